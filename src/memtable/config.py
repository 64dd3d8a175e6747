"""Configuration of the table engine.

Defaults can be changed through environment variables
prefixed by ``MEMTABLE_``, nested settings use ``__``
as the delimiter::

    MEMTABLE_DISPLAY__MAX_ROWS=50
    MEMTABLE_JOIN__MATCH_MISSING=equal

Options explicitly passed to an operation always
take precedence over the configured defaults.
"""

from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

MatchMissing = Literal["error", "equal", "notequal"]


class DisplayOptions(BaseModel):
    """How tables are rendered as text."""

    max_rows: int = Field(default=20, ge=1, description="Rows shown before truncating")
    max_colwidth: int = Field(default=30, ge=4, description="Longest cell text shown")
    float_precision: int = Field(default=2, ge=0, description="Decimals of float cells")


class JoinOptions(BaseModel):
    """Defaults of the join operations."""

    match_missing: MatchMissing = Field(
        default="error", description="How missing join keys are matched"
    )


class GroupingOptions(BaseModel):
    """Defaults of the grouping operations."""

    sort: bool = Field(default=False, description="Sort groups by key")


class NamingOptions(BaseModel):
    """How colliding column names are made unique."""

    unique_separator: str = Field(
        default="_", min_length=1, description="Separator before the numeric suffix"
    )


class Options(BaseSettings):
    """Global options of memtable."""

    model_config = SettingsConfigDict(
        env_prefix="MEMTABLE_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    display: DisplayOptions = Field(default_factory=DisplayOptions)
    join: JoinOptions = Field(default_factory=JoinOptions)
    grouping: GroupingOptions = Field(default_factory=GroupingOptions)
    naming: NamingOptions = Field(default_factory=NamingOptions)
    infer_nullable: bool = Field(
        default=True,
        description="Columns accept missing values only if they contain any",
    )


@lru_cache
def get_options() -> Options:
    """Get the global options, read once from the environment."""
    return Options()
