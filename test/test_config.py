import pydantic
import pytest

from memtable.config import Options


def test_defaults(options):
    opts = options()
    assert opts.display.max_rows == 20
    assert opts.display.max_colwidth == 30
    assert opts.display.float_precision == 2
    assert opts.join.match_missing == "error"
    assert opts.grouping.sort is False
    assert opts.naming.unique_separator == "_"
    assert opts.infer_nullable is True


def test_environment_overrides(options):
    opts = options(
        MEMTABLE_DISPLAY__MAX_ROWS="5",
        MEMTABLE_JOIN__MATCH_MISSING="equal",
        MEMTABLE_INFER_NULLABLE="false",
    )
    assert opts.display.max_rows == 5
    assert opts.join.match_missing == "equal"
    assert opts.infer_nullable is False


def test_invalid_option(monkeypatch):
    monkeypatch.setenv("MEMTABLE_JOIN__MATCH_MISSING", "sometimes")
    with pytest.raises(pydantic.ValidationError):
        Options()
