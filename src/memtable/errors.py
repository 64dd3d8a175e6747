"""Errors raised by the table engine.

Every error is a :class:`MemTableError` and also derives from the
builtin exception that best describes it, so that code catching
``KeyError`` or ``ValueError`` keeps working::

    try:
        table.get(0, "unknown")
    except KeyError:
        ...

Errors carry the context needed to locate the problem
(column name, row index, expected and actual types)
as attributes, in addition to a readable message.
"""

from typing import Any


class MemTableError(Exception):
    """Base class for all the errors raised by memtable."""

    def __init__(
        self,
        message: str,
        *,
        column: str | None = None,
        row: int | None = None,
        expected: Any = None,
        actual: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.column = column
        self.row = row
        self.expected = expected
        self.actual = actual

    def __str__(self) -> str:
        return self.message


class DuplicateNameError(MemTableError, ValueError):
    """A column name is already in use."""


class TypeMismatchError(MemTableError, TypeError):
    """A value can't be stored in a column of the declared type."""


class IndexOutOfRangeError(MemTableError, IndexError):
    """A row or column position is out of range."""


class MissingColumnError(MemTableError, KeyError):
    """A column is not available in the table."""


class LengthMismatchError(MemTableError, ValueError):
    """An operation would leave columns with different lengths."""


class StaleViewError(MemTableError, RuntimeError):
    """A view or a group index refers to a parent that changed or vanished."""


class CorruptedTableError(MemTableError, RuntimeError):
    """The columns of a table no longer have the same length."""


class MissingKeyError(MemTableError, ValueError):
    """A join key contains missing values and matching them is an error."""


class UnsupportedOptionError(MemTableError, ValueError):
    """A combination of options is not supported by the operation."""


class ValidationError(MemTableError, ValueError):
    """A requested validation of the input data failed."""


class NoKeyColumnError(MemTableError, ValueError):
    """Unstacking requires at least one key column."""


class EmptyGroupResultError(MemTableError, ValueError):
    """A group produced no rows where exactly one or one per row was needed."""
