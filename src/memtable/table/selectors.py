"""Selection of rows and columns.

Rows and columns of a table can be selected in many ways,
all of them are resolved here to row positions and column names
before the table does anything with them.

Rows can be selected by:

* ``None``, all the rows;
* an ``int``, a single row;
* a ``slice``;
* a list of positions;
* a list of booleans with one entry per row;
* :class:`Not` wrapping any of the previous ones.

Columns can be selected by:

* ``None``, all the columns;
* a name or position, a single column;
* a ``slice`` of positions;
* a list of names and positions or a list of booleans;
* a compiled regular expression matched against the names;
* :class:`Not`, :class:`Between` and :class:`Cols`.

>>> select_columns(Not("b"), ["a", "b", "c"])
['a', 'c']
>>> select_columns(Between("b", "c"), ["a", "b", "c"])
['b', 'c']
>>> select_rows(slice(1, None), 3)
[1, 2]
"""

import re
from collections.abc import Iterable, Sequence
from typing import Any

from ..errors import (
    DuplicateNameError,
    IndexOutOfRangeError,
    LengthMismatchError,
    MissingColumnError,
)


class Not:
    """Select everything except the wrapped selection."""

    def __init__(self, *selection: Any) -> None:
        self.selection = selection[0] if len(selection) == 1 else list(selection)

    def __repr__(self) -> str:
        return f"Not({self.selection!r})"


class Between:
    """Select the columns between two columns, both included."""

    def __init__(self, first: str | int, last: str | int) -> None:
        self.first = first
        self.last = last

    def __repr__(self) -> str:
        return f"Between({self.first!r}, {self.last!r})"


class Cols:
    """Select the union of multiple column selections, in order."""

    def __init__(self, *selections: Any) -> None:
        self.selections = selections

    def __repr__(self) -> str:
        return f"Cols({', '.join(map(repr, self.selections))})"


def _is_mask(selector: Sequence[Any]) -> bool:
    return len(selector) > 0 and all(isinstance(v, bool) for v in selector)


def _row_position(row: int, nrows: int) -> int:
    position = row + nrows if row < 0 else row
    if not 0 <= position < nrows:
        raise IndexOutOfRangeError(
            f"Row {row} out of range for {nrows} rows", row=row, expected=nrows
        )
    return position


def select_rows(selector: Any, nrows: int) -> int | list[int]:
    """Resolve a row selection to a position or a list of positions."""
    if selector is None:
        return list(range(nrows))
    if isinstance(selector, bool):
        raise TypeError("Rows are selected by position, not bool")
    if isinstance(selector, int):
        return _row_position(selector, nrows)
    if isinstance(selector, slice):
        return list(range(nrows)[selector])
    if isinstance(selector, Not):
        excluded = select_rows(selector.selection, nrows)
        if isinstance(excluded, int):
            excluded = [excluded]
        excluded = set(excluded)
        return [row for row in range(nrows) if row not in excluded]
    if isinstance(selector, Iterable) and not isinstance(selector, str):
        selector = list(selector)
        if _is_mask(selector):
            if len(selector) != nrows:
                raise LengthMismatchError(
                    f"Boolean row selection has {len(selector)} entries "
                    f"for {nrows} rows",
                    expected=nrows,
                    actual=len(selector),
                )
            return [row for row, keep in enumerate(selector) if keep]
        return [_row_position(row, nrows) for row in selector]
    raise TypeError(f"Unsupported row selection {selector!r}")


def _column_name(selector: str | int, names: list[str]) -> str:
    if isinstance(selector, bool):
        raise TypeError("Columns are selected by name or position, not bool")
    if isinstance(selector, int):
        position = selector + len(names) if selector < 0 else selector
        if not 0 <= position < len(names):
            raise IndexOutOfRangeError(
                f"Column position {selector} out of range for {len(names)} columns",
                expected=len(names),
                actual=selector,
            )
        return names[position]
    if isinstance(selector, str):
        if selector not in names:
            raise MissingColumnError(f"Column {selector!r} not found", column=selector)
        return selector
    raise TypeError(f"Unsupported column selection {selector!r}")


def select_columns(selector: Any, names: list[str]) -> str | list[str]:
    """Resolve a column selection to a name or a list of names."""
    if selector is None:
        return list(names)
    if isinstance(selector, (str, int)):
        return _column_name(selector, names)
    if isinstance(selector, slice):
        return names[selector]
    if isinstance(selector, re.Pattern):
        return [name for name in names if selector.search(name)]
    if isinstance(selector, Not):
        excluded = select_columns(selector.selection, names)
        if isinstance(excluded, str):
            excluded = [excluded]
        return [name for name in names if name not in excluded]
    if isinstance(selector, Between):
        first = names.index(_column_name(selector.first, names))
        last = names.index(_column_name(selector.last, names))
        return names[first : last + 1]
    if isinstance(selector, Cols):
        selected: list[str] = []
        for selection in selector.selections:
            resolved = select_columns(selection, names)
            if isinstance(resolved, str):
                resolved = [resolved]
            selected.extend(name for name in resolved if name not in selected)
        return selected
    if isinstance(selector, Iterable):
        selector = list(selector)
        if _is_mask(selector):
            if len(selector) != len(names):
                raise LengthMismatchError(
                    f"Boolean column selection has {len(selector)} entries "
                    f"for {len(names)} columns",
                    expected=len(names),
                    actual=len(selector),
                )
            return [name for name, keep in zip(names, selector) if keep]
        selected = [_column_name(item, names) for item in selector]
        if len(set(selected)) != len(selected):
            raise DuplicateNameError(
                f"Column selection {selector!r} contains duplicates"
            )
        return selected
    raise TypeError(f"Unsupported column selection {selector!r}")


def as_list(selection: str | int | list) -> list:
    """Wrap single selections in a list."""
    if isinstance(selection, (str, int)):
        return [selection]
    return list(selection)
