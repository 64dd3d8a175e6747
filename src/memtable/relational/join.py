"""Joins of tables.

A join combines the rows of two tables that have the same
values in the key columns. The join operations are implemented
as hash joins: the keys of one table are indexed in a dictionary
mapping each key to the rows that have it, then the rows of the
other table look up their key in the dictionary to find the
rows they match.

Supposing we have two tables::

    left:
    +----+--------+
    | id | name   |
    +----+--------+
    | 1  | Alice  |
    | 2  | Bob    |
    | 3  | Charlie|
    +----+--------+

    right:
    +----+-----+
    | id | age |
    +----+-----+
    | 3  | 25  |
    | 2  | 30  |
    +----+-----+

We would perform the following steps:

1. Index the keys of the right table::

    {3: [0], 2: [1]}

2. For each row of the left table, look up the rows of the right
   table with the same key. Alice has no match, Bob matches
   the row 1 and Charlie the row 0::

    [(1, 1), (2, 0)]

3. Build the columns of the result taking, for each pair,
   the values of the left row and of the right row::

    +----+--------+-----+
    | id | name   | age |
    +----+--------+-----+
    | 2  | Bob    | 30  |
    | 3  | Charlie| 25  |
    +----+--------+-----+

>>> from memtable import Table
>>> left = Table({"id": [1, 2, 3], "name": ["Alice", "Bob", "Charlie"]})
>>> right = Table({"id": [3, 2], "age": [25, 30]})
>>> inner_join(left, right, on="id").to_pydict()
{'id': [2, 3], 'name': ['Bob', 'Charlie'], 'age': [30, 25]}

The kind of join decides what happens to the rows without a match:
inner joins drop them, left joins keep the left ones, right joins the
right ones and outer joins both of them. Semi and anti joins
only return the left rows that have (or don't have) a match.

Keys with missing values
========================

How rows with a missing value in their key are matched
is controlled by ``match_missing``:

* ``"error"`` raises :class:`~memtable.errors.MissingKeyError`;
* ``"equal"`` considers missing values equal to each other;
* ``"notequal"`` never matches a missing value, not even with
  another missing value.

>>> left = Table({"id": [1, None]})
>>> right = Table({"id": [1, None]})
>>> inner_join(left, right, on="id", match_missing="equal").nrows
2
>>> inner_join(left, right, on="id", match_missing="notequal").nrows
1
"""

import logging
from typing import Any

from .. import dtypes
from ..config import get_options
from ..errors import (
    DuplicateNameError,
    MissingKeyError,
    UnsupportedOptionError,
    ValidationError,
)
from ..storage import Column
from ..table.base import TableLike
from ..table.table import Table
from ..utils import naming

logger = logging.getLogger(__name__)

__all__ = (
    "normalize_on",
    "inner_join",
    "left_join",
    "right_join",
    "outer_join",
    "semi_join",
    "anti_join",
    "cross_join",
)

MATCH_MISSING = ("error", "equal", "notequal")

OnArg = str | tuple[str, str] | list[str | tuple[str, str]]

# Pairs of matching rows, None when there is no row on that side.
RowPairs = list[tuple[int | None, int | None]]


def normalize_on(on: OnArg) -> list[tuple[str, str]]:
    """Convert the join keys to a list of (left, right) column names.

    >>> normalize_on("id")
    [('id', 'id')]
    >>> normalize_on(["id1", ("id2", "ID2")])
    [('id1', 'id1'), ('id2', 'ID2')]
    """
    if isinstance(on, str):
        return [(on, on)]
    if isinstance(on, tuple):
        return [_as_pair(on)]
    if isinstance(on, list):
        pairs = [(key, key) if isinstance(key, str) else _as_pair(key) for key in on]
        if not pairs:
            raise UnsupportedOptionError("At least one join key must be provided")
        return pairs
    raise TypeError(f"Unsupported join keys {on!r}")


def _as_pair(pair: Any) -> tuple[str, str]:
    if (
        not isinstance(pair, tuple)
        or len(pair) != 2
        or not all(isinstance(name, str) for name in pair)
    ):
        raise TypeError(f"Join keys must be names or (left, right) pairs, not {pair!r}")
    return pair


def _match_missing_option(match_missing: str | None, kind: str) -> str:
    if match_missing is None:
        match_missing = get_options().join.match_missing
    if match_missing not in MATCH_MISSING:
        raise UnsupportedOptionError(
            f"Unsupported match_missing={match_missing!r}, expected one of {MATCH_MISSING}"
        )
    if kind == "outer" and match_missing == "notequal":
        raise UnsupportedOptionError(
            "match_missing='notequal' is not supported by outer joins"
        )
    return match_missing


def _join_keys(
    table: TableLike, names: list[str], side: str, match_missing: str
) -> list[tuple[Any, ...] | None]:
    """The key of each row, ``None`` for keys that can't match anything."""
    columns = [table.column_values(name) for name in names]
    keys: list[tuple[Any, ...] | None] = []
    for row in range(table.nrows):
        key = tuple(values[row] for values in columns)
        if any(value is None for value in key):
            if match_missing == "error":
                name = names[key.index(None)]
                raise MissingKeyError(
                    f"Missing value in key column {name!r} of the {side} table "
                    f"(row {row}), use match_missing='equal' or 'notequal' "
                    "to join keys with missing values",
                    column=name,
                    row=row,
                )
            if match_missing == "notequal":
                keys.append(None)
                continue
        keys.append(tuple(dtypes.hashable(value) for value in key))
    return keys


def _index(keys: list[tuple[Any, ...] | None]) -> dict[tuple[Any, ...], list[int]]:
    index: dict[tuple[Any, ...], list[int]] = {}
    for row, key in enumerate(keys):
        if key is not None:
            index.setdefault(key, []).append(row)
    return index


def _check_unique(
    keys: list[tuple[Any, ...] | None], side: str, names: list[str]
) -> None:
    seen = set()
    for row, key in enumerate(keys):
        if key is None:
            continue
        if key in seen:
            raise ValidationError(
                f"Duplicate key {key!r} in the {side} table (row {row}) "
                f"for columns {names}",
                row=row,
            )
        seen.add(key)


def _match_rows(
    left_keys: list[tuple[Any, ...] | None],
    right_keys: list[tuple[Any, ...] | None],
    kind: str,
) -> RowPairs:
    """Pair the rows of the two tables with the same key, in output order."""
    if kind == "right":
        swapped = _match_rows(right_keys, left_keys, "left")
        return [(left_row, right_row) for right_row, left_row in swapped]

    index = _index(right_keys)
    pairs: RowPairs = []
    matched_right: set[int] = set()
    for left_row, key in enumerate(left_keys):
        matches = index.get(key, []) if key is not None else []
        if kind == "semi":
            if matches:
                pairs.append((left_row, None))
            continue
        if kind == "anti":
            if not matches:
                pairs.append((left_row, None))
            continue
        for right_row in matches:
            pairs.append((left_row, right_row))
        matched_right.update(matches)
        if not matches and kind in ("left", "outer"):
            pairs.append((left_row, None))

    if kind == "outer":
        pairs.extend(
            (None, right_row)
            for right_row in range(len(right_keys))
            if right_row not in matched_right
        )
    return pairs


def _take(table: TableLike, name: str, rows: list[int | None]) -> Column:
    """A column with the values of the given rows, missing for ``None`` rows."""
    field = table.column_field(name)
    values = table.column_values(name)
    taken = [values[row] if row is not None else None for row in rows]
    nullable = field.nullable or None in rows
    return Column.wrap(taken, field.type, nullable, name=name)


def _coalesced_keys(
    left: TableLike,
    right: TableLike,
    pairs: list[tuple[str, str]],
    rows: RowPairs,
) -> list[tuple[str, Column]]:
    """Key columns taking the value from the right row when there is no left row."""
    columns = []
    for left_name, right_name in pairs:
        left_field = left.column_field(left_name)
        right_field = right.column_field(right_name)
        left_values = left.column_values(left_name)
        right_values = right.column_values(right_name)
        values = [
            left_values[left_row] if left_row is not None else right_values[right_row]
            for left_row, right_row in rows
        ]
        dtype = dtypes.promote(left_field.type, right_field.type)
        nullable = left_field.nullable or right_field.nullable
        columns.append((left_name, Column.wrap(values, dtype, nullable, name=left_name)))
    return columns


def _result_names(
    left: TableLike,
    right_names: list[str],
    make_unique: bool,
    indicator: str | None,
) -> tuple[list[str], str | None]:
    """Names of the right columns and of the indicator in the result."""
    taken = set(left.column_names)
    renamed = []
    for name in [*right_names, *([indicator] if indicator is not None else [])]:
        if name in taken:
            if not make_unique:
                raise DuplicateNameError(
                    f"Column {name!r} exists in both tables, "
                    "use make_unique=True to rename it",
                    column=name,
                )
            name = naming.uniquify(name, taken)
        taken.add(name)
        renamed.append(name)
    if indicator is not None:
        return renamed[:-1], renamed[-1]
    return renamed, None


def _indicator_values(rows: RowPairs) -> list[str]:
    return [
        "both"
        if left_row is not None and right_row is not None
        else "left_only"
        if right_row is None
        else "right_only"
        for left_row, right_row in rows
    ]


def _join(
    left: TableLike,
    right: TableLike,
    kind: str,
    on: OnArg | None,
    match_missing: str | None = None,
    make_unique: bool = False,
    validate: tuple[bool, bool] = (False, False),
    indicator: str | None = None,
) -> Table:
    left.validate()
    right.validate()
    if kind == "cross":
        pairs: list[tuple[str, str]] = []
        rows: RowPairs = [
            (left_row, right_row)
            for left_row in range(left.nrows)
            for right_row in range(right.nrows)
        ]
    else:
        if on is None:
            raise UnsupportedOptionError(f"{kind} joins require the on argument")
        pairs = normalize_on(on)
        match_missing = _match_missing_option(match_missing, kind)
        left_names = [left_name for left_name, _ in pairs]
        right_names = [right_name for _, right_name in pairs]
        for left_name, right_name in pairs:
            left.column_field(left_name)
            right.column_field(right_name)

    right_key_names = {right_name for _, right_name in pairs}
    right_values = [name for name in right.column_names if name not in right_key_names]
    if kind not in ("semi", "anti"):
        result_names, indicator_name = _result_names(
            left, right_values, make_unique, indicator
        )

    if kind != "cross":
        left_keys = _join_keys(left, left_names, "left", match_missing)
        right_keys = _join_keys(right, right_names, "right", match_missing)
        left_unique, right_unique = validate
        if left_unique:
            _check_unique(left_keys, "left", left_names)
        if right_unique:
            _check_unique(right_keys, "right", right_names)
        rows = _match_rows(left_keys, right_keys, kind)

    if kind in ("semi", "anti"):
        source = left if isinstance(left, Table) else left.to_table()
        result = source.select([left_row for left_row, _ in rows], None)
        logger.debug(f"{kind} join kept {result.nrows} of {left.nrows} rows")
        return result

    left_rows = [left_row for left_row, _ in rows]
    right_rows = [right_row for _, right_row in rows]
    columns: list[tuple[str, Column]] = []
    if kind in ("right", "outer"):
        keys = dict(_coalesced_keys(left, right, pairs, rows))
    else:
        keys = {}
    for name in left.column_names:
        columns.append((name, keys[name] if name in keys else _take(left, name, left_rows)))
    for source, name in zip(right_values, result_names):
        column = _take(right, source, right_rows)
        columns.append((name, column))
    if indicator_name is not None:
        columns.append(
            (indicator_name, Column.wrap(_indicator_values(rows), name=indicator_name))
        )

    result = Table._wrap(columns)
    logger.debug(
        f"{kind} join of {left.nrows} and {right.nrows} rows produced {result.nrows} rows"
    )
    return result


def _fold(kind: str, tables: tuple[TableLike, ...], **options: Any) -> Table:
    if len(tables) < 2:
        raise ValueError(f"{kind} joins require at least two tables")
    result = _join(tables[0], tables[1], kind, **options)
    for table in tables[2:]:
        result = _join(result, table, kind, **options)
    return result


def inner_join(
    left: TableLike,
    right: TableLike,
    *others: TableLike,
    on: OnArg,
    match_missing: str | None = None,
    make_unique: bool = False,
    validate: tuple[bool, bool] = (False, False),
    indicator: str | None = None,
) -> Table:
    """Keep the pairs of rows of the tables with the same key.

    More than two tables can be provided, they are joined
    from left to right.

    :param on: The key columns, a name if it's the same in both tables,
               a ``(left, right)`` tuple if it differs, or a list of both.
    :param match_missing: How missing keys are matched, see the module
                          documentation. Uses the configured default when ``None``.
    :param make_unique: Add a numeric suffix to the right columns
                        whose name is already used in the left table,
                        instead of raising :class:`~memtable.errors.DuplicateNameError`.
    :param validate: If the keys must be unique in the left and right tables,
                     raises :class:`~memtable.errors.ValidationError` otherwise.
    :param indicator: Name of a column telling if each row
                      comes from ``"both"`` tables, ``"left_only"``
                      or ``"right_only"``.
    """
    return _fold(
        "inner",
        (left, right, *others),
        on=on,
        match_missing=match_missing,
        make_unique=make_unique,
        validate=validate,
        indicator=indicator,
    )


def left_join(
    left: TableLike,
    right: TableLike,
    *,
    on: OnArg,
    match_missing: str | None = None,
    make_unique: bool = False,
    validate: tuple[bool, bool] = (False, False),
    indicator: str | None = None,
    inplace: bool = False,
) -> Table:
    """Keep all the rows of the left table and the rows of the right that match.

    Left rows without a match have missing values in the right columns.
    See :func:`inner_join` for the options.

    :param inplace: Add the right columns to the left table instead of
                    building a new table. Requires each left row
                    to match at most one right row.
    """
    if not inplace:
        return _join(
            left,
            right,
            "left",
            on,
            match_missing=match_missing,
            make_unique=make_unique,
            validate=validate,
            indicator=indicator,
        )
    if not isinstance(left, Table):
        raise TypeError("Only tables can be joined in place, not views")

    joined = _join(
        left,
        right,
        "left",
        on,
        match_missing=match_missing,
        make_unique=make_unique,
        validate=validate,
        indicator=indicator,
    )
    if joined.nrows != left.nrows:
        raise ValidationError(
            "Some rows of the left table match more than one row of the right table, "
            "they can't be joined in place"
        )
    existing = set(left.column_names)
    for name, column in joined.itercolumns():
        if name not in existing:
            left._store.add_column(name, column)
    return left


def right_join(
    left: TableLike,
    right: TableLike,
    *,
    on: OnArg,
    match_missing: str | None = None,
    make_unique: bool = False,
    validate: tuple[bool, bool] = (False, False),
    indicator: str | None = None,
) -> Table:
    """Keep all the rows of the right table and the rows of the left that match.

    Rows follow the order of the right table.
    See :func:`inner_join` for the options.
    """
    return _join(
        left,
        right,
        "right",
        on,
        match_missing=match_missing,
        make_unique=make_unique,
        validate=validate,
        indicator=indicator,
    )


def outer_join(
    left: TableLike,
    right: TableLike,
    *others: TableLike,
    on: OnArg,
    match_missing: str | None = None,
    make_unique: bool = False,
    validate: tuple[bool, bool] = (False, False),
    indicator: str | None = None,
) -> Table:
    """Keep all the rows of both tables, matching those with the same key.

    The rows of the left join come first, followed by
    the right rows that didn't match any left row.
    ``match_missing="notequal"`` is not supported.
    See :func:`inner_join` for the options.

    >>> from memtable import Table
    >>> left = Table({"id": [1, 2, 3, 4, None]})
    >>> right = Table({"id": [1, 2, 5, 6, None]})
    >>> outer_join(left, right, on="id", match_missing="equal").column_values("id")
    [1, 2, 3, 4, None, 5, 6]
    """
    return _fold(
        "outer",
        (left, right, *others),
        on=on,
        match_missing=match_missing,
        make_unique=make_unique,
        validate=validate,
        indicator=indicator,
    )


def semi_join(
    left: TableLike,
    right: TableLike,
    *,
    on: OnArg,
    match_missing: str | None = None,
    validate: tuple[bool, bool] = (False, False),
) -> Table:
    """Keep the left rows that match at least one right row, once each."""
    return _join(left, right, "semi", on, match_missing=match_missing, validate=validate)


def anti_join(
    left: TableLike,
    right: TableLike,
    *,
    on: OnArg,
    match_missing: str | None = None,
    validate: tuple[bool, bool] = (False, False),
) -> Table:
    """Keep the left rows that don't match any right row."""
    return _join(left, right, "anti", on, match_missing=match_missing, validate=validate)


def cross_join(
    left: TableLike,
    right: TableLike,
    *others: TableLike,
    make_unique: bool = False,
) -> Table:
    """Combine each row of the left table with each row of the right table.

    >>> from memtable import Table
    >>> cross_join(Table({"x": [1, 2]}), Table({"y": ["a", "b"]})).to_pydict()
    {'x': [1, 1, 2, 2], 'y': ['a', 'b', 'a', 'b']}
    """
    return _fold("cross", (left, right, *others), on=None, make_unique=make_unique)
