"""Split-apply-combine.

Grouping partitions the rows of a table by the values of
one or more key columns. The resulting :class:`GroupIndex`
maps each distinct key to the rows that have it and can then
be used to apply aggregations to each group:

* :func:`combine` emits the rows computed for each group,
  usually one row for each group;
* :func:`transform` emits one row for each row of the table,
  in the original order, with the result of the group the row
  belongs to;
* :func:`select` is like :func:`transform` but only keeps
  the key columns and the results.

>>> from memtable import Table
>>> from memtable.grouping.aggregations import MeanAggregation
>>> table = Table({"k": ["a", "b", "a"], "v": [1, 2, 3]})
>>> groups = group_by(table, "k")
>>> len(groups)
2
>>> combine(groups, {"mean": MeanAggregation("v")}).to_pydict()
{'k': ['a', 'b'], 'mean': [2.0, 2.0]}
>>> transform(groups, {"mean": MeanAggregation("v")}).column_values("mean")
[2.0, 2.0, 2.0]

By default groups appear in the order their key is first met,
``sort=True`` sorts them by key with missing keys last.

Rows with a missing value in their key form groups like
any other value, unless ``skip_missing=True`` which excludes
them, or ``coalesce_missing=True`` which puts all of them
in a single group.

The index remembers the table it was built from only through a
weak reference. It can't be used anymore once the table
changes structure or the values of its key columns change,
as the groups would no longer match the rows.
"""

import logging
from collections.abc import Mapping, Sequence
from typing import Any, Callable, Iterator

from .. import dtypes
from ..config import get_options
from ..errors import (
    DuplicateNameError,
    EmptyGroupResultError,
    LengthMismatchError,
    StaleViewError,
    ValidationError,
)
from ..storage import Column
from ..table import selectors
from ..table.base import TableLike
from ..table.sorting import sort_columns
from ..table.table import Table
from ..table.views import TableView, _ParentReference
from .aggregations import Aggregation

logger = logging.getLogger(__name__)

AggregationsArg = (
    Mapping[str, Aggregation | Callable[[TableView], Any]]
    | Callable[[TableView], Any]
)


class GroupIndex:
    """Partition of the rows of a table by the values of key columns.

    Created by :func:`group_by`.
    """

    def __init__(
        self,
        parent: Table,
        keys: list[str],
        groups: list[tuple[tuple[Any, ...], list[int]]],
        skip_missing: bool = False,
    ) -> None:
        """
        :param parent: The table that was grouped.
        :param keys: The names of the key columns.
        :param groups: The key and rows of each group, in group order.
        :param skip_missing: If rows with missing keys were excluded.
        """
        self._parent = _ParentReference(parent)
        self._key_positions = [parent.column_position(name) for name in keys]
        self._key_columns = [parent._store.column(name) for name in keys]
        self._key_versions = [column.version for column in self._key_columns]
        self._groups = groups
        self._lookup = {
            tuple(dtypes.hashable(v) for v in key): position
            for position, (key, _) in enumerate(groups)
        }
        self.skip_missing = skip_missing

    def _check(self) -> Table:
        """Get the parent table, ensuring the groups still match its rows."""
        parent = self._parent.resolve()
        columns = parent._store.columns()
        for position, column, version in zip(
            self._key_positions, self._key_columns, self._key_versions
        ):
            if columns[position] is not column or column.version != version:
                raise StaleViewError(
                    f"Key column {parent.column_names[position]!r} "
                    "changed after the table was grouped"
                )
        return parent

    @property
    def parent(self) -> Table:
        """The table that was grouped."""
        return self._check()

    @property
    def group_columns(self) -> list[str]:
        """Names of the key columns."""
        names = self._check().column_names
        return [names[position] for position in self._key_positions]

    @property
    def value_columns(self) -> list[str]:
        """Names of the columns that are not keys."""
        keys = self.group_columns
        return [name for name in self._check().column_names if name not in keys]

    @property
    def group_indices(self) -> list[list[int]]:
        """The rows of each group."""
        self._check()
        return [list(rows) for _, rows in self._groups]

    @property
    def ngroups(self) -> int:
        return len(self._groups)

    def group_keys(self) -> list[tuple[Any, ...]]:
        """The key of each group, in group order."""
        self._check()
        return [key for key, _ in self._groups]

    def __len__(self) -> int:
        self._check()
        return len(self._groups)

    def __iter__(self) -> Iterator[TableView]:
        parent = self._check()
        for _, rows in self._groups:
            yield TableView(parent, rows, parent.column_names)

    def __getitem__(self, key: int | tuple | Mapping[str, Any]) -> TableView:
        """Get a group by position, by key or by key values by column name."""
        parent = self._check()
        if isinstance(key, bool):
            raise TypeError("Groups are selected by position or key, not bool")
        if isinstance(key, int):
            position = selectors.select_rows(key, len(self._groups))
        else:
            if isinstance(key, Mapping):
                keys = self.group_columns
                if set(key) != set(keys):
                    raise KeyError(f"Group keys must provide exactly the columns {keys}")
                key = tuple(key[name] for name in keys)
            elif not isinstance(key, tuple):
                key = (key,)
            try:
                position = self._lookup[tuple(dtypes.hashable(v) for v in key)]
            except KeyError:
                raise KeyError(f"No group with key {key!r}") from None
        return TableView(parent, self._groups[position][1], parent.column_names)

    def __repr__(self) -> str:
        return f"<GroupIndex {len(self._groups)} groups by {self.group_columns}>"

    def to_table(self, keep_keys: bool = True) -> Table:
        """Copy the rows of the table, ordered by group."""
        parent = self._check()
        rows = [row for _, group_rows in self._groups for row in group_rows]
        result = parent.select(rows, None)
        if not keep_keys:
            result.drop_column(self.group_columns)
        return result

    def combine(self, aggregations: AggregationsArg, *, keep_keys: bool = True) -> Table:
        """See :func:`combine`."""
        return combine(self, aggregations, keep_keys=keep_keys)

    def transform(self, aggregations: AggregationsArg) -> Table:
        """See :func:`transform`."""
        return transform(self, aggregations)

    def select(self, aggregations: AggregationsArg) -> Table:
        """See :func:`select`."""
        return select(self, aggregations)


def group_by(
    table: Table,
    keys: Any = None,
    *,
    sort: bool | None = None,
    skip_missing: bool = False,
    coalesce_missing: bool = False,
) -> GroupIndex:
    """Group the rows of a table by the values of the key columns.

    :param table: The table to group.
    :param keys: The key columns, when empty all rows are in a single group.
    :param sort: Sort groups by key instead of first appearance.
                 Uses the configured default when ``None``.
    :param skip_missing: Exclude the rows with a missing value in the key.
    :param coalesce_missing: Put all rows with a missing value in the key
                             in a single group, whose key is the first
                             such key encountered.
    """
    if not isinstance(table, Table):
        raise TypeError(
            f"Only tables can be grouped, not {type(table).__name__}, "
            "use .copy() to group a view"
        )
    if sort is None:
        sort = get_options().grouping.sort
    table.validate()
    names = (
        []
        if keys is None
        else selectors.as_list(selectors.select_columns(keys, table.column_names))
    )
    storages = [table._store.column(name).storage for name in names]

    groups: dict[tuple[Any, ...], tuple[tuple[Any, ...], list[int]]] = {}
    missing_key = None
    for row in range(table.nrows):
        key = tuple(storage[row] for storage in storages)
        if any(value is None for value in key):
            if skip_missing:
                continue
            if coalesce_missing:
                if missing_key is None:
                    missing_key = key
                key = missing_key
        hashed = tuple(dtypes.hashable(value) for value in key)
        groups.setdefault(hashed, (key, []))[1].append(row)

    ordered = list(groups.values())
    if sort and names and ordered:
        order = sort_columns(
            {
                name: [key[position] for key, _ in ordered]
                for position, name in enumerate(names)
            },
            {name: table.column_type(name) for name in names},
            [False] * len(names),
        )
        ordered = [ordered[position] for position in order]

    logger.debug(f"Grouped {table.nrows} rows by {names} in {len(ordered)} groups")
    return GroupIndex(table, names, ordered, skip_missing)


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes))


def _broadcast(value: Any, nrows: int) -> list[Any]:
    if not _is_sequence(value):
        return [value] * nrows
    if len(value) == nrows:
        return list(value)
    return list(value) * nrows


def _block_from_values(values: dict[str, Any]) -> tuple[dict[str, list[Any]], int]:
    """Broadcast scalar results to the length of the sequence results."""
    nrows = None
    for name, value in values.items():
        if not _is_sequence(value) or len(value) == 1:
            continue
        if nrows is None:
            nrows = len(value)
        elif len(value) != nrows:
            raise LengthMismatchError(
                f"Result {name!r} has {len(value)} rows, expected {nrows}",
                column=name,
                expected=nrows,
                actual=len(value),
            )
    if nrows is None:
        nrows = 1
    block = {
        name: _broadcast(value, nrows)
        for name, value in values.items()
    }
    return block, nrows


def _group_result(
    aggregations: AggregationsArg, group: TableView
) -> tuple[dict[str, list[Any]], int] | None:
    """Compute the result for a group as columns of values.

    Returns ``None`` when the group produced nothing.
    """
    if isinstance(aggregations, Mapping):
        values = {
            name: aggregation.compute(group)
            if isinstance(aggregation, Aggregation)
            else aggregation(group)
            for name, aggregation in aggregations.items()
        }
        return _block_from_values(values)

    result = aggregations(group)
    if result is None:
        return None
    if isinstance(result, TableLike):
        result.validate()
        return (
            {name: result.column_values(name) for name in result.column_names},
            result.nrows,
        )
    if isinstance(result, Mapping):
        return _block_from_values(dict(result))
    return _block_from_values({"x1": result})


def _key_column(parent: Table, name: str, values: list[Any]) -> Column:
    source = parent._store.column(name)
    return Column.wrap(values, source.dtype, source.nullable, name=name)


def _check_names(
    names: list[str], expected: list[str] | None, group: tuple[Any, ...]
) -> list[str]:
    if expected is not None and names != expected:
        raise ValidationError(
            f"Group {group!r} produced columns {names}, "
            f"while previous groups produced {expected}"
        )
    return names


def _without_keys(
    block: dict[str, list[Any]], keys: list[str], key: tuple[Any, ...]
) -> dict[str, list[Any]]:
    """Drop the key columns from a group result, they must hold the group key."""
    block = dict(block)
    coalesced = any(value is None for value in key)
    for position, name in enumerate(keys):
        if name not in block:
            continue
        expected = dtypes.hashable(key[position])
        for value in block.pop(name):
            if dtypes.hashable(value) != expected and not coalesced:
                raise DuplicateNameError(
                    f"Result {name!r} has the same name of a key column "
                    f"but holds {value!r} instead of {key[position]!r}",
                    column=name,
                    expected=key[position],
                    actual=value,
                )
    return block


def combine(
    groups: GroupIndex, aggregations: AggregationsArg, *, keep_keys: bool = True
) -> Table:
    """Compute the result of each group and combine them in a table.

    :param groups: The groups to aggregate.
    :param aggregations: A mapping of result names to the
                         :class:`~memtable.grouping.aggregations.Aggregation`
                         (or function receiving the group) computing them,
                         or a function receiving the group and returning a table,
                         a mapping of values or a single value.
                         Sequences are emitted as one row per value, results
                         with zero rows drop the group. Key columns in the
                         results are dropped, as the group keys are added.
    :param keep_keys: Include the key columns in the result.
    """
    parent = groups._check()
    keys = groups.group_columns
    names: list[str] | None = list(aggregations) if isinstance(aggregations, Mapping) else None
    if names is not None and keep_keys:
        names = [name for name in names if name not in keys]

    key_values: list[tuple[Any, ...]] = []
    results: dict[str, list[Any]] = {name: [] for name in names or ()}
    for key, rows in groups._groups:
        computed = _group_result(aggregations, TableView(parent, rows, parent.column_names))
        if computed is None or computed[1] == 0:
            continue
        block, nrows = computed
        if keep_keys:
            block = _without_keys(block, keys, key)
        names = _check_names(list(block), names, key)
        if not results:
            results = {name: [] for name in names}
        for name in names:
            results[name].extend(block[name])
        key_values.extend([key] * nrows)

    result = Table()
    if keep_keys:
        for position, name in enumerate(keys):
            values = [key[position] for key in key_values]
            result._store.add_column(name, _key_column(parent, name, values))
    for name, values in results.items():
        result._store.add_column(name, Column.wrap(values, name=name))
    logger.debug(f"Combined {len(groups._groups)} groups in {result.nrows} rows")
    return result


def _transformed(
    groups: GroupIndex, aggregations: AggregationsArg
) -> tuple[Table, dict[str, list[Any]]]:
    """Compute the result of each group for each of the rows of the group."""
    parent = groups._check()
    names: list[str] | None = None
    results: dict[str, list[Any]] = {}
    for key, rows in groups._groups:
        computed = _group_result(aggregations, TableView(parent, rows, parent.column_names))
        if computed is None or computed[1] == 0:
            raise EmptyGroupResultError(
                f"Group {key!r} produced no rows, which can't be "
                f"broadcast to its {len(rows)} rows"
            )
        block, nrows = computed
        if nrows not in (1, len(rows)):
            raise LengthMismatchError(
                f"Group {key!r} produced {nrows} rows, expected 1 or {len(rows)}",
                expected=len(rows),
                actual=nrows,
            )
        names = _check_names(list(block), names, key)
        for name in names:
            values = results.setdefault(name, [None] * parent.nrows)
            column = block[name] * len(rows) if nrows == 1 else block[name]
            for row, value in zip(rows, column):
                values[row] = value
    if names is None and isinstance(aggregations, Mapping):
        results = {name: [None] * parent.nrows for name in aggregations}
    return parent, results


def transform(groups: GroupIndex, aggregations: AggregationsArg) -> Table:
    """Compute the result of each group and add it to each row of the group.

    The result has the same rows of the table, in the same order,
    with the result columns added or replacing existing columns.
    Rows excluded from the groups by ``skip_missing`` get missing values.
    """
    parent, results = _transformed(groups, aggregations)
    keys = groups.group_columns
    result = parent.copy()
    for name, values in results.items():
        if name in keys:
            raise DuplicateNameError(
                f"Result {name!r} has the same name of a key column", column=name
            )
        result.set_column(name, Column.wrap(values, name=name), mode="share")
    logger.debug(f"Transformed {len(groups._groups)} groups of {result.nrows} rows")
    return result


def select(groups: GroupIndex, aggregations: AggregationsArg) -> Table:
    """Like :func:`transform`, but only keeps the key columns and the results."""
    parent, results = _transformed(groups, aggregations)
    keys = groups.group_columns
    result = parent.select(None, keys)
    for name, values in results.items():
        if name in keys:
            raise DuplicateNameError(
                f"Result {name!r} has the same name of a key column", column=name
            )
        result.set_column(name, Column.wrap(values, name=name), mode="share")
    return result
