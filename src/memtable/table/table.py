"""Tables of named columns.

A :class:`Table` is an ordered set of named, typed columns
sharing the same number of rows. It's the main object
users interact with:

>>> table = Table({"id": [1, 2, 3], "name": ["a", "b", "c"]})
>>> table.shape
(3, 2)
>>> table.describe_columns()
[('id', DataType(int64), False), ('name', DataType(string), False)]

Copy and share
--------------

Every selection can either copy the data (``mode="copy"``,
the default) or share it with the table (``mode="share"``).
Shared data is backed by the same storage of the table,
so changes made through it are visible in the table and the
other way around:

>>> ids = table.select(columns="id", mode="share")
>>> ids[0] = 10
>>> table.get(0, "id")
10
>>> copied = table.select(columns="id")
>>> copied[0] = 100
>>> table.get(0, "id")
10

Selecting multiple rows in ``"share"`` mode returns
a :class:`~memtable.table.views.TableView` that reads and
writes the rows of the table it was taken from:

>>> view = table.select([0, 2], ["name"], mode="share")
>>> view.column_values("name")
['a', 'c']

Operations that change the structure of the table
(``append_row``, ``delete_rows``, ``insert_column``, ...)
modify the table in place and return it, so that they can be chained.
Operations that compute new data (``sort``, ``unique``, ``rename``, ...)
return a new table unless ``inplace=True`` is provided.
"""

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Callable, Iterator

import pyarrow as pa

from .. import dtypes
from ..errors import (
    DuplicateNameError,
    LengthMismatchError,
    MissingColumnError,
    TypeMismatchError,
    UnsupportedOptionError,
)
from ..storage import Column, ColumnStore
from ..utils import naming
from . import selectors
from .base import TableLike
from .sorting import normalize_descending, sort_columns
from .views import ColumnView, RowView, TableView, check_mode

logger = logging.getLogger(__name__)

VCAT_POLICIES = ("exact", "union", "intersect")


def _is_scalar(value: Any) -> bool:
    """If a value should be broadcast to all rows instead of being a column."""
    return (
        value is None
        or isinstance(value, (str, bytes, Mapping))
        or not isinstance(value, Iterable)
    )


def _broadcast_length(columns: Mapping[str, Any]) -> int:
    """Number of rows of a table built from the provided columns.

    Columns of one row (and scalars) are broadcast to the length
    of the others, any other length must be the same for all columns.
    """
    if not columns:
        return 0
    nrows = None
    for name, values in columns.items():
        if _is_scalar(values) or len(values) == 1:
            continue
        if nrows is None:
            nrows = len(values)
        elif len(values) != nrows:
            raise LengthMismatchError(
                f"Column {name!r} has {len(values)} rows, expected {nrows}",
                column=name,
                expected=nrows,
                actual=len(values),
            )
    return 1 if nrows is None else nrows


def _as_column(name: str, values: Any, nrows: int | None, copy: bool) -> Column:
    """Build a column of ``nrows`` rows out of the provided values.

    When ``nrows`` is ``None`` the column keeps the length of the values.
    When ``copy`` is ``False`` Columns and lists are used as they are.
    """
    if _is_scalar(values):
        dtype = None if values is None else dtypes.value_type(values)
        return Column.wrap([values] * (1 if nrows is None else nrows), dtype, name=name)

    if isinstance(values, Column):
        column = values.copy() if copy else values
    elif isinstance(values, (pa.Array, pa.ChunkedArray)):
        if pa.types.is_dictionary(values.type):
            values = values.cast(values.type.value_type)
        column = Column.wrap(values.to_pylist(), values.type, name=name)
    elif isinstance(values, list) and not copy:
        column = Column.wrap(values, name=name)
    else:
        column = Column(values, name=name)

    if nrows is None or len(column) == nrows:
        return column
    if len(column) == 1:
        return Column.wrap(
            column.to_pylist() * nrows, column.dtype, column.nullable, name=name
        )
    raise LengthMismatchError(
        f"Column {name!r} has {len(column)} rows, expected 1 or {nrows}",
        column=name,
        expected=nrows,
        actual=len(column),
    )


def _as_record(row: Any) -> Any:
    if isinstance(row, RowView):
        return row.to_dict()
    return row


class Table(TableLike):
    """Ordered set of named columns with the same number of rows."""

    def __init__(
        self,
        columns: Mapping[str, Any] | TableLike | None = None,
        *,
        copy_columns: bool = True,
    ) -> None:
        """
        :param columns: The values of each column by name. Values can be
                        :class:`~memtable.storage.Column` objects, lists,
                        any other iterable, arrow arrays or scalars that
                        are repeated for all the rows.
        :param copy_columns: When ``False`` the provided
                             :class:`~memtable.storage.Column` objects and lists
                             become the storage of the table instead of being
                             copied, so the table and the caller share them.
        """
        self._store = ColumnStore()
        if columns is None:
            return
        if isinstance(columns, Table):
            columns = dict(columns._store.items())
        elif isinstance(columns, TableLike):
            columns.validate()
            columns = {name: columns._copy_column(name) for name in columns.column_names}
            copy_columns = False
        if not isinstance(columns, Mapping):
            raise TypeError(
                "Tables are built from a mapping of column names to values, "
                "use Table.from_rows or Table.from_records to build them from rows"
            )

        columns = {
            name: values
            if _is_scalar(values)
            or isinstance(values, (Sequence, pa.Array, pa.ChunkedArray))
            else list(values)
            for name, values in columns.items()
        }
        nrows = _broadcast_length(columns)
        for name, values in columns.items():
            self._store.add_column(name, _as_column(name, values, nrows, copy_columns))

    @classmethod
    def _wrap(cls, items: Iterable[tuple[str, Column]]) -> "Table":
        """Build a table out of existing columns, without copying them."""
        table = cls()
        for name, column in items:
            table._store.add_column(name, column)
        return table

    @classmethod
    def from_rows(
        cls, rows: Iterable[Sequence[Any]], names: Sequence[str] | None = None
    ) -> "Table":
        """Build a table from rows of positional values.

        When ``names`` is not provided, columns are
        named ``x1``, ``x2``, ... by their position.

        >>> Table.from_rows([(1, "a"), (2, "b")]).column_names
        ['x1', 'x2']
        """
        rows = [list(row) for row in rows]
        if names is None:
            width = len(rows[0]) if rows else 0
            names = [f"x{position + 1}" for position in range(width)]
        names = list(names)
        for position, row in enumerate(rows):
            if len(row) != len(names):
                raise LengthMismatchError(
                    f"Row {position} has {len(row)} values, expected {len(names)}",
                    row=position,
                    expected=len(names),
                    actual=len(row),
                )
        return cls._wrap(
            (name, Column.wrap([row[position] for row in rows], name=name))
            for position, name in enumerate(names)
        )

    @classmethod
    def from_records(cls, records: Iterable[Mapping[str, Any]]) -> "Table":
        """Build a table from records with possibly different keys.

        The columns are the union of the keys of all records,
        records that lack a key have a missing value in that column.

        >>> table = Table.from_records([{"a": 1}, {"a": 2.5, "b": "x"}])
        >>> table.to_pydict()
        {'a': [1.0, 2.5], 'b': [None, 'x']}
        """
        table = cls()
        table._store.append_rows([_as_record(r) for r in records], cols="union")
        return table

    @property
    def column_names(self) -> list[str]:
        return self._store.names

    @property
    def nrows(self) -> int:
        return self._store.nrows

    @property
    def generation(self) -> int:
        """Counter of the structural changes of the table."""
        return self._store.generation

    def column_position(self, col: str | int) -> int:
        return self._store.position(col)

    def column_field(self, col: str | int) -> pa.Field:
        name = self._store.resolve(col)
        column = self._store.column(name)
        return pa.field(name, column.dtype, column.nullable)

    def get(self, row: int, col: str | int) -> Any:
        return self._store.get(row, col)

    def set(self, row: int, col: str | int, value: Any) -> None:
        self._store.set(row, col, value)

    def column_values(self, col: str | int) -> list[Any]:
        return self._store.column(col).to_pylist()

    def validate(self) -> None:
        self._store.check_consistency()

    def select(
        self, rows: Any = None, columns: Any = None, *, mode: str = "copy"
    ) -> Any:
        """Select a subset of the rows and columns.

        What is returned depends on what is selected and on ``mode``:

        * a single row and a single column: the value of the cell;
        * a single row: a :class:`~memtable.table.views.RowView` when sharing,
          a ``dict`` when copying;
        * all the rows (``rows=None``) of a single column: the
          :class:`~memtable.storage.Column` of the table when sharing,
          a copy of it when copying;
        * some rows of a single column: a :class:`~memtable.table.views.ColumnView`
          when sharing, a new :class:`~memtable.storage.Column` when copying;
        * all the rows of multiple columns: a new :class:`Table` using the same
          columns when sharing, a copy when copying;
        * some rows of multiple columns: a :class:`~memtable.table.views.TableView`
          when sharing, a new :class:`Table` when copying.

        :param rows: The rows to select, see :mod:`memtable.table.selectors`.
        :param columns: The columns to select, see :mod:`memtable.table.selectors`.
        :param mode: ``"copy"`` or ``"share"``.
        """
        check_mode(mode)
        self.validate()
        share = mode == "share"
        selected_rows = selectors.select_rows(rows, self.nrows)
        selected_columns = selectors.select_columns(columns, self.column_names)

        if isinstance(selected_rows, int):
            if isinstance(selected_columns, str):
                return self._store.get(selected_rows, selected_columns)
            if share:
                return RowView(self, selected_rows, selected_columns)
            return {
                name: self._store.get(selected_rows, name) for name in selected_columns
            }

        if isinstance(selected_columns, str):
            column = self._store.column(selected_columns)
            if rows is None:
                return column if share else column.copy()
            if share:
                return ColumnView(self, selected_rows, selected_columns)
            return column.take(selected_rows)

        if rows is None:
            return Table._wrap(
                (name, self._store.column(name) if share else self._store.column(name).copy())
                for name in selected_columns
            )
        if share:
            return TableView(self, selected_rows, selected_columns)
        return Table._wrap(
            (name, self._store.column(name).take(selected_rows))
            for name in selected_columns
        )

    def column(self, col: str | int, mode: str = "copy") -> Column:
        """A single column, shared with the table or copied."""
        return self.select(None, self._store.resolve(col), mode=mode)

    def row(self, row: int, mode: str = "copy") -> RowView | dict[str, Any]:
        """A single row, as a :class:`RowView` when shared or a ``dict`` when copied."""
        return self.select(self._store.row_position(row), None, mode=mode)

    def view(self, rows: Any = None, columns: Any = None) -> Any:
        """A view over a subset of the table, all of it by default."""
        if rows is None:
            rows = slice(None)
        return self.select(rows, columns, mode="share")

    def __getitem__(self, key: str | tuple[Any, Any]) -> Any:
        """``table["name"]`` is the column of the table,
        ``table[rows, columns]`` copies the selection."""
        if isinstance(key, tuple):
            rows, columns = key
            return self.select(rows, columns)
        if isinstance(key, str):
            return self.select(None, key, mode="share")
        raise TypeError(
            f"Tables are indexed by column name or (rows, columns), not {key!r}"
        )

    def __setitem__(self, key: str | tuple[Any, Any], value: Any) -> None:
        """``table["name"] = values`` replaces or adds a column,
        ``table[rows, columns] = value`` assigns the selected cells."""
        if isinstance(key, tuple):
            rows, columns = key
            if isinstance(rows, int) and isinstance(columns, (str, int)):
                self.set(rows, columns, value)
            else:
                self.assign(rows, columns, value)
        elif isinstance(key, str):
            self.set_column(key, value)
        else:
            raise TypeError(
                f"Tables are indexed by column name or (rows, columns), not {key!r}"
            )

    def assign(self, rows: Any, columns: Any, value: Any) -> None:
        """Assign a value to all the selected cells.

        ``value`` can be a scalar, assigned to every cell,
        a sequence with one value per selected row, assigned
        to each selected column, or a table with the same
        shape of the selection.
        """
        self.validate()
        target_rows = selectors.as_list(selectors.select_rows(rows, self.nrows))
        target_columns = selectors.as_list(
            selectors.select_columns(columns, self.column_names)
        )
        planned = []
        for position, name in enumerate(target_columns):
            column = self._store.column(name)
            values = self._assigned_values(value, position, target_rows, target_columns)
            converted = [
                dtypes.coerce(v, column.dtype, column.nullable, column=name, row=row)
                for row, v in zip(target_rows, values)
            ]
            planned.append((column, converted))

        for column, converted in planned:
            storage = column.storage
            for row, v in zip(target_rows, converted):
                storage[row] = v
            column.version += 1

    @staticmethod
    def _assigned_values(
        value: Any, position: int, rows: list[int], columns: list[str]
    ) -> list[Any]:
        if isinstance(value, TableLike):
            if value.shape != (len(rows), len(columns)):
                raise LengthMismatchError(
                    f"Can't assign a table of shape {value.shape} "
                    f"to a selection of shape {(len(rows), len(columns))}",
                    expected=(len(rows), len(columns)),
                    actual=value.shape,
                )
            return value.column_values(position)
        if _is_scalar(value):
            return [value] * len(rows)
        values = list(value)
        if len(values) == 1:
            return values * len(rows)
        if len(values) != len(rows):
            raise LengthMismatchError(
                f"Can't assign {len(values)} values to {len(rows)} rows",
                column=columns[position],
                expected=len(rows),
                actual=len(values),
            )
        return values

    def set_column(self, name: str, values: Any, mode: str = "copy") -> "Table":
        """Replace a column, or add it at the end if it doesn't exist.

        ``values`` are broadcast when they are a scalar or have only one row.
        In ``"share"`` mode Columns and lists become the storage
        of the column instead of being copied.
        """
        check_mode(mode)
        self.validate()
        if isinstance(name, int):
            name = self._store.resolve(name)
        column = self._new_column(name, values, mode)
        if name in self._store:
            self._store.replace_column(name, column)
        else:
            self._store.add_column(name, column)
        return self

    def insert_column(
        self,
        position: int | None,
        name: str,
        values: Any,
        *,
        make_unique: bool = False,
        mode: str = "copy",
    ) -> "Table":
        """Add a new column at the given position, at the end when ``None``.

        :param make_unique: Add a numeric suffix to ``name``
                            if a column with the same name exists.
        """
        check_mode(mode)
        self.validate()
        if name in self._store:
            if not make_unique:
                raise DuplicateNameError(f"Column {name!r} already exists", column=name)
            name = naming.uniquify(name, set(self.column_names))
        column = self._new_column(name, values, mode)
        self._store.add_column(name, column, position)
        logger.debug(f"Inserted column {name!r} at position {position}")
        return self

    def _new_column(self, name: str, values: Any, mode: str) -> Column:
        nrows = self.nrows if self.ncols else None
        return _as_column(name, values, nrows, copy=mode == "copy")

    def drop_column(self, columns: Any) -> "Table":
        """Remove one or more columns."""
        names = selectors.as_list(selectors.select_columns(columns, self.column_names))
        for name in names:
            self._store.drop_column(name)
        return self

    def rename(
        self,
        mapping: Mapping[str | int, str] | Callable[[str], str] | Sequence[str],
        *,
        make_unique: bool = False,
        inplace: bool = False,
    ) -> "Table":
        """Rename the columns.

        All the names change at the same time, so names can be swapped:

        >>> Table({"a": [1], "b": [2]}).rename({"a": "b", "b": "a"}).column_names
        ['b', 'a']

        :param mapping: The new name of each column by current name or position,
                        a function computing the new name from the current one
                        or the list of the new names of all the columns.
        :param make_unique: Add a numeric suffix to names that would be duplicated
                            instead of raising :class:`~memtable.errors.DuplicateNameError`.
        :param inplace: Rename the columns of this table instead of a copy.
        """
        names = self.column_names
        if callable(mapping):
            new_names = [mapping(name) for name in names]
        elif isinstance(mapping, Mapping):
            renames = {self._store.resolve(old): new for old, new in mapping.items()}
            new_names = [renames.get(name, name) for name in names]
        else:
            new_names = list(mapping)
            if len(new_names) != len(names):
                raise LengthMismatchError(
                    f"Got {len(new_names)} names for {len(names)} columns",
                    expected=len(names),
                    actual=len(new_names),
                )
        if make_unique:
            new_names = naming.make_unique(new_names)

        target = self if inplace else self.copy()
        target._store.rename(dict(zip(names, new_names)))
        return target

    def reorder_columns(self, order: Any, *, inplace: bool = False) -> "Table":
        """Change the order of the columns, ``order`` must list all of them."""
        names = selectors.as_list(selectors.select_columns(order, self.column_names))
        if sorted(names) != sorted(self.column_names):
            raise MissingColumnError(
                f"Column order {names} is not a permutation of {self.column_names}"
            )
        target = self if inplace else self.copy()
        target._store.reorder(names)
        return target

    def select_columns(
        self, columns: Any, *, mode: str = "copy", inplace: bool = False
    ) -> "Table":
        """Keep only some of the columns, in the order they are selected."""
        check_mode(mode)
        names = selectors.as_list(selectors.select_columns(columns, self.column_names))
        if not inplace:
            return self.select(None, names, mode=mode)
        for name in self.column_names:
            if name not in names:
                self._store.drop_column(name)
        if names:
            self._store.reorder(names)
        return self

    def hcat(self, *others: TableLike, make_unique: bool = False) -> "Table":
        """A new table with the columns of this table followed by the others."""
        return hcat(self, *others, make_unique=make_unique)

    def append_row(
        self,
        values: Mapping[str, Any] | Sequence[Any],
        *,
        cols: str = "exact",
        promote: bool | None = None,
    ) -> "Table":
        """Add a row at the end of the table.

        See :meth:`~memtable.storage.ColumnStore.append_row` for the options.

        >>> table = Table({"a": [1]})
        >>> table.append_row({"a": 2, "b": "x"}, cols="union").to_pydict()
        {'a': [1, 2], 'b': [None, 'x']}
        """
        self._store.append_row(_as_record(values), cols=cols, promote=promote)
        return self

    def append(
        self,
        other: TableLike | Mapping[str, Any],
        *,
        cols: str = "exact",
        promote: bool | None = None,
    ) -> "Table":
        """Add all the rows of another table at the end of this one.

        Columns are matched by name, see
        :meth:`~memtable.storage.ColumnStore.append_row` for the options.
        """
        if not isinstance(other, TableLike):
            other = Table(other)
        other.validate()
        if cols == "exact" and set(other.column_names) != set(self.column_names):
            raise MissingColumnError(
                f"Columns {other.column_names} don't match {self.column_names}"
            )
        self._store.append_rows(list(other.iterrecords()), cols=cols, promote=promote)
        return self

    def delete_rows(self, rows: Any) -> "Table":
        """Remove the selected rows."""
        selected = selectors.as_list(selectors.select_rows(rows, self.nrows))
        self._store.delete_rows(selected)
        return self

    def filter_rows(
        self,
        predicate: Callable[..., bool],
        columns: Any = None,
        *,
        view: bool = False,
    ) -> "Table | TableView":
        """Keep the rows for which ``predicate`` is true.

        The predicate receives each row as a read-only
        :class:`~memtable.table.views.RowView`, or the values
        of the ``columns`` when they are provided:

        >>> table = Table({"a": [1, 2, 3], "b": [3, 2, 1]})
        >>> table.filter_rows(lambda row: row.a > 1).to_pydict()
        {'a': [2, 3], 'b': [2, 1]}
        >>> table.filter_rows(lambda a, b: a < b, ["a", "b"]).to_pydict()
        {'a': [1], 'b': [3]}

        :param view: Return a :class:`~memtable.table.views.TableView`
                     over the rows instead of a new table.
        """
        self.validate()
        if columns is None:
            keep = [
                bool(predicate(RowView(self, row, readonly=True)))
                for row in range(self.nrows)
            ]
        else:
            names = selectors.as_list(selectors.select_columns(columns, self.column_names))
            storages = [self._store.column(name).storage for name in names]
            keep = [
                bool(predicate(*(storage[row] for storage in storages)))
                for row in range(self.nrows)
            ]
        rows = [row for row, kept in enumerate(keep) if kept]
        return self.select(rows, None, mode="share" if view else "copy")

    def sort(
        self,
        by: Any = None,
        descending: bool | list[bool] = False,
        *,
        inplace: bool = False,
    ) -> "Table":
        """Sort the rows by one or more columns, all of them by default.

        The sort is stable and missing values are placed last.

        >>> Table({"a": [2, None, 1]}).sort("a").column_values("a")
        [1, 2, None]
        """
        self.validate()
        keys = selectors.as_list(selectors.select_columns(by, self.column_names))
        if keys:
            order = sort_columns(
                {name: self.column_values(name) for name in keys},
                {name: self.column_type(name) for name in keys},
                normalize_descending(keys, descending),
            )
        else:
            order = list(range(self.nrows))
        logger.debug(f"Sorted {self.nrows} rows by {keys}")
        if inplace:
            self._store.permute_rows(order)
            return self
        return self.select(order, None)

    def _row_keys(self, columns: Any) -> list[tuple[Any, ...]]:
        names = selectors.as_list(selectors.select_columns(columns, self.column_names))
        storages = [self._store.column(name).storage for name in names]
        return [
            tuple(dtypes.hashable(storage[row]) for storage in storages)
            for row in range(self.nrows)
        ]

    def nonunique(self, columns: Any = None) -> list[bool]:
        """For each row, if an equal row appears before it."""
        self.validate()
        seen = set()
        duplicated = []
        for key in self._row_keys(columns):
            duplicated.append(key in seen)
            seen.add(key)
        return duplicated

    def unique(self, columns: Any = None, *, inplace: bool = False) -> "Table":
        """Keep the first occurrence of each distinct row.

        Rows are compared on the ``columns``, all of them by default.
        """
        duplicated = self.nonunique(columns)
        if inplace:
            return self.delete_rows(duplicated)
        return self.select([not flag for flag in duplicated], None)

    def complete_cases(self, columns: Any = None) -> list[bool]:
        """For each row, if it has no missing value in the ``columns``."""
        self.validate()
        return [None not in key for key in self._row_keys(columns)]

    def drop_missing(
        self,
        columns: Any = None,
        *,
        disallow_missing: bool = True,
        inplace: bool = False,
    ) -> "Table":
        """Remove the rows with missing values in the ``columns``.

        :param disallow_missing: Also mark the ``columns``
                                 as not accepting missing values.
        """
        complete = self.complete_cases(columns)
        names = selectors.as_list(selectors.select_columns(columns, self.column_names))
        if inplace:
            target = self.delete_rows([not kept for kept in complete])
        else:
            target = self.select(complete, None)
        if disallow_missing:
            for name in names:
                column = target._store.column(name)
                if not pa.types.is_null(column.dtype):
                    column.set_nullable(False, name=name)
        return target

    def allow_missing(self, columns: Any = None, *, inplace: bool = False) -> "Table":
        """Make the ``columns`` accept missing values."""
        names = selectors.as_list(selectors.select_columns(columns, self.column_names))
        target = self if inplace else self.copy()
        for name in names:
            target._store.column(name).set_nullable(True, name=name)
        return target

    def disallow_missing(
        self, columns: Any = None, *, error: bool = True, inplace: bool = False
    ) -> "Table":
        """Make the ``columns`` refuse missing values.

        :param error: When ``False`` columns that contain
                      missing values are silently skipped.
        """
        names = selectors.as_list(selectors.select_columns(columns, self.column_names))
        changed = []
        for name in names:
            column = self._store.column(name)
            if column.has_missing() or pa.types.is_null(column.dtype):
                if error:
                    raise TypeMismatchError(
                        f"Column {name!r} contains missing values",
                        column=name,
                        expected="non missing",
                        actual="missing",
                    )
                continue
            changed.append(name)
        target = self if inplace else self.copy()
        for name in changed:
            target._store.column(name).set_nullable(False, name=name)
        return target

    def head(self, n: int = 5) -> "Table":
        """A copy of the first ``n`` rows."""
        return self.select(slice(0, max(n, 0)), None)

    def tail(self, n: int = 5) -> "Table":
        """A copy of the last ``n`` rows."""
        return self.select(slice(max(self.nrows - n, 0), None), None)

    def copy(self) -> "Table":
        """A new table with the same values and its own storage."""
        self.validate()
        return Table._wrap((name, column.copy()) for name, column in self._store.items())

    def iterrows(self, readonly: bool = False) -> Iterator[RowView]:
        """Iterate over the rows, each one as a :class:`RowView`."""
        for row in range(self.nrows):
            yield RowView(self, row, readonly=readonly)

    def itercolumns(self) -> Iterator[tuple[str, Column]]:
        """Iterate over the names and columns of the table, without copying them."""
        yield from self._store.items()


def _columns_of(table: TableLike, copy: bool) -> list[tuple[str, Column]]:
    table.validate()
    if isinstance(table, Table):
        return [
            (name, column.copy() if copy else column)
            for name, column in table._store.items()
        ]
    return [(name, table._copy_column(name)) for name in table.column_names]


def hcat(
    *tables: TableLike, make_unique: bool = False, copy_columns: bool = True
) -> Table:
    """Concatenate tables horizontally.

    All the tables must have the same number of rows.

    :param make_unique: Add a numeric suffix to colliding names
                        instead of raising :class:`~memtable.errors.DuplicateNameError`.
    :param copy_columns: When ``False`` the result shares the columns of the tables.
    """
    result = Table()
    for table in tables:
        for name, column in _columns_of(table, copy_columns):
            if name in result._store:
                if not make_unique:
                    raise DuplicateNameError(
                        f"Column {name!r} already exists", column=name
                    )
                name = naming.uniquify(name, set(result.column_names))
            result._store.add_column(name, column)
    return result


def vcat(*tables: TableLike, cols: str = "exact") -> Table:
    """Concatenate the rows of tables in a new table.

    Columns are matched by name and their types are promoted
    when the tables store different kinds of values.

    >>> vcat(Table({"a": [1]}), Table({"a": [2.5]})).column_values("a")
    [1.0, 2.5]

    :param cols: ``"exact"`` requires all tables to have the same columns,
                 ``"union"`` keeps all the columns filling missing values,
                 ``"intersect"`` only keeps the columns all tables have.
    """
    if cols not in VCAT_POLICIES:
        raise UnsupportedOptionError(
            f"Unsupported cols={cols!r}, expected one of {VCAT_POLICIES}"
        )
    if not tables:
        return Table()

    first, *others = tables
    if cols == "intersect":
        common = [
            name
            for name in first.column_names
            if all(name in table.column_names for table in others)
        ]
        result = Table._wrap(
            (name, column) for name, column in _columns_of(first, True) if name in common
        )
        for table in others:
            table.validate()
            records = [
                {name: record[name] for name in common} for record in table.iterrecords()
            ]
            result._store.append_rows(records, cols="exact", promote=True)
        return result

    result = Table._wrap(_columns_of(first, True))
    for table in others:
        result.append(table, cols=cols, promote=True)
    logger.debug(f"Concatenated {len(tables)} tables, {result.nrows} rows")
    return result
