"""Storage of named columns.

The :class:`ColumnStore` owns the mapping from column names to
:class:`~memtable.storage.column.Column` objects and the number
of rows they all share.

Any change to the structure of the store (adding, removing,
reordering columns, changing the number or order of rows)
increments the :attr:`ColumnStore.generation` counter.
Views over a table remember the generation they were created at
and refuse to work once it changed, instead of reading
values from the wrong rows.

>>> store = ColumnStore()
>>> store.add_column("id", Column([1, 2]))
>>> store.append_row({"id": 3})
>>> store.nrows, store.generation
(3, 2)
"""

import logging
from collections.abc import Mapping
from typing import Any, Iterable, Sequence

import pyarrow as pa

from .. import dtypes
from ..errors import (
    CorruptedTableError,
    DuplicateNameError,
    IndexOutOfRangeError,
    LengthMismatchError,
    MissingColumnError,
    TypeMismatchError,
    UnsupportedOptionError,
    ValidationError,
)
from .column import Column

logger = logging.getLogger(__name__)

APPEND_POLICIES = ("exact", "subset", "union")


class ColumnStore:
    """Ordered set of named columns of the same length."""

    def __init__(self) -> None:
        self._columns: dict[str, Column] = {}
        self._nrows = 0
        self.generation = 0

    @property
    def nrows(self) -> int:
        return self._nrows

    @property
    def ncols(self) -> int:
        return len(self._columns)

    @property
    def names(self) -> list[str]:
        return list(self._columns)

    def __contains__(self, name: object) -> bool:
        return name in self._columns

    def items(self) -> list[tuple[str, Column]]:
        return list(self._columns.items())

    def columns(self) -> list[Column]:
        return list(self._columns.values())

    def distinct_columns(self) -> list[Column]:
        """The columns of the store, counting once those sharing storage."""
        seen: dict[int, Column] = {}
        for column in self._columns.values():
            seen.setdefault(id(column.storage), column)
        return list(seen.values())

    def _touch(self) -> None:
        self.generation += 1

    def resolve(self, col: str | int) -> str:
        """Get the name of a column given its name or position."""
        if isinstance(col, bool):
            raise TypeError("Columns are referenced by name or position, not bool")
        if isinstance(col, int):
            ncols = len(self._columns)
            position = col + ncols if col < 0 else col
            if not 0 <= position < ncols:
                raise IndexOutOfRangeError(
                    f"Column position {col} out of range for {ncols} columns",
                    expected=ncols,
                    actual=col,
                )
            return self.names[position]
        if isinstance(col, str):
            if col not in self._columns:
                raise MissingColumnError(f"Column {col!r} not found", column=col)
            return col
        raise TypeError(
            f"Columns are referenced by name or position, not {type(col).__name__}"
        )

    def position(self, col: str | int) -> int:
        return self.names.index(self.resolve(col))

    def column(self, col: str | int) -> Column:
        return self._columns[self.resolve(col)]

    def row_position(self, row: int) -> int:
        """Validate a row index and convert it to a non negative position."""
        if isinstance(row, bool) or not isinstance(row, int):
            raise TypeError(f"Rows are referenced by position, not {type(row).__name__}")
        position = row + self._nrows if row < 0 else row
        if not 0 <= position < self._nrows:
            raise IndexOutOfRangeError(
                f"Row {row} out of range for {self._nrows} rows",
                row=row,
                expected=self._nrows,
            )
        return position

    def check_consistency(self) -> None:
        """Ensure that all columns have the same number of rows.

        Columns can be resized by code holding an alias to them,
        in such case the store is corrupted and can't be used anymore.
        """
        for name, column in self._columns.items():
            if len(column) != self._nrows:
                raise CorruptedTableError(
                    f"Column {name!r} has {len(column)} rows while the table "
                    f"has {self._nrows}, was it resized through an alias?",
                    column=name,
                    expected=self._nrows,
                    actual=len(column),
                )

    def get(self, row: int, col: str | int) -> Any:
        name = self.resolve(col)
        return self._columns[name].storage[self.row_position(row)]

    def set(self, row: int, col: str | int, value: Any) -> None:
        name = self.resolve(col)
        self._columns[name].set(self.row_position(row), value, name=name)

    def create_column(
        self,
        name: str,
        dtype: pa.DataType,
        nullable: bool = True,
        position: int | None = None,
    ) -> Column:
        """Add a new column, existing rows will have a missing value."""
        if name in self._columns:
            raise DuplicateNameError(f"Column {name!r} already exists", column=name)
        if self._nrows and not nullable:
            raise TypeMismatchError(
                f"Column {name!r} must accept missing values "
                f"to be added to a store with {self._nrows} rows",
                column=name,
                expected="nullable",
            )
        column = Column.wrap([None] * self._nrows, dtype=dtype, nullable=True)
        column.nullable = nullable
        self.add_column(name, column, position)
        return column

    def add_column(self, name: str, column: Column, position: int | None = None) -> None:
        """Register a column under a name, the column is not copied."""
        if not isinstance(name, str):
            raise TypeError(f"Column names must be strings, not {type(name).__name__}")
        if name in self._columns:
            raise DuplicateNameError(f"Column {name!r} already exists", column=name)
        if self._columns and len(column) != self._nrows:
            raise LengthMismatchError(
                f"Column {name!r} has {len(column)} rows, expected {self._nrows}",
                column=name,
                expected=self._nrows,
                actual=len(column),
            )
        if position is None:
            position = len(self._columns)
        if not 0 <= position <= len(self._columns):
            raise IndexOutOfRangeError(
                f"Column position {position} out of range for {len(self._columns)} columns",
                expected=len(self._columns),
                actual=position,
            )
        if not self._columns:
            self._nrows = len(column)

        items = list(self._columns.items())
        items.insert(position, (name, column))
        self._columns = dict(items)
        self._touch()

    def replace_column(self, name: str, column: Column) -> None:
        """Store a different column under an existing name."""
        name = self.resolve(name)
        if len(column) != self._nrows:
            raise LengthMismatchError(
                f"Column {name!r} has {len(column)} rows, expected {self._nrows}",
                column=name,
                expected=self._nrows,
                actual=len(column),
            )
        self._columns[name] = column
        self._touch()

    def drop_column(self, col: str | int) -> Column:
        name = self.resolve(col)
        column = self._columns.pop(name)
        if not self._columns:
            self._nrows = 0
        self._touch()
        return column

    def rename(self, mapping: Mapping[str, str]) -> None:
        """Rename columns, all renames are applied at the same time.

        This allows swapping names like ``{"a": "b", "b": "a"}``.
        """
        for old in mapping:
            self.resolve(old)
        new_names = [mapping.get(name, name) for name in self._columns]
        seen: set[str] = set()
        for name in new_names:
            if not isinstance(name, str):
                raise TypeError(
                    f"Column names must be strings, not {type(name).__name__}"
                )
            if name in seen:
                raise DuplicateNameError(
                    f"Renaming would produce duplicate column {name!r}", column=name
                )
            seen.add(name)
        self._columns = dict(zip(new_names, self._columns.values()))

    def reorder(self, names: Sequence[str]) -> None:
        """Change the order of the columns, ``names`` must list all of them."""
        resolved = [self.resolve(name) for name in names]
        if sorted(resolved) != sorted(self._columns):
            raise MissingColumnError(
                f"Column order {list(names)} is not a permutation of {self.names}"
            )
        self._columns = {name: self._columns[name] for name in resolved}
        self._touch()

    def permute_rows(self, order: Sequence[int]) -> None:
        """Reorder the rows, ``order`` lists the current positions in the new order."""
        self.check_consistency()
        if sorted(order) != list(range(self._nrows)):
            raise IndexOutOfRangeError(
                f"Row order is not a permutation of {self._nrows} rows"
            )
        for column in self.distinct_columns():
            column.storage[:] = [column.storage[i] for i in order]
            column.version += 1
        self._touch()

    def delete_rows(self, rows: Iterable[int]) -> None:
        self.check_consistency()
        positions = sorted({self.row_position(row) for row in rows}, reverse=True)
        if not positions:
            return
        for column in self.distinct_columns():
            for position in positions:
                del column.storage[position]
            column.version += 1
        self._nrows -= len(positions)
        self._touch()
        logger.debug(f"Deleted {len(positions)} rows, {self._nrows} rows left")

    def append_row(
        self,
        values: Mapping[str, Any] | Sequence[Any],
        *,
        cols: str = "exact",
        promote: bool | None = None,
    ) -> None:
        """Add one row at the end of all columns.

        :param values: The values by column name, or positional values
                       for all columns.
        :param cols: How to match the provided values with the columns:
                     ``"exact"`` requires a value for each column and no more,
                     ``"subset"`` fills missing values for columns not provided,
                     ``"union"`` also adds the columns that don't exist yet.
        :param promote: If column types can be widened to store the values.
                        By default only when ``cols="union"``.
        """
        self.append_rows([values], cols=cols, promote=promote)

    def append_rows(
        self,
        rows: Iterable[Mapping[str, Any] | Sequence[Any]],
        *,
        cols: str = "exact",
        promote: bool | None = None,
    ) -> None:
        """Add multiple rows at the end of all columns.

        All the rows are validated and converted before any column
        is modified, so on error the store is left untouched.
        See :meth:`append_row` for the meaning of the options.
        """
        if cols not in APPEND_POLICIES:
            raise UnsupportedOptionError(
                f"Unsupported cols={cols!r}, expected one of {APPEND_POLICIES}"
            )
        if promote is None:
            promote = cols == "union"
        self.check_consistency()

        names = self.names
        records = [self._as_record(row, names) for row in rows]
        if not records:
            return

        # Collect the values for each column, existing first then new ones.
        provided: dict[str, list[Any]] = {name: [] for name in names}
        defaulted: set[str] = set()
        for record in records:
            for name in names:
                if name not in record:
                    if cols == "exact":
                        raise MissingColumnError(
                            f"No value provided for column {name!r}", column=name
                        )
                    defaulted.add(name)
                provided[name].append(record.get(name))
            for name in record:
                if name in self._columns:
                    continue
                if cols != "union" and names:
                    raise MissingColumnError(
                        f"Column {name!r} not found, use cols='union' to add it",
                        column=name,
                    )
                if name not in provided:
                    provided[name] = []
        for name in provided:
            if name not in self._columns:
                provided[name] = [record.get(name) for record in records]

        # Plan the changes: target type and converted values for each column.
        planned: dict[str, tuple[pa.DataType, bool, list[Any]]] = {}
        for name, values in provided.items():
            if name in self._columns:
                column = self._columns[name]
                dtype, nullable = column.dtype, column.nullable or name in defaulted
                dtype, nullable = self._target_type(
                    name, values, dtype, nullable, promote
                )
            else:
                dtype = dtypes.infer_type(values)
                nullable = bool(self._nrows) or any(v is None for v in values)
            converted = [
                dtypes.coerce(v, dtype, nullable, column=name, row=self._nrows + i)
                for i, v in enumerate(values)
            ]
            planned[name] = (dtype, nullable, converted)

        # Columns sharing storage must receive the same values.
        by_storage: dict[int, str] = {}
        for name in names:
            storage_id = id(self._columns[name].storage)
            other = by_storage.setdefault(storage_id, name)
            if other != name and planned[other][2] != planned[name][2]:
                raise ValidationError(
                    f"Columns {other!r} and {name!r} share their storage "
                    "but received different values",
                    column=name,
                )

        # Apply the plan, nothing can fail from here on.
        for column in self.distinct_columns():
            name = next(n for n, c in self._columns.items() if c is column)
            dtype, nullable, converted = planned[name]
            if dtype != column.dtype or nullable != column.nullable:
                column.widen(dtype, nullable)
            column.storage.extend(converted)
            column.version += 1
        for name, (dtype, nullable, converted) in planned.items():
            if name not in self._columns:
                self._columns[name] = Column.wrap(
                    [None] * self._nrows + converted, dtype=dtype, nullable=nullable
                )
        self._nrows += len(records)
        self._touch()
        logger.debug(f"Appended {len(records)} rows, now {self._nrows} rows")

    def _as_record(
        self, row: Mapping[str, Any] | Sequence[Any], names: list[str]
    ) -> Mapping[str, Any]:
        if isinstance(row, Mapping):
            return row
        if isinstance(row, str) or not isinstance(row, Sequence):
            raise TypeError(
                f"Rows must be mappings or sequences, not {type(row).__name__}"
            )
        if len(row) != len(names):
            raise LengthMismatchError(
                f"Row has {len(row)} values but there are {len(names)} columns",
                expected=len(names),
                actual=len(row),
            )
        return dict(zip(names, row))

    @staticmethod
    def _target_type(
        name: str,
        values: list[Any],
        dtype: pa.DataType,
        nullable: bool,
        promote: bool,
    ) -> tuple[pa.DataType, bool]:
        """Find the type a column needs to store the new values."""
        for row, value in enumerate(values):
            try:
                dtypes.coerce(value, dtype, nullable, column=name, row=row)
            except TypeMismatchError:
                if not promote:
                    raise
                if value is None:
                    nullable = True
                else:
                    dtype = dtypes.promote(dtype, dtypes.value_type(value))
        return dtype, nullable
