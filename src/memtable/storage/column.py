"""Typed, nullable columns.

A :class:`Column` is the unit of storage of the engine.
It holds a Python list with the values, the arrow type
declared for those values and if missing values are allowed.

Columns don't know their own name, names are assigned
by the :class:`~memtable.storage.store.ColumnStore` registering them.
This allows the same column (and thus the same storage) to be
part of more than one table under different names, which is
what happens when a table is created without copying its columns.

>>> c = Column([1, 2, 3])
>>> c.dtype
DataType(int64)
>>> c.nullable
False
>>> c[0] = 10
>>> c.to_pylist()
[10, 2, 3]

Every write increments the :attr:`Column.version`, which allows
structures derived from the values (like group indexes) to detect
that the values they were built from changed.
"""

from collections.abc import MutableSequence, Sequence
from typing import Any, Iterable, Iterator

import pyarrow as pa

from .. import dtypes
from ..config import get_options
from ..errors import IndexOutOfRangeError, TypeMismatchError


class Column(MutableSequence):
    """Sequence of values of the same type, possibly missing."""

    def __init__(
        self,
        values: Iterable[Any] = (),
        dtype: pa.DataType | None = None,
        nullable: bool | None = None,
        *,
        name: str | None = None,
    ) -> None:
        """
        :param values: The values of the column, they are always copied.
        :param dtype: The type of the values, inferred when ``None``.
        :param nullable: If the column accepts missing values.
                         When ``None`` it's inferred from the values.
        :param name: The name of the column, only used to report errors.
        """
        data = list(values)
        self._init_storage(data, dtype, nullable, name)

    @classmethod
    def wrap(
        cls,
        storage: list,
        dtype: pa.DataType | None = None,
        nullable: bool | None = None,
        *,
        name: str | None = None,
    ) -> "Column":
        """Create a column that uses the provided list as its storage.

        The list is not copied, values that need a conversion
        to the column type are converted in place, so any
        other holder of the list will see the converted values.
        """
        column = cls.__new__(cls)
        column._init_storage(storage, dtype, nullable, name)
        return column

    def _init_storage(
        self,
        data: list,
        dtype: pa.DataType | None,
        nullable: bool | None,
        name: str | None,
    ) -> None:
        if dtype is None:
            dtype = dtypes.infer_type(data)
        if nullable is None:
            nullable = (
                pa.types.is_null(dtype)
                or not get_options().infer_nullable
                or any(v is None for v in data)
            )
        # Slice assignment keeps the identity of the list for its other holders.
        data[:] = dtypes.coerce_values(data, dtype, nullable, column=name)
        self._data = data
        self.dtype = dtype
        self.nullable = nullable
        self.version = 0

    @property
    def storage(self) -> list:
        """The list backing the column, shared by all its aliases."""
        return self._data

    def shares_storage(self, other: "Column") -> bool:
        """If the two columns are backed by the same list."""
        return self._data is other._data

    def __len__(self) -> int:
        return len(self._data)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._data)

    def _position(self, index: int) -> int:
        size = len(self._data)
        position = index + size if index < 0 else index
        if not 0 <= position < size:
            raise IndexOutOfRangeError(
                f"Row {index} out of range for column of {size} rows",
                row=index,
            )
        return position

    def __getitem__(self, index: int | slice) -> Any:
        if isinstance(index, slice):
            return self._data[index]
        return self._data[self._position(index)]

    def __setitem__(self, index: int, value: Any) -> None:
        self.set(index, value)

    def set(self, index: int, value: Any, *, name: str | None = None) -> None:
        """Store a value at the given row, converting it to the column type."""
        if isinstance(index, slice):
            raise TypeError("Column slices can't be assigned, assign rows one by one")
        position = self._position(index)
        self._data[position] = dtypes.coerce(
            value, self.dtype, self.nullable, column=name, row=position
        )
        self.version += 1

    def __delitem__(self, index: int | slice) -> None:
        if isinstance(index, slice):
            del self._data[index]
        else:
            del self._data[self._position(index)]
        self.version += 1

    def insert(self, index: int, value: Any) -> None:
        self._data.insert(
            index, dtypes.coerce(value, self.dtype, self.nullable, row=index)
        )
        self.version += 1

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Column):
            return self._data == other._data
        if isinstance(other, Sequence) and not isinstance(other, str):
            return self._data == list(other)
        return NotImplemented

    __hash__ = None

    def __repr__(self) -> str:
        nullable = "?" if self.nullable else ""
        return f"Column<{self.dtype}{nullable}>({self._data!r})"

    def copy(self) -> "Column":
        """A new column with its own storage and the same values."""
        column = Column.__new__(Column)
        column._data = list(self._data)
        column.dtype = self.dtype
        column.nullable = self.nullable
        column.version = 0
        return column

    def take(self, indices: Iterable[int]) -> "Column":
        """A new column with the values at the given rows."""
        column = Column.__new__(Column)
        column._data = [self._data[i] for i in indices]
        column.dtype = self.dtype
        column.nullable = self.nullable
        column.version = 0
        return column

    def to_pylist(self) -> list[Any]:
        """A copy of the values as a plain list."""
        return list(self._data)

    def to_arrow(self, name: str | None = None) -> pa.Array:
        """The values as an arrow array of the column type."""
        return dtypes.to_arrow_array(self._data, self.dtype, column=name)

    def has_missing(self) -> bool:
        return any(v is None for v in self._data)

    def widen(self, dtype: pa.DataType, nullable: bool = False) -> None:
        """Widen the column to accept values of ``dtype`` and optionally missing.

        The new type is the promotion of the current type and ``dtype``,
        existing values are converted in place to the new type.
        """
        promoted = dtypes.promote(self.dtype, dtype)
        nullable = self.nullable or nullable
        if promoted != self.dtype:
            self._data[:] = dtypes.coerce_values(self._data, promoted, nullable)
        self.dtype = promoted
        self.nullable = nullable
        self.version += 1

    def set_nullable(self, nullable: bool, *, name: str | None = None) -> None:
        """Allow or disallow missing values in the column."""
        if not nullable and pa.types.is_null(self.dtype):
            raise TypeMismatchError(
                f"Column {name!r} only holds missing values",
                column=name,
                expected="non missing",
                actual=str(self.dtype),
            )
        if not nullable:
            for row, value in enumerate(self._data):
                if value is None:
                    raise TypeMismatchError(
                        f"Column {name!r} contains missing values (row {row})",
                        column=name,
                        row=row,
                        expected="non missing",
                        actual="missing",
                    )
        self.nullable = nullable
