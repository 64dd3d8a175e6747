"""Base classes and interfaces for tables.

This module defines the interface shared by everything
that exposes rows and columns: tables themselves and
the views over them.

Collaborators like serializers or the display routines
only rely on this interface, which is constituted by:

* column introspection: :attr:`TableLike.column_names`,
  :meth:`TableLike.describe_columns`, :attr:`TableLike.nrows`
  and :attr:`TableLike.ncols`;
* cell access: :meth:`TableLike.get` by row and column name or position.
"""

import abc
from typing import TYPE_CHECKING, Any, Callable, Iterator

import pyarrow as pa

from .. import dtypes
from ..utils.tabulate import tabulate

if TYPE_CHECKING:
    from .table import Table


class TableLike(abc.ABC):
    """Rows and columns of data.

    The base `TableLike` class only provides the
    operations that can be derived from the few
    abstract methods subclasses have to implement.

    Subclasses can hold their data (like :class:`~memtable.Table`)
    or forward access to another table (like :class:`~memtable.TableView`).
    """

    @property
    @abc.abstractmethod
    def column_names(self) -> list[str]:
        """Names of the columns, in order."""
        ...

    @property
    @abc.abstractmethod
    def nrows(self) -> int:
        """Number of rows."""
        ...

    @abc.abstractmethod
    def column_field(self, col: str | int) -> pa.Field:
        """Name, type and nullability of a column as an arrow field."""
        ...

    @abc.abstractmethod
    def get(self, row: int, col: str | int) -> Any:
        """Value of a single cell."""
        ...

    @abc.abstractmethod
    def column_values(self, col: str | int) -> list[Any]:
        """A new list with all the values of a column."""
        ...

    @abc.abstractmethod
    def validate(self) -> None:
        """Ensure the data is consistent before reading it.

        Must raise :class:`~memtable.errors.CorruptedTableError`
        or :class:`~memtable.errors.StaleViewError` when the data
        can't be trusted.
        """
        ...

    @property
    def ncols(self) -> int:
        return len(self.column_names)

    @property
    def shape(self) -> tuple[int, int]:
        return (self.nrows, self.ncols)

    def __len__(self) -> int:
        return self.nrows

    def __contains__(self, name: object) -> bool:
        return name in self.column_names

    def column_type(self, col: str | int) -> pa.DataType:
        return self.column_field(col).type

    def describe_columns(self) -> list[tuple[str, pa.DataType, bool]]:
        """List the ``(name, type, nullable)`` of each column."""
        return [
            (field.name, field.type, field.nullable)
            for field in (self.column_field(name) for name in self.column_names)
        ]

    @property
    def schema(self) -> pa.Schema:
        """The columns as an arrow schema."""
        return pa.schema([self.column_field(name) for name in self.column_names])

    def names(self, predicate: Callable[[pa.DataType], bool] | None = None) -> list[str]:
        """Names of the columns whose type satisfies the predicate.

        For example ``table.names(pa.types.is_string)``
        lists the columns holding strings.
        """
        if predicate is None:
            return self.column_names
        return [name for name in self.column_names if predicate(self.column_type(name))]

    def row_values(self, row: int) -> tuple[Any, ...]:
        return tuple(self.get(row, name) for name in self.column_names)

    def column_to_arrow(self, col: str | int) -> pa.Array:
        field = self.column_field(col)
        return dtypes.to_arrow_array(
            self.column_values(col), field.type, column=field.name
        )

    def to_pydict(self) -> dict[str, list[Any]]:
        """The columns as a dictionary of lists."""
        self.validate()
        return {name: self.column_values(name) for name in self.column_names}

    def to_pylist(self) -> list[dict[str, Any]]:
        """The rows as a list of dictionaries."""
        self.validate()
        columns = self.to_pydict()
        return [
            {name: values[row] for name, values in columns.items()}
            for row in range(self.nrows)
        ]

    def iterrecords(self) -> Iterator[dict[str, Any]]:
        names = self.column_names
        for row in range(self.nrows):
            yield {name: self.get(row, name) for name in names}

    def to_table(self) -> "Table":
        """Copy the data in a new table owning its columns."""
        from .table import Table

        self.validate()
        return Table(
            {
                name: self._copy_column(name)
                for name in self.column_names
            },
            copy_columns=False,
        )

    def _copy_column(self, name: str):
        from ..storage import Column

        field = self.column_field(name)
        return Column(self.column_values(name), field.type, field.nullable, name=name)

    def equals(self, other: "TableLike", *, check_types: bool = False) -> bool:
        """If the two tables have the same columns with the same values.

        Missing values are considered equal to each other.
        When ``check_types`` is set, also the column types must match.
        """
        if not isinstance(other, TableLike):
            return False
        if self.column_names != other.column_names or self.nrows != other.nrows:
            return False
        if check_types and self.schema != other.schema:
            return False
        return all(
            self.column_values(name) == other.column_values(name)
            for name in self.column_names
        )

    def __str__(self) -> str:
        return tabulate(self)

    def __repr__(self) -> str:
        return (
            f"<{self.__class__.__name__} {self.nrows} rows x {self.ncols} columns>\n"
            f"{tabulate(self)}"
        )
