"""Views over the rows and columns of a table.

Views don't copy any data: they remember which rows and
columns of their parent table they expose and forward
every read and write to the parent storage.

>>> from memtable import Table
>>> table = Table({"id": [1, 2, 3], "name": ["a", "b", "c"]})
>>> view = table.view([2, 0])
>>> view.get(0, "name")
'c'
>>> view.set(0, "name", "z")
>>> table.get(2, "name")
'z'

Views only hold a weak reference to their parent and remember
its structural generation. Once the parent is garbage collected or its
structure changes (rows added or removed, columns added, removed
or reordered) using the view raises :class:`~memtable.errors.StaleViewError`:

>>> table.delete_rows([1])  # doctest: +ELLIPSIS
<Table 2 rows x 2 columns>...
>>> view.get(0, "name")
Traceback (most recent call last):
    ...
memtable.errors.StaleViewError: The parent table changed structure after the view was created
"""

import weakref
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, Iterator

import pyarrow as pa

from ..errors import (
    CorruptedTableError,
    MissingColumnError,
    StaleViewError,
    UnsupportedOptionError,
)
from . import selectors
from .base import TableLike

if TYPE_CHECKING:
    from ..storage import Column
    from .table import Table


class _ParentReference:
    """Weak reference to a table, valid until the table changes structure."""

    __slots__ = ("_ref", "generation")

    def __init__(self, parent: "Table") -> None:
        self._ref = weakref.ref(parent)
        self.generation = parent.generation

    def resolve(self) -> "Table":
        parent = self._ref()
        if parent is None:
            raise StaleViewError("The parent table no longer exists")
        if parent.generation != self.generation:
            raise StaleViewError(
                "The parent table changed structure after the view was created",
                expected=self.generation,
                actual=parent.generation,
            )
        return parent


def _check_column_length(parent: "Table", column: "Column", name: str) -> None:
    if len(column) != parent.nrows:
        raise CorruptedTableError(
            f"Column {name!r} has {len(column)} rows while the table "
            f"has {parent.nrows}, was it resized through an alias?",
            column=name,
            expected=parent.nrows,
            actual=len(column),
        )


class TableView(TableLike):
    """A subset of rows and columns of a parent table.

    Created by :meth:`Table.view` or by selections in ``"share"`` mode.
    """

    def __init__(self, parent: "Table", rows: list[int], columns: list[str]) -> None:
        """
        :param parent: The table the view reads and writes.
        :param rows: The positions of the parent rows exposed by the view.
        :param columns: The names of the parent columns exposed by the view.
        """
        self._parent = _ParentReference(parent)
        self._rows = list(rows)
        self._positions = [parent.column_position(name) for name in columns]

    @property
    def parent(self) -> "Table":
        """The table the view refers to."""
        return self._parent.resolve()

    @property
    def parent_indices(self) -> tuple[list[int], list[int]]:
        """Positions of the rows and columns of the parent exposed by the view."""
        self._parent.resolve()
        return list(self._rows), list(self._positions)

    def _column(self, col: str | int) -> tuple["Table", str, "Column"]:
        parent = self._parent.resolve()
        names = self.column_names
        name = selectors.select_columns(col, names)
        if not isinstance(name, str):
            raise TypeError(f"Expected a single column, got {col!r}")
        column = parent._store.column(name)
        _check_column_length(parent, column, name)
        return parent, name, column

    def _parent_row(self, row: int) -> int:
        return self._rows[selectors.select_rows(row, len(self._rows))]

    @property
    def column_names(self) -> list[str]:
        names = self._parent.resolve().column_names
        return [names[position] for position in self._positions]

    @property
    def nrows(self) -> int:
        self._parent.resolve()
        return len(self._rows)

    def validate(self) -> None:
        parent = self._parent.resolve()
        for name in self.column_names:
            _check_column_length(parent, parent._store.column(name), name)

    def column_field(self, col: str | int) -> pa.Field:
        _, name, column = self._column(col)
        return pa.field(name, column.dtype, column.nullable)

    def get(self, row: int, col: str | int) -> Any:
        _, _, column = self._column(col)
        return column.storage[self._parent_row(row)]

    def set(self, row: int, col: str | int, value: Any) -> None:
        _, name, column = self._column(col)
        column.set(self._parent_row(row), value, name=name)

    def __getitem__(self, key: tuple[int, str | int]) -> Any:
        row, col = key
        return self.get(row, col)

    def __setitem__(self, key: tuple[int, str | int], value: Any) -> None:
        row, col = key
        self.set(row, col, value)

    def column_values(self, col: str | int) -> list[Any]:
        _, _, column = self._column(col)
        storage = column.storage
        return [storage[row] for row in self._rows]

    def column(self, col: str | int, mode: str = "copy") -> "Column | ColumnView":
        """A column of the view, see :meth:`Table.select` for ``mode``."""
        parent, name, column = self._column(col)
        if mode == "share":
            return ColumnView(parent, self._rows, name)
        check_mode(mode)
        return column.take(self._rows)

    def row(self, row: int, mode: str = "copy") -> "RowView | dict[str, Any]":
        """A row of the view, see :meth:`Table.select` for ``mode``."""
        if mode == "share":
            return RowView(self, row)
        check_mode(mode)
        return {name: self.get(row, name) for name in self.column_names}

    def view(self, rows: Any = None, columns: Any = None) -> "TableView":
        """A view over a subset of this view, referring to the same parent."""
        parent = self._parent.resolve()
        selected_rows = selectors.as_list(selectors.select_rows(rows, len(self._rows)))
        selected_columns = selectors.as_list(
            selectors.select_columns(columns, self.column_names)
        )
        return TableView(
            parent, [self._rows[row] for row in selected_rows], selected_columns
        )

    def iterrows(self, readonly: bool = False) -> Iterator["RowView"]:
        for row in range(self.nrows):
            yield RowView(self, row, readonly=readonly)

    def copy(self) -> "Table":
        """Materialize the view into a new table."""
        return self.to_table()


class ColumnView(Sequence):
    """A subset of the rows of a single column of a parent table."""

    def __init__(self, parent: "Table", rows: list[int], name: str) -> None:
        self._parent = _ParentReference(parent)
        self._rows = list(rows)
        self._position = parent.column_position(name)

    def _column(self) -> tuple[str, "Column"]:
        parent = self._parent.resolve()
        name = parent.column_names[self._position]
        column = parent._store.column(name)
        _check_column_length(parent, column, name)
        return name, column

    @property
    def name(self) -> str:
        return self._column()[0]

    @property
    def dtype(self) -> pa.DataType:
        return self._column()[1].dtype

    @property
    def parent(self) -> "Table":
        return self._parent.resolve()

    def __len__(self) -> int:
        self._parent.resolve()
        return len(self._rows)

    def __getitem__(self, index: int) -> Any:
        _, column = self._column()
        return column.storage[self._rows[selectors.select_rows(index, len(self._rows))]]

    def __setitem__(self, index: int, value: Any) -> None:
        name, column = self._column()
        column.set(self._rows[selectors.select_rows(index, len(self._rows))], value, name=name)

    def __iter__(self) -> Iterator[Any]:
        _, column = self._column()
        storage = column.storage
        return iter([storage[row] for row in self._rows])

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Sequence) and not isinstance(other, str):
            return list(self) == list(other)
        return NotImplemented

    __hash__ = None

    def to_pylist(self) -> list[Any]:
        return list(self)

    def __repr__(self) -> str:
        return f"ColumnView({self.to_pylist()!r})"


class RowView:
    """A single row of a table or of a view over a table.

    Values are accessed by column name or position, or as attributes::

        row["name"], row[1], row.name

    Rows handed to predicates are read-only, assigning
    values to them raises ``TypeError``.
    """

    __slots__ = ("_parent", "_row", "_positions", "_row_number", "_readonly")

    def __init__(
        self,
        source: "Table | TableView",
        row: int,
        columns: list[str] | None = None,
        *,
        readonly: bool = False,
    ) -> None:
        """
        :param source: The table or view the row belongs to.
        :param row: The position of the row in the source.
        :param columns: The columns exposed by the row, all when ``None``.
        :param readonly: If the row refuses assignments.
        """
        if columns is None:
            columns = source.column_names
        row_number = selectors.select_rows(row, source.nrows)
        if isinstance(source, TableView):
            parent = source.parent
            rows, _ = source.parent_indices
            parent_row = rows[row_number]
        else:
            parent = source
            parent_row = row_number
        self._parent = _ParentReference(parent)
        self._row = parent_row
        self._positions = [parent.column_position(name) for name in columns]
        self._row_number = row_number
        self._readonly = readonly

    @property
    def parent(self) -> "Table":
        return self._parent.resolve()

    @property
    def row_number(self) -> int:
        """Position of the row in the table or view it was taken from."""
        return self._row_number

    @property
    def parent_indices(self) -> tuple[int, list[int]]:
        """Position of the row and of the columns in the parent table."""
        self._parent.resolve()
        return self._row, list(self._positions)

    def keys(self) -> list[str]:
        names = self._parent.resolve().column_names
        return [names[position] for position in self._positions]

    def _column(self, key: str | int) -> tuple[str, "Column"]:
        parent = self._parent.resolve()
        name = selectors.select_columns(key, self.keys())
        if not isinstance(name, str):
            raise TypeError(f"Expected a single column, got {key!r}")
        column = parent._store.column(name)
        _check_column_length(parent, column, name)
        return name, column

    def __getitem__(self, key: str | int) -> Any:
        _, column = self._column(key)
        return column.storage[self._row]

    def __setitem__(self, key: str | int, value: Any) -> None:
        if self._readonly:
            raise TypeError("The row is read-only")
        name, column = self._column(key)
        column.set(self._row, value, name=name)

    def __getattr__(self, attr: str) -> Any:
        if attr.startswith("_"):
            raise AttributeError(attr)
        try:
            return self[attr]
        except MissingColumnError:
            raise AttributeError(f"Row has no column {attr!r}") from None

    def values(self) -> list[Any]:
        return [self[name] for name in self.keys()]

    def items(self) -> list[tuple[str, Any]]:
        return list(zip(self.keys(), self.values()))

    def to_dict(self) -> dict[str, Any]:
        """Copy the row values in a dictionary."""
        return dict(self.items())

    def __iter__(self) -> Iterator[Any]:
        return iter(self.values())

    def __len__(self) -> int:
        return len(self._positions)

    def __repr__(self) -> str:
        values = ", ".join(f"{name}={value!r}" for name, value in self.items())
        return f"Row({self._row_number}: {values})"


def check_mode(mode: str) -> None:
    if mode not in ("copy", "share"):
        raise UnsupportedOptionError(
            f"Unsupported selection mode {mode!r}, expected 'copy' or 'share'"
        )
