"""Reshaping of tables between the wide and long format.

Data in the *wide* format has a column for each measure::

    id, M1, M2
    1,  11, 111
    2,  12, 112

The same data in the *long* format has a row for each measure,
with a column naming the measure and one holding its value::

    id, variable, value
    1,  M1,       11
    2,  M1,       12
    1,  M2,       111
    2,  M2,       112

:func:`stack` converts from wide to long format,
:func:`unstack` converts from long to wide format:

>>> from memtable import Table
>>> wide = Table({"id": [1, 2], "M1": [11, 12], "M2": [111, 112]})
>>> long = stack(wide, ["M1", "M2"], "id")
>>> long.to_pydict()
{'id': [1, 2, 1, 2], 'variable': ['M1', 'M1', 'M2', 'M2'], 'value': [11, 12, 111, 112]}
>>> unstack(long, "id").to_pydict()
{'id': [1, 2], 'M1': [11, 12], 'M2': [111, 112]}

The module also provides :func:`flatten`, which expands
columns holding lists to one row for each element of the list,
and :func:`permutedims`, which transposes a table.
"""

import logging
from typing import Any, Callable

import pyarrow as pa

from .. import dtypes
from ..errors import (
    DuplicateNameError,
    LengthMismatchError,
    NoKeyColumnError,
    ValidationError,
)
from ..storage import Column
from ..table import selectors
from ..table.base import TableLike
from ..table.table import Table
from ..table.views import _ParentReference
from ..utils import naming

logger = logging.getLogger(__name__)

__all__ = ("stack", "unstack", "flatten", "permutedims", "StackView")


def _stack_columns(
    table: TableLike, value_columns: Any, id_columns: Any
) -> tuple[list[str], list[str]]:
    names = table.column_names
    if value_columns is None:
        values = [name for name in names if dtypes.is_numeric(table.column_type(name))]
    else:
        values = selectors.as_list(selectors.select_columns(value_columns, names))
    if id_columns is None:
        ids = [name for name in names if name not in values]
    else:
        ids = selectors.as_list(selectors.select_columns(id_columns, names))
    return values, ids


def _value_field(table: TableLike, value_columns: list[str], name: str) -> pa.Field:
    """The type able to hold the values of all the stacked columns."""
    dtype = pa.null()
    nullable = False
    for column in value_columns:
        field = table.column_field(column)
        dtype = dtypes.promote(dtype, field.type)
        nullable = nullable or field.nullable
    return pa.field(name, dtype, nullable or pa.types.is_null(dtype))


def stack(
    table: TableLike,
    value_columns: Any = None,
    id_columns: Any = None,
    *,
    variable_name: str = "variable",
    value_name: str = "value",
    view: bool = False,
) -> "Table | StackView":
    """Convert a table from the wide to the long format.

    Each row of the result holds one value of one of the ``value_columns``,
    all the values of the first value column come first, then those of
    the second and so on. The columns of the result are the ``id_columns``,
    repeated for each value, followed by ``variable_name`` holding
    the name of the value column and ``value_name`` holding the value.

    The value column has the type promoted from all the stacked columns,
    so integer columns stacked with floating point ones hold floats, and
    unstacking the result gives back floating point columns:

    >>> long = stack(Table({"id": [1], "a": [1], "b": [0.5]}), ["a", "b"], "id")
    >>> long.column_type("value")
    DataType(double)
    >>> unstack(long, "id").to_pydict()
    {'id': [1], 'a': [1.0], 'b': [0.5]}

    :param value_columns: The columns to stack, by default the numeric ones.
    :param id_columns: The columns to repeat, by default all the others.
    :param view: Return a :class:`StackView` reading the values from
                 the table instead of copying them.
    """
    table.validate()
    values, ids = _stack_columns(table, value_columns, id_columns)
    for name in (variable_name, value_name):
        if name in ids:
            raise DuplicateNameError(
                f"Column {name!r} is both an id column and a stacked column",
                column=name,
            )
    if view:
        if not isinstance(table, Table):
            raise TypeError("Only tables can be stacked as a view")
        return StackView(table, values, ids, variable_name, value_name)

    nrows = table.nrows
    columns: list[tuple[str, Column]] = []
    for name in ids:
        field = table.column_field(name)
        repeated = table.column_values(name) * len(values)
        columns.append((name, Column.wrap(repeated, field.type, field.nullable, name=name)))
    variable = [name for name in values for _ in range(nrows)]
    columns.append(
        (variable_name, Column.wrap(variable, pa.string(), False, name=variable_name))
    )
    field = _value_field(table, values, value_name)
    stacked = [value for name in values for value in table.column_values(name)]
    columns.append(
        (value_name, Column.wrap(stacked, field.type, field.nullable, name=value_name))
    )

    logger.debug(f"Stacked {len(values)} columns of {nrows} rows")
    return Table._wrap(columns)


class StackView(TableLike):
    """A table in long format reading its values from a table in wide format.

    Created by :func:`stack` with ``view=True``, it becomes stale when
    the structure of the table changes. Changes to the values of
    the table are visible through the view.
    """

    def __init__(
        self,
        parent: Table,
        value_columns: list[str],
        id_columns: list[str],
        variable_name: str,
        value_name: str,
    ) -> None:
        self._parent = _ParentReference(parent)
        self._values = list(value_columns)
        self._ids = list(id_columns)
        self._variable_name = variable_name
        self._value_name = value_name

    @property
    def column_names(self) -> list[str]:
        return [*self._ids, self._variable_name, self._value_name]

    @property
    def nrows(self) -> int:
        return self._parent.resolve().nrows * len(self._values)

    def validate(self) -> None:
        self._parent.resolve().validate()

    def _name(self, col: str | int) -> str:
        name = selectors.select_columns(col, self.column_names)
        if not isinstance(name, str):
            raise TypeError(f"Expected a single column, got {col!r}")
        return name

    def column_field(self, col: str | int) -> pa.Field:
        parent = self._parent.resolve()
        name = self._name(col)
        if name == self._variable_name:
            return pa.field(name, pa.string(), False)
        if name == self._value_name:
            return _value_field(parent, self._values, name)
        return parent.column_field(name)

    def get(self, row: int, col: str | int) -> Any:
        parent = self._parent.resolve()
        name = self._name(col)
        position = selectors.select_rows(row, self.nrows)
        value_column, source_row = divmod(position, parent.nrows)
        if name == self._variable_name:
            return self._values[value_column]
        if name == self._value_name:
            return parent.get(source_row, self._values[value_column])
        return parent.get(source_row, name)

    def column_values(self, col: str | int) -> list[Any]:
        parent = self._parent.resolve()
        name = self._name(col)
        if name == self._variable_name:
            return [value for value in self._values for _ in range(parent.nrows)]
        if name == self._value_name:
            return [value for column in self._values for value in parent.column_values(column)]
        return parent.column_values(name) * len(self._values)


def unstack(
    table: TableLike,
    row_keys: Any = None,
    variable_column: str = "variable",
    value_column: str = "value",
    *,
    fill: Any = None,
    renamecols: Callable[[str], str] | None = None,
    allow_duplicates: bool = False,
) -> Table:
    """Convert a table from the long to the wide format.

    The result has one row for each distinct combination of the
    ``row_keys`` and one column for each distinct value of the
    ``variable_column``, holding the values of the ``value_column``.
    Rows and columns are in order of first appearance.

    :param row_keys: The columns identifying a row of the result,
                     by default all the columns except the variable and value.
    :param fill: The value of the combinations that don't appear in the table.
    :param renamecols: Compute the name of the new columns from the variable.
    :param allow_duplicates: Keep the last value when a combination
                             appears more than once, instead of raising
                             :class:`~memtable.errors.ValidationError`.
    """
    table.validate()
    names = table.column_names
    variable_column = selectors.select_columns(variable_column, names)
    value_column = selectors.select_columns(value_column, names)
    if row_keys is None:
        keys = [name for name in names if name not in (variable_column, value_column)]
    else:
        keys = selectors.as_list(selectors.select_columns(row_keys, names))
    if not keys:
        raise NoKeyColumnError(
            "No key columns left to identify the rows, "
            "all the columns are the variable or the value"
        )

    key_values = [table.column_values(name) for name in keys]
    variables = table.column_values(variable_column)
    values = table.column_values(value_column)

    rows: dict[tuple[Any, ...], int] = {}
    row_keys_values: list[tuple[Any, ...]] = []
    new_columns: dict[Any, dict[int, Any]] = {}
    for row in range(table.nrows):
        key = tuple(column[row] for column in key_values)
        hashed = tuple(dtypes.hashable(value) for value in key)
        if hashed not in rows:
            rows[hashed] = len(row_keys_values)
            row_keys_values.append(key)
        target = rows[hashed]
        cells = new_columns.setdefault(dtypes.hashable(variables[row]), {})
        if target in cells:
            if not allow_duplicates:
                raise ValidationError(
                    f"Duplicate entries for key {key!r} and variable "
                    f"{variables[row]!r} (row {row})",
                    row=row,
                )
            logger.warning(
                f"Duplicate entries for key {key!r} and variable "
                f"{variables[row]!r}, keeping the last one"
            )
        cells[target] = values[row]

    columns: list[tuple[str, Column]] = []
    for position, name in enumerate(keys):
        field = table.column_field(name)
        column_values = [key[position] for key in row_keys_values]
        columns.append((name, Column.wrap(column_values, field.type, field.nullable, name=name)))

    value_type = table.column_type(value_column)
    taken = set(keys)
    for variable, cells in new_columns.items():
        name = "missing" if variable is None else str(variable)
        if renamecols is not None:
            name = renamecols(name)
        if name in taken:
            raise DuplicateNameError(
                f"Unstacked column {name!r} collides with an existing column",
                column=name,
            )
        taken.add(name)
        filled = [cells.get(row, fill) for row in range(len(row_keys_values))]
        dtype = dtypes.promote(value_type, dtypes.infer_type(filled))
        columns.append((name, Column.wrap(filled, dtype, name=name)))

    logger.debug(
        f"Unstacked {table.nrows} rows in {len(row_keys_values)} rows "
        f"and {len(new_columns)} columns"
    )
    return Table._wrap(columns)


def flatten(table: TableLike, columns: Any) -> Table:
    """Expand the lists in the ``columns`` to one row for each element.

    The other columns are repeated for each element.
    When multiple columns are flattened, their lists
    in the same row must have the same length.
    Missing values are kept as a single missing element.

    >>> from memtable import Table
    >>> flatten(Table({"a": [1, 2], "b": [[1, 2], [3]]}), "b").to_pydict()
    {'a': [1, 1, 2], 'b': [1, 2, 3]}
    """
    table.validate()
    names = selectors.as_list(selectors.select_columns(columns, table.column_names))
    lists = {name: table.column_values(name) for name in names}

    repeats = []
    for row in range(table.nrows):
        lengths = {
            name: 1 if values[row] is None else len(values[row])
            for name, values in lists.items()
        }
        if len(set(lengths.values())) > 1:
            raise LengthMismatchError(
                f"Lists in row {row} have different lengths {lengths}",
                row=row,
            )
        repeats.append(next(iter(lengths.values()), 1))

    result: list[tuple[str, Column]] = []
    for name in table.column_names:
        field = table.column_field(name)
        values = table.column_values(name)
        if name in lists:
            flattened = [
                item
                for value in values
                for item in ([None] if value is None else value)
            ]
            dtype = (
                field.type.value_type
                if pa.types.is_list(field.type)
                or pa.types.is_large_list(field.type)
                or pa.types.is_fixed_size_list(field.type)
                else dtypes.infer_type(flattened)
            )
            result.append((name, Column.wrap(flattened, dtype, name=name)))
        else:
            repeated = [value for value, n in zip(values, repeats) for _ in range(n)]
            result.append((name, Column.wrap(repeated, field.type, field.nullable, name=name)))
    return Table._wrap(result)


def permutedims(
    table: TableLike,
    names_column: str | int = 0,
    dest_column: str | None = None,
    *,
    make_unique: bool = False,
) -> Table:
    """Transpose a table, the rows become columns and the columns rows.

    The values of ``names_column`` become the names of the new columns,
    the names of the other columns are stored in ``dest_column``
    (by default named like ``names_column``).

    >>> from memtable import Table
    >>> table = Table({"name": ["x", "y"], "a": [1, 2], "b": [3, 4]})
    >>> permutedims(table, "name").to_pydict()
    {'name': ['a', 'b'], 'x': [1, 3], 'y': [2, 4]}
    """
    table.validate()
    source = selectors.select_columns(names_column, table.column_names)
    if not isinstance(source, str):
        raise TypeError(f"Expected a single column, got {names_column!r}")
    if dest_column is None:
        dest_column = source
    others = [name for name in table.column_names if name != source]

    new_names = [
        "missing" if value is None else str(value)
        for value in table.column_values(source)
    ]
    all_names = [dest_column, *new_names]
    if make_unique:
        all_names = naming.make_unique(all_names)
    elif len(set(all_names)) != len(all_names):
        raise DuplicateNameError(
            f"Transposing would produce duplicate columns {all_names}, "
            "use make_unique=True to rename them"
        )

    result: list[tuple[str, Column]] = [
        (all_names[0], Column.wrap(list(others), pa.string(), False, name=all_names[0]))
    ]
    for row, name in enumerate(all_names[1:]):
        values = [table.get(row, column) for column in others]
        result.append((name, Column.wrap(values, name=name)))
    return Table._wrap(result)
