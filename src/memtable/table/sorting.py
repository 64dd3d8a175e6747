"""Sorting of rows.

When computing ranks, looking for the most significant
values or presenting groups in a stable order, it's often
necessary to sort rows based on one or more columns.

The sorting itself is delegated to arrow, which provides
a stable sort over multiple keys. Missing values are
always placed after any other value, regardless of the
sort direction.

>>> import pyarrow as pa
>>> sort_indices({"values": pa.array([3, None, 1, 2])}, [False])
[2, 3, 0, 1]
>>> sort_indices({"values": pa.array([3, None, 1, 2])}, [True])
[0, 3, 2, 1]

Columns that arrow can't sort, like the ones holding values
of multiple kinds or lists, are sorted in Python. Values are
ordered by kind first (booleans, numbers, strings, sequences)
and then by value:

>>> sort_columns({"k": [[2, 1], [1], None, [1, 5]]}, {"k": pa.list_(pa.int64())}, [False])
[1, 3, 0, 2]
"""

import logging
from typing import Any

import pyarrow as pa
import pyarrow.compute as pc

from .. import dtypes

logger = logging.getLogger(__name__)

# Errors arrow reports for types it has no sort kernel for.
_UNSORTABLE_ERRORS = (pa.ArrowNotImplementedError, pa.ArrowTypeError)


def sort_indices(keys: dict[str, pa.Array], descending: list[bool]) -> list[int]:
    """Compute the positions of the rows in sorted order.

    :param keys: The arrays to sort by, in the order they should be sorted.
    :param descending: If each array should be sorted in a descending order.
    """
    if len(keys) != len(descending):
        raise ValueError("Keys and descending must have the same length")
    if not keys:
        return []

    # Missing values are placed at the end of each key by default.
    sorting = [
        (name, "descending" if desc else "ascending")
        for name, desc in zip(keys, descending)
    ]
    # The table is only a container for the keys, arrow sorts
    # tables by multiple columns with a single stable sort.
    table = pa.table(keys)
    return pc.sort_indices(table, sort_keys=sorting).to_pylist()


def sort_columns(
    values: dict[str, list[Any]],
    types: dict[str, pa.DataType],
    descending: list[bool],
) -> list[int]:
    """Compute the positions of the rows sorted by the provided column values.

    Sorting happens in arrow when it supports the column types,
    in Python otherwise. Both sorts are stable and place missing values last.

    :param values: The values of each key column, most significant first.
    :param types: The type of each key column.
    :param descending: If each column should be sorted in a descending order.
    """
    if len(values) != len(descending):
        raise ValueError("Keys and descending must have the same length")
    if not any(pa.types.is_union(types[name]) for name in values):
        arrays = {
            name: dtypes.to_arrow_array(column, types[name], column=name)
            for name, column in values.items()
        }
        try:
            return sort_indices(arrays, descending)
        except _UNSORTABLE_ERRORS as err:
            logger.debug(f"Sorting {list(values)} in Python: {err}")
    return _python_sort_indices(list(values.values()), descending)


def _python_sort_indices(columns: list[list[Any]], descending: list[bool]) -> list[int]:
    if not columns:
        return []
    order = list(range(len(columns[0])))
    # Stable sorts from the least significant key to the most significant one.
    for column, desc in reversed(list(zip(columns, descending))):
        present = [row for row in order if column[row] is not None]
        missing = [row for row in order if column[row] is None]
        present.sort(key=lambda row: sort_key(column[row]), reverse=desc)
        order = present + missing
    return order


def sort_key(value: Any) -> tuple:
    """A key ordering values of any kind, first by kind and then by value.

    >>> sorted([[2], "a", 1.5, True, None, 1], key=sort_key)
    [True, 1, 1.5, 'a', [2], None]
    """
    if value is None:
        return (6,)
    if isinstance(value, bool):
        return (0, value)
    if isinstance(value, (int, float)):
        return (1, value)
    if isinstance(value, str):
        return (2, value)
    if isinstance(value, (list, tuple)):
        return (3, tuple(sort_key(v) for v in value))
    if isinstance(value, dict):
        return (4, tuple((str(k), sort_key(v)) for k, v in value.items()))
    return (5, type(value).__name__, value)


def normalize_descending(keys: list[str], descending: bool | list[bool]) -> list[bool]:
    """Expand a single sort direction to all the keys."""
    if isinstance(descending, bool):
        return [descending] * len(keys)
    descending = list(descending)
    if len(descending) != len(keys):
        raise ValueError("Keys and descending must have the same length")
    return descending
