"""Aggregations computed on the groups of a table.

Frequently when analysing data is necessary
to compute statistics like the min, max, average, etc...
of the rows sharing the same key.

Aggregations receive each group as a
:class:`~memtable.table.views.TableView` and reduce it
to a value, which becomes a cell of the result.
Numeric reductions are computed by :mod:`pyarrow.compute`.

For example, given the following data::

    city, shop, n_employees
    New York, Shop A, 10
    New York, Shop B, 15
    Los Angeles, Shop C, 8
    Los Angeles, Shop D, 12
    New York, Shop E, 20

We could group by city and compute the sum of the employees
to get::

    city, total_employees
    New York, 45
    Los Angeles, 20

>>> from memtable import Table, group_by, combine
>>> data = Table({
...    'city': ['New York', 'New York', 'Los Angeles', 'Los Angeles', 'New York'],
...    'shop': ['Shop A', 'Shop B', 'Shop C', 'Shop D', 'Shop E'],
...    'n_employees': [10, 15, 8, 12, 20]
... })
>>> combine(group_by(data, "city"), {"total_employees": SumAggregation("n_employees")}).to_pydict()
{'city': ['New York', 'Los Angeles'], 'total_employees': [45, 20]}

Aggregations can also return a sequence of values,
in which case a row is emitted for each value
(see :class:`CollectAggregation`).
"""

import abc
from typing import Any, Callable

import pyarrow as pa
import pyarrow.compute as pc

from ..table.base import TableLike
from ..utils.inspect import get_qualname

__all__ = (
    "Aggregation",
    "SumAggregation",
    "MinAggregation",
    "MaxAggregation",
    "MeanAggregation",
    "CountAggregation",
    "FirstAggregation",
    "LastAggregation",
    "RowCountAggregation",
    "CollectAggregation",
    "FunctionAggregation",
    "AGGREGATIONS",
)


class Aggregation(abc.ABC):
    """Base class for aggregations.

    Every aggregation is expected to implement
    a method to compute its result for a single group
    of rows. The result can be a single value or
    a list of values, one for each row it produces.
    """

    def __init__(self, column: str) -> None:
        self.column = column

    def __str__(self) -> str:
        return f"{self.__class__.__name__}({self.column})"

    __repr__ = __str__

    @abc.abstractmethod
    def compute(self, group: TableLike) -> Any: ...


class SimpleAggregation(Aggregation):
    """Provide a base implementation for reductions computed by arrow.

    The values of the column are converted to an arrow array
    and reduced by a function of :mod:`pyarrow.compute`,
    the resulting scalar is converted back to a Python value.
    Missing values are ignored, a group with only missing values
    produces a missing value.
    """

    @abc.abstractmethod
    def _aggregate(self, data: pa.Array) -> pa.Scalar: ...

    def compute(self, group: TableLike) -> Any:
        return self._aggregate(group.column_to_arrow(self.column)).as_py()


class SumAggregation(SimpleAggregation):
    """Compute the sum of an aggregated column."""

    def _aggregate(self, data: pa.Array) -> pa.Scalar:
        return pc.sum(data)


class MinAggregation(SimpleAggregation):
    """Compute the min of an aggregated column."""

    def _aggregate(self, data: pa.Array) -> pa.Scalar:
        return pc.min(data)


class MaxAggregation(SimpleAggregation):
    """Compute the max of an aggregated column."""

    def _aggregate(self, data: pa.Array) -> pa.Scalar:
        return pc.max(data)


class MeanAggregation(SimpleAggregation):
    """Compute the mean of an aggregated column."""

    def _aggregate(self, data: pa.Array) -> pa.Scalar:
        return pc.mean(data)


class CountAggregation(SimpleAggregation):
    """Count the non missing values of an aggregated column."""

    def _aggregate(self, data: pa.Array) -> pa.Scalar:
        return pc.count(data)


class FirstAggregation(Aggregation):
    """The value of the column in the first row of the group."""

    def compute(self, group: TableLike) -> Any:
        values = group.column_values(self.column)
        return values[0] if values else None


class LastAggregation(Aggregation):
    """The value of the column in the last row of the group."""

    def compute(self, group: TableLike) -> Any:
        values = group.column_values(self.column)
        return values[-1] if values else None


class RowCountAggregation(Aggregation):
    """The number of rows of the group, including those with missing values."""

    def __init__(self) -> None:
        super().__init__("*")

    def compute(self, group: TableLike) -> int:
        return group.nrows


class CollectAggregation(Aggregation):
    """All the values of the column in the group.

    As the result is a list, :func:`~memtable.grouping.combine`
    emits one row for each value of the group.
    """

    def compute(self, group: TableLike) -> list[Any]:
        return group.column_values(self.column)


class FunctionAggregation(Aggregation):
    """Apply an arbitrary function to the values of the group.

    The function receives the values of each of the ``columns``
    as a list, or the group itself if no column is provided.
    When ``by_row`` is set the function is called once per row
    with the values of the row, producing one value for each row.

    >>> from memtable import Table
    >>> group = Table({"a": [1, 2], "b": [3, 4]})
    >>> FunctionAggregation(lambda a, b: sum(a) * sum(b), "a", "b").compute(group)
    21
    >>> FunctionAggregation(lambda a, b: a + b, "a", "b", by_row=True).compute(group)
    [4, 6]
    """

    def __init__(
        self, function: Callable[..., Any], *columns: str, by_row: bool = False
    ) -> None:
        super().__init__(columns[0] if len(columns) == 1 else ", ".join(columns))
        self.function = function
        self.columns = columns
        self.by_row = by_row

    def __str__(self) -> str:
        return f"{self.__class__.__name__}({get_qualname(self.function)}, {self.column})"

    __repr__ = __str__

    def compute(self, group: TableLike) -> Any:
        if not self.columns:
            return self.function(group)
        values = [group.column_values(column) for column in self.columns]
        if self.by_row:
            return [self.function(*row) for row in zip(*values)]
        return self.function(*values)


# Aggregations that can be referenced by name, for example from the command line.
AGGREGATIONS: dict[str, type[Aggregation]] = {
    "sum": SumAggregation,
    "min": MinAggregation,
    "max": MaxAggregation,
    "mean": MeanAggregation,
    "count": CountAggregation,
    "first": FirstAggregation,
    "last": LastAggregation,
    "collect": CollectAggregation,
}
