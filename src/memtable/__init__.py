"""memtable

An in-memory columnar table engine, with explicit copy and share semantics.

Tables are ordered sets of named, typed columns. What makes memtable
different from other dataframe libraries is that every operation
that can return data shared with a table asks explicitly if the data
should be copied or shared, and structures derived from a table
(views, group indexes) detect when the table changed under them
instead of silently returning wrong data.

The package is constituted by multiple components, each isolated
within its own module and each self documented:

* :mod:`memtable.storage`, the typed columns and the store holding them.
* :mod:`memtable.table`, tables, views and selection of rows and columns.
* :mod:`memtable.grouping`, split-apply-combine over the rows of a table.
* :mod:`memtable.relational`, joins and reshaping of tables.
* :mod:`memtable.interop`, exchange of tables with Apache Arrow and files.

>>> from memtable import Table, group_by, combine, SumAggregation
>>> table = Table({"city": ["Rome", "Milan", "Rome"], "sales": [10, 20, 30]})
>>> combine(group_by(table, "city"), {"sales": SumAggregation("sales")}).to_pydict()
{'city': ['Rome', 'Milan'], 'sales': [40, 20]}
"""

from . import errors
from .config import Options, get_options
from .grouping import (
    Aggregation,
    CollectAggregation,
    CountAggregation,
    FirstAggregation,
    FunctionAggregation,
    GroupIndex,
    LastAggregation,
    MaxAggregation,
    MeanAggregation,
    MinAggregation,
    RowCountAggregation,
    SumAggregation,
    combine,
    group_by,
    select,
    transform,
)
from .relational import (
    anti_join,
    cross_join,
    flatten,
    inner_join,
    left_join,
    outer_join,
    permutedims,
    right_join,
    semi_join,
    stack,
    unstack,
)
from .storage import Column, ColumnStore
from .table import (
    Between,
    Cols,
    ColumnView,
    Not,
    RowView,
    Table,
    TableLike,
    TableView,
    hcat,
    vcat,
)

__all__ = (
    "errors",
    "Options",
    "get_options",
    "Column",
    "ColumnStore",
    "Table",
    "TableLike",
    "TableView",
    "RowView",
    "ColumnView",
    "Not",
    "Between",
    "Cols",
    "hcat",
    "vcat",
    "GroupIndex",
    "group_by",
    "combine",
    "transform",
    "select",
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
    "inner_join",
    "left_join",
    "right_join",
    "outer_join",
    "semi_join",
    "anti_join",
    "cross_join",
    "stack",
    "unstack",
    "flatten",
    "permutedims",
)
