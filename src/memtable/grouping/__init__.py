"""Grouping of rows and aggregations of the groups."""

from .aggregations import (
    AGGREGATIONS,
    Aggregation,
    CollectAggregation,
    CountAggregation,
    FirstAggregation,
    FunctionAggregation,
    LastAggregation,
    MaxAggregation,
    MeanAggregation,
    MinAggregation,
    RowCountAggregation,
    SumAggregation,
)
from .groupindex import GroupIndex, combine, group_by, select, transform

__all__ = (
    "GroupIndex",
    "group_by",
    "combine",
    "transform",
    "select",
    "AGGREGATIONS",
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
)
