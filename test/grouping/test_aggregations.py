import pytest

from memtable import Table
from memtable.grouping.aggregations import (
    AGGREGATIONS,
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


@pytest.fixture
def group():
    return Table({"v": [1, None, 3], "s": ["x", "y", None]})


@pytest.mark.parametrize(
    "aggregation, expected",
    [
        (SumAggregation("v"), 4),
        (MinAggregation("v"), 1),
        (MaxAggregation("v"), 3),
        (MeanAggregation("v"), 2.0),
        (CountAggregation("v"), 2),
        (CountAggregation("s"), 2),
        (MinAggregation("s"), "x"),
        (FirstAggregation("s"), "x"),
        (LastAggregation("s"), None),
        (RowCountAggregation(), 3),
        (CollectAggregation("v"), [1, None, 3]),
    ],
)
def test_aggregations(group, aggregation, expected):
    assert aggregation.compute(group) == expected


def test_aggregation_of_missing_values():
    table = Table({"v": [1, None]})
    group = table.view([1])
    assert SumAggregation("v").compute(group) is None
    assert CountAggregation("v").compute(group) == 0


def test_aggregation_of_view(group):
    view = group.view([0, 2])
    assert SumAggregation("v").compute(view) == 4
    assert FirstAggregation("v").compute(view.view([1])) == 3


def test_function_aggregation(group):
    def total(group):
        return group.nrows * 10

    assert FunctionAggregation(total).compute(group) == 30
    assert FunctionAggregation(len, "v").compute(group) == 3
    assert str(FunctionAggregation(len, "v")) == "FunctionAggregation(builtins.len, v)"


def test_str():
    assert str(SumAggregation("amount")) == "SumAggregation(amount)"
    assert str(RowCountAggregation()) == "RowCountAggregation(*)"


def test_registry():
    assert AGGREGATIONS["mean"] is MeanAggregation
    assert set(AGGREGATIONS) == {
        "sum",
        "min",
        "max",
        "mean",
        "count",
        "first",
        "last",
        "collect",
    }
