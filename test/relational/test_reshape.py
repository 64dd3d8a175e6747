import logging

import pyarrow as pa
import pytest

from memtable import Table
from memtable.errors import (
    DuplicateNameError,
    LengthMismatchError,
    NoKeyColumnError,
    StaleViewError,
    ValidationError,
)
from memtable.relational import StackView, flatten, permutedims, stack, unstack


@pytest.fixture
def wide():
    return Table({"id": ["a", "b"], "x": [1, 2], "y": [1.5, None]})


def test_stack_numeric_columns_by_default(wide):
    long = stack(wide)
    assert long.to_pydict() == {
        "id": ["a", "b", "a", "b"],
        "variable": ["x", "x", "y", "y"],
        "value": [1.0, 2.0, 1.5, None],
    }
    assert long.describe_columns() == [
        ("id", pa.string(), False),
        ("variable", pa.string(), False),
        ("value", pa.float64(), True),
    ]


def test_stack_names(wide):
    long = stack(wide, "x", variable_name="measure", value_name="amount")
    assert long.column_names == ["id", "y", "measure", "amount"]
    with pytest.raises(DuplicateNameError):
        stack(wide, "x", variable_name="id")


def test_stack_then_unstack(wide):
    restored = unstack(stack(wide, ["x", "y"], "id"), "id")
    assert restored.to_pydict() == wide.to_pydict()


def test_stack_then_unstack_widens_integers(wide):
    restored = unstack(stack(wide, ["x", "y"], "id"), "id")
    assert restored.column_type("x") == pa.float64()
    assert restored.column_values("x") == [1.0, 2.0]
    assert wide.column_type("x") == pa.int64()


def test_stack_view(wide):
    long = stack(wide, ["x", "y"], "id", view=True)
    assert isinstance(long, StackView)
    assert long.shape == (4, 3)
    assert long.get(3, "value") is None
    assert long.get(2, "variable") == "y"
    wide.set(1, "y", 2.5)
    assert long.column_values("value") == [1, 2, 1.5, 2.5]
    assert long.to_table().column_type("value") == pa.float64()
    wide.append_row({"id": "c", "x": 3, "y": 3.5})
    with pytest.raises(StaleViewError):
        long.nrows


def test_stack_view_requires_table(wide):
    with pytest.raises(TypeError):
        stack(wide.view(), view=True)


def test_unstack_fill_and_rename():
    long = Table(
        {
            "id": [1, 1, 2],
            "variable": ["a", "b", "a"],
            "value": [10, 20, 30],
        }
    )
    result = unstack(long, "id", fill=0, renamecols=lambda name: f"v_{name}")
    assert result.to_pydict() == {"id": [1, 2], "v_a": [10, 30], "v_b": [20, 0]}
    assert unstack(long).column_values("b") == [20, None]


def test_unstack_duplicates(caplog):
    long = Table({"id": [1, 1], "variable": ["a", "a"], "value": [1, 2]})
    with pytest.raises(ValidationError):
        unstack(long, "id")
    with caplog.at_level(logging.WARNING, logger="memtable.relational.reshape"):
        result = unstack(long, "id", allow_duplicates=True)
    assert result.to_pydict() == {"id": [1], "a": [2]}
    assert "keeping the last one" in caplog.text


def test_unstack_missing_variable():
    long = Table({"id": [1, 1], "variable": ["a", None], "value": [1, 2]})
    assert unstack(long, "id").column_names == ["id", "a", "missing"]


def test_unstack_errors():
    with pytest.raises(NoKeyColumnError):
        unstack(Table({"variable": ["a"], "value": [1]}))
    with pytest.raises(DuplicateNameError):
        unstack(Table({"id": [1], "variable": ["id"], "value": [1]}), "id")


def test_flatten():
    table = Table({"a": [1, 2, 3], "b": [[1, 2], None, [4]], "c": [["x", "y"], ["z"], ["w"]]})
    result = flatten(table, "b")
    assert result.to_pydict() == {
        "a": [1, 1, 2, 3],
        "b": [1, 2, None, 4],
        "c": [["x", "y"], ["x", "y"], ["z"], ["w"]],
    }
    assert result.column_type("b") == pa.int64()


def test_flatten_multiple_columns():
    table = Table({"b": [[1, 2], [3]], "c": [["x", "y"], ["z"]]})
    assert flatten(table, ["b", "c"]).to_pydict() == {
        "b": [1, 2, 3],
        "c": ["x", "y", "z"],
    }
    with pytest.raises(LengthMismatchError):
        flatten(Table({"b": [[1, 2]], "c": [["x"]]}), ["b", "c"])


def test_permutedims():
    table = Table({"name": ["x", "y"], "a": [1, 2], "b": [3, 4]})
    assert permutedims(table, "name", "column").to_pydict() == {
        "column": ["a", "b"],
        "x": [1, 3],
        "y": [2, 4],
    }
    same = Table({"name": ["x", "x"], "a": [1, 2]})
    with pytest.raises(DuplicateNameError):
        permutedims(same)
    assert permutedims(same, make_unique=True).column_names == ["name", "x", "x_1"]
