import pyarrow as pa
import pytest

from memtable import Table
from memtable.table.sorting import (
    normalize_descending,
    sort_columns,
    sort_indices,
    sort_key,
)


@pytest.fixture
def sales():
    return Table(
        {
            "city": ["Rome", "Milan", None, "Rome", "Milan"],
            "amount": [30, 10, 5, None, 20],
            "order": [1, 2, 3, 4, 5],
        }
    )


def test_sort_indices_multiple_keys():
    keys = {"a": pa.array([2, 1, 2, 1]), "b": pa.array(["x", "y", "z", "w"])}
    assert sort_indices(keys, [False, True]) == [1, 3, 2, 0]


def test_sort_indices_without_deprecation_warnings(recwarn):
    assert sort_indices({"a": pa.array([2, None, 1])}, [True]) == [0, 2, 1]
    assert not [w for w in recwarn if issubclass(w.category, FutureWarning)]


def test_sort_indices_no_keys():
    assert sort_indices({}, []) == []
    with pytest.raises(ValueError):
        sort_indices({"a": pa.array([1])}, [])


def test_normalize_descending():
    assert normalize_descending(["a", "b"], True) == [True, True]
    assert normalize_descending(["a", "b"], [True, False]) == [True, False]
    with pytest.raises(ValueError):
        normalize_descending(["a", "b"], [True])


def test_sort_missing_last(sales):
    assert sales.sort("amount").column_values("amount") == [5, 10, 20, 30, None]
    assert sales.sort("amount", descending=True).column_values("amount") == [
        30,
        20,
        10,
        5,
        None,
    ]


def test_sort_multiple_keys(sales):
    result = sales.sort(["city", "amount"], descending=[False, True])
    assert result.column_values("order") == [5, 2, 1, 4, 3]


def test_sort_is_stable(sales):
    assert sales.sort("city").column_values("order") == [2, 5, 1, 4, 3]


def test_sort_copy_and_inplace(sales):
    result = sales.sort("order", descending=True)
    assert result.column_values("order") == [5, 4, 3, 2, 1]
    assert sales.column_values("order") == [1, 2, 3, 4, 5]
    assert sales.sort("order", descending=True, inplace=True) is sales
    assert sales.column_values("order") == [5, 4, 3, 2, 1]


def test_sort_shared_columns_moved_once():
    values = [3, 1, 2]
    table = Table({"a": values, "b": values}, copy_columns=False)
    table.sort("a", inplace=True)
    assert values == [1, 2, 3]
    assert table.to_pydict() == {"a": [1, 2, 3], "b": [1, 2, 3]}


def test_sort_columns_in_python():
    mixed = pa.dense_union([pa.field("int64", pa.int64()), pa.field("string", pa.string())])
    assert sort_columns({"k": ["b", 2, None, 1]}, {"k": mixed}, [False]) == [3, 1, 0, 2]
    assert sort_columns({"k": ["b", 2, None, 1]}, {"k": mixed}, [True]) == [0, 1, 3, 2]
    assert sort_columns(
        {"k": [[2, 1], [1], [1, 5]], "n": [1, 2, 3]},
        {"k": pa.list_(pa.int64()), "n": pa.int64()},
        [False, False],
    ) == [1, 2, 0]


def test_sort_key_orders_kinds():
    values = ["a", 2, None, False, [1, None], 0.5]
    assert sorted(values, key=sort_key) == [False, 0.5, 2, "a", [1, None], None]


def test_sort_mixed_kinds():
    table = Table({"k": [1, "x", None, 0.5], "order": [1, 2, 3, 4]})
    assert table.sort("k").column_values("k") == [0.5, 1, "x", None]
    assert table.sort("k", descending=True).column_values("order") == [2, 1, 4, 3]


def test_sort_list_column():
    table = Table({"k": [[2, 1], [1], [1, 5]], "order": [1, 2, 3]})
    assert table.sort("k").column_values("order") == [2, 3, 1]
    assert table.sort("k", descending=True).column_values("order") == [1, 3, 2]
