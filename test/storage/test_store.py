import pyarrow as pa
import pytest

from memtable.errors import (
    CorruptedTableError,
    DuplicateNameError,
    LengthMismatchError,
    MissingColumnError,
    TypeMismatchError,
    UnsupportedOptionError,
    ValidationError,
)
from memtable.storage import Column, ColumnStore


@pytest.fixture
def store():
    store = ColumnStore()
    store.add_column("id", Column([1, 2, 3]))
    store.add_column("name", Column(["a", "b", "c"]))
    return store


def test_add_column_length_mismatch(store):
    with pytest.raises(LengthMismatchError) as err:
        store.add_column("other", Column([1, 2]))
    assert err.value.column == "other"
    assert store.names == ["id", "name"]


def test_add_column_duplicate(store):
    with pytest.raises(DuplicateNameError):
        store.add_column("id", Column([1, 2, 3]))


def test_add_column_at_position(store):
    store.add_column("first", Column([0, 0, 0]), position=0)
    assert store.names == ["first", "id", "name"]


def test_create_column(store):
    column = store.create_column("age", pa.int64())
    assert column.to_pylist() == [None, None, None]
    assert store.names == ["id", "name", "age"]
    with pytest.raises(DuplicateNameError):
        store.create_column("age", pa.int64())
    with pytest.raises(TypeMismatchError):
        store.create_column("score", pa.int64(), nullable=False)


def test_get_and_set(store):
    assert store.get(1, "name") == "b"
    assert store.get(-1, 0) == 3
    store.set(0, "name", "z")
    assert store.get(0, 1) == "z"
    with pytest.raises(MissingColumnError):
        store.get(0, "unknown")
    with pytest.raises(TypeMismatchError):
        store.set(0, "id", "x")


def test_generation_changes_with_structure(store):
    generation = store.generation
    store.set(0, "id", 10)
    store.rename({"id": "key"})
    assert store.generation == generation
    store.append_row({"key": 4, "name": "d"})
    assert store.generation == generation + 1
    store.delete_rows([0])
    store.drop_column("name")
    assert store.generation == generation + 3


def test_append_row_exact(store):
    store.append_row({"id": 4, "name": "d"})
    store.append_row([5, "e"])
    assert store.column("id").to_pylist() == [1, 2, 3, 4, 5]
    with pytest.raises(MissingColumnError):
        store.append_row({"id": 6})
    with pytest.raises(MissingColumnError):
        store.append_row({"id": 6, "name": "f", "other": 1})
    with pytest.raises(LengthMismatchError):
        store.append_row([6])
    assert store.nrows == 5


def test_append_row_subset(store):
    store.append_row({"id": 4}, cols="subset")
    assert store.column("name").to_pylist() == ["a", "b", "c", None]
    assert store.column("name").nullable


def test_append_row_union_adds_and_widens(store):
    store.append_row({"id": 4.5, "age": 30}, cols="union")
    assert store.names == ["id", "name", "age"]
    assert store.column("id").dtype == pa.float64()
    assert store.column("id").to_pylist() == [1.0, 2.0, 3.0, 4.5]
    assert store.column("age").to_pylist() == [None, None, None, 30]
    assert store.column("name").to_pylist() == ["a", "b", "c", None]


def test_append_row_without_promote_fails(store):
    with pytest.raises(TypeMismatchError):
        store.append_row({"id": "x", "name": "d"})
    assert store.nrows == 3
    assert store.column("id").dtype == pa.int64()


def test_append_row_promote_to_union(store):
    store.append_row({"id": "x", "name": "d"}, promote=True)
    assert pa.types.is_union(store.column("id").dtype)
    assert store.column("id").to_pylist() == [1, 2, 3, "x"]


def test_append_rows_is_atomic(store):
    with pytest.raises(TypeMismatchError):
        store.append_rows([{"id": 4, "name": "d"}, {"id": "x", "name": "e"}])
    assert store.nrows == 3
    assert store.column("id").to_pylist() == [1, 2, 3]


def test_append_row_unsupported_cols(store):
    with pytest.raises(UnsupportedOptionError):
        store.append_row({"id": 4, "name": "d"}, cols="whatever")


def test_aliased_columns_resized_once():
    shared = Column([1, 2])
    store = ColumnStore()
    store.add_column("a", shared)
    store.add_column("b", shared)
    store.append_row({"a": 3, "b": 3})
    assert shared.to_pylist() == [1, 2, 3]
    store.delete_rows([0])
    assert shared.to_pylist() == [2, 3]
    store.check_consistency()
    with pytest.raises(ValidationError):
        store.append_row({"a": 4, "b": 5})


def test_rename_is_simultaneous(store):
    store.rename({"id": "name", "name": "id"})
    assert store.names == ["name", "id"]
    assert store.column("id").to_pylist() == ["a", "b", "c"]
    with pytest.raises(DuplicateNameError):
        store.rename({"id": "name"})


def test_reorder_and_permute(store):
    store.reorder(["name", "id"])
    assert store.names == ["name", "id"]
    with pytest.raises(MissingColumnError):
        store.reorder(["name"])
    store.permute_rows([2, 0, 1])
    assert store.column("id").to_pylist() == [3, 1, 2]


def test_replace_column(store):
    store.replace_column("id", Column([7, 8, 9]))
    assert store.column("id").to_pylist() == [7, 8, 9]
    with pytest.raises(LengthMismatchError):
        store.replace_column("id", Column([1]))


def test_drop_last_column_resets_rows(store):
    store.drop_column("id")
    store.drop_column("name")
    assert store.nrows == 0
    store.add_column("x", Column([1]))
    assert store.nrows == 1


def test_corruption_detected(store):
    store.column("id").storage.append(4)
    with pytest.raises(CorruptedTableError) as err:
        store.check_consistency()
    assert err.value.column == "id"
    with pytest.raises(CorruptedTableError):
        store.append_row({"id": 5, "name": "e"})
