import pyarrow as pa
import pytest

from memtable import Table, hcat, vcat
from memtable.errors import (
    DuplicateNameError,
    LengthMismatchError,
    MissingColumnError,
    TypeMismatchError,
    UnsupportedOptionError,
)
from memtable.storage import Column


@pytest.fixture
def people():
    return Table(
        {
            "id": [1, 2, 3, 4],
            "name": ["Ann", "Bob", "Cid", "Dan"],
            "age": [31, None, 25, 31],
        }
    )


def test_construction_infers_schema(people):
    assert people.shape == (4, 3)
    assert people.describe_columns() == [
        ("id", pa.int64(), False),
        ("name", pa.string(), False),
        ("age", pa.int64(), True),
    ]
    assert people.schema.field("age").nullable


def test_construction_broadcasts_scalars():
    table = Table({"a": [1, 2, 3], "b": 0, "c": ["x"]})
    assert table.to_pydict() == {"a": [1, 2, 3], "b": [0, 0, 0], "c": ["x", "x", "x"]}


def test_construction_length_mismatch():
    with pytest.raises(LengthMismatchError) as err:
        Table({"a": [1, 2], "b": [1, 2, 3]})
    assert err.value.column == "b"


def test_construction_from_iterables_and_arrow():
    table = Table(
        {
            "a": (v * 2 for v in range(3)),
            "b": pa.array(["x", "y", "x"]).dictionary_encode(),
        }
    )
    assert table.to_pydict() == {"a": [0, 2, 4], "b": ["x", "y", "x"]}
    assert table.column_type("b") == pa.string()


def test_construction_rejects_rows():
    with pytest.raises(TypeError):
        Table([[1, 2], [3, 4]])


def test_construction_copies_by_default():
    values = [1, 2, 3]
    table = Table({"a": values})
    table.set(0, "a", 10)
    assert values == [1, 2, 3]


def test_construction_without_copy_shares_lists():
    values = [1, 2, 3]
    column = Column([4, 5, 6])
    table = Table({"a": values, "b": column}, copy_columns=False)
    table.set(0, "a", 10)
    table.set(0, "b", 40)
    assert values == [10, 2, 3]
    assert column.to_pylist() == [40, 5, 6]


def test_construction_from_table_copies(people):
    other = Table(people)
    other.set(0, "name", "Zed")
    assert people.get(0, "name") == "Ann"


def test_copy_shares_no_storage(people):
    copied = people.copy()
    assert copied.equals(people, check_types=True)
    for (_, original), (_, column) in zip(people.itercolumns(), copied.itercolumns()):
        assert not original.shares_storage(column)
    copied.set(1, "age", 40)
    assert people.get(1, "age") is None


def test_from_rows():
    table = Table.from_rows([(1, "a"), (2, None)], names=["id", "label"])
    assert table.to_pydict() == {"id": [1, 2], "label": ["a", None]}
    assert Table.from_rows([(1, 2)]).column_names == ["x1", "x2"]
    with pytest.raises(LengthMismatchError):
        Table.from_rows([(1, 2), (3,)])


def test_from_records_union_of_keys():
    table = Table.from_records([{"a": 1}, {"b": "x"}, {"a": 3, "b": "y"}])
    assert table.to_pydict() == {"a": [1, None, 3], "b": [None, "x", "y"]}


def test_get_and_set(people):
    assert people.get(-1, "name") == "Dan"
    assert people.get(0, 1) == "Ann"
    people.set(1, "age", 50)
    assert people.get(1, "age") == 50
    with pytest.raises(TypeMismatchError):
        people.set(0, "id", "one")
    with pytest.raises(MissingColumnError):
        people.get(0, "unknown")


def test_set_column(people):
    people.set_column("age", [1, 2, 3, 4])
    people.set_column("country", "IT")
    assert people.column_values("age") == [1, 2, 3, 4]
    assert people.column_values("country") == ["IT"] * 4
    assert people.column_names[-1] == "country"
    with pytest.raises(LengthMismatchError):
        people.set_column("age", [1, 2])


def test_set_column_share_mode(people):
    values = [0, 0, 0, 0]
    people.set_column("score", values, mode="share")
    people.set(0, "score", 5)
    assert values == [5, 0, 0, 0]


def test_setitem(people):
    people["score"] = 1
    people[0, "score"] = 10
    people[[1, 2], "score"] = [20, 30]
    assert people.column_values("score") == [10, 20, 30, 1]


def test_assign_is_atomic(people):
    with pytest.raises(TypeMismatchError):
        people.assign([0, 1], ["age", "name"], 99)
    assert people.column_values("age") == [31, None, 25, 31]


def test_assign_table_value(people):
    people.assign([0, 1], ["id", "name"], Table({"x": [10, 20], "y": ["p", "q"]}))
    assert people.column_values("id") == [10, 20, 3, 4]
    assert people.column_values("name") == ["p", "q", "Cid", "Dan"]
    with pytest.raises(LengthMismatchError):
        people.assign([0], ["id"], Table({"x": [1, 2]}))


def test_insert_column(people):
    people.insert_column(0, "rank", [4, 3, 2, 1])
    assert people.column_names == ["rank", "id", "name", "age"]
    with pytest.raises(DuplicateNameError):
        people.insert_column(0, "id", 0)
    people.insert_column(None, "id", 0, make_unique=True)
    assert people.column_names == ["rank", "id", "name", "age", "id_1"]


def test_drop_column(people):
    people.drop_column(["id", "age"])
    assert people.column_names == ["name"]
    with pytest.raises(MissingColumnError):
        people.drop_column("age")


def test_rename(people):
    renamed = people.rename({"id": "key", 2: "years"})
    assert renamed.column_names == ["key", "name", "years"]
    assert people.column_names == ["id", "name", "age"]
    assert people.rename(str.upper).column_names == ["ID", "NAME", "AGE"]
    assert people.rename(["a", "a", "a"], make_unique=True).column_names == [
        "a",
        "a_1",
        "a_2",
    ]
    with pytest.raises(DuplicateNameError):
        people.rename({"id": "name"})
    with pytest.raises(LengthMismatchError):
        people.rename(["a"])


def test_rename_inplace(people):
    result = people.rename({"id": "key"}, inplace=True)
    assert result is people
    assert people.column_names == ["key", "name", "age"]


def test_reorder_and_select_columns(people):
    assert people.reorder_columns(["age", "id", "name"]).column_names == [
        "age",
        "id",
        "name",
    ]
    with pytest.raises(MissingColumnError):
        people.reorder_columns(["age"])
    selected = people.select_columns(["name", "id"])
    assert selected.column_names == ["name", "id"]
    people.select_columns(["age"], inplace=True)
    assert people.column_names == ["age"]


def test_hcat(people):
    extra = Table({"score": [1, 2, 3, 4], "id": [9, 9, 9, 9]})
    with pytest.raises(DuplicateNameError):
        hcat(people, extra)
    joined = people.hcat(extra, make_unique=True)
    assert joined.column_names == ["id", "name", "age", "score", "id_1"]
    with pytest.raises(LengthMismatchError):
        hcat(people, Table({"x": [1]}).append_row([2]))


def test_hcat_shared_columns(people):
    joined = hcat(people, Table({"x": [0, 0, 0, 0]}), copy_columns=False)
    joined.set(0, "id", 100)
    assert people.get(0, "id") == 100


def test_append_row(people):
    people.append_row({"id": 5, "name": "Eve", "age": 22})
    people.append_row([6, "Fay", None])
    assert people.nrows == 6
    assert people.get(-1, "name") == "Fay"
    with pytest.raises(MissingColumnError):
        people.append_row({"id": 7})


def test_append_row_never_truncates(people):
    with pytest.raises(TypeMismatchError):
        people.append_row({"id": 2.7, "name": "Eve", "age": 22})
    with pytest.raises(TypeMismatchError):
        people.set(0, "age", 31.5)
    assert people.nrows == 4
    assert people.get(0, "age") == 31


def test_append_row_from_row_view(people):
    people.append_row(people.row(0, mode="share"))
    assert people.row(-1) == {"id": 1, "name": "Ann", "age": 31}


def test_append_table(people):
    people.append(Table({"age": [40], "id": [5], "name": ["Eve"]}))
    assert people.row(4) == {"id": 5, "name": "Eve", "age": 40}
    with pytest.raises(MissingColumnError):
        people.append(Table({"id": [6]}))
    people.append({"id": [6], "city": ["Rome"]}, cols="union")
    assert people.column_names == ["id", "name", "age", "city"]
    assert people.column_values("city") == [None] * 5 + ["Rome"]


def test_delete_rows(people):
    people.delete_rows([0, -1])
    assert people.column_values("id") == [2, 3]
    people.delete_rows([True, False])
    assert people.column_values("id") == [3]


def test_filter_rows(people):
    adults = people.filter_rows(lambda row: row.age is not None and row.age > 30)
    assert adults.column_values("name") == ["Ann", "Dan"]
    assert people.filter_rows(lambda id: id % 2 == 0, "id").column_values("id") == [
        2,
        4,
    ]


def test_filter_rows_readonly(people):
    def change(row):
        row["age"] = 0
        return True

    with pytest.raises(TypeError):
        people.filter_rows(change)


def test_filter_rows_view(people):
    view = people.filter_rows(lambda row: row.id > 2, view=True)
    view.set(0, "name", "Changed")
    assert people.get(2, "name") == "Changed"


def test_nonunique_and_unique(people):
    assert people.nonunique("age") == [False, False, False, True]
    assert people.unique("age").column_values("id") == [1, 2, 3]
    assert people.unique().nrows == 4
    people.unique("age", inplace=True)
    assert people.nrows == 3


def test_unique_with_list_values():
    table = Table({"tags": [["a"], ["b"], ["a"]]})
    assert table.nonunique() == [False, False, True]


def test_missing_values(people):
    assert people.complete_cases() == [True, False, True, True]
    complete = people.drop_missing()
    assert complete.column_values("id") == [1, 3, 4]
    assert complete.column_field("age").nullable is False
    assert people.nrows == 4

    kept = people.drop_missing("id", disallow_missing=False)
    assert kept.nrows == 4

    with pytest.raises(TypeMismatchError):
        people.disallow_missing("age")
    relaxed = people.disallow_missing(error=False)
    assert relaxed.column_field("age").nullable is True
    assert people.allow_missing("id").column_field("id").nullable is True
    assert people.column_field("id").nullable is False


def test_drop_missing_inplace(people):
    people.drop_missing("age", inplace=True)
    assert people.column_values("name") == ["Ann", "Cid", "Dan"]
    with pytest.raises(TypeMismatchError):
        people.set(0, "age", None)


def test_head_and_tail(people):
    assert people.head(2).column_values("id") == [1, 2]
    assert people.tail(3).column_values("id") == [2, 3, 4]
    assert people.head(10).nrows == 4
    assert people.tail(0).nrows == 0


def test_iterrows(people):
    for row in people.iterrows():
        row["id"] = row["id"] * 10
    assert people.column_values("id") == [10, 20, 30, 40]


def test_to_pylist(people):
    assert people.head(1).to_pylist() == [{"id": 1, "name": "Ann", "age": 31}]


def test_vcat():
    first = Table({"a": [1], "b": ["x"]})
    second = Table({"b": ["y"], "a": [2.5]})
    result = vcat(first, second)
    assert result.to_pydict() == {"a": [1.0, 2.5], "b": ["x", "y"]}
    assert first.column_values("a") == [1]


def test_vcat_policies():
    first = Table({"a": [1], "b": ["x"]})
    second = Table({"a": [2], "c": [True]})
    with pytest.raises(MissingColumnError):
        vcat(first, second)
    assert vcat(first, second, cols="union").to_pydict() == {
        "a": [1, 2],
        "b": ["x", None],
        "c": [None, True],
    }
    assert vcat(first, second, cols="intersect").to_pydict() == {"a": [1, 2]}
    with pytest.raises(UnsupportedOptionError):
        vcat(first, second, cols="outer")
    assert vcat().shape == (0, 0)


def test_repr(people):
    assert repr(people).splitlines()[0] == "<Table 4 rows x 3 columns>"
    assert str(people).splitlines()[0].rstrip() == "id | name | age"
