import pyarrow as pa
import pytest

from memtable import dtypes
from memtable.errors import TypeMismatchError


@pytest.mark.parametrize(
    "left,right,expected",
    [
        (pa.int64(), pa.int64(), pa.int64()),
        (pa.null(), pa.string(), pa.string()),
        (pa.bool_(), pa.null(), pa.bool_()),
        (pa.int32(), pa.int64(), pa.int64()),
        (pa.int64(), pa.float64(), pa.float64()),
        (pa.float32(), pa.int8(), pa.float64()),
    ],
)
def test_promote(left, right, expected):
    assert dtypes.promote(left, right) == expected


def test_promote_to_union():
    promoted = dtypes.promote(pa.int64(), pa.string())
    assert pa.types.is_union(promoted)
    assert dtypes.union_members(promoted) == [pa.int64(), pa.string()]


def test_promote_union_member_not_duplicated():
    union = dtypes.promote(pa.int64(), pa.string())
    assert dtypes.promote(union, pa.string()) == union
    widened = dtypes.promote(union, pa.bool_())
    assert dtypes.union_members(widened) == [pa.int64(), pa.string(), pa.bool_()]


def test_booleans_are_not_numbers():
    assert not dtypes.is_numeric(pa.bool_())
    assert pa.types.is_union(dtypes.promote(pa.bool_(), pa.int64()))


@pytest.mark.parametrize(
    "values,expected",
    [
        ([1, 2, None], pa.int64()),
        ([1, 2.5], pa.float64()),
        (["a", None], pa.string()),
        ([True, False], pa.bool_()),
        ([None], pa.null()),
        ([], pa.null()),
        ([[1, 2], [3]], pa.list_(pa.int64())),
    ],
)
def test_infer_type(values, expected):
    assert dtypes.infer_type(values) == expected


def test_coerce_converts_when_lossless():
    assert dtypes.coerce(1, pa.float64()) == 1.0
    assert isinstance(dtypes.coerce(1, pa.float64()), float)


def test_coerce_rejects_incompatible_values():
    with pytest.raises(TypeMismatchError) as err:
        dtypes.coerce("x", pa.int64(), column="id", row=3)
    assert err.value.column == "id"
    assert err.value.row == 3
    assert err.value.expected == "int64"
    assert err.value.actual == "str"


@pytest.mark.parametrize(
    "value,dtype",
    [
        (1.5, pa.int64()),
        (2**70, pa.int64()),
        (-(2**63) - 1, pa.int64()),
        (300, pa.int8()),
        (True, pa.int64()),
        (1, pa.bool_()),
    ],
)
def test_coerce_rejects_lossy_conversions(value, dtype):
    with pytest.raises(TypeMismatchError):
        dtypes.coerce(value, dtype)


def test_coerce_integer_range():
    assert dtypes.coerce(2**63 - 1, pa.int64()) == 2**63 - 1
    assert dtypes.coerce(-(2**63), pa.int64()) == -(2**63)


def test_coerce_missing_into_non_nullable():
    assert dtypes.coerce(None, pa.int64(), nullable=True) is None
    with pytest.raises(TypeMismatchError):
        dtypes.coerce(None, pa.int64(), nullable=False)


def test_coerce_into_union():
    union = dtypes.promote(pa.int64(), pa.string())
    assert dtypes.coerce("a", union) == "a"
    assert dtypes.coerce(3, union) == 3


def test_union_columns_cant_be_exported():
    union = dtypes.promote(pa.int64(), pa.string())
    with pytest.raises(TypeMismatchError):
        dtypes.to_arrow_array([1, "a"], union, column="mixed")


def test_hashable():
    assert dtypes.hashable({"a": [1]}) == (("a", (1,)),)
    assert dtypes.hashable(None) is None
