import pyarrow as pa
import pytest

from memtable.errors import IndexOutOfRangeError, TypeMismatchError
from memtable.storage import Column


def test_infers_type_and_nullability():
    column = Column([1, None, 3])
    assert column.dtype == pa.int64()
    assert column.nullable is True
    assert Column([1, 2]).nullable is False
    assert Column([None, None]).dtype == pa.null()


def test_nullability_not_inferred(options):
    options(MEMTABLE_INFER_NULLABLE="false")
    assert Column([1, 2]).nullable is True


def test_converts_values_to_declared_type():
    column = Column([1, 2], pa.float64())
    assert column.to_pylist() == [1.0, 2.0]
    assert all(isinstance(v, float) for v in column)


def test_constructor_copies_values():
    values = [1, 2, 3]
    column = Column(values)
    column[0] = 10
    assert values == [1, 2, 3]
    assert column.storage is not values


def test_wrap_shares_values():
    values = [1, 2, 3]
    column = Column.wrap(values)
    column[0] = 10
    assert values == [10, 2, 3]
    assert column.storage is values


def test_set_checks_type():
    column = Column([1, 2])
    with pytest.raises(TypeMismatchError):
        column[0] = "a"
    with pytest.raises(TypeMismatchError):
        column[0] = None
    assert column.to_pylist() == [1, 2]


def test_set_out_of_range():
    column = Column([1, 2])
    with pytest.raises(IndexOutOfRangeError):
        column[2] = 1
    assert column[-1] == 2


def test_version_increments_on_write():
    column = Column([1, 2])
    assert column.version == 0
    column[0] = 3
    column.append(4)
    assert column.version == 2
    assert column.to_pylist() == [3, 2, 4]


def test_copy_and_take():
    column = Column([1, 2, 3])
    copied = column.copy()
    assert copied == column
    assert not copied.shares_storage(column)
    assert column.take([2, 0]).to_pylist() == [3, 1]


def test_widen():
    column = Column([1, 2])
    column.widen(pa.float64())
    assert column.dtype == pa.float64()
    assert column.to_pylist() == [1.0, 2.0]
    column.widen(pa.string(), nullable=True)
    assert pa.types.is_union(column.dtype)
    assert column.nullable
    column.append("x")
    column.append(None)
    assert column.to_pylist() == [1.0, 2.0, "x", None]


def test_set_nullable():
    column = Column([1, None])
    with pytest.raises(TypeMismatchError):
        column.set_nullable(False, name="a")
    column[1] = 2
    column.set_nullable(False)
    assert column.nullable is False


def test_to_arrow():
    assert Column([1, None]).to_arrow().equals(pa.array([1, None], type=pa.int64()))


def test_repr():
    assert repr(Column([1, None])) == "Column<int64?>([1, None])"
