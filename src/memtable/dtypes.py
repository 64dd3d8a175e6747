"""Element types of columns.

Columns declare the type of their elements as a :class:`pyarrow.DataType`.
Arrow already provides a closed set of scalar kinds (integers, floats,
strings, booleans, dates, lists, ...) and a union type that we use
when a column has to hold values of more than one kind.

Types are inferred from Python values and widened following
a fixed lattice when values of different kinds are mixed:

>>> promote(pa.int64(), pa.float64())
DataType(double)
>>> promote(pa.null(), pa.string())
DataType(string)
>>> union_members(promote(pa.int64(), pa.string()))
[DataType(int64), DataType(string)]

Missing values are represented by ``None`` and are accepted
by any column that is declared nullable.
"""

from typing import Any, Iterable

import pyarrow as pa

from .errors import TypeMismatchError

__all__ = (
    "infer_type",
    "promote",
    "coerce",
    "coerce_values",
    "is_numeric",
    "union_members",
    "to_arrow_array",
    "hashable",
)

# Failures that pyarrow might report when converting Python values.
_CONVERSION_ERRORS = (pa.ArrowException, TypeError, ValueError, OverflowError)

# Python types whose arrow type is known without asking arrow.
# Looked up by exact type, so that bool is not confused with int.
_PYTHON_TYPES = {
    bool: pa.bool_(),
    int: pa.int64(),
    float: pa.float64(),
    str: pa.string(),
}

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


def is_numeric(dtype: pa.DataType) -> bool:
    """If the type holds numbers. Booleans are not numbers."""
    return pa.types.is_integer(dtype) or pa.types.is_floating(dtype)


def union_members(dtype: pa.DataType) -> list[pa.DataType]:
    """The kinds a type can hold, a single one unless it is an union."""
    if pa.types.is_union(dtype):
        return [dtype.field(i).type for i in range(dtype.num_fields)]
    return [dtype]


def make_union(members: Iterable[pa.DataType]) -> pa.DataType:
    """Build the type holding all the provided kinds."""
    unique: list[pa.DataType] = []
    for member in members:
        if pa.types.is_null(member) or member in unique:
            continue
        unique.append(member)
    if not unique:
        return pa.null()
    if len(unique) == 1:
        return unique[0]
    return pa.dense_union([pa.field(str(member), member) for member in unique])


def promote(left: pa.DataType, right: pa.DataType) -> pa.DataType:
    """Compute the narrowest type able to hold values of both types.

    * equal types are preserved,
    * ``null`` is absorbed by the other type,
    * integers widen to ``int64``, integers and floats widen to ``float64``,
    * any other combination becomes the union of the two kinds.
    """
    if left == right:
        return left
    if pa.types.is_null(left):
        return right
    if pa.types.is_null(right):
        return left
    if pa.types.is_union(left) or pa.types.is_union(right):
        return make_union(union_members(left) + union_members(right))
    if is_numeric(left) and is_numeric(right):
        if pa.types.is_floating(left) or pa.types.is_floating(right):
            return pa.float64()
        return pa.int64()
    return make_union([left, right])


def value_type(value: Any) -> pa.DataType:
    """Arrow type of a single non missing Python value."""
    known = _PYTHON_TYPES.get(type(value))
    if known is not None:
        return known
    try:
        return pa.scalar(value).type
    except _CONVERSION_ERRORS as err:
        raise TypeMismatchError(
            f"Unsupported value {value!r} of type {type(value).__name__}",
            actual=type(value).__name__,
        ) from err


def infer_type(values: Iterable[Any]) -> pa.DataType:
    """Infer the type of a column from its values.

    >>> infer_type([1, None, 3])
    DataType(int64)
    >>> infer_type([1, 2.5])
    DataType(double)
    >>> infer_type([None, None])
    DataType(null)
    """
    dtype = pa.null()
    for value in values:
        if value is None:
            continue
        dtype = promote(dtype, value_type(value))
    return dtype


def coerce(
    value: Any,
    dtype: pa.DataType,
    nullable: bool = True,
    *,
    column: str | None = None,
    row: int | None = None,
) -> Any:
    """Convert a value so that it can be stored in a column of ``dtype``.

    Values that already are of the right kind are returned as they are,
    others are converted by arrow (for example ``1`` becomes ``1.0``
    in a ``float64`` column). Values that can't be converted
    without losing information raise :class:`TypeMismatchError`.
    """
    if value is None:
        if not nullable:
            raise TypeMismatchError(
                f"Column {column!r} does not accept missing values (row {row})",
                column=column,
                row=row,
                expected=str(dtype),
                actual="missing",
            )
        return None

    candidates = union_members(dtype)
    known = _PYTHON_TYPES.get(type(value))
    if known is not None and known in candidates:
        if known != pa.int64() or _INT64_MIN <= value <= _INT64_MAX:
            return value

    for candidate in candidates:
        try:
            converted = pa.scalar(value, type=candidate).as_py()
        except _CONVERSION_ERRORS:
            continue
        if _lossless(value, converted):
            return converted

    raise TypeMismatchError(
        f"Can't store {value!r} ({type(value).__name__}) "
        f"in column {column!r} of type {dtype} (row {row})",
        column=column,
        row=row,
        expected=str(dtype),
        actual=type(value).__name__,
    )


def _lossless(value: Any, converted: Any) -> bool:
    """If converting ``value`` to ``converted`` preserved it."""
    if isinstance(value, bool) or isinstance(converted, bool):
        return type(value) is type(converted) and value == converted
    try:
        return bool(converted == value)
    except (TypeError, ValueError):
        return False


def coerce_values(
    values: Iterable[Any],
    dtype: pa.DataType,
    nullable: bool = True,
    *,
    column: str | None = None,
) -> list[Any]:
    """Convert all the values for storage in a column of ``dtype``."""
    return [
        coerce(value, dtype, nullable, column=column, row=row)
        for row, value in enumerate(values)
    ]


def to_arrow_array(
    values: list[Any], dtype: pa.DataType, *, column: str | None = None
) -> pa.Array:
    """Convert column values to an arrow array of the column type.

    Union columns have no direct conversion from Python values,
    so they can't be exported.
    """
    if pa.types.is_union(dtype):
        raise TypeMismatchError(
            f"Column {column!r} holds values of multiple kinds ({dtype}) "
            "and can't be converted to arrow",
            column=column,
            expected="single kind",
            actual=str(dtype),
        )
    return pa.array(values, type=dtype)


def hashable(value: Any) -> Any:
    """A hashable equivalent of a cell value, to use it as a key.

    Lists and dictionaries (list and struct columns) are converted
    to tuples, other values are returned unchanged.

    >>> hashable([1, [2, 3]])
    (1, (2, 3))
    """
    if isinstance(value, list):
        return tuple(hashable(v) for v in value)
    if isinstance(value, dict):
        return tuple((k, hashable(v)) for k, v in value.items())
    return value
