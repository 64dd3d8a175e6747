"""Operations combining and reshaping tables."""

from .join import (
    anti_join,
    cross_join,
    inner_join,
    left_join,
    normalize_on,
    outer_join,
    right_join,
    semi_join,
)
from .reshape import StackView, flatten, permutedims, stack, unstack

__all__ = (
    "inner_join",
    "left_join",
    "right_join",
    "outer_join",
    "semi_join",
    "anti_join",
    "cross_join",
    "normalize_on",
    "stack",
    "unstack",
    "flatten",
    "permutedims",
    "StackView",
)
