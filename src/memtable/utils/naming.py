"""Column name uniquification utilities."""

from typing import Iterable

from ..config import get_options


def uniquify(base: str, taken: set[str], separator: str | None = None) -> str:
    """Make a unique name by adding _1, _2, etc if needed.

    >>> uniquify("a", {"a", "a_1"})
    'a_2'
    """
    if base not in taken:
        return base
    if separator is None:
        separator = get_options().naming.unique_separator

    i = 1
    while f"{base}{separator}{i}" in taken:
        i += 1
    return f"{base}{separator}{i}"


def make_unique(names: Iterable[str], separator: str | None = None) -> list[str]:
    """Disambiguate repeated names, the first occurrence keeps its name.

    Suffixes never clash with any of the provided names,
    even those coming later in the sequence:

    >>> make_unique(["a", "a", "a_1", "b", "a"])
    ['a', 'a_2', 'a_1', 'b', 'a_3']
    """
    names = list(names)
    # Names that appear unchanged are reserved up front.
    taken: set[str] = set()
    first_seen: set[str] = set()
    keep: list[bool] = []
    for name in names:
        keep.append(name not in first_seen)
        first_seen.add(name)
    taken.update(first_seen)

    result = []
    for name, kept in zip(names, keep):
        if kept:
            result.append(name)
            continue
        unique = uniquify(name, taken, separator)
        taken.add(unique)
        result.append(unique)
    return result
