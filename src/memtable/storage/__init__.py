"""Columnar storage.

The storage layer provides typed, nullable columns
(:class:`Column`) and the ordered set of named columns
sharing the same number of rows that backs every table
(:class:`ColumnStore`).

Tables and views never hold values themselves,
they always read and write through the storage.
"""

from .column import Column
from .store import APPEND_POLICIES, ColumnStore

__all__ = ("Column", "ColumnStore", "APPEND_POLICIES")
