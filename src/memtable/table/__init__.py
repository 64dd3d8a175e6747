"""Tables, views over tables and selection of rows and columns."""

from .base import TableLike
from .selectors import Between, Cols, Not
from .table import Table, hcat, vcat
from .views import ColumnView, RowView, TableView

__all__ = (
    "TableLike",
    "Table",
    "TableView",
    "RowView",
    "ColumnView",
    "Not",
    "Between",
    "Cols",
    "hcat",
    "vcat",
)
