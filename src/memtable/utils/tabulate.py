"""Format tables into text for print.

The `tabulate` function takes a table (or a view over a table) and formats it into a text table.
It will truncate long strings, format floats to a fixed number of decimal places,
and limit the number of rows to display.

Before rendering, the table is validated, so that a table whose columns
were resized through an alias is reported instead of printed wrong.

Example:

    >>> from memtable import Table
    >>> table = Table({
    ...     "Product": ["Videogame", "Laptop", None],
    ...     "Quantity": [8, 8, 7],
    ...     "Price": [66.5, 38.72, 77.46],
    ... })
    >>> print(tabulate(table))
    Product   | Quantity | Price
    --------- | -------- | -----
    Videogame | 8        | 66.50
    Laptop    | 8        | 38.72
    missing   | 7        | 77.46
"""

from typing import TYPE_CHECKING, Any

from ..config import get_options

if TYPE_CHECKING:
    from ..table.base import TableLike


def tabulate(table: "TableLike", max_rows: int | None = None) -> str:
    """Format a table into text.

    Will produce a string like::

        Product   | Quantity | Price | Total
        --------- | -------- | ----- | ------
        Videogame | 8        | 66.50 | 532.00
        Laptop    | 8        | 38.72 | 309.76
        Laptop    | 7        | 77.46 | 542.22
    """
    if max_rows is None:
        max_rows = get_options().display.max_rows
    table.validate()

    cols = table.column_names
    rows = [
        [format_value(table.get(row, col)) for col in cols]
        for row in range(min(table.nrows, max_rows))
    ]

    colsizes = compute_max_colsize(cols, rows)
    header = [maketablerow(cols, colsizes=colsizes)]
    separator = [maketablerow(["-"] * len(cols), colsizes=colsizes, fillvalue="-")]
    textrows = [maketablerow(row, colsizes=colsizes) for row in rows]

    text = "\n".join(header + separator + textrows)
    if table.nrows > max_rows:
        text += f"\n... and {table.nrows - max_rows} more rows"
    return text


def compute_max_colsize(cols: list[str], rows: list[list[str]]) -> list[int]:
    """Compute the maximum size of each column in a table."""
    return [
        max([len(row[colidx]) for row in rows] + [len(cols[colidx])])
        for colidx, _ in enumerate(cols)
    ]


def maketablerow(cols: list[str], colsizes: list[int], fillvalue: str = " ") -> str:
    """Make a table row with the given column sizes."""
    return " | ".join(
        [col.ljust(colsizes[idx], fillvalue) for idx, col in enumerate(cols)]
    )


def format_value(v: Any) -> str:
    """Format a value to be printed in the table.

    This function will format floats to the configured decimal places,
    print missing values as ``missing`` and truncate long strings.
    """
    options = get_options().display
    if v is None:
        return "missing"
    elif isinstance(v, float):
        return f"{v:.{options.float_precision}f}"
    elif isinstance(v, bool):
        return "true" if v else "false"

    v = str(v)
    if len(v) > options.max_colwidth:
        v = v[: options.max_colwidth - 3] + "..."
    return v
