"""Command line interface for displaying tables stored in files.

This module provides a command line interface to load a CSV, JSON,
Parquet or Arrow file with :func:`memtable.interop.read_table`,
optionally group and aggregate it with :func:`memtable.grouping.group_by`
and :func:`memtable.grouping.combine`, sort it and print it.

The results are printed to the console in a tabular format
using the :mod:`memtable.utils.tabulate` module::

    memtable-show shops.csv --group-by city --agg total=sum:n_employees
"""

import argparse
import logging

from memtable.errors import MemTableError
from memtable.grouping import AGGREGATIONS, Aggregation, combine, group_by
from memtable.interop import read_table
from memtable.utils import tabulate

logger = logging.getLogger(__name__)


def parse_aggregation(text: str) -> tuple[str, Aggregation]:
    """Parse an aggregation in the form ``NAME=FUNCTION:COLUMN``.

    >>> parse_aggregation("total=sum:n_employees")
    ('total', SumAggregation(n_employees))
    """
    try:
        name, definition = text.split("=", 1)
        function, column = definition.split(":", 1)
    except ValueError:
        raise ValueError(
            f"Invalid aggregation {text!r}, expected NAME=FUNCTION:COLUMN"
        ) from None
    try:
        aggregation = AGGREGATIONS[function.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown aggregation function {function!r}, "
            f"expected one of {sorted(AGGREGATIONS)}"
        ) from None
    return name, aggregation(column)


def main(argv: list[str] | None = None) -> None:
    """Parse the command line arguments and display the table."""
    parser = argparse.ArgumentParser(description="Display a table stored in a file.")
    parser.add_argument("filename", type=str, help="The CSV, JSON, Parquet or Arrow file.")
    parser.add_argument(
        "-g",
        "--group-by",
        action="append",
        default=[],
        help="Group by a column. Can be provided multiple times.",
    )
    parser.add_argument(
        "-a",
        "--agg",
        action="append",
        default=[],
        help="Aggregate the groups as NAME=FUNCTION:COLUMN. Can be provided multiple times.",
    )
    parser.add_argument("-s", "--sort", action="append", help="Sort by a column.")
    parser.add_argument("-n", "--limit", type=int, help="Display at most this many rows.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    try:
        aggregations = dict(parse_aggregation(text) for text in args.agg)
    except ValueError as e:
        parser.error(str(e))
    if aggregations and not args.group_by:
        parser.error("--agg requires --group-by")

    try:
        table = read_table(args.filename)
        logger.debug(f"Loaded {args.filename} with columns {table.column_names}")
        if args.group_by:
            table = combine(group_by(table, args.group_by), aggregations)
        if args.sort:
            table = table.sort(args.sort)
    except MemTableError as e:
        print(f"Unable to display {args.filename}, {e}")
        return

    print(tabulate.tabulate(table, max_rows=args.limit))


if __name__ == "__main__":
    main()
