"""Exchange of tables with Apache Arrow and the file formats it supports.

Tables are converted to and from :class:`pyarrow.Table`,
reading and writing files is then delegated to pyarrow
readers and writers for CSV, JSON, Parquet and Arrow IPC files.

>>> from memtable import Table
>>> arrow_table = to_arrow(Table({"id": [1, 2], "name": ["a", None]}))
>>> arrow_table.schema
id: int64 not null
name: string
>>> from_arrow(arrow_table).to_pydict()
{'id': [1, 2], 'name': ['a', None]}

Columns holding values of multiple kinds have no equivalent
arrow type and can't be exported, trying to do so raises
:class:`~memtable.errors.TypeMismatchError`.
"""

import logging
import os
from typing import Callable

import pyarrow as pa
import pyarrow.csv
import pyarrow.ipc
import pyarrow.json
import pyarrow.parquet

from .errors import UnsupportedOptionError
from .storage import Column
from .table import Table, TableLike

logger = logging.getLogger(__name__)

__all__ = (
    "to_arrow",
    "from_arrow",
    "read_csv",
    "write_csv",
    "read_json",
    "read_parquet",
    "write_parquet",
    "read_ipc",
    "write_ipc",
    "read_table",
)


def to_arrow(table: TableLike) -> pa.Table:
    """Convert a table to an arrow table with the same schema."""
    table.validate()
    return pa.Table.from_arrays(
        [table.column_to_arrow(name) for name in table.column_names],
        schema=table.schema,
    )


def from_arrow(data: pa.Table | pa.RecordBatch) -> Table:
    """Convert an arrow table or record batch to a table.

    Dictionary encoded columns are decoded, columns accept
    missing values only when they contain any.
    """
    columns = []
    for name, array in zip(data.column_names, data.columns):
        if pa.types.is_dictionary(array.type):
            array = array.cast(array.type.value_type)
        columns.append((name, Column.wrap(array.to_pylist(), array.type, name=name)))
    return Table._wrap(columns)


def read_csv(
    filename: str,
    *,
    delimiter: str = ",",
    column_types: dict[str, pa.DataType] | None = None,
) -> Table:
    """Load a table from a CSV file, types are inferred by arrow.

    :param filename: The path of the local CSV file.
    :param delimiter: The character separating values.
    :param column_types: Types of the columns that should not be inferred.
    """
    data = pa.csv.read_csv(
        filename,
        parse_options=pa.csv.ParseOptions(delimiter=delimiter),
        convert_options=pa.csv.ConvertOptions(column_types=column_types or {}),
    )
    logger.debug(f"Read {data.num_rows} rows from {filename}")
    return from_arrow(data)


def write_csv(table: TableLike, filename: str) -> None:
    """Save a table to a CSV file."""
    pa.csv.write_csv(to_arrow(table), filename)


def read_json(filename: str) -> Table:
    """Load a table from a file with a JSON object on each line."""
    data = pa.json.read_json(filename)
    logger.debug(f"Read {data.num_rows} rows from {filename}")
    return from_arrow(data)


def read_parquet(filename: str, columns: list[str] | None = None) -> Table:
    """Load a table from a Parquet file.

    :param columns: Only load these columns.
    """
    data = pa.parquet.read_table(filename, columns=columns)
    logger.debug(f"Read {data.num_rows} rows from {filename}")
    return from_arrow(data)


def write_parquet(table: TableLike, filename: str) -> None:
    """Save a table to a Parquet file."""
    pa.parquet.write_table(to_arrow(table), filename)


def read_ipc(filename: str) -> Table:
    """Load a table from an Arrow IPC (Feather v2) file."""
    with pa.memory_map(filename, "r") as source:
        data = pa.ipc.open_file(source).read_all()
    logger.debug(f"Read {data.num_rows} rows from {filename}")
    return from_arrow(data)


def write_ipc(table: TableLike, filename: str) -> None:
    """Save a table to an Arrow IPC (Feather v2) file."""
    data = to_arrow(table)
    with pa.OSFile(filename, "wb") as sink:
        with pa.ipc.new_file(sink, data.schema) as writer:
            writer.write_table(data)


READERS: dict[str, Callable[[str], Table]] = {
    ".csv": read_csv,
    ".json": read_json,
    ".jsonl": read_json,
    ".parquet": read_parquet,
    ".arrow": read_ipc,
    ".feather": read_ipc,
    ".ipc": read_ipc,
}


def read_table(filename: str) -> Table:
    """Load a table from a file, the format is detected by its extension."""
    extension = os.path.splitext(filename)[1].lower()
    try:
        reader = READERS[extension]
    except KeyError:
        raise UnsupportedOptionError(
            f"Unsupported file format {extension!r}, expected one of {sorted(READERS)}"
        ) from None
    return reader(filename)
