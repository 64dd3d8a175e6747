import pytest

from memtable import Table
from memtable.errors import CorruptedTableError
from memtable.utils.tabulate import format_value, tabulate


def test_format_value():
    assert format_value(None) == "missing"
    assert format_value(1.23456) == "1.23"
    assert format_value(True) == "true"
    assert format_value(12) == "12"
    assert format_value("x" * 40) == "x" * 27 + "..."


def test_format_value_options(options):
    options(MEMTABLE_DISPLAY__FLOAT_PRECISION="4", MEMTABLE_DISPLAY__MAX_COLWIDTH="5")
    assert format_value(1.5) == "1.5000"
    assert format_value("abcdefgh") == "ab..."


def test_tabulate():
    table = Table({"name": ["Ann", "Bob"], "age": [31, None]})
    assert tabulate(table).splitlines() == [
        "name | age    ",
        "---- | -------",
        "Ann  | 31     ",
        "Bob  | missing",
    ]


def test_tabulate_truncates_rows():
    table = Table({"n": list(range(10))})
    lines = tabulate(table, max_rows=3).splitlines()
    assert len(lines) == 6
    assert lines[-1] == "... and 7 more rows"


def test_tabulate_view():
    table = Table({"n": [1, 2, 3]})
    assert tabulate(table.view([2])).splitlines()[-1] == "3"


def test_tabulate_corrupted_table():
    values = [1, 2]
    table = Table({"n": values}, copy_columns=False)
    values.pop()
    with pytest.raises(CorruptedTableError):
        tabulate(table)
