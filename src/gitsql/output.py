"""Rendering of query results as a table, CSV, TSV or JSON."""

from __future__ import annotations

import csv
import json
from typing import Sequence, TextIO

from rich.console import Console
from rich.table import Table

from .errors import OutputFormatError

FORMATS = ("table", "csv", "tsv", "json")


def _display_table(columns: Sequence[str], rows: Sequence[tuple], stream: TextIO) -> None:
    table = Table(show_header=True)
    for column in columns:
        table.add_column(column)
    for row in rows:
        table.add_row(*("" if value is None else str(value) for value in row))
    Console(file=stream).print(table)


def _display_delimited(
    columns: Sequence[str], rows: Sequence[tuple], stream: TextIO, delimiter: str
) -> None:
    writer = csv.writer(stream, delimiter=delimiter, lineterminator="\n")
    writer.writerow(columns)
    writer.writerows(rows)


def _display_json(columns: Sequence[str], rows: Sequence[tuple], stream: TextIO) -> None:
    json.dump([dict(zip(columns, row)) for row in rows], stream, indent=2)
    stream.write("\n")


def display(
    columns: Sequence[str],
    rows: Sequence[tuple],
    stream: TextIO,
    output_format: str = "table",
) -> None:
    """Write ``rows`` to ``stream`` in ``output_format``.

    Raises
    ------
    OutputFormatError:
        If ``output_format`` is not one of ``FORMATS``.
    """

    if output_format == "table":
        _display_table(columns, rows, stream)
    elif output_format == "csv":
        _display_delimited(columns, rows, stream, ",")
    elif output_format == "tsv":
        _display_delimited(columns, rows, stream, "\t")
    elif output_format == "json":
        _display_json(columns, rows, stream)
    else:
        raise OutputFormatError(
            f"Unknown output format '{output_format}', expected one of {', '.join(FORMATS)}"
        )
