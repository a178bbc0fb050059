"""apsw helpers for gitsql's embedded query engine."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, List, Tuple

import apsw

from ..config import DEFAULT_CONFIG, QueryConfig
from ..errors import SchemaDeclarationError
from ..vtab.stats import GitStatsModule

logger = logging.getLogger(__name__)


def register_module(connection: apsw.Connection, module: Any, name: str = "git_stats") -> None:
    """Make ``module`` available to ``CREATE VIRTUAL TABLE ... USING name``."""

    connection.createmodule(name, module)


def _quote_argument(value: str) -> str:
    return '"' + value.replace('"', '""') + '"'


def ensure_tables(
    connection: apsw.Connection,
    repo_path: Path,
    table: str = "git_stats",
    module: str = "git_stats",
) -> None:
    """Create the statistics table for ``repo_path`` unless it already exists."""

    statement = (
        f"CREATE VIRTUAL TABLE IF NOT EXISTS {_quote_argument(table)} "
        f"USING {module}({_quote_argument(str(repo_path))})"
    )
    try:
        connection.execute(statement)
    except apsw.SQLError as e:
        raise SchemaDeclarationError(f"Cannot declare table {table}: {e}") from e
    logger.debug("Table %s ready for %s", table, repo_path)


def get_connection(config: QueryConfig | None = None, module: Any = None) -> apsw.Connection:
    """Open an engine connection with the statistics table registered.

    ``module`` defaults to a new ``GitStatsModule``; callers may pass their own
    instance to control what gets registered.
    """

    active_config = config or DEFAULT_CONFIG
    connection = apsw.Connection(active_config.resolved_database())
    try:
        register_module(connection, module or GitStatsModule(), active_config.module_name)
        ensure_tables(
            connection,
            active_config.resolved_repo_path(),
            table=active_config.table_name,
            module=active_config.module_name,
        )
    except Exception:
        connection.close()
        raise
    return connection


@contextmanager
def session(config: QueryConfig | None = None) -> Iterator[apsw.Connection]:
    """Yield a connection from ``get_connection`` and close it afterwards."""

    connection = get_connection(config)
    try:
        yield connection
    finally:
        connection.close()


def run_query(connection: apsw.Connection, sql: str) -> Tuple[List[str], List[tuple]]:
    """Execute ``sql`` and return its column names and rows."""

    cursor = connection.cursor()
    cursor.execute(sql)
    try:
        columns = [name for name, _ in cursor.getdescription()]
    except apsw.ExecutionCompleteError:
        # Statements without result rows have no description left to read.
        columns = []
    rows = [tuple(row) for row in cursor]
    return columns, rows
