"""Query the history of a git repository with SQL."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Iterable, TextIO

import apsw

from .config import QueryConfig
from .errors import GitSQLError
from .output import FORMATS, display
from .queries import PRESETS
from .remote import repository_path
from .storage.database import run_query, session

EXAMPLE = 'gitsql "SELECT file, SUM(additions) FROM git_stats GROUP BY file"'


def _resolve_query(args: argparse.Namespace, stdin: TextIO) -> str | None:
    """Pick the query from the argument, then piped stdin, then a preset."""
    if args.query:
        return args.query
    if not stdin.isatty():
        piped = stdin.read().strip()
        if piped:
            return piped
    if args.preset:
        return PRESETS[args.preset]
    return None


def _list_presets(stream: TextIO) -> None:
    for name, query in sorted(PRESETS.items()):
        print(f"{name}: {query}", file=stream)


def _run(args: argparse.Namespace, query: str, stdout: TextIO) -> None:
    with repository_path(args.repo) as repo_path:
        config = QueryConfig(
            repo_path=repo_path,
            database_path=args.database,
            output_format=args.format,
        )
        with session(config) as connection:
            columns, rows = run_query(connection, query)
    display(columns, rows, stdout, config.output_format)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=__doc__,
        epilog=f"Example: {EXAMPLE}",
    )
    parser.add_argument("query", nargs="?", help="SQL to run (read from stdin when omitted)")
    parser.add_argument(
        "--repo",
        default=".",
        help="Path to the git repository (defaults to the current directory). "
        "A remote URL is cloned to a temporary directory first.",
    )
    parser.add_argument(
        "--format",
        choices=FORMATS,
        default="table",
        help="Output format",
    )
    parser.add_argument("--preset", choices=sorted(PRESETS), help="Run a preset query")
    parser.add_argument(
        "--list-presets",
        action="store_true",
        help="Print the preset queries and exit",
    )
    parser.add_argument(
        "--database",
        type=Path,
        help="SQLite file for the session (defaults to an in-memory database)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(
    argv: Iterable[str] | None = None,
    stdin: TextIO | None = None,
    stdout: TextIO | None = None,
) -> int:
    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    if args.list_presets:
        _list_presets(stdout)
        return 0

    query = _resolve_query(args, stdin)
    if query is None:
        parser.print_help(file=stdout)
        return 0

    try:
        _run(args, query, stdout)
    except (GitSQLError, apsw.Error) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
