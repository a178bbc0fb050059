"""gitsql package.

Git history exposed as SQLite virtual tables, queried through apsw.
"""

__all__ = [
    "cli",
    "config",
    "errors",
    "git",
    "output",
    "queries",
    "remote",
    "storage",
    "vtab",
]
