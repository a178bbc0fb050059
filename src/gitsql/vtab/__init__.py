"""Virtual table modules exposing git data to the SQL engine."""

from .stats import GitStatsModule, GitStatsTable, StatsCursor

__all__ = ["GitStatsModule", "GitStatsTable", "StatsCursor"]
