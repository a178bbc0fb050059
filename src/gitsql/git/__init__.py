"""Git integration for walking repository history and computing file statistics."""

from .history import (
    CommitWalker,
    FileStat,
    GitRepo,
    ParentDiffStats,
    RootCommitStats,
    count_lines,
    stats_provider_for,
)

__all__ = [
    "CommitWalker",
    "FileStat",
    "GitRepo",
    "ParentDiffStats",
    "RootCommitStats",
    "count_lines",
    "stats_provider_for",
]
