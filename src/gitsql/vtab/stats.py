"""The ``git_stats`` virtual table: one row per file changed in each commit.

The classes here implement apsw's virtual table protocol. ``GitStatsModule``
is registered on a connection, ``CREATE VIRTUAL TABLE`` hands it the
repository path and gets back a ``GitStatsTable``, and every scan of that
table drives a fresh ``StatsCursor`` through Filter/Eof/Column/Next.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from ..errors import GitSQLError, SchemaDeclarationError
from ..git.history import CommitWalker, FileStat, GitRepo, stats_provider_for

logger = logging.getLogger(__name__)


SCHEMA = """CREATE TABLE git_stats (
    commit_id TEXT,
    file TEXT,
    additions INTEGER,
    deletions INTEGER
)"""

QUOTE_CHARS = ('"', "'")


def strip_quotes(argument: str) -> str:
    """Remove one layer of enclosing quotes from a module argument.

    Doubled quote characters inside the quoted text collapse to a single one,
    which is how ``ensure_tables`` escapes them.
    """

    text = argument.strip()
    if not text:
        raise SchemaDeclarationError("Empty repository path argument")
    quote = text[0]
    if quote not in QUOTE_CHARS:
        return text
    if len(text) < 2 or text[-1] != quote:
        raise SchemaDeclarationError(f"Unbalanced quotes in argument: {argument}")
    return text[1:-1].replace(quote * 2, quote)


class StatsCursor:
    """Walks the cross product of commits and the files each commit changed.

    The cursor is unpositioned until ``Filter`` runs, positioned on
    ``(commit, file index)`` while rows remain, and exhausted once the walker
    runs dry. Statistics are computed for one commit at a time.
    """

    def __init__(self, repo: GitRepo):
        self._repo: Optional[GitRepo] = repo
        self._walker: Optional[CommitWalker] = None
        self._commit = None
        self._stats: List[FileStat] = []
        self._index = 0
        self._rowid = 0

    def Filter(self, indexnum, indexname, constraintargs) -> None:
        self._release_walker()
        self._commit = None
        self._stats = []
        self._index = 0
        self._rowid = 0

        if self._repo is None:
            raise GitSQLError("Cursor has been closed")
        self._walker = self._repo.walk()
        if self._walker is None:
            logger.debug("No commits in %s, scan is empty", self._repo.repo_path)
            return
        self._advance_commit()

    def _advance_commit(self) -> None:
        # Exhausted until a commit with rows is found; an error leaves it so.
        self._commit = None
        self._stats = []
        self._index = 0
        if self._walker is None:
            return
        for commit in self._walker:
            provider = stats_provider_for(commit)
            logger.debug("Computing stats for %s with %s", commit.hexsha, type(provider).__name__)
            stats = provider.compute(commit)
            if stats:
                self._commit = commit
                self._stats = stats
                return
        logger.debug("Commit history exhausted")

    def Next(self) -> None:
        self._rowid += 1
        if self._index + 1 < len(self._stats):
            self._index += 1
            return
        self._advance_commit()

    def Eof(self) -> bool:
        return self._commit is None

    def Rowid(self) -> int:
        return self._rowid

    def Column(self, number: int):
        if number == -1:
            return self._rowid
        if self._commit is None:
            raise GitSQLError("Cursor is not positioned on a row")
        stat = self._stats[self._index]
        if number == 0:
            return self._commit.hexsha
        if number == 1:
            return stat.path
        if number == 2:
            return stat.additions
        if number == 3:
            return stat.deletions
        raise GitSQLError(f"No column with index {number}")

    def _release_walker(self) -> None:
        if self._walker is not None:
            self._walker.close()
            self._walker = None

    def Close(self) -> None:
        self._release_walker()
        self._commit = None
        self._stats = []
        if self._repo is not None:
            self._repo.close()
            self._repo = None


class GitStatsTable:
    """A ``git_stats`` table bound to one repository path."""

    def __init__(self, repo_path: Path):
        self.repo_path = repo_path

    def BestIndex(self, constraints, orderbys):
        # No constraint or ordering is consumed; the engine filters after a full scan.
        return None

    def Open(self) -> StatsCursor:
        logger.debug("Opening cursor on %s", self.repo_path)
        return StatsCursor(GitRepo(self.repo_path))

    def Disconnect(self) -> None:
        pass

    def Destroy(self) -> None:
        pass


class GitStatsModule:
    """Module object registered with ``Connection.createmodule``."""

    schema = SCHEMA

    def Create(self, connection, modulename, databasename, tablename, *args):
        if not args:
            raise SchemaDeclarationError(
                f"{modulename} needs the repository path as its first argument"
            )
        repo_path = Path(strip_quotes(args[0]))
        logger.debug("Declaring %s.%s for %s", databasename, tablename, repo_path)
        return self.schema, GitStatsTable(repo_path)

    Connect = Create
