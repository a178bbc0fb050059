"""Commit history traversal and per-file line statistics."""

from __future__ import annotations

import heapq
import itertools
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional, Set

from git import Commit, Repo
from git.exc import InvalidGitRepositoryError, NoSuchPathError
from git.refs.symbolic import SymbolicReference

from ..errors import DiffComputationError, HistoryResolutionError, RepositoryOpenError

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class FileStat:
    """Lines added and deleted for one file within one commit."""

    path: str
    additions: int
    deletions: int


def count_lines(content: bytes) -> int:
    """Count lines the way git does: a trailing unterminated line still counts."""

    if not content:
        return 0
    newlines = content.count(b"\n")
    return newlines if content.endswith(b"\n") else newlines + 1


class GitRepo:
    """Read-only handle on a repository opened with gitpython."""

    def __init__(self, repo_path: Path):
        self.repo_path = Path(repo_path).resolve()
        try:
            self.repo = Repo(self.repo_path)
        except (InvalidGitRepositoryError, NoSuchPathError) as e:
            raise RepositoryOpenError(f"Not a valid git repository: {repo_path}") from e

    def resolve_tip(self) -> Optional[Commit]:
        """Return the commit HEAD points at, or ``None`` for an unborn branch.

        HEAD is unborn only when it names a branch whose ref does not exist.
        A ref pointing at a missing object is a broken repository, not an
        empty one.
        """
        head = self.repo.head
        if not head.is_detached:
            try:
                SymbolicReference.dereference_recursive(self.repo, head.reference.path)
            except ValueError:
                logger.debug("HEAD of %s is unborn", self.repo_path)
                return None
        try:
            return head.commit
        except Exception as e:
            raise HistoryResolutionError(f"Cannot resolve HEAD in {self.repo_path}") from e

    def walk(self) -> Optional["CommitWalker"]:
        """Return a walker rooted at HEAD, or ``None`` when there are no commits."""
        tip = self.resolve_tip()
        if tip is None:
            return None
        return CommitWalker(tip)

    def close(self) -> None:
        self.repo.close()

    def __enter__(self) -> "GitRepo":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class CommitWalker:
    """Lazily yield every commit reachable from ``tip``, newest committer time first.

    Commits sit in a priority queue keyed on committer timestamp. A commit's
    parents are only loaded once that commit has been yielded, so starting a
    walk touches nothing but the tip.
    """

    def __init__(self, tip: Commit):
        self._queue: list = []
        self._seen: Set[bytes] = set()
        self._order = itertools.count()
        self._push(tip)

    def _push(self, commit: Commit) -> None:
        if commit.binsha in self._seen:
            return
        self._seen.add(commit.binsha)
        heapq.heappush(self._queue, (-commit.committed_date, next(self._order), commit))

    def __iter__(self) -> Iterator[Commit]:
        return self

    def __next__(self) -> Commit:
        if not self._queue:
            raise StopIteration
        _, _, commit = heapq.heappop(self._queue)
        try:
            for parent in commit.parents:
                self._push(parent)
        except (ValueError, OSError) as e:
            raise HistoryResolutionError(
                f"Cannot load the parents of commit {commit.hexsha}"
            ) from e
        return commit

    def close(self) -> None:
        self._queue.clear()
        self._seen.clear()


class RootCommitStats:
    """Statistics for a commit without parents.

    There is nothing to diff against, so every file in the tree is reported
    with its full line count as additions and no deletions.
    """

    def compute(self, commit: Commit) -> List[FileStat]:
        stats: List[FileStat] = []
        try:
            for item in commit.tree.traverse():
                if item.type != "blob":
                    continue
                content = item.data_stream.read()
                stats.append(FileStat(item.path, count_lines(content), 0))
        except Exception as e:
            raise DiffComputationError(
                f"Cannot read files of root commit {commit.hexsha}"
            ) from e
        return stats


class ParentDiffStats:
    """Statistics from ``git diff --numstat`` against the first parent.

    Output is NUL separated so paths come back unquoted, and renames are
    reported as a deletion plus an addition.
    """

    def compute(self, commit: Commit) -> List[FileStat]:
        parent = commit.parents[0]
        try:
            output = commit.repo.git.diff(
                parent.hexsha, commit.hexsha, "--", numstat=True, no_renames=True, z=True
            )
        except Exception as e:
            raise DiffComputationError(f"Cannot diff commit {commit.hexsha}") from e
        return parse_numstat(output)


def parse_numstat(output: str) -> List[FileStat]:
    """Parse ``git diff --numstat -z --no-renames`` output.

    Each record is ``added<TAB>deleted<TAB>path`` terminated by NUL. Binary
    files report ``-`` for both counts and are counted as zero.
    """

    stats: List[FileStat] = []
    for record in output.split("\0"):
        if not record.strip():
            continue
        added, deleted, path = record.lstrip("\n").split("\t", 2)
        stats.append(
            FileStat(
                path,
                0 if added == "-" else int(added),
                0 if deleted == "-" else int(deleted),
            )
        )
    return stats


ROOT_COMMIT_STATS = RootCommitStats()
PARENT_DIFF_STATS = ParentDiffStats()


def stats_provider_for(commit: Commit):
    """Pick the statistics provider matching the commit's parent count."""
    if commit.parents:
        return PARENT_DIFF_STATS
    return ROOT_COMMIT_STATS
