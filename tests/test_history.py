"""Tests for history traversal and per-commit statistics."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

import pytest
from git import Repo

from gitsql.errors import DiffComputationError, HistoryResolutionError, RepositoryOpenError
from gitsql.git.history import (
    CommitWalker,
    FileStat,
    GitRepo,
    ParentDiffStats,
    RootCommitStats,
    count_lines,
    parse_numstat,
    stats_provider_for,
)


@dataclass(eq=False)
class FakeCommit:
    name: str
    committed_date: int
    parents: List["FakeCommit"] = field(default_factory=list)

    @property
    def binsha(self) -> bytes:
        return self.name.encode()


def test_count_lines_matches_git() -> None:
    assert count_lines(b"") == 0
    assert count_lines(b"one\n") == 1
    assert count_lines(b"one\ntwo") == 2
    assert count_lines(b"one\ntwo\nthree\n") == 3
    assert count_lines(b"\n\n") == 2


def test_walker_orders_by_committer_time_across_branches() -> None:
    root = FakeCommit("root", 100)
    left = FakeCommit("left", 300, [root])
    right = FakeCommit("right", 200, [root])
    left_tip = FakeCommit("left-tip", 400, [left])
    merge = FakeCommit("merge", 500, [left_tip, right])

    names = [commit.name for commit in CommitWalker(merge)]

    assert names == ["merge", "left-tip", "left", "right", "root"]


def test_walker_close_stops_iteration() -> None:
    walker = CommitWalker(FakeCommit("tip", 10, [FakeCommit("base", 5)]))
    assert next(walker).name == "tip"
    walker.close()
    assert list(walker) == []


def test_open_rejects_non_repository(tmp_path) -> None:
    with pytest.raises(RepositoryOpenError):
        GitRepo(tmp_path)
    with pytest.raises(RepositoryOpenError):
        GitRepo(tmp_path / "missing")


def test_unborn_head_resolves_to_none(repo_builder) -> None:
    with GitRepo(repo_builder.path) as repo:
        assert repo.resolve_tip() is None
        assert repo.walk() is None


def test_root_commit_reports_full_line_counts(repo_builder) -> None:
    sha = repo_builder.commit(
        {"a.txt": "1\n2\n3\n", "b.txt": "x\ny\n", "docs/c.md": "only line"}
    )
    commit = repo_builder.repo.commit(sha)

    assert isinstance(stats_provider_for(commit), RootCommitStats)
    stats = {stat.path: stat for stat in RootCommitStats().compute(commit)}

    assert stats == {
        "a.txt": FileStat("a.txt", 3, 0),
        "b.txt": FileStat("b.txt", 2, 0),
        "docs/c.md": FileStat("docs/c.md", 1, 0),
    }


def test_parent_diff_counts_changed_lines(repo_builder) -> None:
    repo_builder.commit({"a.txt": "1\n2\n3\n4\n5\n", "keep.txt": "same\n"})
    sha = repo_builder.commit({"a.txt": "1\n2\nx\ny\nz\n4\n5\n"})
    commit = repo_builder.repo.commit(sha)

    assert isinstance(stats_provider_for(commit), ParentDiffStats)
    assert ParentDiffStats().compute(commit) == [FileStat("a.txt", 3, 1)]


def test_parent_diff_reports_deleted_files(repo_builder) -> None:
    repo_builder.commit({"a.txt": "1\n2\n", "b.txt": "b\n"})
    sha = repo_builder.commit({"b.txt": None})
    commit = repo_builder.repo.commit(sha)

    assert ParentDiffStats().compute(commit) == [FileStat("b.txt", 0, 1)]


def test_walk_yields_every_reachable_commit(repo_builder) -> None:
    first = repo_builder.commit({"a.txt": "a\n"})
    second = repo_builder.commit({"a.txt": "a\nb\n"})
    third = repo_builder.commit({"b.txt": "b\n"})

    with GitRepo(repo_builder.path) as repo:
        walker = repo.walk()
        shas = [commit.hexsha for commit in walker]

    assert shas == [third, second, first]


def _delete_loose_object(repo_path, hexsha: str) -> None:
    (repo_path / ".git" / "objects" / hexsha[:2] / hexsha[2:]).unlink()


def test_parse_numstat_reads_nul_separated_records() -> None:
    output = "3\t1\tsrc/a.py\0-\t-\timage.png\0" + "0\t2\tname with\ttab.txt\0"

    assert parse_numstat(output) == [
        FileStat("src/a.py", 3, 1),
        FileStat("image.png", 0, 0),
        FileStat("name with\ttab.txt", 0, 2),
    ]
    assert parse_numstat("") == []


def test_non_ascii_paths_match_between_root_and_child(repo_builder) -> None:
    first = repo_builder.commit({"café.txt": "1\n"})
    second = repo_builder.commit({"café.txt": "1\n2\n"})
    repo = repo_builder.repo

    assert RootCommitStats().compute(repo.commit(first)) == [FileStat("café.txt", 1, 0)]
    assert ParentDiffStats().compute(repo.commit(second)) == [FileStat("café.txt", 1, 0)]


def test_renames_are_split_into_delete_and_add(repo_builder) -> None:
    repo_builder.commit({"old.txt": "1\n2\n"})
    sha = repo_builder.commit({"old.txt": None, "new.txt": "1\n2\n"})

    stats = ParentDiffStats().compute(repo_builder.repo.commit(sha))

    assert sorted(stats, key=lambda stat: stat.path) == [
        FileStat("new.txt", 2, 0),
        FileStat("old.txt", 0, 2),
    ]


def test_dangling_branch_ref_is_not_unborn(repo_builder) -> None:
    repo_builder.commit({"a.txt": "a\n"})
    branch = repo_builder.repo.head.reference.path
    (repo_builder.path / ".git" / branch).write_text("1" * 40 + "\n", encoding="utf-8")

    with GitRepo(repo_builder.path) as repo:
        with pytest.raises(HistoryResolutionError):
            repo.resolve_tip()


def test_missing_parent_object_fails_the_walk(repo_builder, tmp_path) -> None:
    repo_builder.commit({"a.txt": "1\n"})
    repo_builder.commit({"a.txt": "1\n2\n"})
    repo_builder.commit({"a.txt": "1\n2\n3\n"})
    shallow = Repo.clone_from(f"file://{repo_builder.path}", tmp_path / "shallow", depth=1)
    shallow.close()

    with GitRepo(tmp_path / "shallow") as repo:
        walker = repo.walk()
        with pytest.raises(HistoryResolutionError):
            list(walker)


def test_missing_blob_fails_root_stats(repo_builder) -> None:
    sha = repo_builder.commit({"a.txt": "1\n"})
    blob = repo_builder.repo.commit(sha).tree["a.txt"].hexsha
    _delete_loose_object(repo_builder.path, blob)

    with GitRepo(repo_builder.path) as repo:
        with pytest.raises(DiffComputationError):
            RootCommitStats().compute(repo.repo.commit(sha))


def test_missing_blob_fails_parent_diff(repo_builder) -> None:
    repo_builder.commit({"a.txt": "1\n"})
    sha = repo_builder.commit({"a.txt": "1\n2\n"})
    blob = repo_builder.repo.commit(sha).tree["a.txt"].hexsha
    _delete_loose_object(repo_builder.path, blob)

    with GitRepo(repo_builder.path) as repo:
        with pytest.raises(DiffComputationError):
            ParentDiffStats().compute(repo.repo.commit(sha))
