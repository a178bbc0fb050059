from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, Iterator, List, Optional

import pytest
from git import Actor, Repo

AUTHOR = Actor("Test Author", "author@example.com")


class RepoBuilder:
    """Create commits in a scratch repository with increasing commit times."""

    def __init__(self, path: Path):
        self.path = path
        self.repo = Repo.init(path)
        self._clock = 1_700_000_000

    def commit(
        self,
        files: Dict[str, Optional[str]],
        message: str = "change",
        parents=None,
    ) -> str:
        for name, content in files.items():
            if content is None:
                self.repo.index.remove([name], working_tree=True)
                continue
            target = self.path / name
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content.encode("utf-8"))
            self.repo.index.add([name])
        self._clock += 60
        date = f"{self._clock} +0000"
        commit = self.repo.index.commit(
            message,
            parent_commits=parents,
            author=AUTHOR,
            committer=AUTHOR,
            author_date=date,
            commit_date=date,
        )
        return commit.hexsha

    def reachable(self) -> set[str]:
        return {commit.hexsha for commit in self.repo.iter_commits("HEAD")}


@pytest.fixture
def make_repo(tmp_path) -> Iterator[Callable[[str], RepoBuilder]]:
    builders: List[RepoBuilder] = []

    def factory(name: str) -> RepoBuilder:
        builder = RepoBuilder(tmp_path / name)
        builders.append(builder)
        return builder

    yield factory
    for builder in builders:
        builder.repo.close()


@pytest.fixture
def repo_builder(make_repo) -> RepoBuilder:
    return make_repo("repo")
