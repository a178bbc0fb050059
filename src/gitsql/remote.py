"""Cloning remote repositories into throwaway directories."""

from __future__ import annotations

import logging
import re
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from git import Repo
from git.exc import GitCommandError

from .errors import RemoteCloneError

logger = logging.getLogger(__name__)

REMOTE_SCHEMES = ("http://", "https://", "ssh://", "git://")
SCP_LIKE = re.compile(r"^[\w.-]+@[\w.-]+:\S+$")


def is_remote_url(location: str) -> bool:
    """Return ``True`` when ``location`` names a remote rather than a local path."""

    if Path(location).expanduser().exists():
        return False
    return location.startswith(REMOTE_SCHEMES) or bool(SCP_LIKE.match(location))


@contextmanager
def cloned_repository(url: str) -> Iterator[Path]:
    """Clone ``url`` into a temporary directory that is removed on exit."""

    with tempfile.TemporaryDirectory(prefix="gitsql-") as directory:
        logger.debug("Cloning %s into %s", url, directory)
        try:
            repo = Repo.clone_from(url, directory)
        except GitCommandError as e:
            raise RemoteCloneError(f"Cannot clone {url}: {str(e.stderr or e).strip()}") from e
        repo.close()
        yield Path(directory)


@contextmanager
def repository_path(location: str) -> Iterator[Path]:
    """Yield a local path for ``location``, cloning it first when it is remote."""

    if is_remote_url(location):
        with cloned_repository(location) as directory:
            yield directory
    else:
        yield Path(location)
