"""Runtime configuration for a single gitsql query session."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


MEMORY_DATABASE = ":memory:"


@dataclass(slots=True)
class QueryConfig:
    """Settings used to build an engine session.

    Attributes
    ----------
    repo_path:
        Path to the git repository whose history is queried. Defaults to the
        current working directory.
    database_path:
        Optional SQLite file backing the session. ``None`` keeps everything in
        memory, which is what one-shot queries want.
    table_name:
        Name of the virtual table created for ``repo_path``.
    module_name:
        Name the file statistics module is registered under.
    output_format:
        One of ``table``, ``csv``, ``tsv`` or ``json``.
    """

    repo_path: Path = field(default_factory=Path.cwd)
    database_path: Path | None = None
    table_name: str = "git_stats"
    module_name: str = "git_stats"
    output_format: str = "table"

    def resolved_repo_path(self) -> Path:
        """Return an absolute path to the repository."""

        return Path(self.repo_path).expanduser().resolve()

    def resolved_database(self) -> str:
        """Return the filename handed to the engine.

        The parent directory of an on-disk database is created when it does not
        exist yet.
        """

        if self.database_path is None:
            return MEMORY_DATABASE
        target = Path(self.database_path).expanduser()
        target.parent.mkdir(parents=True, exist_ok=True)
        return str(target.resolve())


DEFAULT_CONFIG = QueryConfig()
