"""Exception types raised while exposing git history as SQL tables."""

from __future__ import annotations


class GitSQLError(Exception):
    """Base class for every error raised by gitsql."""


class SchemaDeclarationError(GitSQLError):
    """The virtual table arguments were malformed or the engine rejected the schema."""


class RepositoryOpenError(GitSQLError):
    """The configured path does not resolve to a git repository."""


class HistoryResolutionError(GitSQLError):
    """HEAD could not be resolved for a reason other than an unborn branch."""


class DiffComputationError(GitSQLError):
    """Reading blob content or diffing a commit against its parent failed."""


class RemoteCloneError(GitSQLError):
    """A remote repository could not be cloned."""


class OutputFormatError(GitSQLError):
    """An unknown result format was requested."""
