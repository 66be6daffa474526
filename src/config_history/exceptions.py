"""Config History - Exception Classes.

This module defines all exceptions raised by the change-history recorder.
All exceptions inherit from ConfigHistoryError for easy catching.

Recoverable (logged and dropped per event by GitStore):
    - DecodeError
    - WriteError / SnapshotNotFoundError
    - CommitError

Fatal (propagated out of the event handlers):
    - ReferenceIndexError

Usage:
    try:
        store = GitStore(HistoryConfig(repository_path="/repository"))
    except ConfigHistoryError as e:
        print(f"Unable to open history store: {e}")
"""

from __future__ import annotations


class ConfigHistoryError(Exception):
    """Base exception for all config history errors."""
    pass


class InvalidConfigError(ConfigHistoryError):
    """Raised when configuration is invalid."""

    def __init__(self, message: str):
        super().__init__(f"Invalid configuration: {message}")


class GitNotFoundError(ConfigHistoryError):
    """Raised when the git executable is not installed."""

    def __init__(self, executable: str = "git"):
        self.executable = executable
        super().__init__(f"{executable} executable not found. Please install git first.")


class RepositoryError(ConfigHistoryError):
    """Raised when the repository cannot be initialized or opened."""

    def __init__(self, path: str, reason: str = ""):
        self.path = path
        self.reason = reason
        msg = f"Unable to open repository at {path}"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class DecodeError(ConfigHistoryError):
    """Raised when an object cannot be decoded into a snapshot.

    The name is the snapshot file name when the type descriptor could be
    read, empty otherwise.
    """

    def __init__(self, name: str = "", reason: str = ""):
        self.name = name
        self.reason = reason
        msg = "Unable to decode object"
        if name:
            msg += f" {name!r}"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class WriteError(ConfigHistoryError):
    """Raised when a working tree file cannot be written or removed."""

    def __init__(self, name: str, reason: str = ""):
        self.name = name
        self.reason = reason
        msg = f"Unable to write {name!r}"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class SnapshotNotFoundError(WriteError):
    """Raised when removing a snapshot file that does not exist."""

    def __init__(self, name: str):
        super().__init__(name, "file does not exist")


class CommitError(ConfigHistoryError):
    """Raised when staging or commit creation fails."""

    def __init__(self, name: str, reason: str = ""):
        self.name = name
        self.reason = reason
        msg = f"Unable to commit {name!r}"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class ReferenceIndexError(ConfigHistoryError):
    """Raised when the reference index cannot be regenerated.

    A stale index silently breaks every client that fetches the
    repository over a dumb transport, so the store never swallows this.
    """

    def __init__(self, path: str, reason: str = ""):
        self.path = path
        self.reason = reason
        msg = f"Unable to publish reference index {path}"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)
