"""Change history recorder backed by git.

This package turns a stream of object lifecycle notifications (added,
updated, removed) into an append-only git history of each object type's
YAML snapshot, and keeps .git/info/refs current so the repository can be
cloned from a plain file server.

Basic Usage:
    >>> from config_history import GitStore, HistoryConfig
    >>> store = GitStore(HistoryConfig(repository_path="/repository"))
    >>> store.on_add(obj)
    >>> store.on_update(old_obj, new_obj)
    >>> store.on_delete(obj)

Loading Configuration:
    >>> config = HistoryConfig.from_yaml("/var/run/configmaps/config/config.yaml")
    >>> config = HistoryConfig.from_env()
"""

__version__ = "0.1.0"

from config_history.commit import CommitWriter
from config_history.config import HistoryConfig, PathScheme
from config_history.exceptions import (
    CommitError,
    ConfigHistoryError,
    DecodeError,
    GitNotFoundError,
    InvalidConfigError,
    ReferenceIndexError,
    RepositoryError,
    SnapshotNotFoundError,
    WriteError,
)
from config_history.git import CommitInfo, GitRepository, GitResult, Reference, Signature
from config_history.refs import (
    ReferenceIndexPublisher,
    format_reference_index,
    parse_reference_index,
)
from config_history.serializer import (
    ResourceKind,
    Snapshot,
    decode_object,
    decode_snapshot,
    resource_filename,
)
from config_history.store import GitStore, ResourceEventHandler
from config_history.worktree import WorkingTree

__all__ = [
    # Version
    "__version__",
    # Store
    "GitStore",
    "ResourceEventHandler",
    # Configuration
    "HistoryConfig",
    "PathScheme",
    # Components
    "CommitWriter",
    "ReferenceIndexPublisher",
    "WorkingTree",
    "GitRepository",
    # Serialization
    "ResourceKind",
    "Snapshot",
    "decode_object",
    "decode_snapshot",
    "resource_filename",
    "format_reference_index",
    "parse_reference_index",
    # Data models
    "CommitInfo",
    "GitResult",
    "Reference",
    "Signature",
    # Exceptions
    "ConfigHistoryError",
    "InvalidConfigError",
    "GitNotFoundError",
    "RepositoryError",
    "DecodeError",
    "WriteError",
    "SnapshotNotFoundError",
    "CommitError",
    "ReferenceIndexError",
]
