"""Git backed history store.

Every add/update/delete notification for a tracked object becomes one
commit of the object's YAML snapshot. Processing of one event:

    decode -> write/remove file -> commit (if changed) -> publish info/refs

Failure Policy:
    - DecodeError, WriteError: logged, event dropped
    - CommitError: logged, index is still published
    - ReferenceIndexError: propagated to the caller

All events run under one lock, so commits land in the order the handlers
were called and no two events interleave.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, List, Optional

from .commit import CommitWriter
from .config import HistoryConfig
from .exceptions import CommitError, DecodeError, WriteError
from .git import CommitInfo, GitRepository
from .refs import ReferenceIndexPublisher
from .serializer import decode_snapshot
from .worktree import WorkingTree

logger = logging.getLogger(__name__)


class ResourceEventHandler(ABC):
    """Receiver of object lifecycle notifications."""

    @abstractmethod
    def on_add(self, obj: Any) -> None:
        pass

    @abstractmethod
    def on_update(self, old: Any, new: Any) -> None:
        pass

    @abstractmethod
    def on_delete(self, obj: Any) -> None:
        pass


class GitStore(ResourceEventHandler):
    """Records object state changes as commits in a git repository.

    Construct once at startup and hand the instance to whatever dispatches
    notifications. Handlers are safe to call from multiple threads.

    Usage:
        >>> store = GitStore(HistoryConfig(repository_path="/repository"))
        >>> store.on_add({"apiVersion": "v1", "kind": "ConfigMap", "data": {"a": "1"}})
        >>> [c.message for c in store.history()]
        ['configmap.v1..yaml added']
    """

    def __init__(self, config: Optional[HistoryConfig] = None):
        """Open the repository, initializing it if needed.

        Raises:
            GitNotFoundError: If git is not installed
            RepositoryError: If the repository cannot be opened
            ReferenceIndexError: If the initial index cannot be written
        """
        self.config = config or HistoryConfig()
        self.repo = GitRepository.init_or_open(
            self.config.repository_path,
            branch=self.config.branch,
            executable=self.config.git_executable,
        )
        self.worktree = WorkingTree(self.repo.path)
        self.committer = CommitWriter.from_config(self.repo, self.config)
        self.index = ReferenceIndexPublisher(self.repo)
        self.component = self.config.component

        self._lock = threading.Lock()

        with self._lock:
            self.index.publish()

    def on_add(self, obj: Any) -> None:
        with self._lock:
            self._record(obj, "added", "Added")

    def on_update(self, old: Any, new: Any) -> None:
        with self._lock:
            self._record(new, "modified", "Updated")

    def on_delete(self, obj: Any) -> None:
        with self._lock:
            try:
                snapshot = decode_snapshot(obj, self.config.path_scheme)
            except DecodeError as e:
                logger.warning(f"Unable to decode {e.name!r}: {e.reason}")
                return

            name = snapshot.name
            try:
                self.worktree.remove(name)
            except WriteError as e:
                logger.warning(f"Unable to delete file {name!r}: {e.reason}")
                return

            commit_hash = self._commit(name, f'"{name}" removed')
            self.index.publish()
            logger.info(f"Deleted {name!r} in commit {commit_hash!r}")

    def _record(self, obj: Any, verb: str, action: str) -> None:
        try:
            snapshot = decode_snapshot(obj, self.config.path_scheme)
        except DecodeError as e:
            logger.warning(f"Unable to decode {e.name!r}: {e.reason}")
            return

        name = snapshot.name
        try:
            self.worktree.replace(name, snapshot.content)
        except WriteError as e:
            logger.warning(f"Unable to write file {name!r}: {e.reason}")
            return

        commit_hash = self._commit(name, f"{name} {verb}")
        self.index.publish()
        logger.info(f"{action} {name!r} in commit {commit_hash!r}")

    def _commit(self, name: str, message: str) -> Optional[str]:
        try:
            return self.committer.commit(name, self.component, message)
        except CommitError as e:
            logger.warning(f"Unable to commit file {name!r}: {e.reason}")
            return None

    def history(self, name: Optional[str] = None) -> List[CommitInfo]:
        """Commits of the history log, newest first.

        Args:
            name: Only commits touching this snapshot file
        """
        with self._lock:
            return self.repo.log(path=name)
