"""Commit Writer.

Stages one snapshot path and records a commit when the tree changed.

Identity Model:
    - author: fixed, the recorder itself
    - committer: the acting component that triggered the change

Repeated writes of identical content leave the index equal to HEAD, so no
commit is created and the history log does not grow.
"""

from __future__ import annotations

import logging
from typing import Optional

from .config import HistoryConfig
from .exceptions import CommitError
from .git import GitRepository, Signature

logger = logging.getLogger(__name__)


class CommitWriter:
    """Creates commits with dual identity metadata."""

    def __init__(self, repo: GitRepository, author: Signature, email_domain: str):
        """Initialize commit writer.

        Args:
            repo: Repository to commit into
            author: Fixed author identity for every commit
            email_domain: Domain appended to component names for committer email
        """
        self.repo = repo
        self.author = author
        self.email_domain = email_domain

    @classmethod
    def from_config(cls, repo: GitRepository, config: HistoryConfig) -> CommitWriter:
        return cls(
            repo,
            author=Signature(config.author_name, config.author_email),
            email_domain=config.email_domain,
        )

    def committer_for(self, component: str) -> Signature:
        return Signature(component, f"{component}@{self.email_domain}")

    def commit(self, name: str, component: str, message: str) -> Optional[str]:
        """Stage name and commit it if the tree changed.

        Args:
            name: Snapshot path just written or removed
            component: Acting component recorded as committer
            message: Commit message

        Returns:
            New commit hash, or None when there was nothing to commit

        Raises:
            CommitError: If staging or commit creation fails
        """
        result = self.repo.add(name)
        if not result.success:
            raise CommitError(name, result.error or "git add failed")

        try:
            changed = self.repo.has_staged_changes()
        except RuntimeError as e:
            raise CommitError(name, str(e)) from e

        if not changed:
            logger.debug(f"No changes in {name}, skipping commit")
            return None

        result = self.repo.commit(message, self.author, self.committer_for(component))
        if not result.success:
            raise CommitError(name, result.error or result.output or "git commit failed")

        commit_hash = self.repo.rev_parse("HEAD")
        if commit_hash is None:
            raise CommitError(name, "HEAD does not resolve after commit")
        return commit_hash
