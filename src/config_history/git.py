"""Git plumbing for the history store.

Provides:
1. Repository bootstrap - init an empty repository or open an existing one
2. Staging and commits with explicit author/committer identities
3. Reference enumeration for the dumb transport index
4. History read-back

Key Design:
    - All operations use subprocess.run (not git library)
    - Identities are passed through GIT_AUTHOR_*/GIT_COMMITTER_* so no
      user level git configuration is needed
    - Hooks and commit signing are disabled for every commit
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from .exceptions import GitNotFoundError, RepositoryError

logger = logging.getLogger(__name__)

# Control characters that never occur in names or subjects and are not
# whitespace, so stripping git output leaves them intact.
_FIELD_SEP = "\x01"
_RECORD_SEP = "\x02"


@dataclass
class GitResult:
    """Result of a git operation.

    Attributes:
        success: Whether operation succeeded
        output: stdout from git
        error: stderr from git (if failed)
        return_code: Process return code
    """

    success: bool
    output: str = ""
    error: str = ""
    return_code: int = 0


@dataclass(frozen=True)
class Signature:
    """Identity attached to a commit."""

    name: str
    email: str


@dataclass
class Reference:
    """A git reference.

    Attributes:
        name: Full reference name (refs/heads/master)
        target: Commit hash the reference resolves to
        symbolic: Whether the reference points at another reference
    """

    name: str
    target: str
    symbolic: bool = False


@dataclass
class CommitInfo:
    """Information about one commit in the history log.

    Attributes:
        hash: Commit hash
        author: Author identity (the recorder)
        committer: Committer identity (the acting component)
        message: Commit message subject
        timestamp: Committer timestamp, seconds since the epoch
    """

    hash: str
    author: Signature
    committer: Signature
    message: str
    timestamp: int = 0


class GitRepository:
    """Git operations on a single non-bare repository.

    Example:
        >>> repo = GitRepository.init_or_open("/tmp/history")
        >>> repo.add("configmap.v1..yaml")
        >>> if repo.has_staged_changes():
        ...     repo.commit("configmap.v1..yaml added", author, committer)
    """

    def __init__(self, path: str, executable: str = "git"):
        """Open an existing repository.

        Args:
            path: Working tree root (the directory containing .git)
            executable: git binary name or path

        Raises:
            GitNotFoundError: If git is not installed
            RepositoryError: If path is not a git working tree
        """
        self.path = Path(path).resolve()
        self.executable = executable

        if shutil.which(executable) is None:
            raise GitNotFoundError(executable)

        if not self.git_dir.is_dir():
            raise RepositoryError(str(self.path), "not a git repository")

        result = self._run(["rev-parse", "--is-inside-work-tree"])
        if not result.success or result.output != "true":
            raise RepositoryError(str(self.path), result.error or "not a work tree")

    @classmethod
    def init(
        cls,
        path: str,
        branch: str = "master",
        executable: str = "git",
    ) -> GitRepository:
        """Initialize an empty repository with HEAD on the given branch."""
        if shutil.which(executable) is None:
            raise GitNotFoundError(executable)

        root = Path(path)
        try:
            root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise RepositoryError(str(root), str(e)) from e

        for args in (["init", "--quiet"], ["symbolic-ref", "HEAD", f"refs/heads/{branch}"]):
            result = _run_git(executable, root, args)
            if not result.success:
                raise RepositoryError(str(root), result.error)

        logger.info(f"Initialized empty repository in {root}")
        return cls(str(root), executable=executable)

    @classmethod
    def init_or_open(
        cls,
        path: str,
        branch: str = "master",
        executable: str = "git",
    ) -> GitRepository:
        """Open the repository at path, initializing it if .git is absent."""
        if not (Path(path) / ".git").exists():
            return cls.init(path, branch=branch, executable=executable)
        return cls(path, executable=executable)

    @property
    def git_dir(self) -> Path:
        return self.path / ".git"

    def _run(
        self,
        args: List[str],
        env: Optional[Dict[str, str]] = None,
    ) -> GitResult:
        return _run_git(self.executable, self.path, args, env=env)

    def add(self, path: str) -> GitResult:
        """Stage additions, modifications and removals of one path."""
        return self._run(["add", "--all", "--", path])

    def has_staged_changes(self) -> bool:
        """Check if the index differs from HEAD.

        Raises:
            RuntimeError: If git cannot compare the index
        """
        result = self._run(["diff", "--staged", "--quiet"])
        if result.return_code == 0:
            return False
        if result.return_code == 1:
            return True
        raise RuntimeError(result.error or f"git diff exited with {result.return_code}")

    def commit(
        self,
        message: str,
        author: Signature,
        committer: Signature,
    ) -> GitResult:
        """Commit the index with explicit author and committer."""
        env = {
            "GIT_AUTHOR_NAME": author.name,
            "GIT_AUTHOR_EMAIL": author.email,
            "GIT_COMMITTER_NAME": committer.name,
            "GIT_COMMITTER_EMAIL": committer.email,
        }
        return self._run(
            [
                "-c", "commit.gpgsign=false",
                "commit", "--quiet", "--no-verify",
                "--allow-empty-message",
                "-m", message,
            ],
            env=env,
        )

    def rev_parse(self, ref: str = "HEAD") -> Optional[str]:
        """Get commit hash for a ref, None if it does not resolve."""
        result = self._run(["rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}"])
        if not result.success:
            return None
        return result.output

    def references(self) -> List[Reference]:
        """List every reference under refs/, sorted by name.

        Raises:
            RuntimeError: If git cannot enumerate the references
        """
        result = self._run(
            ["for-each-ref", "--format=%(objectname)%09%(refname)%09%(symref)"]
        )
        if not result.success:
            raise RuntimeError(result.error or "git for-each-ref failed")

        refs = []
        for line in result.output.splitlines():
            if not line:
                continue
            target, name, symref = (line.split("\t") + ["", ""])[:3]
            refs.append(Reference(name=name, target=target, symbolic=bool(symref)))
        return refs

    def log(self, path: Optional[str] = None, max_count: Optional[int] = None) -> List[CommitInfo]:
        """Get commits reachable from HEAD, newest first.

        Args:
            path: Only commits touching this path
            max_count: Limit number of commits

        Returns:
            List of CommitInfo (empty before the first commit)
        """
        if self.rev_parse("HEAD") is None:
            return []

        fmt = "%x01".join(["%H", "%an", "%ae", "%cn", "%ce", "%ct", "%s"]) + "%x02"
        args = ["log", f"--format={fmt}"]
        if max_count is not None:
            args.append(f"--max-count={max_count}")
        if path is not None:
            args.extend(["--", path])

        result = self._run(args)
        if not result.success:
            raise RuntimeError(result.error or "git log failed")

        commits = []
        for record in result.output.split(_RECORD_SEP):
            record = record.strip("\n")
            if not record:
                continue
            sha, an, ae, cn, ce, ct, subject = record.split(_FIELD_SEP)
            commits.append(
                CommitInfo(
                    hash=sha,
                    author=Signature(an, ae),
                    committer=Signature(cn, ce),
                    message=subject,
                    timestamp=int(ct),
                )
            )
        return commits


def _run_git(
    executable: str,
    cwd: Path,
    args: List[str],
    env: Optional[Dict[str, str]] = None,
) -> GitResult:
    """Run a git command.

    Args:
        executable: git binary
        cwd: Working directory
        args: Git command arguments (without 'git')
        env: Extra environment variables

    Returns:
        GitResult with output and status
    """
    cmd = [executable] + args
    run_env = os.environ.copy()
    # Snapshot names are passed as pathspecs and must never glob or
    # trigger pathspec magic.
    run_env["GIT_LITERAL_PATHSPECS"] = "1"
    if env:
        run_env.update(env)

    logger.debug(f"Running {' '.join(cmd)} in {cwd}")
    try:
        result = subprocess.run(
            cmd,
            cwd=str(cwd),
            capture_output=True,
            text=True,
            env=run_env,
        )
    except OSError as e:
        return GitResult(success=False, error=str(e), return_code=-1)

    return GitResult(
        success=result.returncode == 0,
        output=result.stdout.strip() if result.stdout else "",
        error=result.stderr.strip() if result.stderr else "",
        return_code=result.returncode,
    )
