"""Reference Index Publisher.

Regenerates .git/info/refs, the flat reference list that lets clients
fetch the repository over the dumb HTTP transport from a plain file
server. One line per direct reference:

    <hash>\\t<refname>\\n

Symbolic references (HEAD, refs/remotes/origin/HEAD) are left out.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, Iterable, List

from .exceptions import ReferenceIndexError
from .git import GitRepository, Reference

logger = logging.getLogger(__name__)

INDEX_PATH = Path("info") / "refs"


def format_reference_index(refs: Iterable[Reference]) -> bytes:
    """Render direct references in info/refs format."""
    lines = [f"{ref.target}\t{ref.name}\n" for ref in refs if not ref.symbolic]
    return "".join(lines).encode("utf-8")


def parse_reference_index(data: bytes) -> Dict[str, str]:
    """Parse info/refs content into {refname: hash}."""
    refs = {}
    for line in data.decode("utf-8").splitlines():
        if not line:
            continue
        target, _, name = line.partition("\t")
        refs[name] = target
    return refs


class ReferenceIndexPublisher:
    """Writes the reference index of a repository."""

    def __init__(self, repo: GitRepository):
        self.repo = repo

    @property
    def path(self) -> Path:
        return self.repo.git_dir / INDEX_PATH

    def publish(self) -> List[Reference]:
        """Rewrite the index from the repository's current references.

        Returns:
            The direct references written

        Raises:
            ReferenceIndexError: If references cannot be listed or the file
                cannot be written
        """
        try:
            refs = [ref for ref in self.repo.references() if not ref.symbolic]
        except RuntimeError as e:
            raise ReferenceIndexError(str(self.path), str(e)) from e

        data = format_reference_index(refs)
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix="refs.", dir=str(self.path.parent))
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.chmod(tmp_name, 0o644)
            os.replace(tmp_name, self.path)
        except OSError as e:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise ReferenceIndexError(str(self.path), str(e)) from e

        logger.debug(f"Published {len(refs)} references to {self.path}")
        return refs
