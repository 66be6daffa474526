"""Working Tree Writer.

Replaces or removes snapshot files in the repository working tree.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Union

from .exceptions import SnapshotNotFoundError, WriteError

logger = logging.getLogger(__name__)


class WorkingTree:
    """Snapshot files under a working tree root.

    Names are plain file names relative to the root; anything that would
    escape the root (absolute paths, "..", the .git directory) is rejected.
    """

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)

    def _resolve(self, name: str) -> Path:
        path = Path(name)
        if (
            not name
            or path.is_absolute()
            or ".." in path.parts
            or (path.parts and path.parts[0] == ".git")
        ):
            raise WriteError(name, "invalid snapshot file name")
        return self.root / path

    def exists(self, name: str) -> bool:
        try:
            return self._resolve(name).is_file()
        except (OSError, ValueError):
            return False

    def read(self, name: str) -> bytes:
        """Read the current content of a snapshot file."""
        path = self._resolve(name)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            raise SnapshotNotFoundError(name) from None
        except (OSError, ValueError) as e:
            raise WriteError(name, str(e)) from e

    def replace(self, name: str, content: bytes) -> None:
        """Set the file's content to exactly content.

        Writes to a temporary sibling and renames it over the target, so
        the file never holds a mix of old and new bytes.

        Raises:
            WriteError: If the file cannot be written
        """
        path = self._resolve(name)
        tmp_name = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent)
            )
            with os.fdopen(fd, "wb") as f:
                f.write(content)
            os.chmod(tmp_name, 0o644)
            os.replace(tmp_name, path)
        except (OSError, ValueError) as e:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise WriteError(name, str(e)) from e

        logger.debug(f"Wrote {len(content)} bytes to {name}")

    def remove(self, name: str) -> None:
        """Delete a snapshot file.

        Raises:
            SnapshotNotFoundError: If the file does not exist
            WriteError: If the file cannot be removed
        """
        path = self._resolve(name)
        try:
            path.unlink()
        except FileNotFoundError:
            raise SnapshotNotFoundError(name) from None
        except (OSError, ValueError) as e:
            raise WriteError(name, str(e)) from e

        logger.debug(f"Removed {name}")
