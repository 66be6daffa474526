"""Config History Configuration.

This module defines the HistoryConfig dataclass and the ways to load it:
directly, from a dict, from a YAML file or from CONFIG_HISTORY_* environment
variables.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml

from .exceptions import InvalidConfigError

ENV_PREFIX = "CONFIG_HISTORY_"


class PathScheme(Enum):
    """How snapshot file names are derived from a tracked object.

    TYPE keys on (kind, version, group) only, so every instance of a type
    shares one file. INSTANCE also keys on namespace and name.
    """

    TYPE = "type"
    INSTANCE = "instance"


@dataclass
class HistoryConfig:
    """Configuration for the git backed history store.

    Attributes:
        repository_path: Directory holding the working tree and .git
        branch: Branch created when a new repository is initialized
        author_name: Fixed author name, representing the recorder itself
        author_email: Fixed author email
        component: Acting component recorded as committer
        email_domain: Domain used to build the committer email
        path_scheme: Snapshot file naming scheme
        git_executable: Name or path of the git binary

    Example:
        >>> config = HistoryConfig(repository_path="/tmp/history")
        >>> config.branch
        'master'
    """

    repository_path: str = "/repository"
    branch: str = "master"
    author_name: str = "config-history-operator"
    author_email: str = "config-history-operator@openshift.io"
    component: str = "operator"
    email_domain: str = "openshift.io"
    path_scheme: PathScheme = PathScheme.TYPE
    git_executable: str = "git"

    def __post_init__(self) -> None:
        if isinstance(self.path_scheme, str):
            try:
                self.path_scheme = PathScheme(self.path_scheme.lower())
            except ValueError:
                raise InvalidConfigError(
                    f"unknown path_scheme {self.path_scheme!r}, "
                    f"expected one of {[s.value for s in PathScheme]}"
                ) from None
        elif not isinstance(self.path_scheme, PathScheme):
            raise InvalidConfigError("path_scheme must be a string")
        if isinstance(self.repository_path, Path):
            self.repository_path = str(self.repository_path)

        for f in fields(self):
            if f.name == "path_scheme":
                continue
            value = getattr(self, f.name)
            if not isinstance(value, str) or not value.strip():
                raise InvalidConfigError(f"{f.name} must be a non-empty string")

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> HistoryConfig:
        """Create from dictionary.

        Raises:
            InvalidConfigError: On unknown keys or invalid values
        """
        if data is None:
            return cls()
        if not isinstance(data, Mapping):
            raise InvalidConfigError(
                f"expected a mapping, got {type(data).__name__}"
            )

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise InvalidConfigError(f"unknown keys: {', '.join(unknown)}")

        return cls(**dict(data))

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> HistoryConfig:
        """Load configuration from YAML file."""
        path = Path(path)
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except OSError as e:
            raise InvalidConfigError(f"unable to read {path}: {e}") from e
        except yaml.YAMLError as e:
            raise InvalidConfigError(f"unable to parse {path}: {e}") from e

        return cls.from_dict(data)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> HistoryConfig:
        """Load configuration from CONFIG_HISTORY_* environment variables.

        Example:
            CONFIG_HISTORY_REPOSITORY_PATH=/repository
            CONFIG_HISTORY_PATH_SCHEME=instance
        """
        environ = os.environ if environ is None else environ
        data: Dict[str, Any] = {}
        for f in fields(cls):
            value = environ.get(ENV_PREFIX + f.name.upper())
            if value is not None:
                data[f.name] = value
        return cls.from_dict(data)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "repository_path": self.repository_path,
            "branch": self.branch,
            "author_name": self.author_name,
            "author_email": self.author_email,
            "component": self.component,
            "email_domain": self.email_domain,
            "path_scheme": self.path_scheme.value,
            "git_executable": self.git_executable,
        }
