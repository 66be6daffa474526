"""Test configuration for config-history."""
import shutil
import sys
from pathlib import Path

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest
from config_history import GitStore, HistoryConfig


def make_object(kind="ConfigMap", api_version="v1", name="cluster", namespace="", **payload):
    """Build unstructured object content."""
    metadata = {"name": name}
    if namespace:
        metadata["namespace"] = namespace
    obj = {"apiVersion": api_version, "kind": kind, "metadata": metadata}
    obj.update(payload)
    return obj


@pytest.fixture
def git_available():
    """Skip tests that need a git binary when none is installed."""
    if shutil.which("git") is None:
        pytest.skip("git executable not installed")


@pytest.fixture
def repo_path(tmp_path):
    """Directory for a fresh repository."""
    return tmp_path / "repository"


@pytest.fixture
def config(repo_path):
    """History config pointing at a fresh repository."""
    return HistoryConfig(repository_path=str(repo_path))


@pytest.fixture
def store(git_available, config):
    """Store over a freshly initialized repository."""
    return GitStore(config)
