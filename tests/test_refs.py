"""Tests for the reference index publisher."""

import re
from unittest.mock import patch

import pytest

from config_history import (
    CommitWriter,
    GitRepository,
    HistoryConfig,
    Reference,
    ReferenceIndexError,
    ReferenceIndexPublisher,
    WorkingTree,
    format_reference_index,
    parse_reference_index,
)

LINE = re.compile(r"^[0-9a-f]{40}([0-9a-f]{24})?\t\S+$")


@pytest.fixture
def repo(git_available, repo_path):
    return GitRepository.init(str(repo_path))


@pytest.fixture
def publisher(repo):
    return ReferenceIndexPublisher(repo)


def commit_file(repo, name="a.yaml", content=b"a\n"):
    WorkingTree(repo.path).replace(name, content)
    writer = CommitWriter.from_config(repo, HistoryConfig(repository_path=str(repo.path)))
    return writer.commit(name, "operator", f"{name} added")


class TestFormat:
    """Test index rendering and parsing."""

    def test_format_skips_symbolic(self):
        refs = [
            Reference(name="HEAD", target="a" * 40, symbolic=True),
            Reference(name="refs/heads/master", target="a" * 40),
            Reference(name="refs/tags/v1", target="b" * 40),
        ]
        data = format_reference_index(refs)
        assert data == (
            f"{'a' * 40}\trefs/heads/master\n{'b' * 40}\trefs/tags/v1\n".encode()
        )

    def test_parse(self):
        data = f"{'a' * 40}\trefs/heads/master\n".encode()
        assert parse_reference_index(data) == {"refs/heads/master": "a" * 40}

    def test_empty(self):
        assert format_reference_index([]) == b""
        assert parse_reference_index(b"") == {}


class TestPublish:
    """Test ReferenceIndexPublisher.publish."""

    def test_path(self, repo, publisher):
        assert publisher.path == repo.git_dir / "info" / "refs"

    def test_empty_repository(self, publisher):
        assert publisher.publish() == []
        assert publisher.path.read_bytes() == b""

    def test_branch_tip(self, repo, publisher):
        commit_hash = commit_file(repo)
        publisher.publish()

        data = publisher.path.read_bytes()
        for line in data.decode().splitlines():
            assert LINE.match(line)
        assert parse_reference_index(data) == {"refs/heads/master": commit_hash}

    def test_rewrites_instead_of_appending(self, repo, publisher):
        commit_file(repo, content=b"1\n")
        publisher.publish()
        second = commit_file(repo, content=b"2\n")
        publisher.publish()

        data = publisher.path.read_bytes()
        assert data.count(b"\n") == 1
        assert parse_reference_index(data)["refs/heads/master"] == second

    def test_tags_included_symbolic_excluded(self, repo, publisher):
        commit_hash = commit_file(repo)
        repo._run(["tag", "v1"])
        repo._run(["symbolic-ref", "refs/remotes/origin/HEAD", "refs/heads/master"])

        refs = publisher.publish()

        assert [ref.name for ref in refs] == ["refs/heads/master", "refs/tags/v1"]
        assert parse_reference_index(publisher.path.read_bytes()) == {
            "refs/heads/master": commit_hash,
            "refs/tags/v1": commit_hash,
        }

    def test_enumeration_failure(self, repo, publisher):
        with patch.object(repo, "references", side_effect=RuntimeError("corrupt refs")):
            with pytest.raises(ReferenceIndexError) as exc:
                publisher.publish()
        assert "corrupt refs" in str(exc.value)

    def test_write_failure(self, publisher):
        with patch("config_history.refs.os.replace", side_effect=OSError("read-only")):
            with pytest.raises(ReferenceIndexError):
                publisher.publish()
        assert not any(p.name.startswith("refs.") for p in publisher.path.parent.iterdir())
