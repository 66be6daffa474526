"""Tests for config-history configuration."""

import pytest

from config_history import HistoryConfig, InvalidConfigError, PathScheme


class TestHistoryConfig:
    """Test HistoryConfig dataclass."""

    def test_default_values(self):
        """Test default configuration values."""
        config = HistoryConfig()
        assert config.repository_path == "/repository"
        assert config.branch == "master"
        assert config.author_name == "config-history-operator"
        assert config.author_email == "config-history-operator@openshift.io"
        assert config.component == "operator"
        assert config.email_domain == "openshift.io"
        assert config.path_scheme is PathScheme.TYPE

    def test_path_scheme_from_string(self):
        config = HistoryConfig(path_scheme="Instance")
        assert config.path_scheme is PathScheme.INSTANCE

    def test_unknown_path_scheme(self):
        with pytest.raises(InvalidConfigError):
            HistoryConfig(path_scheme="by-name")

    def test_empty_repository_path(self):
        with pytest.raises(InvalidConfigError):
            HistoryConfig(repository_path="  ")

    def test_to_dict(self):
        data = HistoryConfig(repository_path="/tmp/history").to_dict()
        assert data["repository_path"] == "/tmp/history"
        assert data["path_scheme"] == "type"


class TestLoading:
    """Test loading configuration from dicts, files and environment."""

    def test_from_dict_round_trip(self):
        config = HistoryConfig(repository_path="/data", component="controller")
        assert HistoryConfig.from_dict(config.to_dict()) == config

    def test_from_dict_none_gives_defaults(self):
        assert HistoryConfig.from_dict(None) == HistoryConfig()

    def test_from_dict_unknown_keys(self):
        with pytest.raises(InvalidConfigError) as exc:
            HistoryConfig.from_dict({"repository": "/data"})
        assert "repository" in str(exc.value)

    def test_from_dict_not_mapping(self):
        with pytest.raises(InvalidConfigError):
            HistoryConfig.from_dict(["/data"])

    def test_from_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("repository_path: /data\npath_scheme: instance\n")
        config = HistoryConfig.from_yaml(path)
        assert config.repository_path == "/data"
        assert config.path_scheme is PathScheme.INSTANCE

    def test_from_yaml_empty_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert HistoryConfig.from_yaml(path) == HistoryConfig()

    def test_from_yaml_invalid(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("repository_path: [unclosed\n")
        with pytest.raises(InvalidConfigError):
            HistoryConfig.from_yaml(path)

    def test_from_yaml_missing_file(self, tmp_path):
        with pytest.raises(InvalidConfigError):
            HistoryConfig.from_yaml(tmp_path / "missing.yaml")

    def test_from_yaml_wrong_type(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("branch: 5\n")
        with pytest.raises(InvalidConfigError):
            HistoryConfig.from_yaml(path)

    def test_from_env(self):
        environ = {
            "CONFIG_HISTORY_REPOSITORY_PATH": "/srv/history",
            "CONFIG_HISTORY_COMPONENT": "kube-controller",
            "UNRELATED": "ignored",
        }
        config = HistoryConfig.from_env(environ)
        assert config.repository_path == "/srv/history"
        assert config.component == "kube-controller"
        assert config.branch == "master"
