"""
Unit tests for sync engine configuration.

Tests loading from YAML, environment overrides, saving and validation.
"""

import pytest

from notifsync.config import (
    CONFIG_FILENAME,
    DEFAULT_LIST_INTERVAL,
    DEFAULT_PAGE_SIZE,
    DEFAULT_UNREAD_INTERVAL,
    ConfigError,
    ConfigValidationError,
    SyncConfig,
)


class TestSyncConfigDefaults:
    """Tests for default values."""

    def test_defaults_without_file(self, temp_config_dir):
        config = SyncConfig(config_dir=temp_config_dir)

        assert config.server_url == ""
        assert config.api_base_path == "/api"
        assert config.unread_interval_seconds == DEFAULT_UNREAD_INTERVAL
        assert config.list_interval_seconds == DEFAULT_LIST_INTERVAL
        assert config.page_size == DEFAULT_PAGE_SIZE
        assert config.log_level == "INFO"
        assert config.is_configured is False

    def test_config_path_from_dir(self, temp_config_dir):
        config = SyncConfig(config_dir=temp_config_dir)
        assert config.config_path == temp_config_dir / CONFIG_FILENAME

    def test_config_path_from_environment(self, temp_config_dir, monkeypatch):
        path = temp_config_dir / "custom.yaml"
        monkeypatch.setenv("NOTIFSYNC_CONFIG_PATH", str(path))

        assert SyncConfig().config_path == path


class TestSyncConfigLoading:
    """Tests for loading from file and environment."""

    def test_load_from_file(self, sync_config_file):
        config = SyncConfig(config_path=sync_config_file)

        assert config.server_url == "http://localhost:5000"
        assert config.unread_interval_seconds == 15
        assert config.list_interval_seconds == 45
        assert config.page_size == 10
        assert config.request_timeout_seconds == 5.0
        assert config.log_level == "DEBUG"
        assert config.user_id == "u1"
        assert config.user_role == "staff"
        assert config.is_configured is True

    def test_api_url(self, sync_config_file):
        assert SyncConfig(config_path=sync_config_file).api_url == "http://localhost:5000/api"

    def test_api_url_without_base_path(self, temp_config_dir):
        config = SyncConfig(config_dir=temp_config_dir)
        config.server_url = "https://hotel.example.com/"
        config.api_base_path = ""

        assert config.api_url == "https://hotel.example.com"

    def test_environment_overrides_file(self, sync_config_file, monkeypatch):
        monkeypatch.setenv("NOTIFSYNC_SERVER_URL", "https://override.example.com")
        monkeypatch.setenv("NOTIFSYNC_LOG_LEVEL", "WARNING")

        config = SyncConfig(config_path=sync_config_file)

        assert config.server_url == "https://override.example.com"
        assert config.log_level == "WARNING"

    def test_empty_file(self, temp_config_dir):
        (temp_config_dir / CONFIG_FILENAME).write_text("")

        config = SyncConfig(config_dir=temp_config_dir)

        assert config.page_size == DEFAULT_PAGE_SIZE

    def test_invalid_yaml(self, temp_config_dir):
        (temp_config_dir / CONFIG_FILENAME).write_text("server_url: [unclosed")

        with pytest.raises(ConfigError):
            SyncConfig(config_dir=temp_config_dir)


class TestSyncConfigSave:
    """Tests for saving configuration."""

    def test_save_round_trip(self, temp_config_dir):
        config = SyncConfig(config_dir=temp_config_dir / "nested")
        config.server_url = "https://hotel.example.com"
        config.page_size = 50
        config.user_role = "guest"
        config.save()

        reloaded = SyncConfig(config_dir=temp_config_dir / "nested")

        assert reloaded.server_url == "https://hotel.example.com"
        assert reloaded.page_size == 50
        assert reloaded.user_role == "guest"

    def test_save_does_not_persist_environment_override(self, temp_config_dir, monkeypatch):
        config = SyncConfig(config_dir=temp_config_dir)
        config.server_url = "https://file.example.com"
        monkeypatch.setenv("NOTIFSYNC_SERVER_URL", "https://env.example.com")
        config.save()
        monkeypatch.delenv("NOTIFSYNC_SERVER_URL")

        assert SyncConfig(config_dir=temp_config_dir).server_url == "https://file.example.com"


class TestSyncConfigValidation:
    """Tests for validation."""

    def test_valid(self, sync_config_file):
        SyncConfig(config_path=sync_config_file).validate()

    @pytest.mark.parametrize("url", ["ftp://hotel.example.com", "not a url", "http://"])
    def test_invalid_server_url(self, temp_config_dir, url):
        config = SyncConfig(config_dir=temp_config_dir)
        config.server_url = url

        with pytest.raises(ConfigValidationError):
            config.validate()

    @pytest.mark.parametrize(
        "attribute",
        ["unread_interval_seconds", "list_interval_seconds", "page_size"],
    )
    def test_non_positive_values(self, temp_config_dir, attribute):
        config = SyncConfig(config_dir=temp_config_dir)
        setattr(config, attribute, 0)

        with pytest.raises(ConfigValidationError) as exc_info:
            config.validate()

        assert attribute in str(exc_info.value)
