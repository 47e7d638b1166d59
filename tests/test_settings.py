"""Tests for the pydantic-settings based service settings."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from kill_on_time.settings import (
    DEFAULT_EVENT_SOURCE,
    DEFAULT_SERVICE_NAME,
    PathSettings,
    ServiceSettings,
    clear_settings_cache,
    get_settings,
)


class TestPathSettings:
    """Tests for PathSettings class."""

    def test_default_paths_use_home_directory(self, monkeypatch):
        monkeypatch.delenv("XDG_DATA_HOME", raising=False)
        monkeypatch.delenv("XDG_STATE_HOME", raising=False)
        paths = PathSettings()
        assert paths.data_dir == Path.home() / ".kill_on_time"
        assert paths.state_dir == Path.home() / ".kill_on_time"

    def test_xdg_paths_when_set(self, monkeypatch):
        monkeypatch.setenv("XDG_DATA_HOME", "/tmp/xdg_data")
        monkeypatch.setenv("XDG_STATE_HOME", "/tmp/xdg_state")
        paths = PathSettings()
        assert paths.data_dir == Path("/tmp/xdg_data/kill_on_time")
        assert paths.state_dir == Path("/tmp/xdg_state/kill_on_time")

    def test_file_paths_derived_from_directories(self):
        paths = PathSettings()
        assert paths.pid_file == paths.state_dir / "kill_on_time.pid"
        assert paths.event_log_file == paths.data_dir / "events.log"

    def test_ensure_directories(self):
        paths = PathSettings()
        paths.ensure_directories()
        assert paths.data_dir.is_dir()
        assert paths.state_dir.is_dir()


class TestServiceSettings:
    """Tests for ServiceSettings."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("KILL_ON_TIME_CONFIG_FILE")
        settings = ServiceSettings()
        assert settings.config_file == Path("appsettings.json")
        assert settings.service_name == DEFAULT_SERVICE_NAME
        assert settings.event_source == DEFAULT_EVENT_SOURCE
        assert settings.log_level == "INFO"

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("KILL_ON_TIME_CONFIG_FILE", "/etc/kill_on_time/appsettings.json")
        monkeypatch.setenv("KILL_ON_TIME_SERVICE_NAME", "Nightly Reaper")
        settings = ServiceSettings()
        assert settings.config_file == Path("/etc/kill_on_time/appsettings.json")
        assert settings.service_name == "Nightly Reaper"

    def test_log_level_normalised(self):
        assert ServiceSettings(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            ServiceSettings(log_level="chatty")

    def test_pid_and_event_log_come_from_paths(self):
        settings = ServiceSettings()
        assert settings.pid_file == settings.paths.pid_file
        assert settings.event_log_file == settings.paths.event_log_file


class TestSettingsCache:
    """Tests for the cached accessor."""

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()

    def test_clear_settings_cache_reloads(self, monkeypatch):
        first = get_settings()
        monkeypatch.setenv("KILL_ON_TIME_LOG_LEVEL", "WARNING")
        assert get_settings().log_level == first.log_level
        clear_settings_cache()
        assert get_settings().log_level == "WARNING"
