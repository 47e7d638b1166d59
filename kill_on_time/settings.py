"""
Typed service settings using pydantic-settings.

These are the knobs of the daemon itself (where the configuration file lives,
what the service and event source are called, how verbose logging is). The
schedule and the kill targets live in the JSON configuration file, see
``kill_on_time.config``.

Usage:
    from kill_on_time.settings import get_settings

    settings = get_settings()
    print(settings.config_file)
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SERVICE_NAME = "Kill on Time Service"
DEFAULT_EVENT_SOURCE = "WorkServiceKillOnTime"


def _get_xdg_dir(env_var: str) -> Path:
    """Get XDG directory, defaulting to ~/.kill_on_time if not set."""
    xdg_base = os.getenv(env_var)
    if xdg_base:
        return Path(xdg_base) / "kill_on_time"
    return Path.home() / ".kill_on_time"


class PathSettings(BaseSettings):
    """XDG-compliant path configuration."""

    model_config = SettingsConfigDict(
        env_prefix="KILL_ON_TIME_",
        extra="ignore",
    )

    @property
    def data_dir(self) -> Path:
        """XDG_DATA_HOME/kill_on_time or ~/.kill_on_time"""
        return _get_xdg_dir("XDG_DATA_HOME")

    @property
    def state_dir(self) -> Path:
        """XDG_STATE_HOME/kill_on_time or ~/.kill_on_time"""
        return _get_xdg_dir("XDG_STATE_HOME")

    @property
    def pid_file(self) -> Path:
        return self.state_dir / "kill_on_time.pid"

    @property
    def event_log_file(self) -> Path:
        return self.data_dir / "events.log"

    def ensure_directories(self) -> None:
        """Create all necessary directories with secure permissions."""
        for directory in [self.data_dir, self.state_dir]:
            directory.mkdir(parents=True, exist_ok=True, mode=0o700)


class ServiceSettings(BaseSettings):
    """Master settings for the daemon process."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="KILL_ON_TIME_",
        extra="ignore",
        case_sensitive=False,
    )

    paths: PathSettings = Field(default_factory=PathSettings)

    config_file: Path = Field(
        default=Path("appsettings.json"),
        description="JSON file holding LaunchTime and KillTargets",
    )
    service_name: str = Field(
        default=DEFAULT_SERVICE_NAME,
        description="Name the service registers under with the host",
    )
    event_source: str = Field(
        default=DEFAULT_EVENT_SOURCE,
        description="Source name used for host event-log entries",
    )
    log_level: str = Field(
        default="INFO",
        description="Console log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"log_level must be a standard logging level, got '{v}'")
        return level

    @property
    def pid_file(self) -> Path:
        return self.paths.pid_file

    @property
    def event_log_file(self) -> Path:
        return self.paths.event_log_file

    def ensure_directories(self) -> None:
        self.paths.ensure_directories()


@lru_cache(maxsize=1)
def get_settings() -> ServiceSettings:
    """Get the cached settings singleton.

    The settings are loaded once and cached for the process lifetime.
    To reload, call clear_settings_cache() first.
    """
    return ServiceSettings()


def clear_settings_cache() -> None:
    """Clear the cached settings instance."""
    get_settings.cache_clear()
