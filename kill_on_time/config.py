"""Service configuration loaded from appsettings.json.

The file carries exactly the two values the scheduler needs:

    {
        "LaunchTime": "03:00",
        "KillTargets": ["notepad", "chrome"]
    }

It is read once at startup; the resulting ServiceConfig is immutable for the
lifetime of the process.
"""

import json
import logging
import os
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from kill_on_time.errors import ConfigurationError

logger = logging.getLogger(__name__)

LAUNCH_TIME_KEY = "LaunchTime"
KILL_TARGETS_KEY = "KillTargets"


class ServiceConfig(BaseModel):
    """LaunchTime and KillTargets, as read from the configuration file."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    launch_time: Optional[str] = Field(default=None, alias=LAUNCH_TIME_KEY)
    kill_targets: Tuple[str, ...] = Field(default=(), alias=KILL_TARGETS_KEY)

    @field_validator("kill_targets", mode="before")
    @classmethod
    def _null_targets_are_empty(cls, v):
        # "KillTargets": null is the same as leaving the key out
        if v is None:
            return ()
        if isinstance(v, str):
            raise ValueError("KillTargets must be a list of process names")
        return v

    @field_validator("launch_time", mode="before")
    @classmethod
    def _strip_launch_time(cls, v):
        if isinstance(v, str):
            return v.strip() or None
        return v

    @classmethod
    def from_dict(cls, data: dict) -> "ServiceConfig":
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e


def load_config(path: str) -> ServiceConfig:
    """Load the service configuration from a JSON file.

    A missing file yields an empty configuration: startup then fails when the
    schedule is computed, with a message naming the missing LaunchTime.
    """
    path = os.path.expanduser(str(path))
    if not os.path.exists(path):
        logger.warning("Configuration file not found: %s", path)
        return ServiceConfig()

    try:
        with open(path, "r", encoding="utf-8-sig") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Configuration file {path} is not valid JSON: {e}") from e
    except UnicodeDecodeError as e:
        raise ConfigurationError(f"Configuration file {path} is not valid UTF-8: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Cannot read configuration file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration file {path} must contain a JSON object")

    config = ServiceConfig.from_dict(data)
    logger.debug(
        "Loaded configuration from %s: LaunchTime=%r, %d kill target(s)",
        path,
        config.launch_time,
        len(config.kill_targets),
    )
    return config
