"""Kill-on-time - terminate configured processes once a day.

Components:
    - config: LaunchTime / KillTargets loaded from appsettings.json
    - schedule: next-fire computation and the recurring timer
    - executor: the kill pass
    - daemon: service lifecycle and background daemon management
    - platform: cross-platform PID helpers and shutdown signals
"""

__version__ = "1.0.0"

from kill_on_time.config import ServiceConfig, load_config
from kill_on_time.errors import ConfigurationError, KillOnTimeError
from kill_on_time.executor import KillPassResult, execute_kill_pass
from kill_on_time.schedule import RecurringTimer, compute_next_delay, delay_until, parse_launch_time

__all__ = [
    "ServiceConfig",
    "load_config",
    "ConfigurationError",
    "KillOnTimeError",
    "KillPassResult",
    "execute_kill_pass",
    "RecurringTimer",
    "compute_next_delay",
    "delay_until",
    "parse_launch_time",
    "__version__",
]
