"""Exceptions raised by the kill-on-time service."""


class KillOnTimeError(Exception):
    """Base error for the service."""


class ConfigurationError(KillOnTimeError):
    """LaunchTime missing or malformed, or the configuration file is unusable.

    Always fatal: the daemon must not run with an undefined schedule.
    """

    def __init__(self, message: str, key: str = ""):
        self.key = key
        super().__init__(message)
