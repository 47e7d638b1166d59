"""Logging setup: a Rich console stream plus the host event-log sink.

The console stream carries everything the service logs. The event log is a
separate logger that only receives the operator-facing entries (resolved
launch time, each killed process, missing targets). On Windows it writes to
the Application event log under the configured source name; elsewhere it
writes to a rotating file in the data directory.
"""

import logging
import sys
from logging.handlers import NTEventLogHandler, RotatingFileHandler
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

from kill_on_time.settings import ServiceSettings

PACKAGE_LOGGER = "kill_on_time"
EVENT_LOGGER = "kill_on_time.eventlog"

EVENT_LOG_MAX_BYTES = 1024 * 1024  # 1MB
EVENT_LOG_BACKUPS = 2


def configure_logging(level: str = "INFO", console: Optional[Console] = None) -> logging.Logger:
    """Attach a RichHandler to the package logger and set its level."""
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(package_logger.handlers):
        if isinstance(handler, RichHandler):
            package_logger.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    package_logger.addHandler(handler)
    package_logger.setLevel(level.upper())
    return package_logger


def create_event_log(settings: ServiceSettings) -> logging.Logger:
    """Build the host event-log logger for this process.

    The logger does not propagate, so event entries are not duplicated on the
    console stream.
    """
    event_log = logging.getLogger(EVENT_LOGGER)
    for handler in list(event_log.handlers):
        event_log.removeHandler(handler)
        handler.close()

    if sys.platform == "win32":
        handler = NTEventLogHandler(appname=settings.event_source)
    else:
        settings.ensure_directories()
        handler = RotatingFileHandler(
            settings.event_log_file,
            maxBytes=EVENT_LOG_MAX_BYTES,
            backupCount=EVENT_LOG_BACKUPS,
            encoding="utf-8",
        )
        handler.setFormatter(
            logging.Formatter(
                f"%(asctime)s - {settings.event_source} - %(levelname)s - %(message)s"
            )
        )

    event_log.addHandler(handler)
    event_log.setLevel(logging.INFO)
    event_log.propagate = False
    return event_log
