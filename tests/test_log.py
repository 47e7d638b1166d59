"""Tests for console logging and the event-log sink."""

import io
import logging
import sys
from logging.handlers import NTEventLogHandler, RotatingFileHandler
from unittest.mock import patch

import pytest
from rich.console import Console
from rich.logging import RichHandler

from kill_on_time.log import EVENT_LOGGER, PACKAGE_LOGGER, configure_logging, create_event_log
from kill_on_time.settings import get_settings


@pytest.fixture
def clean_loggers():
    yield
    for name in (PACKAGE_LOGGER, EVENT_LOGGER):
        log = logging.getLogger(name)
        for handler in list(log.handlers):
            log.removeHandler(handler)
            handler.close()
        log.setLevel(logging.NOTSET)
        log.propagate = True


class TestConfigureLogging:
    """Tests for the Rich console handler."""

    def test_installs_single_rich_handler(self, clean_loggers):
        configure_logging("INFO", console=Console(file=io.StringIO()))
        configure_logging("DEBUG", console=Console(file=io.StringIO()))
        package_logger = logging.getLogger(PACKAGE_LOGGER)
        rich_handlers = [h for h in package_logger.handlers if isinstance(h, RichHandler)]
        assert len(rich_handlers) == 1
        assert package_logger.level == logging.DEBUG

    def test_writes_to_console(self, clean_loggers):
        buffer = io.StringIO()
        configure_logging("INFO", console=Console(file=buffer, width=200))
        logging.getLogger("kill_on_time.executor").info("Killed process: notepad")
        assert "Killed process: notepad" in buffer.getvalue()


class TestCreateEventLog:
    """Tests for the host event-log sink."""

    @pytest.mark.skipif(sys.platform == "win32", reason="file sink is the non-Windows event log")
    def test_file_sink_on_posix(self, clean_loggers):
        settings = get_settings()
        event_log = create_event_log(settings)
        event_log.info("Killed process: %s - ID %d", "notepad", 42)
        for handler in event_log.handlers:
            handler.flush()

        assert isinstance(event_log.handlers[0], RotatingFileHandler)
        content = settings.event_log_file.read_text(encoding="utf-8")
        assert "Killed process: notepad - ID 42" in content
        assert settings.event_source in content

    def test_event_log_does_not_propagate(self, clean_loggers):
        event_log = create_event_log(get_settings())
        assert event_log.propagate is False

    def test_recreating_replaces_handlers(self, clean_loggers):
        settings = get_settings()
        create_event_log(settings)
        event_log = create_event_log(settings)
        assert len(event_log.handlers) == 1

    def test_nt_event_log_on_windows(self, clean_loggers):
        settings = get_settings()
        with patch("kill_on_time.log.sys.platform", "win32"), patch(
            "kill_on_time.log.NTEventLogHandler", spec=NTEventLogHandler
        ) as mock_handler:
            mock_handler.return_value.level = logging.NOTSET
            event_log = create_event_log(settings)
        mock_handler.assert_called_once_with(appname=settings.event_source)
        assert event_log.handlers == [mock_handler.return_value]
