"""Pytest configuration and fixtures for kill-on-time tests."""

import io
import json
import time
from unittest.mock import MagicMock

import pytest
from rich.console import Console

from kill_on_time import messaging
from kill_on_time.settings import clear_settings_cache


@pytest.fixture(autouse=True)
def isolate_settings(tmp_path_factory, monkeypatch):
    """Point settings at a throwaway directory for every test.

    Keeps tests away from the user's real PID file, event log and
    appsettings.json.
    """
    base = tmp_path_factory.mktemp("kill_on_time")
    monkeypatch.setenv("XDG_DATA_HOME", str(base / "data"))
    monkeypatch.setenv("XDG_STATE_HOME", str(base / "state"))
    monkeypatch.setenv("KILL_ON_TIME_CONFIG_FILE", str(base / "appsettings.json"))
    for var in ("KILL_ON_TIME_LOG_LEVEL", "KILL_ON_TIME_SERVICE_NAME", "KILL_ON_TIME_EVENT_SOURCE"):
        monkeypatch.delenv(var, raising=False)
    clear_settings_cache()
    yield base
    clear_settings_cache()


@pytest.fixture
def config_file(isolate_settings):
    """Write appsettings.json for the current test and return its path."""
    path = isolate_settings / "appsettings.json"

    def write(data):
        if isinstance(data, str):
            path.write_text(data, encoding="utf-8")
        else:
            path.write_text(json.dumps(data), encoding="utf-8")
        return path

    return write


@pytest.fixture
def console_output():
    """Capture what the CLI handlers print."""
    buffer = io.StringIO()
    messaging.set_console(Console(file=buffer, width=200, highlight=False))
    yield buffer
    messaging.set_console(None)


def make_process(pid, name):
    """A stand-in for psutil.Process as returned by process_iter()."""
    proc = MagicMock()
    proc.pid = pid
    proc.info = {"pid": pid, "name": name}
    return proc


def wait_for(predicate, timeout=5.0):
    """Poll ``predicate`` until it is true or ``timeout`` seconds pass."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


@pytest.fixture
def fake_process():
    return make_process


@pytest.fixture
def wait_until():
    return wait_for
