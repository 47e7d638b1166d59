"""Kill-on-time daemon.

Runs as a long-lived process: computes the delay until the configured daily
launch time, arms a 24-hour recurring timer and performs a kill pass on every
fire. Host shutdown requests (SIGTERM/SIGINT, SIGBREAK on Windows) are mapped
onto a single cancellation event.

Exit status is 0 for a normal, host-requested stop and 1 for any fatal error.
Fatal errors end the whole process through ``abort_process`` rather than
unwinding the timer thread, so a broken daemon never lingers as a running
process that does nothing.
"""

import atexit
import functools
import logging
import os
import signal
import subprocess
import sys
import threading
import time
from datetime import datetime, timedelta
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from kill_on_time.config import ServiceConfig, load_config
from kill_on_time.errors import ConfigurationError
from kill_on_time.executor import KillPassResult, execute_kill_pass
from kill_on_time.log import configure_logging, create_event_log
from kill_on_time.platform import is_process_running, shutdown_signals, terminate_process
from kill_on_time.schedule import DAILY, RecurringTimer, compute_next_delay
from kill_on_time.settings import ServiceSettings, get_settings

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1

# Granularity of the main thread's wait, so signals are handled promptly on
# every platform
_STOP_POLL_SECONDS = 1.0


class ServiceState(str, Enum):
    """Lifecycle of the service."""

    STARTING = "starting"
    COMPUTING_SCHEDULE = "computing_schedule"
    ARMED = "armed"
    FIRING = "firing"
    STOPPING = "stopping"
    STOPPED = "stopped"
    FAILED = "failed"


def abort_process(exit_code: int = EXIT_FAILURE, pid_file: Optional[Path] = None) -> None:
    """Terminate the whole process with ``exit_code``.

    Works from any thread. Logging is flushed and the PID file removed first,
    since ``os._exit`` skips atexit handlers.
    """
    if pid_file is not None:
        remove_pid_file(pid_file)
    logging.shutdown()
    os._exit(exit_code)


class KillOnTimeService:
    """Owns the schedule, the timer and the log sinks of one daemon process."""

    def __init__(
        self,
        config: ServiceConfig,
        event_log: Optional[logging.Logger] = None,
        clock: Callable[[], datetime] = datetime.now,
        abort: Callable[[int], None] = abort_process,
        period: timedelta = DAILY,
    ):
        self.config = config
        self.event_log = event_log
        self.period = period
        self.state = ServiceState.STARTING
        self.timer: Optional[RecurringTimer] = None
        self.last_result: Optional[KillPassResult] = None
        self.pass_count = 0
        self._clock = clock
        self._abort = abort
        self._state_lock = threading.Lock()

    def _set_state(self, state: ServiceState, expected: Optional[ServiceState] = None) -> None:
        with self._state_lock:
            if expected is not None and self.state != expected:
                return
            if self.state in (ServiceState.FAILED, ServiceState.STOPPED):
                return
            logger.debug("State %s -> %s", self.state.value, state.value)
            self.state = state

    def next_delay(self) -> timedelta:
        """Delay from now until the next launch time."""
        return compute_next_delay(self._clock(), self.config.launch_time, self.event_log)

    def kill_pass(self) -> KillPassResult:
        """Run one kill pass with the configured targets."""
        self._set_state(ServiceState.FIRING, expected=ServiceState.ARMED)
        result = execute_kill_pass(self.config.kill_targets, self.event_log)
        self.last_result = result
        self.pass_count += 1
        self._set_state(ServiceState.ARMED, expected=ServiceState.FIRING)
        return result

    def _on_timer(self) -> None:
        try:
            self.kill_pass()
        except Exception as e:
            logger.exception("Unexpected error during kill pass: %s", e)
            self._fail()

    def _fail(self) -> int:
        with self._state_lock:
            self.state = ServiceState.FAILED
        if self.timer is not None:
            self.timer.cancel()
        self._abort(EXIT_FAILURE)
        return EXIT_FAILURE

    def run(self, stop_event: threading.Event) -> int:
        """Schedule and run kill passes until ``stop_event`` is set.

        Returns the process exit status: 0 after a host-requested stop. Fatal
        errors go through the abort callback; with the default one this call
        never returns in that case.
        """
        self._set_state(ServiceState.COMPUTING_SCHEDULE)
        try:
            delay = self.next_delay()
            self.timer = RecurringTimer(delay, self._on_timer, period=self.period, stop_event=stop_event)
            self._set_state(ServiceState.ARMED)
            with self.timer:
                logger.info(
                    "Next kill pass at %s (in %s)",
                    (self._clock() + delay).isoformat(timespec="seconds"),
                    _format_delay(delay),
                )
                while not stop_event.wait(_STOP_POLL_SECONDS):
                    if self.state == ServiceState.FAILED:
                        break
                if self.state == ServiceState.FAILED:
                    return EXIT_FAILURE
                self._set_state(ServiceState.STOPPING)
        except KeyboardInterrupt:
            # Host stop request arriving before the handlers took over
            self._set_state(ServiceState.STOPPING)
        except ConfigurationError as e:
            logger.error("%s", e)
            return self._fail()
        except Exception as e:
            logger.exception("Unexpected error: %s", e)
            return self._fail()

        self._set_state(ServiceState.STOPPED)
        logger.info("Service stopped")
        return EXIT_OK


def _format_delay(delay: timedelta) -> str:
    total = int(delay.total_seconds())
    hours, remainder = divmod(total, 3600)
    minutes, seconds = divmod(remainder, 60)
    return f"{hours:d}h{minutes:02d}m{seconds:02d}s"


def install_signal_handlers(stop_event: threading.Event) -> None:
    """Map the host's shutdown signals onto ``stop_event``."""

    def signal_handler(signum, frame):
        logger.info("Received signal %d, shutting down...", signum)
        stop_event.set()

    for sig in shutdown_signals():
        signal.signal(sig, signal_handler)


def run_service(
    settings: ServiceSettings,
    stop_event: threading.Event,
    abort: Callable[[int], None] = abort_process,
) -> int:
    """Load configuration, build the service and run it until stopped."""
    logger.info("Starting %s (PID: %d)", settings.service_name, os.getpid())
    try:
        config = load_config(settings.config_file)
        event_log = create_event_log(settings)
    except ConfigurationError as e:
        logger.error("%s", e)
        abort(EXIT_FAILURE)
        return EXIT_FAILURE
    except Exception as e:
        logger.exception("Unexpected error during startup: %s", e)
        abort(EXIT_FAILURE)
        return EXIT_FAILURE

    service = KillOnTimeService(config, event_log=event_log, abort=abort)
    return service.run(stop_event)


def write_pid_file(pid_file: Path) -> None:
    """Write the current PID to the PID file."""
    pid_file.parent.mkdir(parents=True, exist_ok=True)
    pid_file.write_text(str(os.getpid()))


def remove_pid_file(pid_file: Path) -> None:
    """Remove the PID file."""
    try:
        if pid_file.exists():
            pid_file.unlink()
    except OSError:
        pass


def start_daemon(settings: Optional[ServiceSettings] = None) -> int:
    """Run the daemon in the foreground and return its exit status."""
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    stop_event = threading.Event()
    install_signal_handlers(stop_event)

    write_pid_file(settings.pid_file)
    atexit.register(remove_pid_file, settings.pid_file)

    abort = functools.partial(abort_process, pid_file=settings.pid_file)
    return run_service(settings, stop_event, abort=abort)


def get_daemon_pid(settings: Optional[ServiceSettings] = None) -> Optional[int]:
    """Get the PID of the running daemon, or None if not running."""
    settings = settings or get_settings()
    pid_file = settings.pid_file
    if not pid_file.exists():
        return None

    try:
        pid = int(pid_file.read_text().strip())
    except (ValueError, OSError):
        remove_pid_file(pid_file)
        return None

    if is_process_running(pid):
        return pid

    # PID file exists but process is not running - stale PID file
    remove_pid_file(pid_file)
    return None


def start_daemon_background(settings: Optional[ServiceSettings] = None) -> bool:
    """Start the daemon in the background.

    Returns:
        True if daemon started successfully, False otherwise.
    """
    settings = settings or get_settings()
    if get_daemon_pid(settings):
        return True  # Already running

    cmd = [sys.executable, "-m", "kill_on_time", "run"]

    if sys.platform == "win32":
        subprocess.Popen(
            cmd,
            creationflags=subprocess.CREATE_NO_WINDOW,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )
    else:
        subprocess.Popen(
            cmd,
            start_new_session=True,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )

    time.sleep(1)
    return get_daemon_pid(settings) is not None


def stop_daemon(settings: Optional[ServiceSettings] = None) -> bool:
    """Stop the running daemon. Returns True if stopped successfully."""
    settings = settings or get_settings()
    pid = get_daemon_pid(settings)
    if not pid:
        return False

    if not terminate_process(pid):
        return False

    # Wait for process to stop
    for _ in range(10):
        time.sleep(0.5)
        if not get_daemon_pid(settings):
            return True

    return False
