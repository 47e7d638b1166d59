"""Daily schedule computation and the recurring timer.

Uses pure Python timing (no external scheduler dependencies): the timer is a
single thread waiting on the cancellation event between fires.
"""

import logging
import re
import threading
import time as time_module
from datetime import datetime, time, timedelta
from typing import Callable, Optional

from kill_on_time.errors import ConfigurationError

logger = logging.getLogger(__name__)

DAILY = timedelta(days=1)

# Longest single wait on the stop event; bounds how late cancel() is noticed
_POLL_SECONDS = 1.0

_LAUNCH_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")


def parse_launch_time(launch_time_str: Optional[str]) -> time:
    """Parse a 24-hour ``HH:mm`` string (``H:mm`` and ``HH:mm:ss`` also accepted).

    Raises:
        ConfigurationError: if the value is missing or not a valid time of day.
    """
    if launch_time_str is None or not str(launch_time_str).strip():
        raise ConfigurationError(
            "Launch time not found in configuration.", key="LaunchTime"
        )

    value = str(launch_time_str).strip()
    match = _LAUNCH_TIME_RE.match(value)
    if match:
        hour = int(match.group(1))
        minute = int(match.group(2))
        second = int(match.group(3) or 0)
        if hour < 24 and minute < 60 and second < 60:
            return time(hour, minute, second)

    raise ConfigurationError(
        f"Invalid launch time format in configuration. Launch time: '{value}'. "
        "Please use the HH:mm format.",
        key="LaunchTime",
    )


def delay_until(now: datetime, launch_time: time) -> timedelta:
    """Delay from ``now`` until the next occurrence of ``launch_time``.

    Today's slot counts as passed only when ``now`` is strictly after it, so
    calling this exactly at the launch time returns a zero delay. The result
    is always in ``[0, 24h)``.
    """
    candidate = datetime.combine(now.date(), launch_time, tzinfo=now.tzinfo)
    if now > candidate:
        candidate += DAILY
    return candidate - now


def compute_next_delay(
    now: datetime,
    launch_time_str: Optional[str],
    event_log: Optional[logging.Logger] = None,
) -> timedelta:
    """Parse the configured launch time, record it and return the delay to it.

    Used when the service arms its schedule; read-only callers that only want
    the number use ``parse_launch_time`` + ``delay_until``.
    """
    launch_time = parse_launch_time(launch_time_str)

    logger.info("Launch time set to: %s", launch_time.strftime("%H:%M:%S"))
    if event_log is not None:
        event_log.info("Launch time set to: %s", launch_time.strftime("%H:%M:%S"))

    return delay_until(now, launch_time)


class RecurringTimer:
    """Fires ``callback`` after ``initial_delay`` and then every ``period``.

    Use as a context manager: leaving the block disarms the timer and waits
    for its thread, so the timer is released on every exit path. A callback
    that is already running when the timer is cancelled runs to completion.

    Fire deadlines are fixed on the monotonic clock when the timer is armed
    (arm time + initial_delay + n * period), so neither wait overshoot nor
    callback run time shifts later fires. The next wait only starts after the
    callback returns, so fires never overlap.
    """

    def __init__(
        self,
        initial_delay: timedelta,
        callback: Callable[[], None],
        period: timedelta = DAILY,
        stop_event: Optional[threading.Event] = None,
        name: str = "kill-on-time-timer",
    ):
        if initial_delay < timedelta(0):
            raise ValueError("initial_delay must not be negative")
        if period <= timedelta(0):
            raise ValueError("period must be positive")

        self.initial_delay = initial_delay
        self.period = period
        self.callback = callback
        self.next_fire: Optional[datetime] = None
        self.fire_count = 0
        self._stop_event = stop_event or threading.Event()
        self._disarmed = threading.Event()
        self._first_deadline: Optional[float] = None
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)

    @property
    def armed(self) -> bool:
        return self._thread.is_alive() and not self._disarmed.is_set()

    def start(self) -> "RecurringTimer":
        """Arm the timer. Returns immediately; fires happen on the timer thread."""
        if self._thread.ident is not None:
            raise RuntimeError("timer has already been armed")
        next_fire = datetime.now() + self.initial_delay
        self.next_fire = next_fire
        self._first_deadline = time_module.monotonic() + self.initial_delay.total_seconds()
        logger.debug(
            "Timer armed: first fire at %s, then every %s",
            next_fire.isoformat(timespec="seconds"),
            self.period,
        )
        self._thread.start()
        return self

    def cancel(self) -> None:
        """Disarm the timer: no further fires after the current one."""
        self._disarmed.set()

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread.ident is not None:
            self._thread.join(timeout)

    def _cancelled(self) -> bool:
        return self._disarmed.is_set() or self._stop_event.is_set()

    def _wait_until(self, deadline: float) -> bool:
        """Wait until the monotonic ``deadline``; False if cancelled meanwhile."""
        # Poll the private flag too, so cancel() works with a shared stop event
        while not self._cancelled():
            remaining = deadline - time_module.monotonic()
            if remaining <= 0:
                break
            if self._stop_event.wait(min(remaining, _POLL_SECONDS)):
                return False
        return not self._cancelled()

    def _run(self) -> None:
        deadline = self._first_deadline
        period = self.period.total_seconds()
        while self._wait_until(deadline):
            self.fire_count += 1
            self.callback()
            deadline += period
            self.next_fire = datetime.now() + timedelta(
                seconds=max(deadline - time_module.monotonic(), 0.0)
            )
        self.next_fire = None
        logger.debug("Timer disarmed after %d fire(s)", self.fire_count)

    def __enter__(self) -> "RecurringTimer":
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cancel()
        self.join()
