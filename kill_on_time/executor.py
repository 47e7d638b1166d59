"""Kill pass executor.

One kill pass walks the configured target names in order, looks up every
running process with that exact name and terminates each one. Process
handles are never cached: the process table is re-enumerated on each pass.
"""

import logging
import os
import sys
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

import psutil

logger = logging.getLogger(__name__)


@dataclass
class KillAttempt:
    """Outcome of one termination attempt."""

    target: str
    pid: int
    killed: bool
    error: str = ""


@dataclass
class KillPassResult:
    """Everything one kill pass did."""

    attempts: List[KillAttempt] = field(default_factory=list)
    no_targets: bool = False

    @property
    def killed(self) -> List[KillAttempt]:
        return [a for a in self.attempts if a.killed]

    @property
    def failed(self) -> List[KillAttempt]:
        return [a for a in self.attempts if not a.killed]


def process_name_matches(process_name: Optional[str], target: str, platform: str = sys.platform) -> bool:
    """Exact name match, following the host's process-name semantics.

    Windows image names carry an ``.exe`` suffix and compare case-insensitively;
    targets are configured without the extension. Elsewhere names compare as-is.
    """
    if not process_name:
        return False
    if platform == "win32":
        name = process_name[:-4] if process_name.lower().endswith(".exe") else process_name
        return name.lower() == target.lower()
    return process_name == target


def find_processes(target: str) -> List[psutil.Process]:
    """Return all running processes named ``target``, excluding this process."""
    own_pid = os.getpid()
    matches = []
    for proc in psutil.process_iter(["pid", "name"]):
        try:
            info = proc.info
            if info["pid"] == own_pid:
                continue
            if process_name_matches(info.get("name"), target):
                matches.append(proc)
        except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
            continue
    return matches


def terminate(proc: psutil.Process, target: str, event_log: Optional[logging.Logger] = None) -> KillAttempt:
    """Kill one process. Failures are reported in the result, never raised."""
    pid = proc.pid
    try:
        proc.kill()
    except psutil.NoSuchProcess:
        # Exited between enumeration and kill; routine, keep it out of the warnings
        logger.debug("Process %s (PID %d) already exited", target, pid)
        return KillAttempt(target=target, pid=pid, killed=False, error="already exited")
    except (psutil.AccessDenied, psutil.ZombieProcess, OSError) as e:
        logger.warning("Failed to kill process %s (PID %d): %s", target, pid, e)
        return KillAttempt(target=target, pid=pid, killed=False, error=str(e) or type(e).__name__)

    logger.info("Killed process: %s", target)
    if event_log is not None:
        event_log.info("Killed process: %s - ID %d", target, pid)
    return KillAttempt(target=target, pid=pid, killed=True)


def execute_kill_pass(
    targets: Optional[Iterable[str]],
    event_log: Optional[logging.Logger] = None,
) -> KillPassResult:
    """Run one kill pass over ``targets`` in list order.

    An empty or missing target list is not an error: it is logged at critical
    severity and the pass completes without touching any process.
    """
    result = KillPassResult()
    targets = list(targets or [])

    if not targets:
        logger.critical("No targets specified in configuration")
        if event_log is not None:
            event_log.critical("No targets specified in configuration")
        result.no_targets = True
        return result

    for target in targets:
        processes = find_processes(target)
        if not processes:
            logger.debug("No running process named %s", target)
            continue
        for proc in processes:
            result.attempts.append(terminate(proc, target, event_log))

    logger.debug(
        "Kill pass finished: %d killed, %d failed",
        len(result.killed),
        len(result.failed),
    )
    return result
