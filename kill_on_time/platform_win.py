"""Windows platform support for the kill-on-time daemon."""

import ctypes
import signal
from typing import List

PROCESS_TERMINATE = 0x0001
PROCESS_QUERY_LIMITED_INFORMATION = 0x1000


def is_process_running(pid: int) -> bool:
    """Check if a process with the given PID is running."""
    try:
        kernel32 = ctypes.windll.kernel32
        handle = kernel32.OpenProcess(PROCESS_QUERY_LIMITED_INFORMATION, False, pid)
        if handle:
            kernel32.CloseHandle(handle)
            return True
        return False
    except OSError:
        return False


def terminate_process(pid: int) -> bool:
    """Terminate the daemon with this PID.

    Windows has no SIGTERM to deliver to a detached process, so this is a hard
    stop with exit status 0 (the service's normal-shutdown status).
    """
    try:
        kernel32 = ctypes.windll.kernel32
        handle = kernel32.OpenProcess(PROCESS_TERMINATE, False, pid)
        if handle:
            kernel32.TerminateProcess(handle, 0)
            kernel32.CloseHandle(handle)
            return True
        return False
    except OSError:
        return False


def shutdown_signals() -> List[signal.Signals]:
    """Signals the host uses to request a clean stop."""
    return [signal.SIGTERM, signal.SIGINT, signal.SIGBREAK]
