"""Unix/macOS platform support for the kill-on-time daemon."""

import os
import signal
from typing import List


def is_process_running(pid: int) -> bool:
    """Check if a process with the given PID is running."""
    try:
        os.kill(pid, 0)  # Doesn't kill, just checks if process exists
        return True
    except ProcessLookupError:
        return False
    except PermissionError:
        # Exists, but owned by someone else
        return True


def terminate_process(pid: int) -> bool:
    """Ask the daemon with this PID to shut down (SIGTERM)."""
    try:
        os.kill(pid, signal.SIGTERM)
        return True
    except (ProcessLookupError, PermissionError):
        return False


def shutdown_signals() -> List[signal.Signals]:
    """Signals the host uses to request a clean stop."""
    return [signal.SIGTERM, signal.SIGINT]
