"""Platform abstraction for daemon management.

Provides a unified interface for PID checks, termination and the shutdown
signals the service listens to, across Windows, Linux, and macOS.
"""

import sys

if sys.platform == "win32":
    from kill_on_time.platform_win import (
        is_process_running,
        shutdown_signals,
        terminate_process,
    )
else:
    from kill_on_time.platform_unix import (
        is_process_running,
        shutdown_signals,
        terminate_process,
    )

__all__ = ["is_process_running", "shutdown_signals", "terminate_process"]
