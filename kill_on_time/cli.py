"""Command-line interface.

Handles running the service in the foreground, starting/stopping it in the
background, showing its status and running a kill pass immediately.
"""

import argparse
import sys
from datetime import datetime, timedelta
from typing import List, Optional

from kill_on_time import __version__
from kill_on_time.config import load_config
from kill_on_time.errors import ConfigurationError
from kill_on_time.messaging import emit_error, emit_info, emit_success, emit_warning
from kill_on_time.settings import get_settings


def handle_run() -> int:
    """Run the service in the foreground. Returns the process exit status."""
    from kill_on_time.daemon import start_daemon

    return start_daemon(get_settings())


def handle_start() -> bool:
    """Start the daemon in background."""
    from kill_on_time.daemon import get_daemon_pid, start_daemon_background

    settings = get_settings()
    pid = get_daemon_pid(settings)
    if pid:
        emit_warning(f"Kill-on-time daemon already running (PID {pid})")
        return True

    emit_info("Starting kill-on-time daemon...")

    if start_daemon_background(settings):
        pid = get_daemon_pid(settings)
        emit_success(f"Kill-on-time daemon started (PID {pid})")
        return True
    else:
        emit_error("Failed to start kill-on-time daemon")
        return False


def handle_stop() -> bool:
    """Stop the daemon."""
    from kill_on_time.daemon import get_daemon_pid, stop_daemon

    settings = get_settings()
    pid = get_daemon_pid(settings)
    if not pid:
        emit_info("Kill-on-time daemon is not running")
        return True

    emit_info(f"Stopping kill-on-time daemon (PID {pid})...")

    if stop_daemon(settings):
        emit_success("Kill-on-time daemon stopped")
        return True
    else:
        emit_error("Failed to stop kill-on-time daemon")
        return False


def handle_status() -> bool:
    """Show daemon status and the configured schedule."""
    from kill_on_time.daemon import get_daemon_pid
    from kill_on_time.schedule import delay_until, parse_launch_time

    settings = get_settings()
    pid = get_daemon_pid(settings)
    if pid:
        emit_success(f"{settings.service_name}: RUNNING (PID {pid})")
    else:
        emit_warning(f"{settings.service_name}: STOPPED")

    try:
        config = load_config(settings.config_file)
        delay = delay_until(datetime.now(), parse_launch_time(config.launch_time))
    except ConfigurationError as e:
        emit_error(f"Configuration error: {e}")
        return False

    emit_info(f"Config file: {settings.config_file}")
    emit_info(f"Launch time: {config.launch_time}")
    if config.kill_targets:
        emit_info(f"Kill targets: {', '.join(config.kill_targets)}")
    else:
        emit_warning("Kill targets: none configured")
    emit_info(f"Next kill pass: {_format_next(delay)}")
    return True


def handle_next() -> bool:
    """Show when the next kill pass will happen."""
    from kill_on_time.schedule import delay_until, parse_launch_time

    settings = get_settings()
    try:
        config = load_config(settings.config_file)
        delay = delay_until(datetime.now(), parse_launch_time(config.launch_time))
    except ConfigurationError as e:
        emit_error(f"Configuration error: {e}")
        return False

    emit_info(f"Next kill pass: {_format_next(delay)}")
    return True


def handle_kill_now() -> bool:
    """Run one kill pass immediately."""
    from kill_on_time.executor import execute_kill_pass
    from kill_on_time.log import create_event_log

    settings = get_settings()
    try:
        config = load_config(settings.config_file)
    except ConfigurationError as e:
        emit_error(f"Configuration error: {e}")
        return False

    try:
        event_log = create_event_log(settings)
    except OSError as e:
        emit_error(f"Cannot open event log: {e}")
        return False

    result = execute_kill_pass(config.kill_targets, event_log)

    if result.no_targets:
        emit_warning("No targets specified in configuration")
        return True

    if not result.attempts:
        emit_info("No matching processes running")
        return True

    for attempt in result.attempts:
        if attempt.killed:
            emit_success(f"Killed process: {attempt.target} - ID {attempt.pid}")
        else:
            emit_warning(f"Could not kill {attempt.target} (PID {attempt.pid}): {attempt.error}")

    emit_info(f"{len(result.killed)} killed, {len(result.failed)} failed")
    return True


def _format_next(delay: timedelta) -> str:
    when = datetime.now() + delay
    hours, remainder = divmod(int(delay.total_seconds()), 3600)
    minutes = remainder // 60
    return f"{when.strftime('%Y-%m-%d %H:%M')} (in {hours}h {minutes:02d}m)"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kill-on-time",
        description="Terminate configured processes once a day at a fixed time",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="command")
    sub.add_parser("run", help="Run the service in the foreground (default)")
    sub.add_parser("start", help="Start the service in the background")
    sub.add_parser("stop", help="Stop the background service")
    sub.add_parser("status", help="Show service status and schedule")
    sub.add_parser("next", help="Show when the next kill pass happens")
    sub.add_parser("kill-now", help="Run one kill pass immediately")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    command = args.command or "run"

    if command == "run":
        return handle_run()

    handlers = {
        "start": handle_start,
        "stop": handle_stop,
        "status": handle_status,
        "next": handle_next,
        "kill-now": handle_kill_now,
    }
    return 0 if handlers[command]() else 1


def main_entry() -> None:
    sys.exit(main())
