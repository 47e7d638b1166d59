"""User-facing console output for the CLI commands.

Service logging goes through ``logging``; these helpers are for the direct
replies of interactive commands (``status``, ``kill-now`` ...).
"""

from typing import Optional

from rich.console import Console
from rich.markup import escape as escape_rich_markup

_console: Optional[Console] = None


def get_console() -> Console:
    global _console
    if _console is None:
        _console = Console(highlight=False)
    return _console


def set_console(console: Optional[Console]) -> None:
    """Swap the output console (None restores the default on next use)."""
    global _console
    _console = console


def _emit(text: str, style: Optional[str]) -> None:
    get_console().print(escape_rich_markup(text), style=style)


def emit_info(text: str) -> None:
    _emit(text, None)


def emit_success(text: str) -> None:
    _emit(text, "green")


def emit_warning(text: str) -> None:
    _emit(text, "yellow")


def emit_error(text: str) -> None:
    _emit(text, "bold red")
