"""Shared Rich console for Anitrack output.

Command handlers and ``core.output.log`` print through the same Console, and
tests swap it for one that writes to a buffer.
"""

from rich.console import Console

_console: Console | None = None


def get_console() -> Console:
    """Return the shared Console, creating it on first use."""
    global _console
    if _console is None:
        # Ids and dates in tables should not be recoloured as numbers
        _console = Console(highlight=False)
    return _console


def set_console(console: Console | None) -> None:
    """Replace the shared console (None resets to a fresh default)."""
    global _console
    _console = console


def print_error(message: str) -> None:
    """Print an error line that bypasses the log (used before logging is set up).

    Args:
        message: Text to print; not interpreted as Rich markup
    """
    get_console().print(f"❌ {message}", style="red", markup=False)
