"""User-facing console output.

Design principles:
- Reports and summaries go to the Rich console on stderr
- structlog stays the channel for diagnostics, never for the report itself
- Graceful degradation in non-TTY (CI, pipes): Rich drops styling on its own

Usage::

    from canopy.core.progress import status

    status("3 passed", style="success")  # ✓ 3 passed
    status("1 failed", style="warning")  # ! 1 failed
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console

if TYPE_CHECKING:
    from structlog.stdlib import BoundLogger

# Console for output
_console = Console(stderr=True)

# Style prefixes
_STYLES = {
    "success": "[green]✓[/green] ",
    "error": "[red]✗[/red] ",
    "warning": "[yellow]![/yellow] ",
    "info": "  ",
    "none": "",
}


def _get_logger() -> BoundLogger:
    """Get logger lazily to respect runtime config."""
    from canopy.core.logging import get_logger

    return get_logger("progress")


def get_console() -> Console:
    """Get the shared Rich console instance."""
    return _console


def set_console(console: Console) -> Console:
    """Swap the shared console (tests record output this way). Returns the old one."""
    global _console
    previous = _console
    _console = console
    return previous


def status(message: str, *, style: str = "info", indent: int = 0) -> None:
    """Print a styled status message to stderr."""
    prefix = _STYLES.get(style, "")
    padding = " " * indent
    _console.print(f"{padding}{prefix}{message}", highlight=False)

    # Log at DEBUG for observability (lazy to respect runtime config)
    _get_logger().debug("status", message=message, style=style)


def print_block(text: str) -> None:
    """Print pre-formatted text verbatim (no markup, no highlighting)."""
    _console.print(text, markup=False, highlight=False)
