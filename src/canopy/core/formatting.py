"""Summary formatting utilities for consistent terminal output.

Design principles:
- Every summary fits on one line
- Grammatically correct (1 test vs 2 tests)
- Durations shown in whole milliseconds
"""

from __future__ import annotations


def pluralize(count: int, singular: str, plural: str | None = None) -> str:
    """Return grammatically correct singular/plural form.

    Args:
        count: The number of items
        singular: Singular form (e.g., "test")
        plural: Plural form (default: singular + "s")

    Returns:
        Formatted string like "1 test" or "3 tests"
    """
    if plural is None:
        plural = singular + "s"
    word = singular if count == 1 else plural
    return f"{count} {word}"


def format_millis(seconds: float) -> str:
    """Format a duration in seconds as rounded milliseconds.

    Examples:
        0.0124 -> "12 ms"
        0.0005 -> "1 ms"
        1.5 -> "1500 ms"
    """
    if seconds < 0:
        raise ValueError("Duration must be non-negative")
    return f"{round(seconds * 1000)} ms"


def indent(text: str, depth: int, width: int = 2) -> str:
    """Indent every line of text by depth * width spaces."""
    padding = " " * (depth * width)
    return "\n".join(f"{padding}{line}" if line else line for line in text.splitlines())
