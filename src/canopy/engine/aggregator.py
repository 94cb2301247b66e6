"""Counting and rendering of finished result trees."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from canopy.core.formatting import format_millis, indent, pluralize
from canopy.engine.models import (
    CaseResult,
    Counts,
    Marker,
    Status,
    SuiteResult,
)

_GLYPHS = {
    Status.PASSED: "✓",
    Status.FAILED: "✗",
    Status.SKIPPED: "-",
}
_ERROR_GLYPH = "!"
_STATUS_VALUES = frozenset(s.value for s in Status)


def _is_serialized_case(value: Mapping[Any, Any]) -> bool:
    status = value.get("status")
    return Marker.TIME in value and isinstance(status, str) and status in _STATUS_VALUES


def count(entry: Any) -> Counts:
    """Sum passed/failed/skipped leaves of a result tree.

    Accepts the in-memory tree as well as its serialised (to_dict) form.
    Structural error strings count as failures; anything else that is not
    a result (durations, flags, top-level totals) counts as nothing.
    """
    if entry is Marker.SKIP:
        return Counts(skipped=1)
    if isinstance(entry, CaseResult):
        return Counts(
            passed=int(entry.status is Status.PASSED),
            failed=int(entry.status is Status.FAILED),
            skipped=int(entry.status is Status.SKIPPED),
        )
    if isinstance(entry, str):
        return Counts(failed=1)
    if isinstance(entry, SuiteResult):
        return sum((count(child) for child in entry.entries.values()), Counts())
    if isinstance(entry, Mapping):
        if _is_serialized_case(entry):
            status = entry["status"]
            return Counts(
                passed=int(status == Status.PASSED),
                failed=int(status == Status.FAILED),
                skipped=int(status == Status.SKIPPED),
            )
        return sum(
            (count(child) for key, child in entry.items() if not isinstance(key, Marker)),
            Counts(),
        )
    return Counts()


def format_report(entry: Any, depth: int = 0) -> str:
    """Render a result tree as sorted, depth-indented lines.

    Example::

        math
          ✓ adds (1 ms)
          ✗ divides (0 ms)
            division by zero
          - later
    """
    lines: list[str] = []
    if isinstance(entry, SuiteResult):
        _format_children(lines, entry.entries, depth)
    elif isinstance(entry, Mapping):
        _format_children(lines, entry, depth)
    elif entry is not None:
        _format_entry(lines, "<target>", entry, depth)
    return "\n".join(lines)


def _format_children(lines: list[str], entries: Mapping[Any, Any], depth: int) -> None:
    for name in sorted(key for key in entries if isinstance(key, str)):
        _format_entry(lines, name, entries[name], depth)


def _format_entry(lines: list[str], name: str, entry: Any, depth: int) -> None:
    pad = "  " * depth
    if isinstance(entry, CaseResult):
        line = f"{pad}{_GLYPHS[entry.status]} {name}"
        if entry.status is not Status.SKIPPED:
            line += f" ({format_millis(entry.duration_seconds)})"
        lines.append(line)
        if entry.reason:
            lines.append(indent(entry.reason, depth + 1))
    elif entry is Marker.SKIP:
        lines.append(f"{pad}{_GLYPHS[Status.SKIPPED]} {name}")
    elif isinstance(entry, str):
        lines.append(f"{pad}{_ERROR_GLYPH} {name}")
        lines.append(indent(entry, depth + 1))
    elif isinstance(entry, SuiteResult):
        lines.append(f"{pad}{name} ({format_millis(entry.duration_seconds)})")
        _format_children(lines, entry.entries, depth + 1)
    elif isinstance(entry, Mapping):
        lines.append(f"{pad}{name}")
        _format_children(lines, entry, depth + 1)


def format_summary(counts: Counts, duration_seconds: float) -> str:
    """One-line totals, e.g. "3 tests: 1 passed, 1 failed, 1 skipped in 12 ms"."""
    return (
        f"{pluralize(counts.total, 'test')}: {counts.passed} passed, "
        f"{counts.failed} failed, {counts.skipped} skipped in {format_millis(duration_seconds)}"
    )
