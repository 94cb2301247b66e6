"""Engine core models.

Canonical data structures for suite discovery, execution and results.
Every runner in the engine produces output conforming to these models.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum, StrEnum
from typing import Any, NamedTuple

from canopy.core.errors import StructuralError

# =============================================================================
# Markers - out-of-band values that never collide with test names
# =============================================================================


class Marker(Enum):
    """Process-wide sentinel values.

    - SKIP: returned by a case to skip itself
    - TIME: duration key in the serialised result form
    - FOCUS: focus key in the serialised result form
    """

    FOCUS = "focus"
    SKIP = "skip"
    TIME = "time"

    def __repr__(self) -> str:
        return f"<{self.name}>"


SKIP = Marker.SKIP

# =============================================================================
# Suite configuration keys
# =============================================================================

ASYNC_KEY = "_async"
FOCUS_KEY = "_focus"
SKIP_KEY = "_skip"
BEFORE_EACH = "beforeEach"
AFTER_EACH = "afterEach"
AFTER = "after"

HOOK_KEYS: tuple[str, ...] = (BEFORE_EACH, AFTER_EACH, AFTER)
RESERVED_KEYS: frozenset[str] = frozenset({ASYNC_KEY, FOCUS_KEY, SKIP_KEY, *HOOK_KEYS})


class NodeKind(StrEnum):
    """Shape of a node in the input tree, decided once at discovery."""

    CONTAINER = "container"
    SUITE = "suite"
    CASE = "case"
    EMPTY = "empty"


Hook = Callable[..., Any]


@dataclass(frozen=True, slots=True)
class SuiteConfig:
    """Reserved keys of a suite mapping, validated."""

    run_async: bool | None = None
    focus: bool = False
    skip: bool = False
    before_each: Hook | None = None
    after_each: Hook | None = None
    after: Hook | None = None

    @classmethod
    def from_mapping(cls, suite: Mapping[str, Any], name: str) -> SuiteConfig:
        """Read the reserved keys of a suite.

        Raises:
            StructuralError: A hook is not callable or a flag is not a bool.
        """
        hooks: dict[str, Hook | None] = {}
        for key in HOOK_KEYS:
            value = suite.get(key)
            if value is not None and not callable(value):
                raise StructuralError.hook_not_callable(name, key, value)
            hooks[key] = value

        for key in (ASYNC_KEY, FOCUS_KEY, SKIP_KEY):
            value = suite.get(key)
            if value is not None and not isinstance(value, bool):
                raise StructuralError.invalid_flag(name, key, value)

        return cls(
            run_async=suite.get(ASYNC_KEY),
            focus=bool(suite.get(FOCUS_KEY)),
            skip=bool(suite.get(SKIP_KEY)),
            before_each=hooks[BEFORE_EACH],
            after_each=hooks[AFTER_EACH],
            after=hooks[AFTER],
        )


# =============================================================================
# Results
# =============================================================================


class Status(StrEnum):
    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True, slots=True)
class CaseResult:
    """Outcome of one case, or of one hook invocation."""

    status: Status
    duration_seconds: float = 0.0
    reason: str | None = None

    @classmethod
    def passed(cls, duration_seconds: float) -> CaseResult:
        return cls(Status.PASSED, duration_seconds)

    @classmethod
    def failed(cls, reason: str, duration_seconds: float = 0.0) -> CaseResult:
        return cls(Status.FAILED, duration_seconds, reason)

    @classmethod
    def skipped(cls) -> CaseResult:
        return cls(Status.SKIPPED)

    def to_dict(self) -> dict[str, Any] | Marker:
        if self.status is Status.SKIPPED:
            return SKIP
        data: dict[str, Any] = {"status": self.status.value, Marker.TIME: self.duration_seconds}
        if self.reason is not None:
            data["reason"] = self.reason
        return data


@dataclass(slots=True)
class SuiteResult:
    """Results of one suite.

    entries holds case results keyed by case name, hook failures keyed by
    the hook name, structural errors as strings, and the results of child
    nodes when the suite node also has children.
    """

    entries: dict[str, ResultEntry] = field(default_factory=dict)
    duration_seconds: float = 0.0
    focused: bool = False

    def to_dict(self) -> dict[Any, Any]:
        data: dict[Any, Any] = {name: serialize(entry) for name, entry in self.entries.items()}
        data[Marker.TIME] = self.duration_seconds
        if self.focused:
            data[Marker.FOCUS] = True
        return data


ResultTree = dict[str, "ResultEntry"]
ResultEntry = CaseResult | SuiteResult | ResultTree | str


def serialize(entry: ResultEntry | Marker) -> Any:
    """Convert a result entry to plain dicts, strings and markers."""
    if isinstance(entry, CaseResult | SuiteResult):
        return entry.to_dict()
    if isinstance(entry, Mapping):
        return {name: serialize(child) for name, child in entry.items()}
    return entry


# =============================================================================
# Counts and run report
# =============================================================================


class Counts(NamedTuple):
    passed: int = 0
    failed: int = 0
    skipped: int = 0

    def __add__(self, other: object) -> Counts:  # type: ignore[override]
        if not isinstance(other, Counts):
            return NotImplemented
        return Counts(
            self.passed + other.passed,
            self.failed + other.failed,
            self.skipped + other.skipped,
        )

    @property
    def total(self) -> int:
        return self.passed + self.failed + self.skipped


@dataclass
class RunReport:
    """Result of a complete run: the (focus-pruned) tree plus its totals."""

    tree: ResultEntry | Marker | None
    counts: Counts = field(default_factory=Counts)
    duration_seconds: float = 0.0
    focus_requested: bool = False
    run_id: str | None = None

    @property
    def passed(self) -> int:
        return self.counts.passed

    @property
    def failed(self) -> int:
        return self.counts.failed

    @property
    def skipped(self) -> int:
        return self.counts.skipped

    @property
    def ok(self) -> bool:
        return self.counts.failed == 0

    def to_dict(self) -> dict[Any, Any]:
        """Serialised tree with PASSED/FAILED/SKIPPED merged in at the top level."""
        body = serialize(self.tree) if self.tree is not None else {}
        data: dict[Any, Any] = dict(body) if isinstance(body, dict) else {"": body}
        data["PASSED"] = self.counts.passed
        data["FAILED"] = self.counts.failed
        data["SKIPPED"] = self.counts.skipped
        return data
