"""Canopy error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Suite structure
- 6xxx: Engine
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002
    CONFIG_FILE_NOT_FOUND = 2004

    # Suite structure (3xxx)
    SUITE_HOOK_NOT_CALLABLE = 3001
    SUITE_CASE_NOT_CALLABLE = 3002
    SUITE_INVALID_FLAG = 3003
    SUITE_MODULE_LOAD_FAILED = 3004

    # Engine (6xxx)
    ENGINE_WAITER_ALREADY_SET = 6001
    ENGINE_UNBALANCED_DONE = 6002


@dataclass(frozen=True, slots=True)
class CanopyError(Exception):
    """Base error with structured context."""

    code: ErrorCode
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'CONFIG_PARSE_ERROR')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(CanopyError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )

    @classmethod
    def file_not_found(cls, path: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_FILE_NOT_FOUND,
            message=f"Config file not found: {path}",
            details={"path": path},
        )


class StructuralError(CanopyError):
    """Malformed suite shape.

    Never raised out of the engine: the message is recorded as a failed
    leaf in the result tree instead.
    """

    @classmethod
    def hook_not_callable(cls, suite: str, hook: str, value: Any) -> "StructuralError":
        return cls(
            code=ErrorCode.SUITE_HOOK_NOT_CALLABLE,
            message=f"{suite}: '{hook}' must be callable, got {type(value).__name__}",
            details={"suite": suite, "hook": hook},
        )

    @classmethod
    def case_not_callable(cls, suite: str, case: str, value: Any) -> "StructuralError":
        return cls(
            code=ErrorCode.SUITE_CASE_NOT_CALLABLE,
            message=f"{suite}: test '{case}' must be callable, got {type(value).__name__}",
            details={"suite": suite, "case": case},
        )

    @classmethod
    def invalid_flag(cls, suite: str, flag: str, value: Any) -> "StructuralError":
        return cls(
            code=ErrorCode.SUITE_INVALID_FLAG,
            message=f"{suite}: '{flag}' must be a bool or None, got {type(value).__name__}",
            details={"suite": suite, "flag": flag},
        )

    @classmethod
    def module_load_failed(cls, module: str, reason: str) -> "StructuralError":
        return cls(
            code=ErrorCode.SUITE_MODULE_LOAD_FAILED,
            message=f"Failed to load test module {module}: {reason}",
            details={"module": module, "reason": reason},
        )


class EngineError(CanopyError):
    """Misuse of the engine's concurrency primitives."""

    @classmethod
    def waiter_already_set(cls, group: str) -> "EngineError":
        return cls(
            code=ErrorCode.ENGINE_WAITER_ALREADY_SET,
            message=f"Task group '{group}' already has a waiter",
            details={"group": group},
        )

    @classmethod
    def unbalanced_done(cls, group: str, label: str) -> "EngineError":
        return cls(
            code=ErrorCode.ENGINE_UNBALANCED_DONE,
            message=f"Task group '{group}' got done('{label}') with nothing outstanding",
            details={"group": group, "label": label},
        )
