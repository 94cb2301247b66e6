"""Core module exports."""

from canopy.core.errors import (
    CanopyError,
    ConfigError,
    EngineError,
    ErrorCode,
    StructuralError,
)
from canopy.core.logging import (
    clear_run_id,
    configure_logging,
    get_logger,
    get_run_id,
    run_scope,
    set_run_id,
)
from canopy.core.progress import status

__all__ = [
    # Errors
    "CanopyError",
    "ConfigError",
    "EngineError",
    "ErrorCode",
    "StructuralError",
    # Logging
    "clear_run_id",
    "configure_logging",
    "get_logger",
    "get_run_id",
    "run_scope",
    "set_run_id",
    # Progress
    "status",
]
