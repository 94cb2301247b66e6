"""Config module exports."""

from canopy.config.loader import load_config
from canopy.config.models import (
    CanopyConfig,
    EngineConfig,
    LoggingConfig,
    ReportConfig,
)

__all__ = [
    "load_config",
    "CanopyConfig",
    "EngineConfig",
    "LoggingConfig",
    "ReportConfig",
]
