"""Tests for config/models.py module.

Covers:
- LogOutputConfig model
- LoggingConfig model
- EngineConfig model
- ReportConfig model
- CanopyConfig root model
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from canopy.config.models import (
    CanopyConfig,
    EngineConfig,
    LoggingConfig,
    LogOutputConfig,
    ReportConfig,
)


class TestLogOutputConfig:
    """Tests for LogOutputConfig model."""

    def test_defaults(self) -> None:
        """Default values."""
        config = LogOutputConfig()
        assert config.format == "console"
        assert config.destination == "stderr"
        assert config.level is None

    def test_absolute_path_destination(self) -> None:
        """Absolute path is valid destination."""
        config = LogOutputConfig(destination="/var/log/canopy.log")
        assert config.destination == "/var/log/canopy.log"

    def test_relative_path_fails(self) -> None:
        """Relative path is rejected."""
        with pytest.raises(ValidationError, match="absolute path"):
            LogOutputConfig(destination="logs/canopy.log")


class TestLoggingConfig:
    """Tests for LoggingConfig model."""

    def test_defaults(self) -> None:
        """Default values."""
        config = LoggingConfig()
        assert config.level == "WARNING"
        assert len(config.outputs) == 1

    def test_invalid_level(self) -> None:
        """Invalid level is rejected."""
        with pytest.raises(ValidationError):
            LoggingConfig(level="TRACE")  # type: ignore[arg-type]


class TestEngineConfig:
    """Tests for EngineConfig model."""

    def test_defaults(self) -> None:
        """Default values."""
        config = EngineConfig()
        assert config.concurrent is True
        assert config.max_concurrency is None
        assert config.watch_initial_delay_sec == 1.0
        assert config.watch_interval_sec == 5.0
        assert config.test_module_suffix == "_test"
        assert config.after_each_discards_result is False

    def test_valid_max_concurrency(self) -> None:
        """Positive caps are accepted."""
        assert EngineConfig(max_concurrency=1).max_concurrency == 1
        assert EngineConfig(max_concurrency=64).max_concurrency == 64

    @pytest.mark.parametrize("value", [0, -3])
    def test_invalid_max_concurrency(self, value: int) -> None:
        """Zero or negative caps are rejected."""
        with pytest.raises(ValidationError, match="max_concurrency must be >= 1"):
            EngineConfig(max_concurrency=value)

    @pytest.mark.parametrize("field", ["watch_initial_delay_sec", "watch_interval_sec"])
    def test_watch_delays_must_be_positive(self, field: str) -> None:
        """A zero watch delay would spin the watcher."""
        with pytest.raises(ValidationError, match="must be positive"):
            EngineConfig(**{field: 0})


class TestCanopyConfig:
    """Tests for CanopyConfig root model."""

    def test_defaults(self) -> None:
        """Default values for all nested configs."""
        config = CanopyConfig()
        assert config.logging.level == "WARNING"
        assert config.engine.concurrent is True
        assert config.report.silent is False

    def test_nested_override(self) -> None:
        """Can override nested config values."""
        config = CanopyConfig(
            engine=EngineConfig(concurrent=False),
            report=ReportConfig(silent=True),
        )
        assert config.engine.concurrent is False
        assert config.report.silent is True
