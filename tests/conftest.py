"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages.
"""

import sys
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pytest
import structlog
from structlog.testing import capture_logs

# Insert local src directory at the beginning of sys.path
# This ensures that the local canopy package is used, not any installed one
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

from canopy.config.models import CanopyConfig, EngineConfig, ReportConfig  # noqa: E402


@pytest.fixture
def engine_config() -> EngineConfig:
    """Engine config with a fast watcher so stalled tests show up quickly in logs."""
    return EngineConfig(watch_initial_delay_sec=0.05, watch_interval_sec=0.05)


@pytest.fixture
def config(engine_config: EngineConfig) -> CanopyConfig:
    """Full config that never touches env vars or YAML files, with rendering off."""
    return CanopyConfig(engine=engine_config, report=ReportConfig(silent=True))


@pytest.fixture
def captured_logs() -> Iterator[list[dict[str, Any]]]:
    """Capture structlog events regardless of level filters set by earlier tests."""
    structlog.reset_defaults()
    with capture_logs() as logs:
        yield logs
    structlog.reset_defaults()
