"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (CANOPY__SECTION__KEY)
3. Project YAML (canopy.yaml)
4. Global YAML (~/.config/canopy/config.yaml)
5. Built-in defaults (this file)

Environment Variable Format:
    CANOPY__<SECTION>__<KEY>=<VALUE>

Examples:
    CANOPY__LOGGING__LEVEL=DEBUG
    CANOPY__ENGINE__CONCURRENT=false
    CANOPY__ENGINE__MAX_CONCURRENCY=8
    CANOPY__REPORT__SILENT=true
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration.

    Env vars: Not directly configurable via env (use YAML for multi-output).
    """

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        CANOPY__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="WARNING",
        description="Root log level. INFO adds per-suite events, DEBUG adds per-case events.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class EngineConfig(BaseModel):
    """Execution engine configuration.

    Env vars:
        CANOPY__ENGINE__CONCURRENT: Default scheduling mode for suites without _async
        CANOPY__ENGINE__MAX_CONCURRENCY: Cap on concurrently running units per group
        CANOPY__ENGINE__WATCH_INITIAL_DELAY_SEC: First "still waiting" report
        CANOPY__ENGINE__WATCH_INTERVAL_SEC: Interval between later reports
        CANOPY__ENGINE__TEST_MODULE_SUFFIX: Suffix naming test modules in host trees
        CANOPY__ENGINE__AFTER_EACH_DISCARDS_RESULT: Legacy afterEach behaviour
    """

    concurrent: bool = Field(
        default=True,
        description="Run cases and sibling suites as concurrent tasks. "
        "A suite's own _async flag overrides this.",
    )
    max_concurrency: int | None = Field(
        default=None,
        description="Max units running at once inside one task group. None means unbounded.",
    )
    watch_initial_delay_sec: float = Field(
        default=1.0,
        description="Delay before the first report of still-outstanding tasks.",
    )
    watch_interval_sec: float = Field(
        default=5.0,
        description="Interval between later reports of still-outstanding tasks.",
    )
    test_module_suffix: str = Field(
        default="_test",
        description="Host tree nodes whose name ends with this are loaded as suites.",
    )
    after_each_discards_result: bool = Field(
        default=False,
        description="When afterEach fails, drop the case's own result and keep only "
        "the hook failure. Off by default: both are recorded.",
    )

    @field_validator("max_concurrency")
    @classmethod
    def validate_max_concurrency(cls, v: int | None) -> int | None:
        if v is not None and v < 1:
            raise ValueError(f"max_concurrency must be >= 1, got {v}")
        return v

    @field_validator("watch_initial_delay_sec", "watch_interval_sec")
    @classmethod
    def validate_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"Watch delays must be positive, got {v}")
        return v


class ReportConfig(BaseModel):
    """Report rendering configuration.

    Env vars:
        CANOPY__REPORT__SILENT: Skip console rendering of results
    """

    silent: bool = Field(
        default=False,
        description="Do not print the report; callers read counts from the returned report.",
    )


class CanopyConfig(BaseModel):
    """Root configuration for Canopy.

    All settings can be configured via:
    1. Environment variables: CANOPY__SECTION__KEY
    2. YAML config files (project or global)
    3. Direct kwargs to load_config()
    """

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    engine: EngineConfig = Field(default_factory=EngineConfig)
    report: ReportConfig = Field(default_factory=ReportConfig)
