from __future__ import annotations

from datetime import datetime, timedelta
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from sampleseries.config.resolution import (
    DEFAULT_SCHEDULER_CAP,
    derive_worker_bound,
)
from sampleseries.domain.sample import VALUE_UNIT
from sampleseries.sources.series import DEFAULT_VALIDATION_CHUNK_SIZE
from sampleseries.utils.load import load_yaml
from sampleseries.utils.time import parse_datetime, parse_timecode
from sampleseries.utils.workload import (
    DEFAULT_LOAD_WORK_UNITS,
    DEFAULT_VALIDATE_WORK_UNITS,
)

VALID_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")
VALID_VISUAL_PROVIDERS = ("AUTO", "TQDM", "RICH", "OFF")

DEFAULT_SAMPLES_PER_CYCLE = 222222
DEFAULT_START_TIME = datetime(1990, 1, 1, 1, 1, 1, 1000)
DEFAULT_INTERVAL = timedelta(minutes=1)


class RunConfig(BaseModel):
    """Settings for a full run: cycle layout, sample series and diagnostics."""

    cycles: int | Literal["auto"] = Field(
        default="auto",
        description="Number of cycles; 'auto' derives it from half the logical cores (1..4).",
    )
    samples_per_cycle: int = Field(default=DEFAULT_SAMPLES_PER_CYCLE, ge=0)
    start_time: datetime = Field(
        default=DEFAULT_START_TIME,
        description="Timestamp of the first (oldest) sample.",
    )
    interval: timedelta = Field(
        default=DEFAULT_INTERVAL,
        description="Spacing between samples; accepts timecodes such as '1m' or '90s'.",
    )
    load_work_units: int = Field(
        default=DEFAULT_LOAD_WORK_UNITS,
        ge=0,
        description="Synthetic CPU iterations spent loading each sample.",
    )
    validate_work_units: int = Field(
        default=DEFAULT_VALIDATE_WORK_UNITS,
        ge=0,
        description="Synthetic CPU iterations spent validating each sample.",
    )
    max_parallel_cycles: int = Field(
        default=DEFAULT_SCHEDULER_CAP,
        ge=1,
        description="Scheduler cap on simultaneously executing cycles.",
    )
    validation_workers: Optional[int] = Field(
        default=None,
        ge=1,
        description="Threads per cycle for sample validation (null uses the executor default).",
    )
    validation_chunk_size: int = Field(default=DEFAULT_VALIDATION_CHUNK_SIZE, ge=1)
    log_level: str = Field(default="INFO")
    log_dir: Path = Field(default=Path("localDebug"))
    log_file: str = Field(default="application_log.txt")
    fallback_log_file: Path = Field(
        default=Path("obj") / "Debug" / "application_log_fallback.txt",
        description="Written when the primary log location is not writable.",
    )
    visuals: str = Field(
        default="AUTO",
        description="Progress renderer: AUTO (rich on a terminal), TQDM, RICH, or OFF.",
    )

    @field_validator("cycles", mode="before")
    @classmethod
    def _normalize_cycles(cls, value):
        if value is None:
            return "auto"
        if isinstance(value, str):
            text = value.strip().lower()
            if text == "auto":
                return "auto"
            if not text.isdigit():
                raise ValueError(f"cycles must be a positive integer or 'auto', got {value!r}")
            value = int(text)
        if isinstance(value, int) and value < 1:
            raise ValueError("cycles must be >= 1")
        return value

    @field_validator("start_time", mode="before")
    @classmethod
    def _parse_start(cls, value):
        return parse_datetime(value)

    @field_validator("interval", mode="before")
    @classmethod
    def _parse_interval(cls, value):
        delta = parse_timecode(value)
        if delta <= timedelta(0):
            raise ValueError("interval must be positive")
        if delta < VALUE_UNIT:
            # Values are whole milliseconds; finer steps would repeat values.
            raise ValueError(f"interval must be at least {VALUE_UNIT}")
        return delta

    @field_validator("log_level", mode="before")
    @classmethod
    def _validate_log_level(cls, value):
        if value is None:
            return "INFO"
        name = str(value).upper()
        if name not in VALID_LOG_LEVELS:
            raise ValueError(
                f"log_level must be one of {', '.join(VALID_LOG_LEVELS)}, got {value!r}"
            )
        return name

    @field_validator("visuals", mode="before")
    @classmethod
    def _validate_visuals(cls, value):
        if value is None:
            return "AUTO"
        if isinstance(value, bool):
            return "OFF" if value is False else "AUTO"
        name = str(value).upper()
        if name not in VALID_VISUAL_PROVIDERS:
            raise ValueError(
                f"visuals must be one of {', '.join(VALID_VISUAL_PROVIDERS)}, got {value!r}"
            )
        return name

    def resolve_cycles(self, cpu_count: Optional[int] = None) -> int:
        if self.cycles == "auto":
            return derive_worker_bound(cpu_count)
        return self.cycles


def load_run_config(path: Path) -> RunConfig:
    doc = load_yaml(path)
    return RunConfig.model_validate(doc)
