"""
Tracker configuration.

Defaults live on the models; `TrackerSettings.from_env()` applies
environment overrides on top of them.
"""
from __future__ import annotations

import os
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ClockSettings(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    warning_seconds: int = Field(default=15, ge=0)
    critical_seconds: int = Field(default=5, ge=0)

    @model_validator(mode="after")
    def _critical_below_warning(self) -> "ClockSettings":
        if self.critical_seconds > self.warning_seconds:
            raise ValueError("critical_seconds must not exceed warning_seconds")
        return self


class TrackerSettings(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    clock: ClockSettings = Field(default_factory=ClockSettings)

    # per-round countdown; None = no round timer
    round_time_limit: Optional[int] = Field(default=None, gt=0)

    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "TrackerSettings":
        env = os.environ if environ is None else environ

        clock: dict = {}
        if warning := env.get("COMBAT_WARNING_SECONDS"):
            clock["warning_seconds"] = warning
        if critical := env.get("COMBAT_CRITICAL_SECONDS"):
            clock["critical_seconds"] = critical

        data: dict = {"clock": clock}
        if limit := env.get("COMBAT_ROUND_TIME_LIMIT"):
            data["round_time_limit"] = limit
        if level := env.get("COMBAT_LOG_LEVEL"):
            data["log_level"] = level.upper()

        return cls.model_validate(data)


DEFAULT_SETTINGS = TrackerSettings()
