from __future__ import annotations

import logging
import math
from datetime import datetime, timedelta, timezone
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict

from combattracker.config import DEFAULT_SETTINGS, TrackerSettings
from combattracker.core.engine.state import CombatState, as_utc

logger = logging.getLogger(__name__)

AlertLevel = Literal["warning", "critical", "expired"]

Duration = Union[int, float, timedelta]


class ClockReading(BaseModel):
    model_config = ConfigDict(frozen=True)

    elapsed_seconds: int = 0
    formatted_duration: str = "0:00"

    has_round_timer: bool = False
    round_time_remaining: int = 0
    formatted_round_time: str = ""

    is_round_warning: bool = False
    is_round_critical: bool = False
    is_round_expired: bool = False

    is_paused: bool = False
    is_active: bool = False


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_clock(seconds: Union[int, float]) -> str:
    """125 -> "2:05". Zero, negative and non-finite input render as "0:00"."""
    if not math.isfinite(seconds) or seconds <= 0:
        return "0:00"
    total = int(math.floor(seconds))
    minutes, secs = divmod(total, 60)
    return f"{minutes}:{secs:02d}"


def effective_now(now: datetime, paused_at: Optional[datetime]) -> datetime:
    # the clock stops the instant a pause begins
    now, paused_at = as_utc(now), as_utc(paused_at)
    if paused_at is not None and paused_at < now:
        return paused_at
    return now


def seconds_between(start: datetime, end: datetime) -> int:
    delta = as_utc(end) - as_utc(start)
    return max(0, int(math.floor(delta.total_seconds())))


def elapsed_seconds(
    started_at: Optional[datetime],
    paused_at: Optional[datetime],
    now: datetime,
) -> int:
    if started_at is None:
        return 0
    return seconds_between(started_at, effective_now(now, paused_at))


def _limit_seconds(limit: Optional[Duration]) -> Optional[int]:
    if limit is None:
        return None
    if isinstance(limit, timedelta):
        value = limit.total_seconds()
    else:
        value = float(limit)
    if not math.isfinite(value) or value <= 0:
        return None
    return int(math.floor(value))


def read_clock(
    *,
    started_at: Optional[datetime],
    paused_at: Optional[datetime],
    is_active: bool,
    now: datetime,
    round_time_limit: Optional[Duration] = None,
    round_started_at: Optional[datetime] = None,
    settings: Optional[TrackerSettings] = None,
) -> ClockReading:
    """
    Pure projection of the clock inputs. Never raises and never touches
    combat state; safe to call on every display tick.

    Without an explicit `round_time_limit` the limit comes from `settings`
    (or DEFAULT_SETTINGS); pass 0 to read without a round timer.
    """
    tracker = settings or DEFAULT_SETTINGS
    cfg = tracker.clock
    if round_time_limit is None:
        round_time_limit = tracker.round_time_limit
    paused = paused_at is not None

    if is_active and started_at is None:
        logger.warning("active combat without started_at; elapsed time reads as 0")

    elapsed = elapsed_seconds(started_at, paused_at, now) if is_active else 0

    limit = _limit_seconds(round_time_limit)
    has_timer = limit is not None

    remaining = 0
    if has_timer and is_active and started_at is not None:
        round_start = round_started_at or started_at
        used = seconds_between(round_start, effective_now(now, paused_at))
        remaining = max(0, limit - used)

    return ClockReading(
        elapsed_seconds=elapsed,
        formatted_duration=format_clock(elapsed),
        has_round_timer=has_timer,
        round_time_remaining=remaining,
        formatted_round_time=format_clock(remaining) if has_timer else "",
        is_round_warning=has_timer
        and cfg.critical_seconds < remaining <= cfg.warning_seconds,
        is_round_critical=has_timer and 0 < remaining <= cfg.critical_seconds,
        is_round_expired=has_timer and remaining == 0,
        is_paused=paused,
        is_active=is_active,
    )


def read_state_clock(
    state: CombatState,
    *,
    now: datetime,
    round_time_limit: Optional[Duration] = None,
    settings: Optional[TrackerSettings] = None,
) -> ClockReading:
    return read_clock(
        started_at=state.started_at,
        paused_at=state.paused_at,
        is_active=state.is_active,
        now=now,
        round_time_limit=round_time_limit,
        round_started_at=state.round_started_at,
        settings=settings,
    )


def alert_level(reading: ClockReading) -> Optional[AlertLevel]:
    if reading.is_round_expired:
        return "expired"
    if reading.is_round_critical:
        return "critical"
    if reading.is_round_warning:
        return "warning"
    return None


def crossed_thresholds(
    previous: Optional[ClockReading], current: ClockReading
) -> List[AlertLevel]:
    """
    Alert levels entered between two consecutive readings. Each level fires
    once per entry; nothing fires while paused or outside an active combat.
    """
    if not current.is_active or current.is_paused or not current.has_round_timer:
        return []
    level = alert_level(current)
    if level is None:
        return []
    if previous is not None and alert_level(previous) == level:
        return []
    return [level]
