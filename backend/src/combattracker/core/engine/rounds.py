"""
Round bookkeeping layered on the turn controller.

Timed effects count down in rounds, triggers fire on a given round, and the
session summary reports rounds and (pause-excluded) time. Nothing here
touches CombatState; collections go in and new tuples come out.
"""
from __future__ import annotations

import math
import uuid
from datetime import datetime
from typing import Dict, Iterable, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from combattracker.core.clock import elapsed_seconds
from combattracker.core.engine.state import CombatState

RoundPhase = Literal["ongoing", "early", "middle", "late", "overtime"]


class Effect(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(default_factory=lambda: f"effect-{uuid.uuid4().hex[:12]}")
    name: str
    participant_id: str
    duration: int = Field(gt=0)  # rounds
    start_round: int = Field(ge=1)
    description: str = ""

    @field_validator("participant_id", mode="before")
    @classmethod
    def _id_as_str(cls, v):
        return str(v)


class Trigger(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(default_factory=lambda: f"trigger-{uuid.uuid4().hex[:12]}")
    name: str
    trigger_round: int = Field(ge=1)
    description: str = ""
    is_active: bool = True
    triggered_round: Optional[int] = None


class SessionSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_rounds: int = 0
    total_duration: int = 0  # seconds

    total_actions: Optional[int] = None
    damage_dealt: Optional[int] = None
    healing_applied: Optional[int] = None


# ---------- effects ----------

def new_effect(
    state: CombatState,
    *,
    name: str,
    participant_id: str,
    duration: int,
    description: str = "",
) -> Effect:
    """Effect starting on the current round (round 1 before combat starts)."""
    return Effect(
        name=name,
        participant_id=participant_id,
        duration=duration,
        start_round=max(1, state.current_round),
        description=description,
    )


def effect_remaining_rounds(effect: Effect, current_round: int) -> int:
    if current_round < effect.start_round:
        return effect.duration
    return max(0, effect.duration - (current_round - effect.start_round))


def is_effect_expiring(effect: Effect, current_round: int) -> bool:
    return effect_remaining_rounds(effect, current_round) == 1


def expiring_effects(effects: Iterable[Effect], current_round: int) -> Tuple[Effect, ...]:
    return tuple(e for e in effects if is_effect_expiring(e, current_round))


def expired_effects(effects: Iterable[Effect], current_round: int) -> Tuple[Effect, ...]:
    return tuple(e for e in effects if effect_remaining_rounds(e, current_round) <= 0)


def prune_expired_effects(
    effects: Iterable[Effect], current_round: int
) -> Tuple[Tuple[Effect, ...], List[str]]:
    """
    Split effects at a round change: (still running, ids that ran out).
    Call with the new round number after advance_turn wraps.
    """
    kept: List[Effect] = []
    gone: List[str] = []
    for e in effects:
        if effect_remaining_rounds(e, current_round) > 0:
            kept.append(e)
        else:
            gone.append(e.id)
    return tuple(kept), gone


def remove_effect(effects: Iterable[Effect], effect_id: str) -> Tuple[Effect, ...]:
    return tuple(e for e in effects if e.id != effect_id)


def group_effects_by_participant(effects: Iterable[Effect]) -> Dict[str, List[Effect]]:
    groups: Dict[str, List[Effect]] = {}
    for e in effects:
        groups.setdefault(e.participant_id, []).append(e)
    return groups


# ---------- triggers ----------

def sort_triggers_by_round(triggers: Iterable[Trigger]) -> Tuple[Trigger, ...]:
    return tuple(sorted(triggers, key=lambda t: t.trigger_round))


def due_triggers(triggers: Iterable[Trigger], current_round: int) -> Tuple[Trigger, ...]:
    return tuple(t for t in triggers if t.is_active and t.trigger_round == current_round)


def upcoming_triggers(triggers: Iterable[Trigger], current_round: int) -> Tuple[Trigger, ...]:
    return sort_triggers_by_round(
        t for t in triggers if t.is_active and t.trigger_round > current_round
    )


def activate_trigger(
    triggers: Iterable[Trigger], trigger_id: str, current_round: int
) -> Tuple[Trigger, ...]:
    """Fire a trigger once: it goes inactive and remembers the round it fired on."""
    out = []
    for t in triggers:
        if t.id == trigger_id and t.is_active:
            t = t.model_copy(update={"is_active": False, "triggered_round": current_round})
        out.append(t)
    return tuple(out)


def format_time_until_trigger(
    trigger: Trigger, current_round: int, average_round_duration: int
) -> str:
    if trigger.trigger_round <= current_round:
        return "Now"
    rounds_until = trigger.trigger_round - current_round
    if average_round_duration <= 0:
        return f"{rounds_until} rounds"
    return f"{rounds_until} rounds (~{format_duration(rounds_until * average_round_duration)})"


# ---------- pacing ----------

def is_overtime(current_round: int, max_rounds: Optional[int] = None) -> bool:
    return max_rounds is not None and current_round > max_rounds


def round_phase(current_round: int, max_rounds: Optional[int] = None) -> RoundPhase:
    if not max_rounds or max_rounds <= 0:
        return "ongoing"
    progress = current_round / max_rounds
    if progress <= 0.33:
        return "early"
    if progress <= 0.66:
        return "middle"
    if progress <= 1.0:
        return "late"
    return "overtime"


def average_round_duration(state: CombatState, now: datetime) -> int:
    """Whole seconds per round so far; pauses are not counted."""
    if not state.is_active or state.current_round <= 0:
        return 0
    return elapsed_seconds(state.started_at, state.paused_at, now) // state.current_round


def estimated_remaining_seconds(
    current_round: int, max_rounds: Optional[int], average_round_duration: int
) -> Optional[int]:
    if max_rounds is None:
        return None
    return max(0, max_rounds - current_round) * max(0, average_round_duration)


# ---------- summary ----------

def format_duration(total_seconds: float) -> str:
    """65 -> "1m 5s", 3600 -> "1h". Negative or non-finite input reads "0s"."""
    if not math.isfinite(total_seconds) or total_seconds < 0:
        return "0s"

    seconds = int(math.ceil(total_seconds))
    if seconds < 60:
        return f"{seconds}s"

    minutes, secs = divmod(seconds, 60)
    if minutes < 60:
        return f"{minutes}m {secs}s" if secs else f"{minutes}m"

    hours, minutes = divmod(minutes, 60)
    parts = [f"{hours}h"]
    if minutes:
        parts.append(f"{minutes}m")
    if secs:
        parts.append(f"{secs}s")
    return " ".join(parts)


def session_summary(
    state: CombatState,
    now: Optional[datetime] = None,
    *,
    total_rounds: Optional[int] = None,
    total_actions: Optional[int] = None,
    damage_dealt: Optional[int] = None,
    healing_applied: Optional[int] = None,
) -> SessionSummary:
    """
    Summary of a running or ended combat. An ended state no longer carries
    its round count, so pass `total_rounds` (from CombatEnded) for those.
    """
    if state.is_active and now is not None:
        duration = elapsed_seconds(state.started_at, state.paused_at, now)
    else:
        duration = state.total_duration

    return SessionSummary(
        total_rounds=state.current_round if total_rounds is None else total_rounds,
        total_duration=duration,
        total_actions=total_actions,
        damage_dealt=damage_dealt,
        healing_applied=healing_applied,
    )


def format_round_summary(summary: SessionSummary) -> str:
    parts = [
        f"{summary.total_rounds} rounds",
        f"{format_duration(summary.total_duration)} total",
    ]
    if summary.total_rounds > 0:
        avg = summary.total_duration / summary.total_rounds
        parts.append(f"{format_duration(avg)}/round avg")
    if summary.total_actions is not None:
        parts.append(f"{summary.total_actions} actions")
    if summary.damage_dealt is not None:
        parts.append(f"{summary.damage_dealt} damage")
    if summary.healing_applied is not None:
        parts.append(f"{summary.healing_applied} healing")
    return " • ".join(parts)
