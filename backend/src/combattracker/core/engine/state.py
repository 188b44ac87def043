from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, field_validator

CombatPhase = Literal["inactive", "active", "paused", "ended"]


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Naive timestamps are read as UTC; aware ones are converted to UTC."""
    if value is None:
        return None
    if value.tzinfo is None or value.utcoffset() is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(frozen=True)
class Participant:
    id: str
    name: str
    is_player: bool = False
    hp_current: int = 0
    hp_max: int = 0
    temp_hp: int = 0
    ac: int = 10

    # order matters for display
    conditions: Tuple[str, ...] = ()

    # dexterity-like score used to break initiative ties
    tiebreak: int = 10

    is_visible: bool = True
    notes: str = ""

    def __post_init__(self) -> None:
        # keep the record hashable even when built from a list
        object.__setattr__(self, "id", str(self.id))
        object.__setattr__(self, "conditions", tuple(self.conditions))


class InitiativeEntry(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    participant_id: str
    initiative: int = 0
    tiebreak: int = 10
    has_acted: bool = False


class CombatState(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    is_active: bool = False
    current_round: int = 0  # 0 = combat never started
    current_turn: int = 0

    started_at: Optional[datetime] = None
    paused_at: Optional[datetime] = None  # set = paused
    round_started_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None
    total_duration: int = 0  # seconds, filled by end()

    initiative_order: Tuple[InitiativeEntry, ...] = ()

    @field_validator("started_at", "paused_at", "round_started_at", "ended_at")
    @classmethod
    def _utc_timestamps(cls, v: Optional[datetime]) -> Optional[datetime]:
        return as_utc(v)


def can_retreat(state: CombatState) -> bool:
    return not (state.current_round == 1 and state.current_turn == 0)


def is_paused(state: CombatState) -> bool:
    return state.paused_at is not None


def current_entry(state: CombatState) -> Optional[InitiativeEntry]:
    if not state.is_active:
        return None
    if 0 <= state.current_turn < len(state.initiative_order):
        return state.initiative_order[state.current_turn]
    return None


def next_entry(state: CombatState) -> Optional[InitiativeEntry]:
    if not state.is_active or not state.initiative_order:
        return None
    idx = (state.current_turn + 1) % len(state.initiative_order)
    return state.initiative_order[idx]


def find_entry_index(state: CombatState, participant_id: str) -> int:
    for i, entry in enumerate(state.initiative_order):
        if entry.participant_id == str(participant_id):
            return i
    return -1


def combat_phase(state: CombatState) -> CombatPhase:
    if state.is_active:
        return "paused" if state.paused_at is not None else "active"
    if state.ended_at is not None:
        return "ended"
    return "inactive"
