from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

from combattracker.core.engine.commands import (
    AdvanceTurn,
    Command,
    EndCombat,
    MarkActed,
    PauseCombat,
    RemoveFromOrder,
    ResumeCombat,
    RetreatTurn,
    SetInitiative,
    StartCombat,
)
from combattracker.core.engine.state import CombatState, can_retreat, find_entry_index


@dataclass
class ValidationError:
    code: str
    message: str
    meta: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ValidationResult:
    ok: bool
    errors: List[ValidationError] = field(default_factory=list)


def _err(code: str, message: str, **meta: Any) -> ValidationResult:
    return ValidationResult(
        ok=False, errors=[ValidationError(code=code, message=message, meta=meta)]
    )


def _require_running(state: CombatState) -> ValidationResult | None:
    if not state.is_active:
        return _err("COMBAT_NOT_ACTIVE", "Combat is not active")
    if not state.initiative_order:
        return _err("EMPTY_INITIATIVE_ORDER", "Initiative order is empty")
    return None


def _require_known(state: CombatState, participant_id: str) -> ValidationResult | None:
    if find_entry_index(state, participant_id) < 0:
        return _err(
            "UNKNOWN_PARTICIPANT",
            "Participant is not in the initiative order",
            participant_id=participant_id,
        )
    return None


def validate_command(state: CombatState, cmd: Command) -> ValidationResult:
    if isinstance(cmd, StartCombat):
        if state.is_active:
            return _err("COMBAT_ALREADY_ACTIVE", "Combat already started")
        if len(cmd.order) == 0:
            return _err(
                "EMPTY_INITIATIVE_ORDER", "Cannot start combat with zero participants"
            )
        ids = [e.participant_id for e in cmd.order]
        dupes = sorted({pid for pid in ids if ids.count(pid) > 1})
        if dupes:
            return _err(
                "DUPLICATE_PARTICIPANT",
                "Participant appears more than once in the order",
                participant_ids=dupes,
            )
        return ValidationResult(ok=True)

    if isinstance(cmd, AdvanceTurn):
        return _require_running(state) or ValidationResult(ok=True)

    if isinstance(cmd, RetreatTurn):
        bad = _require_running(state)
        if bad:
            return bad
        if not can_retreat(state):
            return _err(
                "AT_COMBAT_START",
                "Already at the first turn of the first round",
                round=state.current_round,
                turn=state.current_turn,
            )
        return ValidationResult(ok=True)

    if isinstance(cmd, PauseCombat):
        if not state.is_active:
            return _err("COMBAT_NOT_ACTIVE", "Combat is not active")
        if state.paused_at is not None:
            return _err("ALREADY_PAUSED", "Combat is already paused")
        return ValidationResult(ok=True)

    if isinstance(cmd, ResumeCombat):
        if state.paused_at is None:
            return _err("NOT_PAUSED", "Combat is not paused")
        return ValidationResult(ok=True)

    if isinstance(cmd, EndCombat):
        if not state.is_active:
            return _err("COMBAT_NOT_ACTIVE", "Combat is not active")
        return ValidationResult(ok=True)

    if isinstance(cmd, MarkActed):
        return _require_known(state, cmd.participant_id) or ValidationResult(ok=True)

    if isinstance(cmd, SetInitiative):
        return _require_known(state, cmd.participant_id) or ValidationResult(ok=True)

    if isinstance(cmd, RemoveFromOrder):
        return _require_known(state, cmd.participant_id) or ValidationResult(ok=True)

    return _err("UNKNOWN_COMMAND", "Unsupported command", type=getattr(cmd, "type", None))


def validate_combat_state(state: CombatState) -> ValidationResult:
    """
    Integrity check for a state loaded from outside (storage, another
    editor). Collects every problem instead of stopping at the first.
    """
    errors: List[ValidationError] = []

    def add(code: str, message: str, **meta: Any) -> None:
        errors.append(ValidationError(code=code, message=message, meta=meta))

    n = len(state.initiative_order)

    if state.current_round < 0:
        add("NEGATIVE_ROUND", "Current round cannot be negative", round=state.current_round)
    if state.current_turn < 0:
        add("NEGATIVE_TURN", "Current turn cannot be negative", turn=state.current_turn)
    if n > 0 and state.current_turn >= n:
        add(
            "TURN_OUT_OF_BOUNDS",
            "Current turn index is out of bounds",
            turn=state.current_turn,
            order_length=n,
        )

    if state.is_active:
        if state.current_round < 1:
            add("ACTIVE_WITHOUT_ROUND", "Active combat must be in round 1 or later")
    else:
        if state.current_round != 0 or state.current_turn != 0:
            add(
                "INACTIVE_WITH_POSITION",
                "Inactive combat must have round and turn at 0",
                round=state.current_round,
                turn=state.current_turn,
            )
        if state.paused_at is not None:
            add("PAUSED_WHILE_INACTIVE", "Only active combat can be paused")

    if state.started_at and state.paused_at and state.started_at > state.paused_at:
        add("START_AFTER_PAUSE", "Start time cannot be after pause time")
    if state.started_at and state.ended_at and state.started_at > state.ended_at:
        add("START_AFTER_END", "Start time cannot be after end time")

    ids = [e.participant_id for e in state.initiative_order]
    if len(ids) != len(set(ids)):
        add("DUPLICATE_PARTICIPANT", "Duplicate participants found in initiative order")

    return ValidationResult(ok=not errors, errors=errors)
