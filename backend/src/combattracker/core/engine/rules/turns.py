"""
Turn/round controller.

Every function takes a CombatState and returns a new one. A call that
cannot apply (combat inactive, empty order, nothing to undo...) returns the
very same object, so `new is old` tells the caller nothing changed.
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Iterable, Optional

from combattracker.core.clock import elapsed_seconds
from combattracker.core.engine.initiative import sort_initiative_order
from combattracker.core.engine.state import (
    CombatState,
    InitiativeEntry,
    as_utc,
    can_retreat,
    find_entry_index,
)

logger = logging.getLogger(__name__)


def _reset_acted(order: tuple[InitiativeEntry, ...]) -> tuple[InitiativeEntry, ...]:
    return tuple(
        e.model_copy(update={"has_acted": False}) if e.has_acted else e for e in order
    )


def start(
    state: CombatState, now: datetime, order: Iterable[InitiativeEntry]
) -> CombatState:
    if state.is_active:
        logger.debug("start ignored: combat already active")
        return state

    return state.model_copy(
        update={
            "is_active": True,
            "current_round": 1,
            "current_turn": 0,
            "started_at": as_utc(now),
            "round_started_at": as_utc(now),
            "paused_at": None,
            "ended_at": None,
            "total_duration": 0,
            "initiative_order": tuple(order),
        }
    )


def advance_turn(state: CombatState, now: Optional[datetime] = None) -> CombatState:
    n = len(state.initiative_order)
    if not state.is_active or n == 0:
        logger.debug("advance_turn ignored: active=%s order=%d", state.is_active, n)
        return state

    if state.current_turn + 1 < n:
        return state.model_copy(update={"current_turn": state.current_turn + 1})

    # wrap: new round, nobody has acted yet
    update = {
        "current_turn": 0,
        "current_round": state.current_round + 1,
        "initiative_order": _reset_acted(state.initiative_order),
    }
    if now is not None:
        update["round_started_at"] = as_utc(now)
    return state.model_copy(update=update)


def retreat_turn(state: CombatState, now: Optional[datetime] = None) -> CombatState:
    n = len(state.initiative_order)
    if not state.is_active or n == 0:
        logger.debug("retreat_turn ignored: active=%s order=%d", state.is_active, n)
        return state
    if not can_retreat(state):
        logger.debug("retreat_turn ignored: already at start of combat")
        return state

    if state.current_turn > 0:
        return state.model_copy(update={"current_turn": state.current_turn - 1})

    update = {"current_round": state.current_round - 1, "current_turn": n - 1}
    if now is not None:
        update["round_started_at"] = as_utc(now)
    return state.model_copy(update=update)


def pause(state: CombatState, now: datetime) -> CombatState:
    if not state.is_active or state.paused_at is not None:
        logger.debug("pause ignored: active=%s paused=%s", state.is_active, state.paused_at)
        return state
    return state.model_copy(update={"paused_at": as_utc(now)})


def resume(state: CombatState, now: datetime) -> CombatState:
    """
    Clears the pause and shifts the start marks forward by the paused
    interval, so elapsed time never includes it.
    """
    if state.paused_at is None:
        logger.debug("resume ignored: not paused")
        return state

    paused_for = as_utc(now) - as_utc(state.paused_at)
    if paused_for.total_seconds() < 0:
        paused_for = timedelta(0)

    update: dict = {"paused_at": None}
    if state.started_at is not None:
        update["started_at"] = state.started_at + paused_for
    if state.round_started_at is not None:
        update["round_started_at"] = state.round_started_at + paused_for
    return state.model_copy(update=update)


def end(state: CombatState, now: Optional[datetime] = None) -> CombatState:
    if not state.is_active:
        logger.debug("end ignored: combat not active")
        return state

    update: dict = {
        "is_active": False,
        "current_round": 0,
        "current_turn": 0,
        "paused_at": None,
        "round_started_at": None,
    }
    # initiative_order stays for export/history
    if now is not None:
        update["ended_at"] = as_utc(now)
        update["total_duration"] = elapsed_seconds(
            state.started_at, state.paused_at, now
        )
    return state.model_copy(update=update)


def mark_acted(state: CombatState, participant_id: str) -> CombatState:
    idx = find_entry_index(state, participant_id)
    if idx < 0:
        logger.debug("mark_acted ignored: %s not in initiative order", participant_id)
        return state

    entry = state.initiative_order[idx]
    if entry.has_acted:
        return state

    order = list(state.initiative_order)
    order[idx] = entry.model_copy(update={"has_acted": True})
    return state.model_copy(update={"initiative_order": tuple(order)})


def set_initiative(
    state: CombatState,
    participant_id: str,
    initiative: int,
    tiebreak: Optional[int] = None,
) -> CombatState:
    """
    Re-sorts the order after changing one entry; the turn pointer follows
    whoever's turn it was.
    """
    idx = find_entry_index(state, participant_id)
    if idx < 0:
        logger.debug("set_initiative ignored: %s not in initiative order", participant_id)
        return state

    turn_owner: Optional[str] = None
    if state.is_active and 0 <= state.current_turn < len(state.initiative_order):
        turn_owner = state.initiative_order[state.current_turn].participant_id

    entry = state.initiative_order[idx]
    changes: dict = {"initiative": int(initiative)}
    if tiebreak is not None:
        changes["tiebreak"] = int(tiebreak)

    order = list(state.initiative_order)
    order[idx] = entry.model_copy(update=changes)
    new_order = sort_initiative_order(order)

    update: dict = {"initiative_order": new_order}
    if turn_owner is not None:
        for i, e in enumerate(new_order):
            if e.participant_id == turn_owner:
                update["current_turn"] = i
                break
    return state.model_copy(update=update)


def remove_from_order(state: CombatState, participant_id: str) -> CombatState:
    idx = find_entry_index(state, participant_id)
    if idx < 0:
        logger.debug("remove_from_order ignored: %s not in initiative order", participant_id)
        return state

    order = state.initiative_order[:idx] + state.initiative_order[idx + 1 :]

    turn = state.current_turn
    if turn >= idx and turn > 0:
        turn -= 1
    if turn >= len(order):
        turn = 0

    return state.model_copy(update={"initiative_order": order, "current_turn": turn})
