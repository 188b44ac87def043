from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, List, Optional, Tuple

from combattracker.core.clock import seconds_between, utc_now
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
from combattracker.core.engine.events import (
    ev_combat_ended,
    ev_combat_paused,
    ev_combat_resumed,
    ev_combat_started,
    ev_command_rejected,
    ev_initiative_set,
    ev_participant_acted,
    ev_participant_removed_from_order,
    ev_round_ended,
    ev_round_started,
    ev_turn_ended,
    ev_turn_retreated,
    ev_turn_started,
)
from combattracker.core.engine.rules import turns
from combattracker.core.engine.rules.validator import validate_command
from combattracker.core.engine.state import (
    CombatState,
    as_utc,
    current_entry,
    find_entry_index,
)

logger = logging.getLogger(__name__)


def _turn_started(state: CombatState, at: datetime) -> list[dict]:
    entry = current_entry(state)
    if entry is None:
        return []
    return [
        ev_turn_started(
            at=at,
            round_=state.current_round,
            turn=state.current_turn,
            participant_id=entry.participant_id,
        ).model_dump()
    ]


def apply_command(
    state: CombatState,
    cmd: Command,
    *,
    now: Optional[datetime] = None,
    clock: Callable[[], datetime] = utc_now,
) -> Tuple[CombatState, List[dict]]:
    """
    Returns (state, events_as_dicts).
    A rejected command yields a single CommandRejected event and the
    unchanged state object.
    """
    at = as_utc(now if now is not None else clock())

    vr = validate_command(state, cmd)
    if not vr.ok:
        e = vr.errors[0]
        logger.debug("command %s rejected: %s", cmd.type, e.code)
        rej = ev_command_rejected(
            at=at,
            round_=state.current_round,
            turn=state.current_turn,
            actor_id=getattr(cmd, "participant_id", None),
            command=cmd.model_dump(),
            code=e.code,
            message=e.message,
            meta=e.meta,
        ).model_dump()
        return state, [rej]

    events: List[dict] = []

    if isinstance(cmd, StartCombat):
        state = turns.start(state, at, cmd.order)
        events.append(
            ev_combat_started(
                at=at,
                round_=state.current_round,
                order=[
                    {
                        "participant_id": e.participant_id,
                        "initiative": e.initiative,
                        "tiebreak": e.tiebreak,
                    }
                    for e in state.initiative_order
                ],
            ).model_dump()
        )
        events.append(
            ev_round_started(at=at, round_=state.current_round, turn=0).model_dump()
        )
        events.extend(_turn_started(state, at))
        return state, events

    if isinstance(cmd, AdvanceTurn):
        prev = state
        outgoing = current_entry(prev)
        state = turns.advance_turn(prev, at)

        if outgoing is not None:
            events.append(
                ev_turn_ended(
                    at=at,
                    round_=prev.current_round,
                    turn=prev.current_turn,
                    participant_id=outgoing.participant_id,
                ).model_dump()
            )
        if state.current_round != prev.current_round:
            events.append(
                ev_round_ended(
                    at=at, round_=prev.current_round, turn=prev.current_turn
                ).model_dump()
            )
            events.append(
                ev_round_started(
                    at=at, round_=state.current_round, turn=state.current_turn
                ).model_dump()
            )
        events.extend(_turn_started(state, at))
        return state, events

    if isinstance(cmd, RetreatTurn):
        prev = state
        state = turns.retreat_turn(prev, at)
        entry = current_entry(state)
        events.append(
            ev_turn_retreated(
                at=at,
                round_=state.current_round,
                turn=state.current_turn,
                from_round=prev.current_round,
                from_turn=prev.current_turn,
                participant_id=entry.participant_id if entry else "",
            ).model_dump()
        )
        return state, events

    if isinstance(cmd, PauseCombat):
        state = turns.pause(state, at)
        events.append(
            ev_combat_paused(
                at=at, round_=state.current_round, turn=state.current_turn
            ).model_dump()
        )
        return state, events

    if isinstance(cmd, ResumeCombat):
        paused_at = state.paused_at
        state = turns.resume(state, at)
        events.append(
            ev_combat_resumed(
                at=at,
                round_=state.current_round,
                turn=state.current_turn,
                paused_seconds=seconds_between(paused_at, at) if paused_at else 0,
            ).model_dump()
        )
        return state, events

    if isinstance(cmd, EndCombat):
        prev = state
        state = turns.end(prev, at)
        events.append(
            ev_combat_ended(
                at=at,
                round_=prev.current_round,
                turn=prev.current_turn,
                total_rounds=prev.current_round,
                total_duration=state.total_duration,
            ).model_dump()
        )
        return state, events

    if isinstance(cmd, MarkActed):
        prev = state
        state = turns.mark_acted(prev, cmd.participant_id)
        if state is not prev:
            events.append(
                ev_participant_acted(
                    at=at,
                    round_=state.current_round,
                    turn=state.current_turn,
                    participant_id=cmd.participant_id,
                ).model_dump()
            )
        return state, events

    if isinstance(cmd, SetInitiative):
        state = turns.set_initiative(
            state, cmd.participant_id, cmd.initiative, cmd.tiebreak
        )
        entry = state.initiative_order[find_entry_index(state, cmd.participant_id)]
        events.append(
            ev_initiative_set(
                at=at,
                round_=state.current_round,
                turn=state.current_turn,
                participant_id=entry.participant_id,
                initiative=entry.initiative,
                tiebreak=entry.tiebreak,
                order=[e.participant_id for e in state.initiative_order],
            ).model_dump()
        )
        return state, events

    if isinstance(cmd, RemoveFromOrder):
        index = find_entry_index(state, cmd.participant_id)
        state = turns.remove_from_order(state, cmd.participant_id)
        events.append(
            ev_participant_removed_from_order(
                at=at,
                round_=state.current_round,
                turn=state.current_turn,
                participant_id=cmd.participant_id,
                index=index,
            ).model_dump()
        )
        return state, events

    return state, events
