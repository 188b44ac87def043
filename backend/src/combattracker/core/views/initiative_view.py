"""
Initiative view: the initiative order joined with the roster, for display.

Entries whose participant is gone from the roster are dropped from the view
but stay in the order, so `position` (index in the unfiltered order) is what
turn highlighting must compare against, never the row index.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from functools import lru_cache
from typing import Iterable, Sequence, Tuple

from combattracker.core.engine.state import CombatState, InitiativeEntry, Participant
from combattracker.core.views.roster import build_roster_index


@dataclass(frozen=True)
class InitiativeRow:
    entry: InitiativeEntry
    participant: Participant
    position: int

    is_active: bool = False
    is_next: bool = False


@lru_cache(maxsize=64)
def _join(
    participants: Tuple[Participant, ...], order: Tuple[InitiativeEntry, ...]
) -> Tuple[InitiativeRow, ...]:
    index = build_roster_index(participants)
    rows = []
    for position, entry in enumerate(order):
        participant = index.get(str(entry.participant_id))
        if participant is None:
            continue
        rows.append(InitiativeRow(entry=entry, participant=participant, position=position))
    return tuple(rows)


def initiative_view(
    participants: Iterable[Participant], order: Iterable[InitiativeEntry]
) -> Tuple[InitiativeRow, ...]:
    """
    O(n) join in turn order. Cached on the (hashable) inputs, so repeated
    calls with equal roster and order return the same tuple.
    """
    return _join(tuple(participants), tuple(order))


def annotate_rows(
    rows: Sequence[InitiativeRow], current_turn: int, order_length: int
) -> Tuple[InitiativeRow, ...]:
    if order_length <= 0:
        return tuple(rows)
    next_turn = (current_turn + 1) % order_length
    return tuple(
        replace(
            row,
            is_active=row.position == current_turn,
            is_next=row.position == next_turn,
        )
        for row in rows
    )


def initiative_display(
    state: CombatState, participants: Iterable[Participant]
) -> Tuple[InitiativeRow, ...]:
    rows = initiative_view(participants, state.initiative_order)
    if not state.is_active:
        return rows
    return annotate_rows(rows, state.current_turn, len(state.initiative_order))
