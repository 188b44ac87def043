from __future__ import annotations

from random import Random
from typing import Iterable, Mapping, Optional, Sequence, Tuple

from combattracker.core.engine.state import InitiativeEntry, Participant


def sort_initiative_order(
    entries: Iterable[InitiativeEntry],
) -> Tuple[InitiativeEntry, ...]:
    """
    Initiative descending, then tiebreak descending.
    sorted() is stable, so full ties keep their incoming order.
    """
    return tuple(sorted(entries, key=lambda e: (-e.initiative, -e.tiebreak)))


def initiative_modifier(score: int) -> int:
    return (score - 10) // 2


def roll_initiative(rng: Random, tiebreak: int) -> int:
    # d20 + modifier, never below 1
    return max(1, rng.randint(1, 20) + initiative_modifier(tiebreak))


def build_initiative_order(
    participants: Sequence[Participant],
    rng: Optional[Random] = None,
    initiatives: Optional[Mapping[str, int]] = None,
) -> Tuple[InitiativeEntry, ...]:
    """
    One entry per participant. Values in `initiatives` are used as-is,
    everyone else rolls with `rng` (or gets 0 when no rng is given).
    """
    fixed = {str(k): int(v) for k, v in (initiatives or {}).items()}
    entries = []
    for p in participants:
        pid = str(p.id)
        if pid in fixed:
            value = fixed[pid]
        elif rng is not None:
            value = roll_initiative(rng, p.tiebreak)
        else:
            value = 0
        entries.append(
            InitiativeEntry(participant_id=pid, initiative=value, tiebreak=p.tiebreak)
        )
    return sort_initiative_order(entries)


def reroll_initiative(
    entries: Iterable[InitiativeEntry],
    rng: Random,
    participant_id: Optional[str] = None,
) -> Tuple[InitiativeEntry, ...]:
    out = []
    for e in entries:
        if participant_id is not None and e.participant_id != str(participant_id):
            out.append(e)
            continue
        out.append(
            e.model_copy(update={"initiative": roll_initiative(rng, e.tiebreak)})
        )
    return sort_initiative_order(out)
