from __future__ import annotations

import pytest

from combattracker.core.engine.rules import turns
from combattracker.core.engine.state import CombatState, InitiativeEntry, Participant

from helpers import T0


@pytest.fixture()
def participants():
    return [
        Participant(
            id="A", name="Fighter", is_player=True, hp_current=30, hp_max=30, ac=18, tiebreak=12
        ),
        Participant(id="B", name="Goblin", hp_current=7, hp_max=7, ac=15, tiebreak=14),
        Participant(
            id="C", name="Wizard", is_player=True, hp_current=18, hp_max=18, ac=12, tiebreak=16
        ),
    ]


@pytest.fixture()
def order():
    return (
        InitiativeEntry(participant_id="A", initiative=18, tiebreak=12),
        InitiativeEntry(participant_id="B", initiative=15, tiebreak=14),
        InitiativeEntry(participant_id="C", initiative=9, tiebreak=16),
    )


@pytest.fixture()
def active_state(order):
    # round 1, turn 0, started at T0
    return turns.start(CombatState(), T0, order)
