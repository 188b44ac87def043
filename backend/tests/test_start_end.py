from combattracker.core.engine.rules import turns
from combattracker.core.engine.state import (
    CombatState,
    combat_phase,
    current_entry,
    next_entry,
)

from helpers import T0, at


def test_new_state_is_inactive():
    state = CombatState()

    assert state.is_active is False
    assert (state.current_round, state.current_turn) == (0, 0)
    assert combat_phase(state) == "inactive"
    assert current_entry(state) is None


def test_start_installs_order_and_resets_position(order):
    state = turns.start(CombatState(), T0, list(order))

    assert state.is_active
    assert (state.current_round, state.current_turn) == (1, 0)
    assert state.started_at == T0
    assert state.round_started_at == T0
    assert state.paused_at is None
    assert state.initiative_order == order
    assert current_entry(state).participant_id == "A"
    assert next_entry(state).participant_id == "B"


def test_start_is_noop_when_already_active(active_state, order):
    assert turns.start(active_state, at(10), order[:1]) is active_state


def test_end_keeps_initiative_order_for_export(active_state):
    state = active_state.model_copy(update={"current_round": 5, "current_turn": 2})

    ended = turns.end(state)

    assert ended.is_active is False
    assert ended.current_round == 0
    assert ended.current_turn == 0
    assert ended.paused_at is None
    assert ended.initiative_order == state.initiative_order


def test_end_records_duration_without_pause_time(active_state):
    state = turns.pause(active_state, at(100))

    ended = turns.end(state, at(400))

    assert ended.ended_at == at(400)
    assert ended.total_duration == 100
    assert combat_phase(ended) == "ended"


def test_end_is_noop_when_inactive():
    state = CombatState()
    assert turns.end(state, at(1)) is state


def test_restart_after_end(active_state, order):
    ended = turns.end(active_state, at(60))
    again = turns.start(ended, at(120), order)

    assert again.is_active
    assert again.ended_at is None
    assert again.total_duration == 0
    assert again.started_at == at(120)
