from combattracker.core.engine.rules import turns
from combattracker.core.engine.rules.validator import validate_combat_state
from combattracker.core.engine.state import CombatState, InitiativeEntry

from helpers import at


def _codes(state):
    return [e.code for e in validate_combat_state(state).errors]


def test_states_built_by_transitions_are_valid(active_state):
    state = active_state
    assert validate_combat_state(CombatState()).ok
    for step in range(7):
        state = turns.advance_turn(state)
        assert validate_combat_state(state).ok, step
    state = turns.pause(state, at(100))
    assert validate_combat_state(state).ok
    assert validate_combat_state(turns.end(state, at(200))).ok


def test_detects_out_of_range_pointer(active_state):
    assert _codes(active_state.model_copy(update={"current_turn": 3})) == ["TURN_OUT_OF_BOUNDS"]


def test_detects_negative_counters():
    codes = _codes(CombatState(is_active=True, current_round=-1, current_turn=-1))
    assert "NEGATIVE_ROUND" in codes
    assert "NEGATIVE_TURN" in codes
    assert "ACTIVE_WITHOUT_ROUND" in codes


def test_detects_inactive_with_position_and_pause():
    codes = _codes(CombatState(current_round=2, paused_at=at(1)))
    assert codes == ["INACTIVE_WITH_POSITION", "PAUSED_WHILE_INACTIVE"]


def test_detects_bad_timestamps(active_state):
    state = active_state.model_copy(update={"paused_at": at(-5)})
    assert _codes(state) == ["START_AFTER_PAUSE"]

    ended = CombatState(started_at=at(10), ended_at=at(5))
    assert _codes(ended) == ["START_AFTER_END"]


def test_detects_duplicate_participants():
    order = (InitiativeEntry(participant_id="A"), InitiativeEntry(participant_id="A"))
    assert _codes(CombatState(initiative_order=order)) == ["DUPLICATE_PARTICIPANT"]
