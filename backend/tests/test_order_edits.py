from combattracker.core.engine.rules import turns
from combattracker.core.engine.state import CombatState, current_entry


def _ids(state):
    return [e.participant_id for e in state.initiative_order]


def test_mark_acted_sets_flag_on_matching_entry(active_state):
    state = turns.mark_acted(active_state, "B")

    flags = {e.participant_id: e.has_acted for e in state.initiative_order}
    assert flags == {"A": False, "B": True, "C": False}


def test_mark_acted_unknown_or_repeated_is_noop(active_state):
    assert turns.mark_acted(active_state, "nobody") is active_state

    once = turns.mark_acted(active_state, "A")
    assert turns.mark_acted(once, "A") is once


def test_set_initiative_resorts_and_keeps_turn_owner(active_state):
    state = turns.advance_turn(active_state)  # B's turn
    assert current_entry(state).participant_id == "B"

    state = turns.set_initiative(state, "C", 20)

    assert _ids(state) == ["C", "A", "B"]
    assert current_entry(state).participant_id == "B"
    assert state.current_turn == 2


def test_set_initiative_tie_uses_tiebreak(active_state):
    state = turns.set_initiative(active_state, "C", 18, tiebreak=11)
    assert _ids(state) == ["A", "C", "B"]

    state = turns.set_initiative(state, "C", 18, tiebreak=13)
    assert _ids(state) == ["C", "A", "B"]


def test_set_initiative_inactive_keeps_turn_zero(order):
    state = CombatState(initiative_order=order)

    state = turns.set_initiative(state, "C", 30)

    assert _ids(state) == ["C", "A", "B"]
    assert state.current_turn == 0


def test_set_initiative_unknown_is_noop(active_state):
    assert turns.set_initiative(active_state, "Z", 10) is active_state


def test_remove_before_current_turn_shifts_pointer(active_state):
    state = turns.advance_turn(turns.advance_turn(active_state))  # C's turn

    state = turns.remove_from_order(state, "A")

    assert _ids(state) == ["B", "C"]
    assert state.current_turn == 1
    assert current_entry(state).participant_id == "C"


def test_remove_after_current_turn_keeps_pointer(active_state):
    state = turns.advance_turn(active_state)  # B's turn

    state = turns.remove_from_order(state, "C")

    assert _ids(state) == ["A", "B"]
    assert state.current_turn == 1


def test_remove_keeps_pointer_in_range(active_state):
    state = turns.advance_turn(turns.advance_turn(active_state))

    state = turns.remove_from_order(state, "C")

    assert 0 <= state.current_turn < len(state.initiative_order)


def test_remove_last_entry_leaves_empty_order(active_state):
    state = active_state
    for pid in ("A", "B", "C"):
        state = turns.remove_from_order(state, pid)

    assert state.initiative_order == ()
    assert state.current_turn == 0
    assert turns.advance_turn(state) is state


def test_remove_unknown_is_noop(active_state):
    assert turns.remove_from_order(active_state, "Z") is active_state
