from random import Random

from combattracker.core.engine.initiative import (
    build_initiative_order,
    initiative_modifier,
    reroll_initiative,
    roll_initiative,
    sort_initiative_order,
)
from combattracker.core.engine.state import InitiativeEntry


def test_sort_by_initiative_then_tiebreak():
    entries = [
        InitiativeEntry(participant_id="low", initiative=5, tiebreak=20),
        InitiativeEntry(participant_id="tie-slow", initiative=12, tiebreak=10),
        InitiativeEntry(participant_id="tie-fast", initiative=12, tiebreak=16),
        InitiativeEntry(participant_id="high", initiative=19, tiebreak=8),
    ]

    ordered = sort_initiative_order(entries)

    assert [e.participant_id for e in ordered] == ["high", "tie-fast", "tie-slow", "low"]


def test_full_tie_keeps_incoming_order():
    entries = [
        InitiativeEntry(participant_id="first", initiative=10, tiebreak=10),
        InitiativeEntry(participant_id="second", initiative=10, tiebreak=10),
    ]
    assert [e.participant_id for e in sort_initiative_order(entries)] == ["first", "second"]


def test_initiative_modifier():
    assert initiative_modifier(10) == 0
    assert initiative_modifier(14) == 2
    assert initiative_modifier(9) == -1
    assert initiative_modifier(1) == -5


def test_roll_is_seeded_and_never_below_one():
    expected = max(1, Random(1234).randint(1, 20) + 2)
    assert roll_initiative(Random(1234), 14) == expected

    rng = Random(7)
    assert all(roll_initiative(rng, 1) >= 1 for _ in range(200))


def test_build_order_uses_fixed_values_and_rolls_the_rest(participants):
    rng = Random(99)
    expected_c = max(1, Random(99).randint(1, 20) + initiative_modifier(16))

    order = build_initiative_order(participants, rng=rng, initiatives={"A": 25, "B": 0})

    by_id = {e.participant_id: e for e in order}
    assert by_id["A"].initiative == 25
    assert by_id["B"].initiative == 0
    assert by_id["C"].initiative == expected_c
    assert by_id["C"].tiebreak == 16
    assert order[0].participant_id == "A"
    assert order[-1].participant_id == "B"


def test_build_order_without_rng_defaults_to_zero(participants):
    order = build_initiative_order(participants)

    assert all(e.initiative == 0 for e in order)
    # all tied at 0: highest tiebreak first
    assert [e.participant_id for e in order] == ["C", "B", "A"]


def test_reroll_single_participant(order):
    rerolled = reroll_initiative(order, Random(3), participant_id="C")

    by_id = {e.participant_id: e for e in rerolled}
    assert by_id["A"] == order[0]
    assert by_id["B"] == order[1]
    assert by_id["C"].initiative == max(1, Random(3).randint(1, 20) + 3)
    assert list(rerolled) == list(sort_initiative_order(rerolled))


def test_reroll_all_keeps_every_participant(order):
    rerolled = reroll_initiative(order, Random(11))

    assert sorted(e.participant_id for e in rerolled) == ["A", "B", "C"]
    assert list(rerolled) == list(sort_initiative_order(rerolled))
