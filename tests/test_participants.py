import pytest

from expenses import CustomExpense, EqualExpense
from helpers import custom, equal, people
from participants import (
    Participant,
    add_participant,
    get_participant,
    remove_participant,
    rename_participant
)


def test_add_participant_generates_sequential_ids():
    participants, alice = add_participant([], "  Alice ")
    participants, bob = add_participant(participants, "Bob")

    assert alice == Participant("P001", "Alice")
    assert bob.participant_id == "P002"
    assert [p.name for p in participants] == ["Alice", "Bob"]


def test_add_participant_does_not_modify_input():
    original = people("P001")

    add_participant(original, "Bob")

    assert len(original) == 1


@pytest.mark.parametrize("name", ["", "   ", None])
def test_add_participant_rejects_empty_names(name):
    with pytest.raises(ValueError):
        add_participant([], name)


def test_rename_keeps_id():
    participants = rename_participant([Participant("P001", "Alice")], "P001", "Alicia")

    assert participants == [Participant("P001", "Alicia")]


def test_rename_unknown_participant():
    with pytest.raises(LookupError):
        rename_participant(people("A"), "Z", "Zed")


def test_get_participant():
    participants = people("A", "B")

    assert get_participant(participants, "B") is participants[1]
    assert get_participant(participants, "Z") is None


def test_remove_cascades_through_expenses():
    participants = people("A", "B", "C")
    expenses = [
        equal("E1", 300, "B", ["A", "B", "C"]),
        custom("E2", 100, "C", ["B", "C"], {"B": 60, "C": 40}),
    ]

    remaining, cascaded = remove_participant(participants, expenses, "B")

    assert [p.participant_id for p in remaining] == ["A", "C"]

    first, second = cascaded
    assert isinstance(first, EqualExpense)
    assert first.payer_id == "A"
    assert first.beneficiaries == ["A", "C"]

    assert isinstance(second, CustomExpense)
    assert second.payer_id == "C"
    assert second.beneficiaries == ["C"]
    assert second.shares == {"C": 40}


def test_remove_leaves_inputs_untouched():
    participants = people("A", "B")
    expenses = [custom("E1", 100, "B", ["A", "B"], {"A": 50, "B": 50})]

    remove_participant(participants, expenses, "B")

    assert [p.participant_id for p in participants] == ["A", "B"]
    assert expenses[0].payer_id == "B"
    assert expenses[0].shares == {"A": 50, "B": 50}


def test_removing_last_participant_clears_payer():
    _, cascaded = remove_participant(people("A"), [equal("E1", 100, "A", ["A"])], "A")

    assert cascaded[0].payer_id is None
    assert cascaded[0].beneficiaries == []


def test_remove_unknown_participant():
    with pytest.raises(LookupError):
        remove_participant(people("A"), [], "Z")
