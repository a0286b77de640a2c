import pytest

from expenses import (
    CustomExpense,
    EqualExpense,
    add_expense,
    build_expense,
    convert_to_base,
    delete_expense,
    edit_expense,
    expense_from_dict
)
from helpers import people


def fields(**overrides):
    values = {
        "title": "Dinner",
        "amount": 30000,
        "payer_id": "A",
        "beneficiaries": ["A", "B", "C"],
    }
    values.update(overrides)
    return values


def test_build_equal_expense():
    expense = build_expense(people("A", "B", "C"), expense_id="E001", **fields(title="  Dinner "))

    assert isinstance(expense, EqualExpense)
    assert expense.split_mode == "equal"
    assert expense.title == "Dinner"
    assert expense.amount == 30000
    assert not hasattr(expense, "shares")


def test_build_custom_expense_keeps_only_beneficiary_shares():
    expense = build_expense(
        people("A", "B", "C"),
        expense_id="E001",
        **fields(
            amount=12000,
            beneficiaries=["A", "C"],
            split_mode="custom",
            shares={"A": 2000, "C": "10000", "B": 500}
        )
    )

    assert isinstance(expense, CustomExpense)
    assert expense.shares == {"A": 2000, "C": 10000}


def test_custom_shares_must_add_up():
    with pytest.raises(ValueError, match="add up"):
        build_expense(
            people("A", "B"),
            expense_id="E001",
            **fields(amount=3000, beneficiaries=["A", "B"], split_mode="custom", shares={"A": 1000})
        )


def test_custom_shares_cannot_be_negative():
    with pytest.raises(ValueError, match="negative"):
        build_expense(
            people("A", "B"),
            expense_id="E001",
            **fields(amount=100, beneficiaries=["A", "B"], split_mode="custom", shares={"A": 150, "B": -50})
        )


@pytest.mark.parametrize("overrides", [
    {"title": " "},
    {"amount": 0},
    {"amount": 0.4},
    {"payer_id": "Z"},
    {"beneficiaries": []},
    {"beneficiaries": ["A", "Z"]},
    {"split_mode": "percent"},
])
def test_invalid_input_is_rejected(overrides):
    with pytest.raises(ValueError):
        build_expense(people("A", "B", "C"), expense_id="E001", **fields(**overrides))


def test_expense_needs_participants():
    with pytest.raises(ValueError, match="participant"):
        build_expense([], expense_id="E001", **fields())


def test_duplicate_beneficiaries_are_collapsed():
    expense = build_expense(people("A", "B"), expense_id="E001", **fields(beneficiaries=["B", "A", "B"]))

    assert expense.beneficiaries == ["B", "A"]


def test_convert_to_base():
    assert convert_to_base(10, 1300.5) == 13005
    assert convert_to_base("9.6", 2) == 20

    with pytest.raises(ValueError):
        convert_to_base(10, 0)


def test_foreign_amount_is_converted_and_recorded():
    expense = build_expense(
        people("A", "B"),
        expense_id="E001",
        **fields(beneficiaries=["A", "B"], amount=25, currency="USD", exchange_rate=1350)
    )

    assert expense.amount == 33750
    assert expense.original_amount == 25
    assert expense.currency == "USD"
    assert expense.exchange_rate == 1350.0
    assert expense.to_dict()["originalAmount"] == 25


def test_base_currency_ignores_exchange_rate():
    expense = build_expense(
        people("A", "B"),
        expense_id="E001",
        **fields(beneficiaries=["A", "B"], amount=5000, currency="KRW", exchange_rate=3)
    )

    assert expense.amount == 5000
    assert expense.exchange_rate == 1.0


def test_add_edit_delete_cycle():
    participants = people("A", "B")

    expenses, first = add_expense(participants, [], **fields(beneficiaries=["A", "B"]))
    expenses, second = add_expense(
        participants, expenses,
        **fields(title="Taxi", amount=100, beneficiaries=["A", "B"], split_mode="custom", shares={"A": 30, "B": 70})
    )
    assert [e.expense_id for e in expenses] == ["E001", "E002"]

    expenses, edited = edit_expense(participants, expenses, "E002", **fields(title="Taxi", amount=100, beneficiaries=["A", "B"]))
    assert edited.expense_id == "E002"
    assert isinstance(edited, EqualExpense)
    assert [e.expense_id for e in expenses] == ["E001", "E002"]
    assert isinstance(second, CustomExpense)

    expenses = delete_expense(expenses, "E001")
    assert [e.expense_id for e in expenses] == ["E002"]


def test_edit_and_delete_unknown_expense():
    with pytest.raises(LookupError):
        edit_expense(people("A"), [], "E404", **fields(beneficiaries=["A"]))
    with pytest.raises(LookupError):
        delete_expense([], "E404")


def test_failed_edit_keeps_original_list():
    participants = people("A", "B")
    expenses, _ = add_expense(participants, [], **fields(beneficiaries=["A", "B"]))

    with pytest.raises(ValueError):
        edit_expense(participants, expenses, "E001", **fields(amount=-5, beneficiaries=["A", "B"]))

    assert expenses[0].amount == 30000


def test_expense_from_dict_reads_stored_form():
    stored = {
        "id": "E001",
        "title": "Dessert",
        "amount": 12000,
        "payerId": "C",
        "beneficiaries": ["A", "C"],
        "splitMode": "custom",
        "shares": {"A": 2000, "C": 10000},
    }

    expense = expense_from_dict(stored)

    assert isinstance(expense, CustomExpense)
    assert expense.to_dict() == stored


@pytest.mark.parametrize("stored", [
    {"id": "E001", "amount": 100, "payerId": "A", "beneficiaries": ["A"]},
    {"id": "E001", "amount": 100, "payerId": "A", "beneficiaries": ["A"], "splitMode": "custom"},
    {"id": "E001", "amount": 100, "payerId": "A", "beneficiaries": ["A"], "splitMode": "weird"},
])
def test_expense_from_dict_falls_back_to_equal(stored):
    assert isinstance(expense_from_dict(stored), EqualExpense)


def test_expense_from_dict_normalises_loose_values():
    stored = {
        "id": "E001",
        "title": 7,
        "amount": "abc",
        "payerId": "A",
        "beneficiaries": "P001",
        "splitMode": "custom",
        "shares": {"A": "12.6", "B": None},
        "originalAmount": "9.5",
        "currency": "USD",
        "exchangeRate": "1300",
    }

    expense = expense_from_dict(stored)

    assert expense.amount == 0
    assert expense.title == "7"
    assert expense.beneficiaries == []
    assert expense.shares == {"A": 13, "B": 0}
    assert expense.original_amount == 10
    assert expense.exchange_rate == 1300.0


@pytest.mark.parametrize("beneficiaries, expected", [
    (12, []),
    (None, []),
    (["A", 3], ["A", "3"]),
])
def test_expense_from_dict_beneficiaries_are_a_list_of_ids(beneficiaries, expected):
    stored = {"id": "E001", "amount": 100, "payerId": "A", "beneficiaries": beneficiaries}

    assert expense_from_dict(stored).beneficiaries == expected
