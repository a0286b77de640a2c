"""
Expenses Module

This module handles all expense-related operations for the shared expense
settler.

Features:
    - Add/edit/delete expenses
    - Equal or custom split between beneficiaries
    - Conversion of foreign amounts into the base currency
    - Validation that custom shares add up to the expense total

Data Model:
    Expense stored inside the session document as:
        - id: string (E001, E002, ... format)
        - title: string
        - amount: int (base currency, already converted)
        - payerId: string or None
        - beneficiaries: list of participant ids
        - splitMode: "equal" | "custom"
        - shares: dict of participant id -> int (custom split only)
        - originalAmount, currency, exchangeRate: optional entry metadata

    In memory an expense is one of two classes, EqualExpense or
    CustomExpense; only CustomExpense has a shares attribute.

Functions:
    convert_to_base: Convert an entered amount into base-currency units.
    build_expense: Validate input and construct an expense.
    add_expense: Append a new expense.
    edit_expense: Replace an existing expense.
    delete_expense: Remove an expense.
    expense_from_dict: Rebuild an expense from its stored form.
"""

from typing import Optional

from participants import Participant
from utils import next_sequential_id, round_half_up, to_decimal


SPLIT_MODES = {"equal", "custom"}


class Expense:
    """
    Fields shared by both split modes.

    Attributes:
        expense_id (str): Unique identifier in E### format.
        title (str): Display label.
        amount (int): Total cost in the base currency.
        payer_id (str | None): Participant who paid (may dangle).
        beneficiaries (list[str]): Participants sharing the cost (may dangle).
        original_amount (int | None): Amount as entered, before conversion.
        currency (str | None): Currency the amount was entered in.
        exchange_rate (float | None): Rate used for the conversion.
    """

    split_mode = "equal"

    def __init__(
        self,
        expense_id: str,
        amount: int,
        payer_id: Optional[str],
        beneficiaries: list[str],
        title: str = "",
        original_amount: Optional[int] = None,
        currency: Optional[str] = None,
        exchange_rate: Optional[float] = None
    ):
        self.expense_id = expense_id
        self.title = title
        self.amount = amount
        self.payer_id = payer_id
        self.beneficiaries = list(beneficiaries)
        self.original_amount = original_amount
        self.currency = currency
        self.exchange_rate = exchange_rate

    def _common_kwargs(self) -> dict:
        return {
            "expense_id": self.expense_id,
            "title": self.title,
            "amount": self.amount,
            "payer_id": self.payer_id,
            "beneficiaries": list(self.beneficiaries),
            "original_amount": self.original_amount,
            "currency": self.currency,
            "exchange_rate": self.exchange_rate
        }

    def to_dict(self) -> dict:
        """Convert expense to dictionary for Firestore storage."""
        data = {
            "id": self.expense_id,
            "title": self.title,
            "amount": self.amount,
            "payerId": self.payer_id,
            "beneficiaries": list(self.beneficiaries),
            "splitMode": self.split_mode
        }
        if self.currency is not None:
            data["originalAmount"] = self.original_amount
            data["currency"] = self.currency
            data["exchangeRate"] = self.exchange_rate
        return data

    def without_participant(self, participant_id: str, fallback_payer: Optional[str]) -> "Expense":
        """
        Return a copy with every reference to participant_id scrubbed.

        The payer is replaced by fallback_payer when it was participant_id.
        """
        kwargs = self._common_kwargs()
        kwargs["beneficiaries"] = [b for b in self.beneficiaries if b != participant_id]
        if self.payer_id == participant_id:
            kwargs["payer_id"] = fallback_payer
        return type(self)(**kwargs)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Expense):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        """Return string representation of expense."""
        return (
            f"{type(self).__name__}(id='{self.expense_id}', payer='{self.payer_id}', "
            f"amount={self.amount}, beneficiaries={self.beneficiaries})"
        )


class EqualExpense(Expense):
    """Expense whose cost is divided evenly among its beneficiaries."""

    split_mode = "equal"


class CustomExpense(Expense):
    """
    Expense whose cost is divided by explicit per-beneficiary amounts.

    Attributes:
        shares (dict[str, int]): Amount owed per beneficiary id. Beneficiaries
            without an entry owe nothing.
    """

    split_mode = "custom"

    def __init__(self, *args, shares: Optional[dict] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.shares = dict(shares or {})

    def _common_kwargs(self) -> dict:
        kwargs = super()._common_kwargs()
        kwargs["shares"] = dict(self.shares)
        return kwargs

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["shares"] = dict(self.shares)
        return data

    def without_participant(self, participant_id: str, fallback_payer: Optional[str]) -> "CustomExpense":
        expense = super().without_participant(participant_id, fallback_payer)
        expense.shares.pop(participant_id, None)
        return expense


def expense_from_dict(data: dict) -> Expense:
    """
    Create an expense from its stored dictionary form.

    A record is custom only when splitMode is "custom" and shares is a
    mapping; everything else is read as an equal split.

    Stored documents are shared with other clients, so amounts and shares
    are rounded to integers (junk counts as zero), ids are read as strings
    and a beneficiaries value that is not a list reads as no beneficiaries.
    """
    beneficiaries = data.get("beneficiaries")
    if not isinstance(beneficiaries, list):
        beneficiaries = []

    payer_id = data.get("payerId")
    original_amount = data.get("originalAmount")
    currency = data.get("currency")
    exchange_rate = data.get("exchangeRate")

    kwargs = {
        "expense_id": str(data.get("id")),
        "title": str(data.get("title") or ""),
        "amount": round_half_up(data.get("amount")),
        "payer_id": str(payer_id) if payer_id is not None else None,
        "beneficiaries": [str(b) for b in beneficiaries],
        "original_amount": round_half_up(original_amount) if original_amount is not None else None,
        "currency": str(currency) if currency is not None else None,
        "exchange_rate": float(to_decimal(exchange_rate)) if exchange_rate is not None else None
    }

    shares = data.get("shares")
    if data.get("splitMode") == "custom" and isinstance(shares, dict):
        shares = {str(pid): round_half_up(value) for pid, value in shares.items()}
        return CustomExpense(shares=shares, **kwargs)
    return EqualExpense(**kwargs)


def convert_to_base(raw_amount, exchange_rate=1) -> int:
    """
    Convert an entered amount into whole base-currency units.

    The entered amount is rounded first, then multiplied by the rate and
    rounded again.

    Args:
        raw_amount: Amount as typed by the user.
        exchange_rate: Base-currency units per unit of the entered currency.

    Returns:
        int: Converted amount.

    Raises:
        ValueError: If the exchange rate is not positive.
    """
    rate = to_decimal(exchange_rate)
    if rate <= 0:
        raise ValueError(f"exchange_rate must be a positive number, got: {exchange_rate}")
    return round_half_up(round_half_up(raw_amount) * rate)


def build_expense(
    participants: list[Participant],
    *,
    expense_id: str,
    title: str,
    amount,
    payer_id: str,
    beneficiaries: list[str],
    split_mode: str = "equal",
    shares: Optional[dict] = None,
    currency: Optional[str] = None,
    exchange_rate=1,
    base_currency: str = "KRW"
) -> Expense:
    """
    Validate entered values and construct an expense.

    Args:
        participants: Current participants (payer and beneficiaries must be among them).
        expense_id: Identifier for the expense.
        title: Display label (must be non-empty).
        amount: Amount as entered, in `currency`.
        payer_id: Participant who paid.
        beneficiaries: Participants sharing the cost (at least one).
        split_mode: "equal" or "custom".
        shares: Per-beneficiary amounts in base currency (custom only).
        currency: Entered currency; None or the base currency means no conversion.
        exchange_rate: Rate applied when currency differs from the base currency.
        base_currency: Currency every stored amount is expressed in.

    Returns:
        Expense: EqualExpense or CustomExpense.

    Raises:
        ValueError: If any validation fails, including custom shares whose
            sum differs from the converted amount.
    """
    if not participants:
        raise ValueError("add a participant before adding expenses")

    if not isinstance(title, str) or not title.strip():
        raise ValueError("title must be a non-empty string")

    if split_mode not in SPLIT_MODES:
        raise ValueError(f"split_mode must be one of {sorted(SPLIT_MODES)}, got: {split_mode}")

    foreign = currency is not None and currency != base_currency
    rate = exchange_rate if foreign else 1
    base_amount = convert_to_base(amount, rate)
    if base_amount < 1:
        raise ValueError(f"amount must be at least 1, got: {amount}")

    known_ids = {p.participant_id for p in participants}

    if payer_id not in known_ids:
        raise ValueError(f"payer_id '{payer_id}' is not a participant")

    if not beneficiaries:
        raise ValueError("beneficiaries must contain at least one participant")

    for beneficiary in beneficiaries:
        if beneficiary not in known_ids:
            raise ValueError(f"beneficiary '{beneficiary}' is not a participant")

    # Duplicates carry no meaning; keep first occurrence order
    unique_beneficiaries = list(dict.fromkeys(beneficiaries))

    kwargs = {
        "expense_id": expense_id,
        "title": title.strip(),
        "amount": base_amount,
        "payer_id": payer_id,
        "beneficiaries": unique_beneficiaries,
        "original_amount": round_half_up(amount) if currency is not None else None,
        "currency": currency,
        "exchange_rate": float(to_decimal(rate)) if currency is not None else None
    }

    if split_mode == "equal":
        return EqualExpense(**kwargs)

    entered = shares or {}
    custom_shares = {}
    for beneficiary in unique_beneficiaries:
        value = round_half_up(entered.get(beneficiary))
        if value < 0:
            raise ValueError(f"share for '{beneficiary}' must not be negative, got: {value}")
        custom_shares[beneficiary] = value

    shares_total = sum(custom_shares.values())
    if shares_total != base_amount:
        raise ValueError(
            f"custom shares must add up to the expense amount "
            f"(shares total {shares_total}, amount {base_amount})"
        )

    return CustomExpense(shares=custom_shares, **kwargs)


def _find_index(expenses: list[Expense], expense_id: str) -> int:
    for index, expense in enumerate(expenses):
        if expense.expense_id == expense_id:
            return index
    raise LookupError(f"Expense {expense_id} not found")


def add_expense(
    participants: list[Participant],
    expenses: list[Expense],
    **fields
) -> tuple[list[Expense], Expense]:
    """
    Validate and append a new expense.

    Args:
        participants: Current participants.
        expenses: Current expenses.
        **fields: Keyword arguments of build_expense except expense_id.

    Returns:
        tuple: (new expense list, created expense).

    Raises:
        ValueError: If input validation fails.
    """
    # Generate sequential expense ID (E001, E002, ...)
    expense_id = next_sequential_id("E", [e.expense_id for e in expenses])
    expense = build_expense(participants, expense_id=expense_id, **fields)
    return [*expenses, expense], expense


def edit_expense(
    participants: list[Participant],
    expenses: list[Expense],
    expense_id: str,
    **fields
) -> tuple[list[Expense], Expense]:
    """
    Replace an existing expense with newly validated values.

    The expense keeps its id and its position in the list. Switching to an
    equal split discards any shares.

    Raises:
        LookupError: If the expense does not exist.
        ValueError: If input validation fails.
    """
    index = _find_index(expenses, expense_id)
    expense = build_expense(participants, expense_id=expense_id, **fields)

    updated = list(expenses)
    updated[index] = expense
    return updated, expense


def delete_expense(expenses: list[Expense], expense_id: str) -> list[Expense]:
    """
    Remove an expense.

    Raises:
        LookupError: If the expense does not exist.
    """
    _find_index(expenses, expense_id)
    return [e for e in expenses if e.expense_id != expense_id]
