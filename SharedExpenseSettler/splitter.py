"""
Splitter Module

This module handles the balance aggregation for the shared expense settler.

Features:
    - Equal splitting among beneficiaries (exact, not pre-rounded)
    - Custom splitting with per-beneficiary amounts
    - Per-participant paid / owed / net balance
    - Tolerance of dangling payer and beneficiary ids

Data Model:
    Input - participants: list of Participant
    Input - expenses: list of EqualExpense / CustomExpense

    Output - balances (dict keyed by participant_id, in input order):
        - paid: int (sum of rounded expense amounts paid)
        - owed: float (sum of shares owed)
        - net: int (paid - owed, halves rounded up)

Functions:
    calculate_balances: Calculate per-participant balances.
"""

from decimal import Decimal

from expenses import CustomExpense
from utils import clamp0, round_half_up


def calculate_balances(participants: list, expenses: list) -> dict:
    """
    Calculate per-participant balances from expenses.

    For each expense:
        1. The amount is rounded to an integer; zero-amount expenses are skipped
        2. The payer's paid increases by the amount (if the payer is known)
        3. Custom split: each beneficiary owes its share (missing -> 0,
           rounded and floored at 0)
        4. Equal split: each beneficiary owes amount / len(beneficiaries)

    Unknown payer or beneficiary ids are ignored; they still count towards
    len(beneficiaries) for an equal split.

    Args:
        participants: List of Participant objects.
        expenses: List of EqualExpense / CustomExpense objects.

    Returns:
        dict: Dictionary keyed by participant_id containing:
            - paid: int
            - owed: float
            - net: int (positive = is owed money, negative = owes money)

    Notes:
        - Never raises on dangling ids, empty beneficiary lists or bad amounts
        - Does NOT modify its inputs
        - Does NOT write to Firebase
    """
    # Initialize balances for all participants with zero values
    # Using Decimal so repeated calls produce identical owed sums
    totals = {
        p.participant_id: {"paid": 0, "owed": Decimal("0")}
        for p in participants
    }

    for expense in expenses:
        amount = round_half_up(expense.amount)
        if amount == 0:
            continue

        if expense.payer_id in totals:
            totals[expense.payer_id]["paid"] += amount

        beneficiaries = expense.beneficiaries or []
        if len(beneficiaries) == 0:
            continue

        if isinstance(expense, CustomExpense):
            for beneficiary_id in beneficiaries:
                share = clamp0(expense.shares.get(beneficiary_id))
                if beneficiary_id in totals:
                    totals[beneficiary_id]["owed"] += share
        else:
            share = Decimal(amount) / Decimal(len(beneficiaries))
            for beneficiary_id in beneficiaries:
                if beneficiary_id in totals:
                    totals[beneficiary_id]["owed"] += share

    return {
        participant_id: {
            "paid": t["paid"],
            "owed": float(t["owed"]),
            "net": round_half_up(Decimal(t["paid"]) - t["owed"])
        }
        for participant_id, t in totals.items()
    }
