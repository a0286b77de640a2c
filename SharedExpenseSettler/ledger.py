"""
Ledger Module

Single entry point that turns a participant/expense snapshot into balances
and settlement suggestions.

Functions:
    compute: Aggregate balances and match settlements.
    apply_settlements: Nets left over after every settlement is paid.
    describe_settlements: Human-readable settlement lines.
"""

import logging

from settlement import optimize_settlements
from splitter import calculate_balances
from utils import format_money

logger = logging.getLogger(__name__)


def compute(participants: list, expenses: list) -> dict:
    """
    Compute balances and settlements for a snapshot.

    Both steps are pure: the same snapshot always yields the same result,
    and neither list is modified.

    Args:
        participants: List of Participant objects.
        expenses: List of EqualExpense / CustomExpense objects.

    Returns:
        dict: Contains two keys:
            - balances: participant_id -> {paid, owed, net}
            - settlements: list of {from, to, amount}
    """
    balances = calculate_balances(participants, expenses)
    settlements = optimize_settlements(balances)

    logger.debug(
        "Computed %d balances and %d settlements from %d expenses",
        len(balances), len(settlements), len(expenses)
    )

    return {
        "balances": balances,
        "settlements": settlements
    }


def apply_settlements(balances: dict, settlements: list[dict]) -> dict:
    """
    Apply settlements to net balances.

    The payer's net goes up by the amount and the receiver's net goes down.
    Ids not present in balances are ignored.

    Args:
        balances: participant_id -> {net, ...}
        settlements: list of {from, to, amount}

    Returns:
        dict: participant_id -> remaining net.
    """
    remaining = {pid: balance["net"] for pid, balance in balances.items()}

    for settlement in settlements:
        if settlement["from"] in remaining:
            remaining[settlement["from"]] += settlement["amount"]
        if settlement["to"] in remaining:
            remaining[settlement["to"]] -= settlement["amount"]

    return remaining


def describe_settlements(settlements: list[dict], participants: list, symbol: str = "₩") -> list[str]:
    """
    Render settlements as "Bob → Alice : ₩ 12,000" lines.

    Ids without a matching participant are shown as "—".
    """
    names = {p.participant_id: p.name for p in participants}
    return [
        f"{names.get(s['from'], '—')} → {names.get(s['to'], '—')} : {format_money(s['amount'], symbol)}"
        for s in settlements
    ]
