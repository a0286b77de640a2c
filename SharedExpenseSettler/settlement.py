"""
Settlement Module

This module handles the settlement calculations for the shared expense
settler.

Features:
    - Convert net balances into settlement transactions
    - Keep the number of transactions small using a greedy algorithm
    - Whole-unit amounts, never a zero-amount transfer

Data Model:
    Input - balances (dict keyed by participant_id):
        - net: int (positive = owed money, negative = owes money)

    Output - list of settlement transactions:
        - from: string (debtor who pays)
        - to: string (creditor who receives)
        - amount: int (always > 0)

Functions:
    optimize_settlements: Convert balances into settlement transactions.
"""

from utils import round_half_up, to_decimal


def optimize_settlements(balances: dict) -> list[dict]:
    """
    Convert net balances into a short list of settlement transactions.

    Uses a greedy algorithm:
        1. Separate participants into debtors (net < 0) and creditors (net > 0)
        2. Sort debtors by largest debt first
        3. Sort creditors by largest credit first
        4. Iteratively match the current debtor with the current creditor:
           - Settle the minimum of their remaining amounts
           - Move past whichever side is settled (possibly both)
           - Stop when either list runs out

    At most len(debtors) + len(creditors) - 1 transactions are produced.

    Args:
        balances: Dictionary keyed by participant_id containing net.

    Returns:
        list[dict]: Settlement transactions, each containing:
            - from: string (debtor who pays)
            - to: string (creditor who receives)
            - amount: int

    Notes:
        - Participants with net == 0 never appear
        - Ties keep the order of the balances mapping (stable sort)
        - Does NOT modify input balances
    """
    debtors = []   # [participant_id, remaining] - amounts stored as positive
    creditors = []

    for participant_id, balance in balances.items():
        net = to_decimal(balance.get("net"))

        if net < 0:
            debtors.append([participant_id, -net])
        elif net > 0:
            creditors.append([participant_id, net])

    debtors.sort(key=lambda x: x[1], reverse=True)
    creditors.sort(key=lambda x: x[1], reverse=True)

    settlements = []

    # Greedy settlement: match largest debtor with largest creditor
    debtor_idx = 0
    creditor_idx = 0

    while debtor_idx < len(debtors) and creditor_idx < len(creditors):
        debtor_id, debt_amount = debtors[debtor_idx]
        creditor_id, credit_amount = creditors[creditor_idx]

        settlement_amount = min(debt_amount, credit_amount)
        rounded_amount = round_half_up(settlement_amount)

        # Fractional leftovers below one unit are not worth a transfer
        if rounded_amount > 0:
            settlements.append({
                "from": debtor_id,
                "to": creditor_id,
                "amount": rounded_amount
            })

        debtors[debtor_idx][1] = debt_amount - settlement_amount
        creditors[creditor_idx][1] = credit_amount - settlement_amount

        if round_half_up(debtors[debtor_idx][1]) == 0:
            debtor_idx += 1

        if round_half_up(creditors[creditor_idx][1]) == 0:
            creditor_idx += 1

    return settlements
