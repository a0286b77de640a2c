"""
Utilities Module

This module provides the shared numeric and formatting helpers for the
shared expense settler.

Features:
    - Lenient Decimal conversion (junk input counts as zero)
    - Half-up integer rounding (halves towards +infinity) for balances and settlements
    - Clamp-at-zero rounding for custom shares
    - Sequential identifiers (P001, E001, ...)
    - Money formatting and per-head display amounts

Functions:
    to_decimal: Convert a loosely typed value to Decimal.
    round_half_up: Round a value to the nearest integer, halves towards +infinity.
    clamp0: Round a value and floor it at zero.
    next_sequential_id: Generate the next <prefix>### identifier.
    format_money: Format an amount with a currency symbol.
    per_head: Per-beneficiary amount shown for an expense.
"""

import re
from decimal import Decimal, InvalidOperation, ROUND_FLOOR
from typing import Iterable, Optional


def to_decimal(value) -> Decimal:
    """
    Convert a value to Decimal without ever raising.

    None, empty strings, booleans and anything that is not a finite number
    convert to Decimal("0").

    Args:
        value: int, float, Decimal, numeric string, or anything else.

    Returns:
        Decimal: The numeric value, or zero for junk input.
    """
    if value is None or isinstance(value, bool):
        return Decimal("0")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip() or "0")
        except (InvalidOperation, ValueError):
            return Decimal("0")
    if not result.is_finite():
        return Decimal("0")
    return result


def round_half_up(value) -> int:
    """
    Round a value to the nearest integer.

    Halves always round towards +infinity: 2.5 -> 3, -1.5 -> -1 and
    -2.5 -> -2, the same results the browser client gets from Math.round.

    Args:
        value: Anything accepted by to_decimal.

    Returns:
        int: Rounded integer.
    """
    return int((to_decimal(value) + Decimal("0.5")).to_integral_value(rounding=ROUND_FLOOR))


def clamp0(value) -> int:
    """Round a value to an integer and floor it at zero."""
    return max(0, round_half_up(value))


def next_sequential_id(prefix: str, existing_ids: Iterable[str]) -> str:
    """
    Generate the next sequential identifier for a prefix.

    Format: <prefix>001, <prefix>002, ...

    Logic:
        1. Extract numeric suffix from ids matching <prefix>### (e.g. P007 -> 7)
        2. Find the highest existing number
        3. Return the next number with a zero-padded 3-digit suffix
        4. If no matching ids exist, start from 001

    Args:
        prefix: Identifier prefix (e.g. "P", "E").
        existing_ids: Identifiers already in use.

    Returns:
        str: Next identifier (e.g. "P004").
    """
    pattern = re.compile(rf"^{re.escape(prefix)}(\d+)$")

    max_num = 0
    for existing in existing_ids:
        match = pattern.match(existing or "")
        if match:
            max_num = max(max_num, int(match.group(1)))

    return f"{prefix}{max_num + 1:03d}"


def format_money(amount, symbol: str = "₩") -> str:
    """
    Format an amount as a whole-unit currency string.

    Args:
        amount: Amount to format (rounded half-up first).
        symbol: Currency symbol (default: ₩).

    Returns:
        str: Formatted string like "₩ 12,000" or "-₩ 500".
    """
    value = round_half_up(amount)
    if value < 0:
        return f"-{symbol} {-value:,}"
    return f"{symbol} {value:,}"


def per_head(expense) -> Optional[int]:
    """
    Per-beneficiary amount displayed next to an expense.

    Args:
        expense: EqualExpense or CustomExpense.

    Returns:
        int | None: Rounded equal share, 0 when nobody benefits,
        None for custom splits (shares differ per person).
    """
    if expense.split_mode == "custom":
        return None
    if not expense.beneficiaries:
        return 0
    return round_half_up(to_decimal(expense.amount) / len(expense.beneficiaries))
