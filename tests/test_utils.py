from decimal import Decimal

import pytest

from helpers import custom, equal
from utils import clamp0, format_money, next_sequential_id, per_head, round_half_up, to_decimal


@pytest.mark.parametrize("value, expected", [
    (2.5, 3),
    (-2.5, -2),
    (-1.5, -1),
    (Decimal("-0.5"), 0),
    (2.4, 2),
    (-2.6, -3),
    (Decimal("49999.5"), 50000),
    ("12", 12),
    (7, 7),
])
def test_round_half_up(value, expected):
    assert round_half_up(value) == expected


@pytest.mark.parametrize("junk", [None, "", "abc", float("nan"), float("inf"), True])
def test_round_half_up_treats_junk_as_zero(junk):
    assert round_half_up(junk) == 0


def test_to_decimal_passes_decimals_through():
    assert to_decimal(Decimal("1.25")) == Decimal("1.25")
    assert to_decimal(" 3 ") == Decimal("3")


def test_clamp0_floors_negative_values():
    assert clamp0(-5) == 0
    assert clamp0("-0.4") == 0
    assert clamp0(1000.4) == 1000


def test_next_sequential_id_continues_after_highest():
    assert next_sequential_id("P", ["P001", "P007", "X9", "legacy-uuid", None]) == "P008"


def test_next_sequential_id_starts_at_one():
    assert next_sequential_id("E", []) == "E001"


def test_format_money():
    assert format_money(12000) == "₩ 12,000"
    assert format_money(-500) == "-₩ 500"
    assert format_money(1234.5, symbol="$") == "$ 1,235"


def test_per_head():
    assert per_head(equal("E1", 100, "A", ["A", "B", "C"])) == 33
    assert per_head(equal("E1", 100, "A", [])) == 0
    assert per_head(custom("E1", 100, "A", ["A"], {"A": 100})) is None
