"""
Tests for `domain/money.py`.

Covers contract rules:
- Amounts are rounded HALF_UP to 2 fractional digits.
- Stored numeric values are coerced to Decimal through their printed form.
"""

from __future__ import annotations

from decimal import Decimal

from domain.money import ZERO, round_money, sum_money, to_decimal, to_optional_decimal


def test_round_money_is_half_up_at_two_digits() -> None:
    """Verify HALF_UP rounding at the cent boundary."""

    assert round_money(Decimal("3.3335")) == Decimal("3.33")
    assert round_money(Decimal("3.335")) == Decimal("3.34")
    assert round_money(Decimal("3.3349")) == Decimal("3.33")
    assert str(round_money(Decimal("58000"))) == "58000.00"


def test_to_decimal_goes_through_str_for_floats() -> None:
    """Verify floats from JSON rows keep their printed value."""

    assert to_decimal(0.1) == Decimal("0.1")
    assert to_decimal("2000") == Decimal("2000")
    assert to_decimal(Decimal("1.5")) == Decimal("1.5")
    assert to_optional_decimal(None) is None


def test_sum_money_starts_from_exact_zero() -> None:
    """Verify sums of Decimals stay Decimal, including the empty sum."""

    assert sum_money([]) == ZERO
    assert isinstance(sum_money([]), Decimal)
    assert sum_money([Decimal("0.10"), Decimal("0.20")]) == Decimal("0.30")

