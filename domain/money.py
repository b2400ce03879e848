"""
Domain: Monetary values.

Every money computation in the pricing core goes through this module so that
rounding is identical across promotions, payment discounts, coupons, shipping
and the final total.

Rules implemented here:
- Amounts are Decimal, never float.
- Rounding is HALF_UP to 2 fractional digits.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable, Optional

ZERO = Decimal("0")
CENT = Decimal("0.01")


def to_decimal(value: Any) -> Decimal:
    """
    Coerce a stored numeric value into a Decimal.

    Goes through str() so float values from JSON rows keep their printed
    representation instead of their binary expansion.
    """

    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def to_optional_decimal(value: Any) -> Optional[Decimal]:
    """Same as to_decimal, but passes None through."""

    if value is None:
        return None
    return to_decimal(value)


def round_money(value: Decimal) -> Decimal:
    """
    Round a monetary amount to 2 fractional digits, HALF_UP.

    Example:
        round_money(Decimal("3.3335"))  # Decimal('3.33')
        round_money(Decimal("3.335"))   # Decimal('3.34')
    """

    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def sum_money(amounts: Iterable[Decimal]) -> Decimal:
    """Sum amounts starting from an exact zero (no float start value)."""

    total = ZERO
    for amount in amounts:
        total += amount
    return total


__all__ = [
    "ZERO",
    "CENT",
    "to_decimal",
    "to_optional_decimal",
    "round_money",
    "sum_money",
]
