"""
Domain: Payment methods and their configured discounts.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional

from .money import ZERO, round_money


class PaymentMethod(str, Enum):
    DEBIT = "DEBIT"
    CREDIT = "CREDIT"


@dataclass(frozen=True, slots=True)
class PaymentDiscount:
    """
    Discount granted for paying with a given method.

    Either component may be absent; when both are present they add up.
    A percentage of 0.10 means 10%.
    """

    payment_method: PaymentMethod
    percentage: Optional[Decimal] = None
    amount: Optional[Decimal] = None
    description: Optional[str] = None

    def compute(self, base: Decimal) -> Decimal:
        """Rounded discount for the given base (subtotal minus promotion discounts)."""

        discount = ZERO
        if self.percentage is not None:
            discount += base * self.percentage
        if self.amount is not None:
            discount += self.amount
        return round_money(discount)
