"""
Domain: Promotions, their rules and the discounts they produce.

Contract excerpts implemented here:
- A Promotion is a prioritized bundle of CONDITION and ACTION rules; lower
  priority values are evaluated first.
- A PromotionRule names the executor that handles it through its
  implementation_key and carries typed parameters.
- A RuleParameter populates only the value fields relevant to its key.
- A DiscountDetail is never emitted with amount <= 0 and its amount is
  always rounded to 2 fractional digits.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional, Tuple
from uuid import UUID

from .money import ZERO, round_money


class RuleType(str, Enum):
    CONDITION = "CONDITION"
    ACTION = "ACTION"


class DiscountScope(str, Enum):
    ITEM = "ITEM"
    ORDER = "ORDER"
    PAYMENT = "PAYMENT"
    SHIPPING = "SHIPPING"


@dataclass(frozen=True, slots=True)
class RuleParameter:
    key: str
    numeric_value: Optional[Decimal] = None
    string_value: Optional[str] = None
    product_id: Optional[UUID] = None


@dataclass(frozen=True, slots=True)
class PromotionRule:
    rule_type: RuleType
    implementation_key: str
    parameters: Tuple[RuleParameter, ...] = ()

    def _param(self, key: str) -> Optional[RuleParameter]:
        for param in self.parameters:
            if param.key == key:
                return param
        return None

    def numeric_param(self, key: str) -> Optional[Decimal]:
        """Numeric value of the first parameter named `key`, or None if absent."""

        param = self._param(key)
        return param.numeric_value if param is not None else None

    def product_param(self, key: str) -> Optional[UUID]:
        param = self._param(key)
        return param.product_id if param is not None else None


@dataclass(frozen=True, slots=True)
class Promotion:
    code: str
    name: str
    description: Optional[str] = None
    priority: int = 0
    active: bool = True
    rules: Tuple[PromotionRule, ...] = ()

    @property
    def conditions(self) -> Tuple[PromotionRule, ...]:
        return tuple(r for r in self.rules if r.rule_type is RuleType.CONDITION)

    @property
    def actions(self) -> Tuple[PromotionRule, ...]:
        return tuple(r for r in self.rules if r.rule_type is RuleType.ACTION)


@dataclass(frozen=True, slots=True)
class DiscountDetail:
    """One applied discount, as shown to the customer and stored on the order."""

    code: str
    scope: DiscountScope
    description: Optional[str]
    amount: Decimal

    def __post_init__(self) -> None:
        if self.amount <= ZERO:
            raise ValueError("DiscountDetail amount must be > 0")
        if round_money(self.amount) != self.amount:
            raise ValueError("DiscountDetail amount must be rounded to 2 fractional digits")
