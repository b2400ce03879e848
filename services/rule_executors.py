"""
Promotion rule executors and the registry that maps implementation keys to them.

Each executor handles one `implementation_key` and implements both halves of
the executor contract:
- evaluate_condition(rule, context) -> bool
  Condition executors test their predicate; action executors return True.
- execute_action(rule, context, promotion) -> DiscountDetail | None
  Action executors compute a discount, or None when the amount is not
  strictly positive; condition executors always return None.

A missing required parameter never raises: the condition is treated as not
satisfied and the action as non-productive.

The registry is built once at import time and is read-only afterwards.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from domain.cart import CartContext
from domain.money import ZERO, round_money
from domain.promotion import DiscountDetail, DiscountScope, Promotion, PromotionRule


class RuleExecutor(ABC):
    """Evaluator for one kind of promotion rule."""

    implementation_key: str = ""

    @abstractmethod
    def evaluate_condition(self, rule: PromotionRule, context: CartContext) -> bool:
        ...

    @abstractmethod
    def execute_action(
        self,
        rule: PromotionRule,
        context: CartContext,
        promotion: Promotion,
    ) -> Optional[DiscountDetail]:
        ...


class ConditionExecutor(RuleExecutor):
    """Base for predicates: never produces a discount."""

    def execute_action(
        self,
        rule: PromotionRule,
        context: CartContext,
        promotion: Promotion,
    ) -> Optional[DiscountDetail]:
        return None


class ActionExecutor(RuleExecutor):
    """Base for discount producers: not gated by its own condition."""

    scope: DiscountScope = DiscountScope.ORDER

    def evaluate_condition(self, rule: PromotionRule, context: CartContext) -> bool:
        return True

    def _discount(self, promotion: Promotion, amount: Decimal) -> Optional[DiscountDetail]:
        amount = round_money(amount)
        if amount <= ZERO:
            return None
        return DiscountDetail(
            code=promotion.code,
            scope=self.scope,
            description=promotion.description,
            amount=amount,
        )


# --- Conditions -------------------------------------------------------------


class MinCartTotalCondition(ConditionExecutor):
    """Cart subtotal >= `minTotal`."""

    implementation_key = "MinCartTotalCondition"

    def evaluate_condition(self, rule: PromotionRule, context: CartContext) -> bool:
        threshold = rule.numeric_param("minTotal")
        if threshold is None:
            return False
        return context.subtotal >= threshold


class MinQuantityCondition(ConditionExecutor):
    """Total units in the cart >= `minQuantity` (truncated to an integer)."""

    implementation_key = "MinQuantityCondition"

    def evaluate_condition(self, rule: PromotionRule, context: CartContext) -> bool:
        threshold = rule.numeric_param("minQuantity")
        if threshold is None:
            return False
        return context.total_quantity >= int(threshold)


class SkuMatchCondition(ConditionExecutor):
    """
    Units of product `productId` in the cart >= `minQuantity`.

    `minQuantity` defaults to 1; `productId` is required.
    """

    implementation_key = "SkuMatchCondition"

    def evaluate_condition(self, rule: PromotionRule, context: CartContext) -> bool:
        product_id = rule.product_param("productId")
        if product_id is None:
            return False

        min_quantity = rule.numeric_param("minQuantity")
        required = int(min_quantity) if min_quantity is not None else 1
        return context.quantity_of_product(product_id) >= required


# --- Actions ----------------------------------------------------------------


class PercentageDiscountAction(ActionExecutor):
    """`percentage` of the cart subtotal (0.10 = 10%), whole order."""

    implementation_key = "PercentageDiscountAction"
    scope = DiscountScope.ORDER

    def execute_action(self, rule, context, promotion):
        percentage = rule.numeric_param("percentage")
        if percentage is None:
            return None
        return self._discount(promotion, context.subtotal * percentage)


class FixedAmountDiscountAction(ActionExecutor):
    """Fixed `amount` off the whole order."""

    implementation_key = "FixedAmountDiscountAction"
    scope = DiscountScope.ORDER

    def execute_action(self, rule, context, promotion):
        amount = rule.numeric_param("amount")
        if amount is None or amount <= ZERO:
            return None
        return self._discount(promotion, amount)


class SkuPercentageDiscountAction(ActionExecutor):
    """`percentage` of the subtotal of product `productId`."""

    implementation_key = "SkuPercentageDiscountAction"
    scope = DiscountScope.ITEM

    def execute_action(self, rule, context, promotion):
        percentage = rule.numeric_param("percentage")
        product_id = rule.product_param("productId")
        if percentage is None or product_id is None:
            return None
        return self._discount(promotion, context.subtotal_of_product(product_id) * percentage)


class SkuFixedAmountDiscountAction(ActionExecutor):
    """Fixed `amount` off each unit of product `productId`."""

    implementation_key = "SkuFixedAmountDiscountAction"
    scope = DiscountScope.ITEM

    def execute_action(self, rule, context, promotion):
        amount = rule.numeric_param("amount")
        product_id = rule.product_param("productId")
        if amount is None or amount <= ZERO or product_id is None:
            return None
        return self._discount(promotion, amount * context.quantity_of_product(product_id))


DEFAULT_EXECUTORS: tuple[RuleExecutor, ...] = (
    MinCartTotalCondition(),
    MinQuantityCondition(),
    SkuMatchCondition(),
    PercentageDiscountAction(),
    FixedAmountDiscountAction(),
    SkuPercentageDiscountAction(),
    SkuFixedAmountDiscountAction(),
)


def build_registry(executors: Iterable[RuleExecutor]) -> Mapping[str, RuleExecutor]:
    """
    Build a read-only implementation_key -> executor mapping.

    Raises:
        ValueError: If two executors share a key, or a key is empty
    """
    registry: dict[str, RuleExecutor] = {}
    for executor in executors:
        key = executor.implementation_key
        if not key:
            raise ValueError(f"{type(executor).__name__} has no implementation_key")
        if key in registry:
            raise ValueError(f"Duplicate rule executor for implementation_key {key!r}")
        registry[key] = executor
    return MappingProxyType(registry)


RULE_EXECUTORS: Mapping[str, RuleExecutor] = build_registry(DEFAULT_EXECUTORS)


__all__ = [
    "RuleExecutor",
    "ConditionExecutor",
    "ActionExecutor",
    "MinCartTotalCondition",
    "MinQuantityCondition",
    "SkuMatchCondition",
    "PercentageDiscountAction",
    "FixedAmountDiscountAction",
    "SkuPercentageDiscountAction",
    "SkuFixedAmountDiscountAction",
    "DEFAULT_EXECUTORS",
    "build_registry",
    "RULE_EXECUTORS",
]
