"""
Promotion engine.

Evaluates active promotions against a CartContext:
- Promotions run in ascending priority (ties keep their fetched order)
- Every CONDITION rule must pass; the first failing or unknown condition
  abandons the promotion
- When all conditions pass, every ACTION rule runs in declared order and each
  strictly positive discount is collected
- All promotions see the same original CartContext (no cascading)
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Mapping

from domain.cart import CartContext
from domain.money import ZERO
from domain.promotion import DiscountDetail, Promotion
from repositories.promotion_repository import list_active_promotions
from services.rule_executors import RULE_EXECUTORS, RuleExecutor

logger = logging.getLogger(__name__)


def _conditions_met(
    promotion: Promotion,
    context: CartContext,
    executors: Mapping[str, RuleExecutor],
) -> bool:
    for rule in promotion.conditions:
        executor = executors.get(rule.implementation_key)
        if executor is None:
            logger.warning(
                f"Unknown rule implementation {rule.implementation_key!r} in promotion {promotion.code}",
                extra={"promotion_code": promotion.code, "implementation_key": rule.implementation_key},
            )
            return False
        if not executor.evaluate_condition(rule, context):
            logger.debug(f"Condition {rule.implementation_key} failed for promotion {promotion.code}")
            return False
    return True


def evaluate_promotions(
    promotions: Iterable[Promotion],
    context: CartContext,
    executors: Mapping[str, RuleExecutor] = RULE_EXECUTORS,
) -> List[DiscountDetail]:
    """
    Apply the given promotions to a cart snapshot.

    Inactive promotions are ignored. Unknown action keys are skipped.

    Args:
        promotions: Candidate promotions (any order)
        context: Cart snapshot every promotion is evaluated against
        executors: implementation_key -> executor registry

    Returns:
        Discounts ordered by promotion priority, then declared action order

    Example:
        discounts = evaluate_promotions(list_active_promotions(), context)
    """
    ordered = sorted((p for p in promotions if p.active), key=lambda p: p.priority)
    discounts: List[DiscountDetail] = []

    for promotion in ordered:
        if not _conditions_met(promotion, context, executors):
            continue

        for rule in promotion.actions:
            executor = executors.get(rule.implementation_key)
            if executor is None:
                logger.warning(
                    f"Unknown rule implementation {rule.implementation_key!r} in promotion {promotion.code}",
                    extra={"promotion_code": promotion.code, "implementation_key": rule.implementation_key},
                )
                continue

            detail = executor.execute_action(rule, context, promotion)
            if detail is not None and detail.amount > ZERO:
                discounts.append(detail)
                logger.debug(f"Promotion {promotion.code} applied {detail.amount}")

    return discounts


def process_cart(
    context: CartContext,
    executors: Mapping[str, RuleExecutor] = RULE_EXECUTORS,
) -> List[DiscountDetail]:
    """Fetch active promotions and evaluate them against `context`."""

    promotions = list_active_promotions()
    logger.debug(f"Processing {len(promotions)} active promotions for cart {context.cart_id}")

    discounts = evaluate_promotions(promotions, context, executors)

    logger.debug(f"Total promotion discounts applied: {len(discounts)}")
    return discounts


__all__ = [
    "evaluate_promotions",
    "process_cart",
]
