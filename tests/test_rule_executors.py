"""
Tests for `services/rule_executors.py`.

Covers contract rules:
- Conditions test their predicate; actions are not gated by evaluate_condition.
- Actions emit a rounded discount, or nothing when the amount is not positive.
- Missing parameters make conditions fail and actions non-productive, never raise.
- The registry maps unique implementation keys and is read-only.
"""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

import pytest

from conftest import action, condition, num, product_ref
from domain.cart import CartContext, CartLine
from domain.product import Product
from domain.promotion import DiscountScope, Promotion
from services.rule_executors import (
    RULE_EXECUTORS,
    FixedAmountDiscountAction,
    MinCartTotalCondition,
    MinQuantityCondition,
    PercentageDiscountAction,
    SkuFixedAmountDiscountAction,
    SkuMatchCondition,
    SkuPercentageDiscountAction,
    build_registry,
)

P_A = UUID("00000000-0000-0000-0000-0000000000aa")
P_B = UUID("00000000-0000-0000-0000-0000000000bb")

PROMO = Promotion(code="PROMO", name="Promo", description="Test promotion", priority=1)


def _context(*lines: tuple) -> CartContext:
    return CartContext.from_lines(
        "cart-1",
        [CartLine.price(Product(pid, str(pid)[-2:], Decimal(price)), qty) for pid, price, qty in lines],
    )


def test_min_cart_total_condition_is_inclusive() -> None:
    """Verify subtotal >= minTotal passes at the threshold."""

    executor = MinCartTotalCondition()
    rule = condition("MinCartTotalCondition", num("minTotal", "50000"))

    assert executor.evaluate_condition(rule, _context((P_A, "25000", 2)))
    assert not executor.evaluate_condition(rule, _context((P_A, "49999.99", 1)))
    assert executor.execute_action(rule, _context((P_A, "25000", 2)), PROMO) is None


def test_min_quantity_condition_counts_all_units() -> None:
    executor = MinQuantityCondition()
    rule = condition("MinQuantityCondition", num("minQuantity", "3"))

    assert executor.evaluate_condition(rule, _context((P_A, "1", 2), (P_B, "1", 1)))
    assert not executor.evaluate_condition(rule, _context((P_A, "1", 2)))


def test_sku_match_condition_defaults_min_quantity_to_one() -> None:
    """Verify productId is required while minQuantity defaults to 1."""

    executor = SkuMatchCondition()
    context = _context((P_A, "100", 2))

    assert executor.evaluate_condition(condition("SkuMatchCondition", product_ref("productId", P_A)), context)
    assert not executor.evaluate_condition(condition("SkuMatchCondition", product_ref("productId", P_B)), context)
    assert not executor.evaluate_condition(
        condition("SkuMatchCondition", product_ref("productId", P_A), num("minQuantity", "3")),
        context,
    )
    assert not executor.evaluate_condition(condition("SkuMatchCondition"), context)


def test_missing_parameters_never_raise() -> None:
    """Verify conditions fail and actions produce nothing without their parameters."""

    context = _context((P_A, "100", 1))

    assert not MinCartTotalCondition().evaluate_condition(condition("MinCartTotalCondition"), context)
    assert not MinQuantityCondition().evaluate_condition(condition("MinQuantityCondition"), context)
    assert PercentageDiscountAction().execute_action(action("PercentageDiscountAction"), context, PROMO) is None
    assert FixedAmountDiscountAction().execute_action(action("FixedAmountDiscountAction"), context, PROMO) is None
    assert SkuPercentageDiscountAction().execute_action(
        action("SkuPercentageDiscountAction", num("percentage", "0.5")), context, PROMO
    ) is None


def test_percentage_action_rounds_half_up() -> None:
    """Verify 10% of 33.335 yields exactly 3.33."""

    detail = PercentageDiscountAction().execute_action(
        action("PercentageDiscountAction", num("percentage", "0.10")),
        _context((P_A, "33.335", 1)),
        PROMO,
    )

    assert detail is not None
    assert detail.amount == Decimal("3.33")
    assert detail.scope is DiscountScope.ORDER
    assert detail.code == "PROMO"
    assert detail.description == "Test promotion"


def test_actions_pass_evaluate_condition() -> None:
    rule = action("PercentageDiscountAction", num("percentage", "0.10"))
    assert PercentageDiscountAction().evaluate_condition(rule, _context((P_A, "1", 1)))


def test_fixed_amount_action() -> None:
    detail = FixedAmountDiscountAction().execute_action(
        action("FixedAmountDiscountAction", num("amount", "5000")),
        _context((P_A, "60000", 1)),
        PROMO,
    )

    assert detail is not None
    assert detail.amount == Decimal("5000.00")
    assert detail.scope is DiscountScope.ORDER


def test_sku_actions_target_one_product() -> None:
    """Verify per-product actions only use the matching product's lines."""

    context = _context((P_A, "5000", 2), (P_B, "10000", 1))

    percentage = SkuPercentageDiscountAction().execute_action(
        action("SkuPercentageDiscountAction", num("percentage", "0.50"), product_ref("productId", P_A)),
        context,
        PROMO,
    )
    fixed = SkuFixedAmountDiscountAction().execute_action(
        action("SkuFixedAmountDiscountAction", num("amount", "300"), product_ref("productId", P_A)),
        context,
        PROMO,
    )

    assert percentage is not None and percentage.amount == Decimal("5000.00")
    assert percentage.scope is DiscountScope.ITEM
    assert fixed is not None and fixed.amount == Decimal("600.00")
    assert fixed.scope is DiscountScope.ITEM


def test_sku_action_without_matching_product_produces_nothing() -> None:
    detail = SkuPercentageDiscountAction().execute_action(
        action("SkuPercentageDiscountAction", num("percentage", "0.50"), product_ref("productId", P_B)),
        _context((P_A, "5000", 2)),
        PROMO,
    )

    assert detail is None


def test_registry_contains_every_executor_and_is_read_only() -> None:
    """Verify all seven implementation keys are registered and the mapping cannot be mutated."""

    assert set(RULE_EXECUTORS) == {
        "MinCartTotalCondition",
        "MinQuantityCondition",
        "SkuMatchCondition",
        "PercentageDiscountAction",
        "FixedAmountDiscountAction",
        "SkuPercentageDiscountAction",
        "SkuFixedAmountDiscountAction",
    }

    with pytest.raises(TypeError):
        RULE_EXECUTORS["Other"] = MinCartTotalCondition()  # type: ignore[index]


def test_registry_rejects_duplicate_keys() -> None:
    with pytest.raises(ValueError):
        build_registry([MinCartTotalCondition(), MinCartTotalCondition()])
