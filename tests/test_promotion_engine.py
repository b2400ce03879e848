"""
Tests for `services/promotion_engine.py`.

Covers contract rules:
- Promotions run in ascending priority; their discounts keep that order.
- A single failing or unknown condition abandons the whole promotion.
- Actions run in declared order; only positive discounts are collected.
- Every promotion sees the same original cart (no cascading).
"""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from conftest import action, condition, five_thousand_off, num
from domain.cart import CartContext, CartLine
from domain.product import Product
from domain.promotion import DiscountScope, Promotion
from services.promotion_engine import evaluate_promotions, process_cart

P_A = UUID("00000000-0000-0000-0000-0000000000aa")


def _context(price: str, quantity: int = 1) -> CartContext:
    return CartContext.from_lines("cart-1", [CartLine.price(Product(P_A, "sku-a", Decimal(price)), quantity)])


def _percent(code: str, priority: int, percentage: str) -> Promotion:
    return Promotion(
        code=code,
        name=code,
        description=f"{code} description",
        priority=priority,
        rules=(action("PercentageDiscountAction", num("percentage", percentage)),),
    )


def test_discounts_follow_priority_order() -> None:
    """Verify priority 1 discounts precede priority 2 regardless of input order."""

    discounts = evaluate_promotions(
        [_percent("B", 2, "0.05"), _percent("A", 1, "0.10")],
        _context("1000"),
    )

    assert [d.code for d in discounts] == ["A", "B"]


def test_promotions_do_not_cascade() -> None:
    """Verify each promotion computes from the original subtotal."""

    discounts = evaluate_promotions(
        [_percent("A", 1, "0.10"), _percent("B", 2, "0.10")],
        _context("1000"),
    )

    assert [d.amount for d in discounts] == [Decimal("100.00"), Decimal("100.00")]


def test_failing_condition_short_circuits_all_actions() -> None:
    """Verify one failing condition among several yields zero discounts."""

    promotion = Promotion(
        code="GATED",
        name="Gated",
        priority=1,
        rules=(
            condition("MinQuantityCondition", num("minQuantity", "1")),
            condition("MinCartTotalCondition", num("minTotal", "999999")),
            action("PercentageDiscountAction", num("percentage", "0.10")),
            action("FixedAmountDiscountAction", num("amount", "100")),
        ),
    )

    assert evaluate_promotions([promotion], _context("1000")) == []


def test_unknown_condition_key_abandons_promotion() -> None:
    promotion = Promotion(
        code="UNKNOWN",
        name="Unknown",
        priority=1,
        rules=(
            condition("NoSuchCondition"),
            action("FixedAmountDiscountAction", num("amount", "100")),
        ),
    )

    assert evaluate_promotions([promotion], _context("1000")) == []


def test_unknown_action_key_is_skipped() -> None:
    """Verify an unknown action is ignored while the other actions still apply."""

    promotion = Promotion(
        code="MIXED",
        name="Mixed",
        priority=1,
        rules=(
            action("NoSuchAction"),
            action("FixedAmountDiscountAction", num("amount", "100")),
        ),
    )

    discounts = evaluate_promotions([promotion], _context("1000"))

    assert [(d.code, d.amount) for d in discounts] == [("MIXED", Decimal("100.00"))]


def test_actions_keep_declared_order_within_promotion() -> None:
    promotion = Promotion(
        code="TWO",
        name="Two actions",
        priority=1,
        rules=(
            action("FixedAmountDiscountAction", num("amount", "50")),
            action("PercentageDiscountAction", num("percentage", "0.10")),
        ),
    )

    discounts = evaluate_promotions([promotion], _context("1000"))

    assert [d.amount for d in discounts] == [Decimal("50.00"), Decimal("100.00")]
    assert all(d.scope is DiscountScope.ORDER for d in discounts)


def test_non_positive_discounts_are_dropped() -> None:
    """Verify a zero-amount action contributes nothing."""

    discounts = evaluate_promotions([_percent("ZERO", 1, "0")], _context("1000"))
    assert discounts == []


def test_inactive_promotions_are_ignored() -> None:
    inactive = Promotion(
        code="OFF",
        name="Off",
        priority=1,
        active=False,
        rules=(action("FixedAmountDiscountAction", num("amount", "100")),),
    )

    assert evaluate_promotions([inactive], _context("1000")) == []


def test_process_cart_uses_active_promotions(store) -> None:
    """Verify process_cart fetches promotions from the repository."""

    store.promotions = [five_thousand_off()]

    applied = process_cart(_context("20000", 3))
    skipped = process_cart(_context("20000", 2))

    assert [(d.code, d.amount) for d in applied] == [("PROMO_5000_OFF", Decimal("5000.00"))]
    assert skipped == []
