"""
Coupon service for selecting and applying user-supplied coupon codes.

Handles:
- Normalization (trim, upper-case) and de-duplication preserving the user's
  order, which is their priority order
- Validity (active, not expired, not exhausted)
- At most one coupon per coupon type, earliest code wins
- At most one non-stackable coupon overall
- Application against the order total and the shipping cost

Usage counters are not touched here. apply_coupons reports which applied
coupons have a finite counter; the checkout confirmation consumes them
atomically together with the order write.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from domain.coupon import Coupon, CouponType
from domain.money import ZERO, round_money
from domain.promotion import DiscountDetail, DiscountScope
from domain.time import utc_now
from repositories.coupon_repository import find_coupons_by_codes

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CouponApplication:
    """
    Outcome of applying the selected coupons.

    discounts: one entry per coupon that produced a positive discount, in
        selection order
    shipping_cost: shipping cost after SHIPPING coupons (zero if one applied)
    redeemed_codes: applied coupons whose remaining_uses must be decremented
        when the order is confirmed
    """
    discounts: Tuple[DiscountDetail, ...]
    shipping_cost: Decimal
    redeemed_codes: Tuple[str, ...]


def normalize_coupon_codes(codes: Optional[Iterable[Optional[str]]]) -> List[str]:
    """
    Drop blank codes, trim and upper-case the rest, and de-duplicate.

    First occurrence wins, so the result keeps the user's priority order.

    Example:
        normalize_coupon_codes([" free_shipping", None, "10desc", "FREE_SHIPPING "])
        # ['FREE_SHIPPING', '10DESC']
    """
    if not codes:
        return []

    normalized: List[str] = []
    seen: set[str] = set()
    for code in codes:
        if code is None or not code.strip():
            continue
        value = code.strip().upper()
        if value not in seen:
            seen.add(value)
            normalized.append(value)
    return normalized


def apply_stackability_rule(coupons: Iterable[Coupon]) -> List[Coupon]:
    """
    Keep every stackable coupon and only the first non-stackable one.

    Any later non-stackable coupon is dropped, whatever its type.
    """
    result: List[Coupon] = []
    non_stackable_found = False

    for coupon in coupons:
        if not coupon.stackable:
            if non_stackable_found:
                logger.debug(f"Dropping non-stackable coupon {coupon.code}")
                continue
            non_stackable_found = True
        result.append(coupon)

    return result


def select_coupons(
    normalized_codes: List[str],
    candidates: Iterable[Coupon],
    as_of: datetime,
) -> List[Coupon]:
    """
    Choose the applicable coupons from fetched candidates.

    Args:
        normalized_codes: Output of normalize_coupon_codes (priority order)
        candidates: Coupon records matching those codes
        as_of: UTC time used for expiry checks

    Returns:
        Selected coupons in application order
    """
    valid_by_code: Dict[str, Coupon] = {}
    for coupon in candidates:
        if coupon.is_valid(as_of):
            valid_by_code.setdefault(coupon.normalized_code, coupon)
        else:
            logger.debug(f"Ignoring invalid coupon {coupon.code}")

    # One coupon per type, earliest user priority wins; dict keeps insertion order.
    chosen: Dict[CouponType, Coupon] = {}
    for code in normalized_codes:
        coupon = valid_by_code.get(code)
        if coupon is not None and coupon.coupon_type not in chosen:
            chosen[coupon.coupon_type] = coupon

    return apply_stackability_rule(chosen.values())


def validate_and_get_coupons(
    codes: Optional[Iterable[Optional[str]]],
    as_of: Optional[datetime] = None,
) -> List[Coupon]:
    """
    Resolve raw user-supplied codes into the coupons to apply.

    Unknown, inactive, expired and exhausted codes are silently excluded.

    Example:
        coupons = validate_and_get_coupons(["10desc", "FREE_SHIPPING"])
        # [Coupon(code='10DESC', ...), Coupon(code='FREE_SHIPPING', ...)]
    """
    normalized = normalize_coupon_codes(codes)
    if not normalized:
        return []

    candidates = find_coupons_by_codes(normalized)
    return select_coupons(normalized, candidates, as_of or utc_now())


def apply_coupons(
    coupons: Iterable[Coupon],
    order_total_before_coupons: Decimal,
    shipping_cost: Decimal,
) -> CouponApplication:
    """
    Compute the discounts granted by the selected coupons.

    - SHIPPING: if shipping is still positive, discount the whole shipping
      cost and set it to zero.
    - ORDER: percentage * order_total_before_coupons + fixed amount, rounded;
      applied only if positive.

    Args:
        coupons: Output of validate_and_get_coupons, in order
        order_total_before_coupons: subtotal - promotion - payment discounts
        shipping_cost: Current shipping cost

    Returns:
        CouponApplication with discounts, the new shipping cost and the
        codes to redeem on confirmation
    """
    discounts: List[DiscountDetail] = []
    redeemed: List[str] = []
    current_shipping = shipping_cost

    for coupon in coupons:
        description = coupon.display_description

        if coupon.coupon_type is CouponType.SHIPPING:
            if current_shipping is None or current_shipping <= ZERO:
                continue
            discounts.append(DiscountDetail(
                code=coupon.code,
                scope=DiscountScope.SHIPPING,
                description=description,
                amount=round_money(current_shipping),
            ))
            current_shipping = ZERO

        elif coupon.coupon_type is CouponType.ORDER:
            amount = ZERO
            if coupon.percentage is not None:
                amount += order_total_before_coupons * coupon.percentage
            if coupon.amount is not None:
                amount += coupon.amount
            amount = round_money(amount)

            if amount <= ZERO:
                continue
            discounts.append(DiscountDetail(
                code=coupon.code,
                scope=DiscountScope.ORDER,
                description=description,
                amount=amount,
            ))

        else:
            continue

        if coupon.has_limited_uses:
            redeemed.append(coupon.code)

    return CouponApplication(
        discounts=tuple(discounts),
        shipping_cost=current_shipping,
        redeemed_codes=tuple(redeemed),
    )


__all__ = [
    "CouponApplication",
    "normalize_coupon_codes",
    "apply_stackability_rule",
    "select_coupons",
    "validate_and_get_coupons",
    "apply_coupons",
]
