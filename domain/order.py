"""
Domain: Checkout calculation results and confirmed orders.

The same OrderCalculationResult backs both a quote (never persisted) and a
confirmation (persisted as an immutable CheckoutOrder).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, Tuple
from uuid import UUID

from .cart import CartLine, ShippingAddress
from .payment import PaymentMethod
from .promotion import DiscountDetail
from .time import require_utc_timestamp


class FulfillmentType(str, Enum):
    DELIVERY = "DELIVERY"
    PICKUP = "PICKUP"


@dataclass(frozen=True, slots=True)
class OrderCalculationResult:
    """
    Full monetary breakdown of one checkout calculation.

    Discounts are ordered: promotions (ascending priority), then the payment
    discount, then coupons in selection order.

    redeemed_coupon_codes lists the applied coupons whose usage counter is
    finite; they are decremented only when the order is confirmed.
    """

    cart_id: UUID
    payment_method: PaymentMethod
    lines: Tuple[CartLine, ...]
    subtotal: Decimal
    discounts: Tuple[DiscountDetail, ...]
    total_discount: Decimal
    shipping_cost: Decimal
    final_total: Decimal
    fulfillment_type: FulfillmentType
    pickup_address: Optional[ShippingAddress] = None
    coupon_codes: Tuple[str, ...] = ()
    redeemed_coupon_codes: Tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class CheckoutOrder:
    """Immutable record of a confirmed order."""

    order_id: UUID
    created_at: datetime
    calculation: OrderCalculationResult
    status: str = "CONFIRMED"

    def __post_init__(self) -> None:
        require_utc_timestamp("created_at", self.created_at)
