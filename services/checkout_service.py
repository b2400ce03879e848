"""
Checkout service: prices a cart end to end.

Pipeline (identical for quote and confirm):
    LOAD CART -> PRICE LINES -> APPLY PROMOTIONS -> APPLY PAYMENT DISCOUNT
    -> RESOLVE FULFILLMENT -> APPLY COUPONS -> FINALIZE

quote() never writes anything. confirm() additionally stores the result
through record_checkout_order(), which consumes limited coupon uses and
writes the order in one transaction.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional, Tuple
from uuid import UUID, uuid4

from domain.cart import CartContext, CartLine, ShippingAddress
from domain.money import ZERO, round_money, sum_money
from domain.order import CheckoutOrder, FulfillmentType, OrderCalculationResult
from domain.payment import PaymentMethod
from domain.promotion import DiscountDetail, DiscountScope
from domain.time import utc_now
from repositories.cart_repository import get_cart_by_id
from repositories.order_repository import COUPON_EXHAUSTED, record_checkout_order
from repositories.payment_repository import get_payment_discount
from repositories.product_repository import get_products_by_ids
from repositories.shipping_repository import get_facility_by_id
from services.coupon_service import apply_coupons, validate_and_get_coupons
from services.errors import (
    CouponUnavailableError,
    InvalidStateError,
    NotFoundError,
    OrderPersistenceError,
)
from services.promotion_engine import process_cart
from services.shipping_service import calculate_shipping_cost

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CheckoutRequest:
    """
    Input for a checkout calculation.

    coupon_codes: raw user input, in priority order
    pickup_facility_id: set for PICKUP; None means DELIVERY
    """
    cart_id: UUID
    payment_method: PaymentMethod
    coupon_codes: Tuple[str, ...] = ()
    pickup_facility_id: Optional[UUID] = None


def _price_lines(cart_id: UUID) -> Tuple[Tuple[CartLine, ...], Optional[ShippingAddress]]:
    cart = get_cart_by_id(cart_id)
    if cart is None:
        raise NotFoundError(f"Cart {cart_id} not found")

    product_ids = list(dict.fromkeys(item.product_id for item in cart.items))
    products = get_products_by_ids(product_ids) if product_ids else {}

    lines: List[CartLine] = []
    for item in cart.items:
        product = products.get(item.product_id)
        if product is None:
            raise NotFoundError(f"Product {item.product_id} not found")
        lines.append(CartLine.price(product, item.quantity))

    return tuple(lines), cart.shipping_address


def _payment_discount(
    payment_method: PaymentMethod,
    base: Decimal,
) -> Optional[DiscountDetail]:
    config = get_payment_discount(payment_method)
    if config is None:
        return None

    amount = config.compute(base)
    if amount <= ZERO:
        return None

    return DiscountDetail(
        code=payment_method.value,
        scope=DiscountScope.PAYMENT,
        description=config.description or f"{payment_method.value} payment discount",
        amount=amount,
    )


def calculate_order(request: CheckoutRequest) -> OrderCalculationResult:
    """
    Run the full checkout calculation without side effects.

    Args:
        request: Cart, payment method, coupon codes and optional pickup facility

    Returns:
        OrderCalculationResult with lines, ordered discounts and totals

    Raises:
        NotFoundError: Cart, product or pickup facility does not exist
        InvalidStateError: Pickup facility does not support pickup

    Example:
        result = calculate_order(CheckoutRequest(cart_id=cid, payment_method=PaymentMethod.DEBIT))
        print(result.final_total)  # Decimal('58000.00')
    """
    lines, shipping_address = _price_lines(request.cart_id)
    context = CartContext.from_lines(str(request.cart_id), lines, request.payment_method)

    discounts: List[DiscountDetail] = list(process_cart(context))
    promotion_total = sum_money(d.amount for d in discounts)

    payment = _payment_discount(request.payment_method, context.subtotal - promotion_total)
    if payment is not None:
        discounts.append(payment)

    pickup_address = None
    if request.pickup_facility_id is not None:
        facility = get_facility_by_id(request.pickup_facility_id)
        if facility is None:
            raise NotFoundError(f"Facility {request.pickup_facility_id} not found")
        if not facility.pickup_available:
            raise InvalidStateError(f"Facility {facility.name} does not support pickup")
        fulfillment = FulfillmentType.PICKUP
        pickup_address = facility.logistic_address
        shipping_cost = ZERO
    else:
        fulfillment = FulfillmentType.DELIVERY
        shipping_cost = calculate_shipping_cost(shipping_address, lines)

    coupons = validate_and_get_coupons(request.coupon_codes)
    before_coupons = context.subtotal - sum_money(d.amount for d in discounts)
    applied = apply_coupons(coupons, before_coupons, shipping_cost)
    discounts.extend(applied.discounts)

    total_discount = sum_money(d.amount for d in discounts)
    final_total = round_money(context.subtotal - total_discount + applied.shipping_cost)
    if final_total < ZERO:
        logger.warning(
            f"Discounts exceed order value for cart {request.cart_id}; total floored at 0",
            extra={"cart_id": str(request.cart_id)},
        )
        final_total = round_money(ZERO)

    return OrderCalculationResult(
        cart_id=request.cart_id,
        payment_method=request.payment_method,
        lines=lines,
        subtotal=round_money(context.subtotal),
        discounts=tuple(discounts),
        total_discount=round_money(total_discount),
        shipping_cost=round_money(applied.shipping_cost),
        final_total=final_total,
        fulfillment_type=fulfillment,
        pickup_address=pickup_address,
        coupon_codes=tuple(request.coupon_codes),
        redeemed_coupon_codes=applied.redeemed_codes,
    )


def quote(request: CheckoutRequest) -> OrderCalculationResult:
    """Preview a checkout. Never persists and never consumes coupon uses."""

    result = calculate_order(request)
    logger.debug(f"Quoted cart {request.cart_id}: total {result.final_total}")
    return result


def confirm(request: CheckoutRequest) -> CheckoutOrder:
    """
    Calculate and persist an order.

    The order write and the coupon usage decrements are one atomic call; on
    any failure nothing is committed.

    Raises:
        NotFoundError / InvalidStateError: As for quote()
        CouponUnavailableError: A limited coupon ran out before the write
        OrderPersistenceError: The order could not be stored
    """
    logger.info(
        f"Confirming checkout for cart {request.cart_id}",
        extra={"cart_id": str(request.cart_id)},
    )

    calculation = calculate_order(request)
    order_id = uuid4()
    created_at = utc_now()

    result = record_checkout_order(order_id, calculation, created_at)
    if not result.success:
        if result.error_code == COUPON_EXHAUSTED:
            raise CouponUnavailableError(
                calculation.redeemed_coupon_codes,
                result.error_message,
            )
        raise OrderPersistenceError(
            f"Failed to store order for cart {request.cart_id}: "
            f"{result.error_code} - {result.error_message}"
        )

    order = CheckoutOrder(
        order_id=result.order_id or order_id,
        created_at=created_at,
        calculation=calculation,
    )
    logger.info(
        f"Confirmed order {order.order_id} for cart {request.cart_id}: total {calculation.final_total}",
        extra={"cart_id": str(request.cart_id), "order_id": str(order.order_id)},
    )
    return order


__all__ = [
    "CheckoutRequest",
    "calculate_order",
    "quote",
    "confirm",
]
