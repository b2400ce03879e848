"""
Order repository (persistence).

Confirmed orders are written through the `confirm_checkout_order` PostgreSQL
function, which in a single transaction:
- Decrements remaining_uses for each redeemed limited-use coupon, only while
  remaining_uses > 0 (conditional update, never below zero)
- Inserts the order, its lines and its discounts
If any decrement is rejected the whole transaction is rolled back and the
function reports COUPON_EXHAUSTED.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional
from uuid import UUID

from postgrest.exceptions import APIError

from domain.order import OrderCalculationResult
from domain.time import to_iso_utc
from repositories.client import get_supabase

COUPON_EXHAUSTED: str = "COUPON_EXHAUSTED"


@dataclass(frozen=True, slots=True)
class AtomicOrderResult:
    """Result from the confirm_checkout_order PostgreSQL function."""
    success: bool
    order_id: Optional[UUID]
    error_code: Optional[str]
    error_message: Optional[str]


def _order_payload(
    order_id: UUID,
    calculation: OrderCalculationResult,
    created_at: datetime,
) -> Dict[str, Any]:
    pickup = calculation.pickup_address
    return {
        "p_order_id": str(order_id),
        "p_cart_id": str(calculation.cart_id),
        "p_payment_method": calculation.payment_method.value,
        "p_fulfillment_type": calculation.fulfillment_type.value,
        "p_subtotal": str(calculation.subtotal),
        "p_total_discount": str(calculation.total_discount),
        "p_shipping_cost": str(calculation.shipping_cost),
        "p_total": str(calculation.final_total),
        "p_coupon_codes": ",".join(calculation.coupon_codes) or None,
        "p_pickup_address": (
            {"street": pickup.street, "city": pickup.city, "zone_id": pickup.zone_id}
            if pickup is not None else None
        ),
        "p_created_at": to_iso_utc(created_at, name="created_at"),
        "p_lines": [
            {
                "sku": line.sku,
                "quantity": line.quantity,
                "unit_price": str(line.unit_price),
                "subtotal": str(line.line_subtotal),
            }
            for line in calculation.lines
        ],
        "p_discounts": [
            {
                "code": discount.code,
                "scope": discount.scope.value,
                "description": discount.description,
                "amount": str(discount.amount),
            }
            for discount in calculation.discounts
        ],
        "p_redeemed_coupon_codes": list(calculation.redeemed_coupon_codes),
    }


def _result_from_json(result: Any) -> AtomicOrderResult:
    if isinstance(result, dict) and result.get("success") is True:
        return AtomicOrderResult(
            success=True,
            order_id=UUID(str(result["order_id"])),
            error_code=None,
            error_message=None,
        )

    data = result if isinstance(result, dict) else {}
    return AtomicOrderResult(
        success=False,
        order_id=None,
        error_code=data.get("error", "UNKNOWN"),
        error_message=data.get("message"),
    )


def record_checkout_order(
    order_id: UUID,
    calculation: OrderCalculationResult,
    created_at: datetime,
) -> AtomicOrderResult:
    """
    Persist a confirmed order and consume its coupon uses atomically.

    Args:
        order_id: Identifier to store the order under
        calculation: The checkout calculation being confirmed
        created_at: UTC confirmation timestamp

    Returns:
        AtomicOrderResult with success status and order_id or error
    """
    try:
        response = get_supabase().rpc(
            "confirm_checkout_order",
            _order_payload(order_id, calculation, created_at),
        ).execute()

        error = getattr(response, "error", None)
        if error:
            return AtomicOrderResult(
                success=False,
                order_id=None,
                error_code="RPC_ERROR",
                error_message=str(error),
            )

        return _result_from_json(response.data)

    except APIError as e:
        # supabase-py raises APIError when the function returns a JSON object,
        # for both success and error payloads.
        try:
            error_data = e.json() if callable(getattr(e, "json", None)) else {}
        except ValueError:
            error_data = {}

        if isinstance(error_data, dict) and error_data.get("success") is True:
            return _result_from_json(error_data)

        return AtomicOrderResult(
            success=False,
            order_id=None,
            error_code=(error_data or {}).get("error", "API_ERROR"),
            error_message=(error_data or {}).get("message", str(e)),
        )


__all__ = [
    "AtomicOrderResult",
    "COUPON_EXHAUSTED",
    "record_checkout_order",
]
