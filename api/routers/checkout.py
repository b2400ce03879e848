"""
Checkout API Endpoints.

Endpoints for previewing (quote) and confirming a checkout.
"""

import logging

from fastapi import APIRouter, HTTPException

from api.models import (
    AddressResponse,
    CheckoutRequest as APICheckoutRequest,
    ConfirmResponse,
    DiscountResponse,
    LineItemResponse,
    QuoteResponse,
)
from domain.order import OrderCalculationResult
from domain.payment import PaymentMethod
from repositories.client import checkout_currency
from services.checkout_service import CheckoutRequest, confirm, quote
from services.errors import (
    CouponUnavailableError,
    InvalidStateError,
    NotFoundError,
    OrderPersistenceError,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _to_service_request(request: APICheckoutRequest) -> CheckoutRequest:
    return CheckoutRequest(
        cart_id=request.cart_id,
        payment_method=PaymentMethod(request.payment_method),
        coupon_codes=tuple(request.coupon_codes),
        pickup_facility_id=request.pickup_facility_id,
    )


def _breakdown(result: OrderCalculationResult) -> dict:
    pickup = result.pickup_address
    return {
        "cart_id": result.cart_id,
        "payment_method": result.payment_method.value,
        "fulfillment_type": result.fulfillment_type.value,
        "pickup_address": (
            AddressResponse(street=pickup.street, city=pickup.city, zone_id=pickup.zone_id)
            if pickup is not None else None
        ),
        "items": [
            LineItemResponse(
                product_id=line.product_id,
                sku=line.sku,
                quantity=line.quantity,
                unit_price=line.unit_price,
                subtotal=line.line_subtotal,
            )
            for line in result.lines
        ],
        "subtotal": result.subtotal,
        "discounts": [
            DiscountResponse(
                code=discount.code,
                scope=discount.scope.value,
                description=discount.description,
                amount=discount.amount,
            )
            for discount in result.discounts
        ],
        "total_discount": result.total_discount,
        "shipping_cost": result.shipping_cost,
        "total": result.final_total,
        "currency": checkout_currency(),
    }


@router.post(
    "/checkout/quote",
    response_model=QuoteResponse,
    summary="Quote Checkout",
    description="Price a cart with promotions, payment discount, shipping and coupons. Nothing is stored."
)
def quote_checkout(request: APICheckoutRequest):
    """
    Calculate the checkout breakdown for a cart.

    **How it works:**
    1. Re-prices every cart line from the current catalog
    2. Applies active promotions in priority order
    3. Applies the payment method discount
    4. Computes shipping (or zero for pickup)
    5. Applies coupons in the order given

    Quoting is repeatable: it never consumes coupon uses.

    **Example request:**
    ```json
    {
      "cart_id": "123e4567-e89b-12d3-a456-426614174000",
      "payment_method": "DEBIT",
      "coupon_codes": ["FREE_SHIPPING"]
    }
    ```
    """
    try:
        result = quote(_to_service_request(request))
        return QuoteResponse(**_breakdown(result))

    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidStateError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception(f"Quote failed for cart {request.cart_id}")
        raise HTTPException(
            status_code=500,
            detail=f"Failed to calculate quote: {str(e)}"
        )


@router.post(
    "/checkout/confirm",
    response_model=ConfirmResponse,
    status_code=201,
    summary="Confirm Checkout",
    description="Price a cart exactly as /checkout/quote does and store the order."
)
def confirm_checkout(request: APICheckoutRequest):
    """
    Confirm a checkout and create an order.

    Limited-use coupons are consumed together with the order write. If one ran
    out in the meantime, nothing is stored and 409 is returned; quote again
    and retry.
    """
    try:
        order = confirm(_to_service_request(request))
        return ConfirmResponse(
            order_id=order.order_id,
            status=order.status,
            created_at=order.created_at,
            **_breakdown(order.calculation),
        )

    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidStateError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except CouponUnavailableError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except OrderPersistenceError as e:
        raise HTTPException(status_code=500, detail=str(e))
    except Exception as e:
        logger.exception(f"Confirm failed for cart {request.cart_id}")
        raise HTTPException(
            status_code=500,
            detail=f"Failed to confirm checkout: {str(e)}"
        )
