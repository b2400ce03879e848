"""
API Request and Response Models.

Pydantic models for validating API requests and serializing responses.
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field


# ============================================================================
# Checkout Models
# ============================================================================

class CheckoutRequest(BaseModel):
    """Request to quote or confirm a checkout."""
    cart_id: UUID
    payment_method: str = Field(..., pattern="^(DEBIT|CREDIT)$")
    coupon_codes: List[str] = Field(default_factory=list, description="Coupon codes in priority order")
    pickup_facility_id: Optional[UUID] = Field(None, description="Set to collect at a facility instead of delivery")

    class Config:
        json_schema_extra = {
            "example": {
                "cart_id": "123e4567-e89b-12d3-a456-426614174000",
                "payment_method": "DEBIT",
                "coupon_codes": ["10DESC", "FREE_SHIPPING"],
                "pickup_facility_id": None
            }
        }


class LineItemResponse(BaseModel):
    """One priced cart line."""
    product_id: UUID
    sku: str
    quantity: int
    unit_price: Decimal
    subtotal: Decimal


class DiscountResponse(BaseModel):
    """One applied discount."""
    code: str
    scope: str  # "ITEM", "ORDER", "PAYMENT" or "SHIPPING"
    description: Optional[str] = None
    amount: Decimal


class AddressResponse(BaseModel):
    street: Optional[str] = None
    city: Optional[str] = None
    zone_id: Optional[str] = None


class QuoteResponse(BaseModel):
    """Full checkout breakdown."""
    cart_id: UUID
    payment_method: str
    fulfillment_type: str  # "DELIVERY" or "PICKUP"
    pickup_address: Optional[AddressResponse] = None
    items: List[LineItemResponse]
    subtotal: Decimal
    discounts: List[DiscountResponse]
    total_discount: Decimal
    shipping_cost: Decimal
    total: Decimal
    currency: str

    class Config:
        json_schema_extra = {
            "example": {
                "cart_id": "123e4567-e89b-12d3-a456-426614174000",
                "payment_method": "CREDIT",
                "fulfillment_type": "DELIVERY",
                "pickup_address": None,
                "items": [
                    {
                        "product_id": "123e4567-e89b-12d3-a456-426614174001",
                        "sku": "p-003",
                        "quantity": 3,
                        "unit_price": "20000",
                        "subtotal": "60000"
                    }
                ],
                "subtotal": "60000.00",
                "discounts": [
                    {
                        "code": "PROMO_5000_OFF",
                        "scope": "ORDER",
                        "description": "5000 off orders over 50000",
                        "amount": "5000.00"
                    }
                ],
                "total_discount": "5000.00",
                "shipping_cost": "3000.00",
                "total": "58000.00",
                "currency": "CLP"
            }
        }


class ConfirmResponse(QuoteResponse):
    """Breakdown of a confirmed order."""
    order_id: UUID
    status: str
    created_at: datetime


# ============================================================================
# Coupon Models
# ============================================================================

class CouponRequest(BaseModel):
    """Create or replace a coupon."""
    code: str = Field(..., min_length=1, max_length=64)
    coupon_type: str = Field(..., pattern="^(ORDER|SHIPPING)$")
    description: Optional[str] = None
    percentage: Optional[Decimal] = Field(None, ge=0, le=1, description="0.10 means 10%")
    amount: Optional[Decimal] = Field(None, ge=0)
    active: Optional[bool] = None
    stackable: Optional[bool] = None
    remaining_uses: Optional[int] = Field(None, ge=0, description="Omit for unlimited uses")
    expiry: Optional[datetime] = None

    class Config:
        json_schema_extra = {
            "example": {
                "code": "10DESC",
                "coupon_type": "ORDER",
                "description": "10% off",
                "percentage": "0.10",
                "amount": None,
                "active": True,
                "stackable": False,
                "remaining_uses": 100,
                "expiry": "2026-12-31T23:59:59Z"
            }
        }


class CouponResponse(BaseModel):
    code: str
    coupon_type: str
    description: Optional[str] = None
    percentage: Optional[Decimal] = None
    amount: Optional[Decimal] = None
    active: bool
    stackable: bool
    remaining_uses: Optional[int] = None
    expiry: Optional[datetime] = None


# ============================================================================
# Error Models
# ============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str
    detail: Optional[str] = None
    status_code: int
