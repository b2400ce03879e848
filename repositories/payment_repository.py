"""
Payment discount repository.

Fetches the discount configured for a payment method, if any.
"""

from __future__ import annotations

from typing import Optional

from domain.money import to_optional_decimal
from domain.payment import PaymentDiscount, PaymentMethod
from repositories.client import get_supabase

_PAYMENT_DISCOUNTS_TABLE: str = "payment_discounts"


def get_payment_discount(payment_method: PaymentMethod) -> Optional[PaymentDiscount]:
    """
    Get the discount configured for a payment method.

    Args:
        payment_method: DEBIT or CREDIT

    Returns:
        PaymentDiscount or None if the method has no discount

    Example:
        discount = get_payment_discount(PaymentMethod.DEBIT)
        # PaymentDiscount(percentage=Decimal('0.10'), ...)
    """
    response = (
        get_supabase().table(_PAYMENT_DISCOUNTS_TABLE)
        .select("*")
        .eq("payment_method", payment_method.value)
        .limit(1)
        .execute()
    )

    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to fetch payment discount: {error}")

    rows = getattr(response, "data", None) or []
    if not rows:
        return None

    row = rows[0]
    return PaymentDiscount(
        payment_method=PaymentMethod(str(row["payment_method"])),
        percentage=to_optional_decimal(row.get("percentage")),
        amount=to_optional_decimal(row.get("amount")),
        description=row.get("description"),
    )


__all__ = ["get_payment_discount"]
