"""
Cart repository (persistence).

Loads a cart with its items and shipping destination. Carts store product
references and quantities only; prices are resolved from the catalog by the
checkout service.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional
from uuid import UUID

from domain.cart import Cart, CartItem, ShippingAddress
from repositories.client import get_supabase

_CARTS_TABLE: str = "carts"
_CART_ITEMS_TABLE: str = "cart_items"


def _row_to_address(row: Mapping[str, Any]) -> Optional[ShippingAddress]:
    street = row.get("shipping_street")
    city = row.get("shipping_city")
    zone_id = row.get("shipping_zone_id")
    if street is None and city is None and zone_id is None:
        return None
    return ShippingAddress(street=street, city=city, zone_id=zone_id)


def get_cart_by_id(cart_id: UUID) -> Optional[Cart]:
    """
    Get a cart and its items by ID.

    Items are returned in the order they were added to the cart.

    Returns:
        Cart domain model or None if not found
    """
    supabase = get_supabase()

    response = (
        supabase.table(_CARTS_TABLE)
        .select("*")
        .eq("cart_id", str(cart_id))
        .limit(1)
        .execute()
    )

    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to fetch cart: {error}")

    rows = getattr(response, "data", None) or []
    if not rows:
        return None

    items_response = (
        supabase.table(_CART_ITEMS_TABLE)
        .select("product_id, quantity, created_at_utc")
        .eq("cart_id", str(cart_id))
        .order("created_at_utc")
        .execute()
    )

    items_error = getattr(items_response, "error", None)
    if items_error:
        raise RuntimeError(f"Failed to fetch cart items: {items_error}")

    item_rows = getattr(items_response, "data", None) or []

    return Cart(
        cart_id=UUID(str(rows[0]["cart_id"])),
        items=tuple(
            CartItem(product_id=UUID(str(row["product_id"])), quantity=int(row["quantity"]))
            for row in item_rows
        ),
        shipping_address=_row_to_address(rows[0]),
    )


__all__ = ["get_cart_by_id"]
