"""
Product repository for catalog prices and physical dimensions.

Both lookups are batched: one query for any number of products.
"""

from __future__ import annotations

from typing import Collection, Dict
from uuid import UUID

from domain.money import to_decimal
from domain.product import Product, ProductDimension
from repositories.client import get_supabase

_PRODUCTS_TABLE: str = "products"
_DIMENSIONS_TABLE: str = "product_dimensions"


def get_products_by_ids(product_ids: Collection[UUID]) -> Dict[UUID, Product]:
    """
    Get the current catalog entry for each product.

    Args:
        product_ids: Product identifiers (duplicates are fine)

    Returns:
        Dictionary mapping product_id to Product. Unknown IDs are absent.

    Example:
        products = get_products_by_ids({item.product_id for item in cart.items})
    """
    ids = sorted({str(pid) for pid in product_ids})
    if not ids:
        return {}

    response = (
        get_supabase().table(_PRODUCTS_TABLE)
        .select("product_id, sku, unit_price")
        .in_("product_id", ids)
        .execute()
    )

    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to fetch products: {error}")

    rows = getattr(response, "data", None) or []

    result: Dict[UUID, Product] = {}
    for row in rows:
        product = Product(
            product_id=UUID(str(row["product_id"])),
            sku=str(row["sku"]),
            unit_price=to_decimal(row["unit_price"]),
        )
        result[product.product_id] = product
    return result


def get_dimensions_for_products(product_ids: Collection[UUID]) -> Dict[UUID, ProductDimension]:
    """
    Get physical dimensions for many products in a single query.

    Returns:
        Dictionary mapping product_id to ProductDimension. Products without
        configured dimensions are absent.
    """
    ids = sorted({str(pid) for pid in product_ids})
    if not ids:
        return {}

    response = (
        get_supabase().table(_DIMENSIONS_TABLE)
        .select("product_id, height, width, depth")
        .in_("product_id", ids)
        .execute()
    )

    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to fetch product dimensions: {error}")

    rows = getattr(response, "data", None) or []

    result: Dict[UUID, ProductDimension] = {}
    for row in rows:
        dimension = ProductDimension(
            product_id=UUID(str(row["product_id"])),
            height=to_decimal(row["height"]),
            width=to_decimal(row["width"]),
            depth=to_decimal(row["depth"]),
        )
        result[dimension.product_id] = dimension
    return result


__all__ = [
    "get_products_by_ids",
    "get_dimensions_for_products",
]
