"""
Domain: Catalog products and their physical dimensions.

The catalog is the only source of truth for unit prices: carts store product
references and quantities, never prices.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from .money import ZERO


@dataclass(frozen=True, slots=True)
class Product:
    """Catalog product with its current unit price."""

    product_id: UUID
    sku: str
    unit_price: Decimal

    def __post_init__(self) -> None:
        if self.unit_price < ZERO:
            raise ValueError("unit_price must be >= 0")


@dataclass(frozen=True, slots=True)
class ProductDimension:
    """
    Physical size of one unit of a product.

    Units are whatever the size categories are configured in; the pricing
    core only compares products against categories, never converts.
    """

    product_id: UUID
    height: Decimal
    width: Decimal
    depth: Decimal

    @property
    def volume(self) -> Decimal:
        return self.height * self.width * self.depth
