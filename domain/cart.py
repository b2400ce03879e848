"""
Domain: Carts and the pricing snapshot built from them.

Contract excerpts implemented here:
- A cart stores product references and quantities; prices are resolved from
  the catalog at calculation time.
- A CartLine's subtotal is unit_price * quantity, recomputed from the current
  catalog price.
- A CartContext is immutable once constructed and its subtotal equals the sum
  of its line subtotals.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Tuple
from uuid import UUID

from .money import ZERO, sum_money
from .payment import PaymentMethod
from .product import Product


@dataclass(frozen=True, slots=True)
class ShippingAddress:
    street: Optional[str] = None
    city: Optional[str] = None
    zone_id: Optional[str] = None

    def has_zone(self) -> bool:
        return self.zone_id is not None and self.zone_id.strip() != ""


@dataclass(frozen=True, slots=True)
class CartItem:
    """A product reference and quantity as stored in a cart (no price)."""

    product_id: UUID
    quantity: int

    def __post_init__(self) -> None:
        if self.quantity < 1:
            raise ValueError("quantity must be >= 1")


@dataclass(frozen=True, slots=True)
class Cart:
    cart_id: UUID
    items: Tuple[CartItem, ...] = ()
    shipping_address: Optional[ShippingAddress] = None


@dataclass(frozen=True, slots=True)
class CartLine:
    """One priced item in a cart."""

    product_id: UUID
    sku: str
    quantity: int
    unit_price: Decimal
    line_subtotal: Decimal

    def __post_init__(self) -> None:
        if self.quantity < 1:
            raise ValueError("quantity must be >= 1")
        if self.unit_price < ZERO:
            raise ValueError("unit_price must be >= 0")
        if self.line_subtotal != self.unit_price * self.quantity:
            raise ValueError("line_subtotal must equal unit_price * quantity")

    @staticmethod
    def price(product: Product, quantity: int) -> "CartLine":
        """Build a line from the product's current catalog price."""

        return CartLine(
            product_id=product.product_id,
            sku=product.sku,
            quantity=quantity,
            unit_price=product.unit_price,
            line_subtotal=product.unit_price * quantity,
        )


@dataclass(frozen=True, slots=True)
class CartContext:
    """
    Immutable pricing snapshot consumed by the rule engine and coupon logic.

    Build it with `CartContext.from_lines` to have the subtotal computed, or
    pass an explicit subtotal which is then checked against the lines.
    """

    cart_id: str
    lines: Tuple[CartLine, ...]
    subtotal: Decimal
    payment_method: Optional[PaymentMethod] = None

    def __post_init__(self) -> None:
        if not isinstance(self.lines, tuple):
            object.__setattr__(self, "lines", tuple(self.lines))
        if self.subtotal != sum_money(line.line_subtotal for line in self.lines):
            raise ValueError("subtotal must equal the sum of line subtotals")

    @staticmethod
    def from_lines(
        cart_id: str,
        lines: Tuple[CartLine, ...] | list[CartLine],
        payment_method: Optional[PaymentMethod] = None,
    ) -> "CartContext":
        lines = tuple(lines)
        return CartContext(
            cart_id=cart_id,
            lines=lines,
            subtotal=sum_money(line.line_subtotal for line in lines),
            payment_method=payment_method,
        )

    @property
    def total_quantity(self) -> int:
        return sum(line.quantity for line in self.lines)

    def quantity_of_product(self, product_id: Optional[UUID]) -> int:
        if product_id is None:
            return 0
        return sum(line.quantity for line in self.lines if line.product_id == product_id)

    def subtotal_of_product(self, product_id: Optional[UUID]) -> Decimal:
        if product_id is None:
            return ZERO
        return sum_money(
            line.line_subtotal for line in self.lines if line.product_id == product_id
        )
