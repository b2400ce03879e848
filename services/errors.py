"""
Checkout failure types.

Only failures that abort a calculation live here. Benign configuration or
user-input problems (unknown rule keys, invalid coupons, missing shipping
configuration) are skipped by the services instead of raised.
"""

from __future__ import annotations


class CheckoutError(Exception):
    """Base class for checkout failures surfaced to the caller."""
    pass


class NotFoundError(CheckoutError):
    """Raised when a cart, product or facility referenced by ID does not exist."""
    pass


class InvalidStateError(CheckoutError):
    """Raised when the request is well-formed but cannot be fulfilled (e.g. pickup unsupported)."""
    pass


class CouponUnavailableError(CheckoutError):
    """Raised when a limited-use coupon was exhausted before the order could be confirmed."""
    def __init__(self, codes: tuple[str, ...] = (), message: str | None = None):
        self.codes = codes
        super().__init__(
            message or f"Coupon no longer available: {', '.join(codes) or 'unknown'}"
        )


class OrderPersistenceError(CheckoutError):
    """Raised when a confirmed order could not be stored; nothing was committed."""
    pass


__all__ = [
    "CheckoutError",
    "NotFoundError",
    "InvalidStateError",
    "CouponUnavailableError",
    "OrderPersistenceError",
]
