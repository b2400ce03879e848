"""
Domain: Coupons.

Contract excerpts implemented here:
- Codes are unique and compared case-insensitively.
- A coupon is valid iff it is active, not expired (expiry absent or strictly
  in the future) and not exhausted (remaining_uses absent or > 0).
- remaining_uses = None means unlimited.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from .time import require_utc_timestamp


class CouponType(str, Enum):
    ORDER = "ORDER"
    SHIPPING = "SHIPPING"


@dataclass(frozen=True, slots=True)
class Coupon:
    code: str
    coupon_type: CouponType
    description: Optional[str] = None
    percentage: Optional[Decimal] = None
    amount: Optional[Decimal] = None
    active: bool = True
    stackable: bool = True
    remaining_uses: Optional[int] = None
    expiry: Optional[datetime] = None

    def __post_init__(self) -> None:
        if self.expiry is not None:
            require_utc_timestamp("expiry", self.expiry)

    @property
    def normalized_code(self) -> str:
        return self.code.strip().upper()

    @property
    def display_description(self) -> str:
        return self.description if self.description is not None else f"Coupon {self.code}"

    @property
    def has_limited_uses(self) -> bool:
        return self.remaining_uses is not None

    def is_expired(self, as_of: datetime) -> bool:
        return self.expiry is not None and self.expiry <= as_of

    def is_exhausted(self) -> bool:
        return self.remaining_uses is not None and self.remaining_uses <= 0

    def is_valid(self, as_of: datetime) -> bool:
        """Check active/expiry/usage rules against an explicit point in time."""

        require_utc_timestamp("as_of", as_of)
        return self.active and not self.is_expired(as_of) and not self.is_exhausted()
