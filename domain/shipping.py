"""
Domain: Shipping configuration.

Contract excerpts implemented here:
- Size categories are volumetric buckets with an inclusive minimum and an
  inclusive (or unbounded) maximum, consulted in ascending min_volume order.
- One shipping rate per size category: cost = base_cost + cost_per_distance * distance.
- A zone may be served by several facilities; only the nearest one matters.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID

from .cart import ShippingAddress
from .money import ZERO, round_money


class FacilityType(str, Enum):
    WAREHOUSE = "WAREHOUSE"
    DISTRIBUTION_CENTER = "DISTRIBUTION_CENTER"
    STORE = "STORE"


@dataclass(frozen=True, slots=True)
class SizeCategory:
    category_id: UUID
    name: str
    min_volume: Decimal
    max_volume: Optional[Decimal] = None  # None: no upper bound

    def contains(self, volume: Decimal) -> bool:
        """Both bounds are inclusive."""

        if volume < self.min_volume:
            return False
        return self.max_volume is None or volume <= self.max_volume


@dataclass(frozen=True, slots=True)
class ShippingRate:
    size_category_id: UUID
    base_cost: Decimal
    cost_per_distance: Decimal

    def cost_for(self, distance: Decimal) -> Decimal:
        return round_money(self.base_cost + self.cost_per_distance * distance)


@dataclass(frozen=True, slots=True)
class Facility:
    facility_id: UUID
    name: str
    facility_type: FacilityType
    pickup_available: bool = False
    logistic_address: Optional[ShippingAddress] = None


@dataclass(frozen=True, slots=True)
class FacilityZoneDistance:
    facility_id: UUID
    zone_id: str
    distance: Decimal

    def __post_init__(self) -> None:
        if self.distance < ZERO:
            raise ValueError("distance must be >= 0")
