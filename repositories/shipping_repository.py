"""
Shipping repository for size categories, rates, facilities and distances.

All reads; shipping configuration is managed outside the pricing core.
"""

from __future__ import annotations

from typing import Any, List, Mapping, Optional
from uuid import UUID

from domain.cart import ShippingAddress
from domain.money import to_decimal, to_optional_decimal
from domain.shipping import (
    Facility,
    FacilityType,
    FacilityZoneDistance,
    ShippingRate,
    SizeCategory,
)
from repositories.client import get_supabase

_SIZE_CATEGORIES_TABLE: str = "size_categories"
_SHIPPING_RATES_TABLE: str = "shipping_rates"
_FACILITIES_TABLE: str = "facilities"
_DISTANCES_TABLE: str = "facility_zone_distances"


def _rows(response: Any, what: str) -> List[Mapping[str, Any]]:
    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to fetch {what}: {error}")
    return getattr(response, "data", None) or []


def list_size_categories() -> List[SizeCategory]:
    """
    Get all size categories ordered by ascending min_volume.

    Returns:
        List of SizeCategory (possibly empty)
    """
    response = (
        get_supabase().table(_SIZE_CATEGORIES_TABLE)
        .select("*")
        .order("min_volume")
        .execute()
    )

    return [
        SizeCategory(
            category_id=UUID(str(row["category_id"])),
            name=str(row["name"]),
            min_volume=to_decimal(row["min_volume"]),
            max_volume=to_optional_decimal(row.get("max_volume")),
        )
        for row in _rows(response, "size categories")
    ]


def get_shipping_rate(size_category_id: UUID) -> Optional[ShippingRate]:
    """
    Get the shipping rate for a size category.

    Returns:
        ShippingRate or None if the category has no rate configured
    """
    response = (
        get_supabase().table(_SHIPPING_RATES_TABLE)
        .select("*")
        .eq("size_category_id", str(size_category_id))
        .limit(1)
        .execute()
    )

    rows = _rows(response, "shipping rate")
    if not rows:
        return None

    row = rows[0]
    return ShippingRate(
        size_category_id=UUID(str(row["size_category_id"])),
        base_cost=to_decimal(row["base_cost"]),
        cost_per_distance=to_decimal(row["cost_per_km"]),
    )


def find_nearest_facility_distance(zone_id: str) -> Optional[FacilityZoneDistance]:
    """
    Get the facility closest to a zone.

    Sorting and limiting happen in the database so only one row is read.

    Returns:
        FacilityZoneDistance or None if no facility serves the zone
    """
    response = (
        get_supabase().table(_DISTANCES_TABLE)
        .select("facility_id, zone_id, distance")
        .eq("zone_id", zone_id)
        .order("distance")
        .limit(1)
        .execute()
    )

    rows = _rows(response, "facility distance")
    if not rows:
        return None

    row = rows[0]
    return FacilityZoneDistance(
        facility_id=UUID(str(row["facility_id"])),
        zone_id=str(row["zone_id"]),
        distance=to_decimal(row["distance"]),
    )


def get_facility_by_id(facility_id: UUID) -> Optional[Facility]:
    """
    Get a facility by its ID.

    Returns:
        Facility or None if not found
    """
    response = (
        get_supabase().table(_FACILITIES_TABLE)
        .select("*")
        .eq("facility_id", str(facility_id))
        .limit(1)
        .execute()
    )

    rows = _rows(response, "facility")
    if not rows:
        return None

    row = rows[0]
    address = None
    if row.get("logistic_street") or row.get("logistic_city") or row.get("logistic_zone_id"):
        address = ShippingAddress(
            street=row.get("logistic_street"),
            city=row.get("logistic_city"),
            zone_id=row.get("logistic_zone_id"),
        )

    return Facility(
        facility_id=UUID(str(row["facility_id"])),
        name=str(row["name"]),
        facility_type=FacilityType(str(row["facility_type"])),
        pickup_available=bool(row.get("pickup_available", False)),
        logistic_address=address,
    )


__all__ = [
    "list_size_categories",
    "get_shipping_rate",
    "find_nearest_facility_distance",
    "get_facility_by_id",
]
