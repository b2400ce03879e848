"""
Shipping cost calculation.

cost = base_cost + cost_per_distance * distance, where:
- base_cost / cost_per_distance come from the rate of the cart's size category
- the size category is chosen from the cart's total volume
- distance is the distance from the nearest facility serving the zone

Missing configuration never fails a checkout: each gap is logged and the
shipping cost falls back to zero.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Iterable, Mapping, Optional, Sequence
from uuid import UUID

from domain.cart import CartLine, ShippingAddress
from domain.money import ZERO
from domain.product import ProductDimension
from domain.shipping import SizeCategory
from repositories.product_repository import get_dimensions_for_products
from repositories.shipping_repository import (
    find_nearest_facility_distance,
    get_shipping_rate,
    list_size_categories,
)

logger = logging.getLogger(__name__)


def calculate_total_volume(
    lines: Iterable[CartLine],
    dimensions: Mapping[UUID, ProductDimension],
) -> Decimal:
    """
    Sum height * width * depth * quantity over lines with known dimensions.

    Lines whose product has no dimension record contribute nothing.
    """
    total = ZERO
    for line in lines:
        dimension = dimensions.get(line.product_id)
        if dimension is None:
            continue
        total += dimension.volume * line.quantity
    return total


def determine_size_category(
    volume: Decimal,
    categories: Sequence[SizeCategory],
) -> Optional[SizeCategory]:
    """
    Classify a volume against categories ordered by ascending min_volume.

    Returns the first category containing the volume (bounds inclusive).
    A volume above every bounded range falls back to the last category.
    Returns None only when there are no categories.
    """
    if not categories:
        return None

    for category in categories:
        if category.contains(volume):
            return category

    return categories[-1]


def calculate_shipping_cost(
    address: Optional[ShippingAddress],
    lines: Sequence[CartLine],
) -> Decimal:
    """
    Compute the delivery cost for a cart.

    Args:
        address: Destination (only zone_id is used)
        lines: Priced cart lines

    Returns:
        Rounded shipping cost, or 0 when it cannot be determined

    Example:
        cost = calculate_shipping_cost(cart.shipping_address, context.lines)
        # Decimal('3500.00')
    """
    if address is None or not address.has_zone():
        logger.warning("No shipping zone on address; shipping cost is 0")
        return ZERO

    zone_id = address.zone_id.strip()
    product_ids = list(dict.fromkeys(line.product_id for line in lines))
    dimensions = get_dimensions_for_products(product_ids) if product_ids else {}

    volume = calculate_total_volume(lines, dimensions)
    if volume <= ZERO:
        logger.warning(f"Cart volume is {volume}; shipping cost is 0", extra={"zone_id": zone_id})
        return ZERO

    category = determine_size_category(volume, list_size_categories())
    if category is None:
        logger.warning("No size categories configured; shipping cost is 0")
        return ZERO

    nearest = find_nearest_facility_distance(zone_id)
    if nearest is None:
        logger.warning(f"No facility serves zone {zone_id}; shipping cost is 0", extra={"zone_id": zone_id})
        return ZERO

    rate = get_shipping_rate(category.category_id)
    if rate is None:
        logger.warning(
            f"No shipping rate for size category {category.name}; shipping cost is 0",
            extra={"size_category": category.name},
        )
        return ZERO

    cost = rate.cost_for(nearest.distance)
    logger.debug(
        f"Shipping {cost} for volume {volume} ({category.name}) over {nearest.distance} to zone {zone_id}"
    )
    return cost


__all__ = [
    "calculate_total_volume",
    "determine_size_category",
    "calculate_shipping_cost",
]
