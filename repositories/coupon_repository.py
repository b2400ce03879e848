"""
Coupon repository (persistence).

Lookups are case-insensitive on the coupon code. This module does not decide
whether a coupon is applicable; validity and stacking live in the coupon
service. Usage counters are decremented only by the atomic order
confirmation function (see order_repository).
"""

from __future__ import annotations

import logging
from typing import Any, Collection, Dict, List, Mapping, Optional

from domain.coupon import Coupon, CouponType
from domain.money import to_optional_decimal
from domain.time import parse_utc_datetime, to_iso_utc
from repositories.client import get_supabase

logger = logging.getLogger(__name__)

_COUPONS_TABLE: str = "coupons"


def _escape_like(value: str) -> str:
    """Escape LIKE wildcards so ilike acts as a case-insensitive equality."""

    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _quote_filter_value(value: str) -> str:
    """
    Wrap a value in PostgREST double quotes.

    Inside quotes PostgREST treats backslash as an escape character, so
    backslashes (including the LIKE escapes) are doubled and quotes escaped.
    """

    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


def _row_to_coupon(row: Mapping[str, Any]) -> Coupon:
    """Convert a Supabase row into a Coupon."""

    remaining = row.get("remaining_uses")
    expiry = row.get("expiry_utc")
    return Coupon(
        code=str(row["code"]),
        coupon_type=CouponType(str(row["coupon_type"])),
        description=row.get("description"),
        percentage=to_optional_decimal(row.get("percentage")),
        amount=to_optional_decimal(row.get("amount")),
        active=bool(row.get("active", True)),
        stackable=bool(row.get("stackable", True)),
        remaining_uses=int(remaining) if remaining is not None else None,
        expiry=parse_utc_datetime(expiry) if expiry is not None else None,
    )


def _coupon_to_payload(coupon: Coupon) -> Dict[str, Any]:
    return {
        "code": coupon.code,
        "coupon_type": coupon.coupon_type.value,
        "description": coupon.description,
        "percentage": str(coupon.percentage) if coupon.percentage is not None else None,
        "amount": str(coupon.amount) if coupon.amount is not None else None,
        "active": coupon.active,
        "stackable": coupon.stackable,
        "remaining_uses": coupon.remaining_uses,
        "expiry_utc": to_iso_utc(coupon.expiry, name="expiry") if coupon.expiry is not None else None,
    }


def find_coupons_by_codes(codes: Collection[str]) -> List[Coupon]:
    """
    Bulk-fetch coupons whose code matches any of `codes`, ignoring case.

    Args:
        codes: Normalized (trimmed, upper-cased) coupon codes

    Returns:
        Matching coupons regardless of validity (possibly empty)
    """
    wanted = {code.upper() for code in codes}
    if not wanted:
        return []

    or_filter = ",".join(f"code.ilike.{_quote_filter_value(_escape_like(code))}" for code in sorted(wanted))

    response = (
        get_supabase().table(_COUPONS_TABLE)
        .select("*")
        .or_(or_filter)
        .execute()
    )

    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to fetch coupons: {error}")

    rows = getattr(response, "data", None) or []
    return [_row_to_coupon(row) for row in rows if str(row["code"]).upper() in wanted]


def list_coupons() -> List[Coupon]:
    """Return every coupon, ordered by code."""

    response = get_supabase().table(_COUPONS_TABLE).select("*").order("code").execute()
    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to list coupons: {error}")

    rows = getattr(response, "data", None) or []
    return [_row_to_coupon(row) for row in rows]


def get_coupon_by_code(code: str) -> Optional[Coupon]:
    """
    Get a single coupon by code, ignoring case.

    Returns:
        Coupon or None if not found
    """
    matches = find_coupons_by_codes([code.strip()])
    return matches[0] if matches else None


def create_coupon(coupon: Coupon) -> Coupon:
    """
    Insert a new coupon.

    Raises:
        ValueError: If a coupon with the same code (ignoring case) already exists
    """
    if get_coupon_by_code(coupon.code) is not None:
        raise ValueError(f"Coupon code already exists: {coupon.code}")

    response = get_supabase().table(_COUPONS_TABLE).insert(_coupon_to_payload(coupon)).execute()
    error = getattr(response, "error", None)
    if error:
        # If the DB also enforces uniqueness, surface it as a ValueError.
        if str(getattr(error, "code", None)) == "23505":
            raise ValueError(f"Coupon code already exists: {coupon.code}") from None
        raise RuntimeError(f"Failed to create coupon: {error}")

    logger.info(f"Created coupon {coupon.code}", extra={"coupon_code": coupon.code})
    return coupon


def update_coupon(code: str, coupon: Coupon) -> Optional[Coupon]:
    """
    Replace the coupon currently stored under `code` (the code itself may change).

    Returns:
        The updated coupon, or None if no coupon exists under `code`

    Raises:
        ValueError: If the new code is already used by a different coupon
    """
    existing = get_coupon_by_code(code)
    if existing is None:
        return None

    if existing.code.upper() != coupon.code.upper() and get_coupon_by_code(coupon.code) is not None:
        raise ValueError(f"Coupon code already in use: {coupon.code}")

    response = (
        get_supabase().table(_COUPONS_TABLE)
        .update(_coupon_to_payload(coupon))
        .eq("code", existing.code)
        .execute()
    )
    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to update coupon: {error}")

    logger.info(f"Updated coupon {existing.code}", extra={"coupon_code": coupon.code})
    return coupon


def delete_coupon(code: str) -> bool:
    """
    Delete a coupon by code, ignoring case.

    Returns:
        True if a coupon was deleted, False if none matched
    """
    existing = get_coupon_by_code(code)
    if existing is None:
        return False

    response = get_supabase().table(_COUPONS_TABLE).delete().eq("code", existing.code).execute()
    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to delete coupon: {error}")

    logger.info(f"Deleted coupon {existing.code}", extra={"coupon_code": existing.code})
    return True


__all__ = [
    "find_coupons_by_codes",
    "list_coupons",
    "get_coupon_by_code",
    "create_coupon",
    "update_coupon",
    "delete_coupon",
]
