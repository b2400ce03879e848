"""
Promotion repository for querying active promotions and their rules.

Promotions, rules and rule parameters live in three tables and are fetched in
one request using PostgREST resource embedding.
"""

from __future__ import annotations

from typing import Any, List, Mapping
from uuid import UUID

from domain.money import to_optional_decimal
from domain.promotion import Promotion, PromotionRule, RuleParameter, RuleType
from repositories.client import get_supabase

_PROMOTIONS_TABLE: str = "promotions"
_PROMOTION_SELECT: str = "*, promotion_rules(*, rule_parameters(*))"


def _row_to_parameter(row: Mapping[str, Any]) -> RuleParameter:
    related = row.get("related_product_id")
    return RuleParameter(
        key=str(row["param_key"]),
        numeric_value=to_optional_decimal(row.get("numeric_value")),
        string_value=row.get("string_value"),
        product_id=UUID(str(related)) if related is not None else None,
    )


def _row_to_rule(row: Mapping[str, Any]) -> PromotionRule:
    params = row.get("rule_parameters") or []
    return PromotionRule(
        rule_type=RuleType(str(row["rule_type"])),
        implementation_key=str(row["implementation_key"]),
        parameters=tuple(_row_to_parameter(p) for p in params),
    )


def _row_to_promotion(row: Mapping[str, Any]) -> Promotion:
    """Convert an embedded promotion row into a Promotion with rules in declared order."""

    rule_rows = sorted(row.get("promotion_rules") or [], key=lambda r: r.get("position") or 0)
    return Promotion(
        code=str(row["code"]),
        name=str(row["name"]),
        description=row.get("description"),
        priority=int(row.get("priority") or 0),
        active=bool(row.get("active", True)),
        rules=tuple(_row_to_rule(r) for r in rule_rows),
    )


def list_active_promotions() -> List[Promotion]:
    """
    Get all active promotions ordered by ascending priority.

    Ties on priority are ordered by code so repeated calls return the same
    sequence.

    Returns:
        List of Promotion (possibly empty)
    """
    response = (
        get_supabase().table(_PROMOTIONS_TABLE)
        .select(_PROMOTION_SELECT)
        .eq("active", True)
        .order("priority")
        .order("code")
        .execute()
    )

    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to fetch promotions: {error}")

    rows = getattr(response, "data", None) or []
    return [_row_to_promotion(row) for row in rows]


__all__ = ["list_active_promotions"]
