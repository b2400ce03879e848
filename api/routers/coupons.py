"""
Coupons API Endpoints.

Endpoints for managing coupons. Codes are matched ignoring case.
"""

from typing import List

from fastapi import APIRouter, HTTPException, Response

from api.models import CouponRequest, CouponResponse
from domain.coupon import Coupon, CouponType
from domain.time import parse_utc_datetime
from repositories.coupon_repository import (
    create_coupon,
    delete_coupon,
    get_coupon_by_code,
    list_coupons,
    update_coupon,
)

router = APIRouter()


def _to_domain(request: CouponRequest) -> Coupon:
    return Coupon(
        code=request.code.strip().upper(),
        coupon_type=CouponType(request.coupon_type),
        description=request.description,
        percentage=request.percentage,
        amount=request.amount,
        active=True if request.active is None else request.active,
        stackable=True if request.stackable is None else request.stackable,
        remaining_uses=request.remaining_uses,
        expiry=parse_utc_datetime(request.expiry) if request.expiry is not None else None,
    )


def _to_response(coupon: Coupon) -> CouponResponse:
    return CouponResponse(
        code=coupon.code,
        coupon_type=coupon.coupon_type.value,
        description=coupon.description,
        percentage=coupon.percentage,
        amount=coupon.amount,
        active=coupon.active,
        stackable=coupon.stackable,
        remaining_uses=coupon.remaining_uses,
        expiry=coupon.expiry,
    )


@router.get(
    "/coupons",
    response_model=List[CouponResponse],
    summary="List Coupons"
)
def get_coupons():
    """List every coupon, including inactive and expired ones."""
    try:
        return [_to_response(coupon) for coupon in list_coupons()]
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to list coupons: {str(e)}"
        )


@router.get(
    "/coupons/{code}",
    response_model=CouponResponse,
    summary="Get Coupon"
)
def get_coupon(code: str):
    try:
        coupon = get_coupon_by_code(code)
        if coupon is None:
            raise HTTPException(
                status_code=404,
                detail=f"Coupon not found: {code}"
            )
        return _to_response(coupon)

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to fetch coupon: {str(e)}"
        )


@router.post(
    "/coupons",
    response_model=CouponResponse,
    status_code=201,
    summary="Create Coupon",
    description="Create a coupon. `active` and `stackable` default to true."
)
def post_coupon(request: CouponRequest):
    """
    Create a coupon.

    Returns 409 if the code already exists (ignoring case).
    """
    try:
        return _to_response(create_coupon(_to_domain(request)))

    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to create coupon: {str(e)}"
        )


@router.put(
    "/coupons/{code}",
    response_model=CouponResponse,
    summary="Update Coupon"
)
def put_coupon(code: str, request: CouponRequest):
    """
    Replace a coupon. The code may be changed as long as the new code is free.
    """
    try:
        updated = update_coupon(code, _to_domain(request))
        if updated is None:
            raise HTTPException(
                status_code=404,
                detail=f"Coupon not found: {code}"
            )
        return _to_response(updated)

    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to update coupon: {str(e)}"
        )


@router.delete(
    "/coupons/{code}",
    status_code=204,
    response_class=Response,
    summary="Delete Coupon"
)
def remove_coupon(code: str):
    try:
        if not delete_coupon(code):
            raise HTTPException(
                status_code=404,
                detail=f"Coupon not found: {code}"
            )
        return Response(status_code=204)

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to delete coupon: {str(e)}"
        )
