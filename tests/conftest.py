"""
Pytest configuration and shared fixtures.

Adds the project root to the Python path so that tests can import the
domain, repositories, services and api packages, and provides an in-memory
stand-in for the Supabase-backed repositories.
"""

import sys
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Dict, List, Optional
from uuid import UUID

import pytest

# Add the project root to the Python path
# so tests can import domain, repositories, etc.
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from domain.cart import Cart, CartItem, ShippingAddress  # noqa: E402
from domain.coupon import Coupon  # noqa: E402
from domain.payment import PaymentDiscount, PaymentMethod  # noqa: E402
from domain.product import Product, ProductDimension  # noqa: E402
from domain.promotion import Promotion, PromotionRule, RuleParameter, RuleType  # noqa: E402
from domain.shipping import (  # noqa: E402
    Facility,
    FacilityType,
    FacilityZoneDistance,
    ShippingRate,
    SizeCategory,
)
from repositories.order_repository import AtomicOrderResult  # noqa: E402

P_001 = UUID("00000000-0000-0000-0000-000000000001")
P_010 = UUID("00000000-0000-0000-0000-000000000010")
P_003 = UUID("00000000-0000-0000-0000-000000000003")

CART_ID = UUID("00000000-0000-0000-0000-0000000000c1")
STORE_ID = UUID("00000000-0000-0000-0000-0000000000f1")
WAREHOUSE_ID = UUID("00000000-0000-0000-0000-0000000000f2")

CAT_XS = UUID("00000000-0000-0000-0000-0000000000a1")
CAT_S = UUID("00000000-0000-0000-0000-0000000000a2")
CAT_M = UUID("00000000-0000-0000-0000-0000000000a3")
CAT_L = UUID("00000000-0000-0000-0000-0000000000a4")
CAT_XL = UUID("00000000-0000-0000-0000-0000000000a5")


def num(key: str, value: str) -> RuleParameter:
    return RuleParameter(key=key, numeric_value=Decimal(value))


def product_ref(key: str, product_id: UUID) -> RuleParameter:
    return RuleParameter(key=key, product_id=product_id)


def condition(key: str, *params: RuleParameter) -> PromotionRule:
    return PromotionRule(rule_type=RuleType.CONDITION, implementation_key=key, parameters=params)


def action(key: str, *params: RuleParameter) -> PromotionRule:
    return PromotionRule(rule_type=RuleType.ACTION, implementation_key=key, parameters=params)


def five_thousand_off(priority: int = 3) -> Promotion:
    return Promotion(
        code="PROMO_5000_OFF",
        name="5000 off",
        description="5000 off orders over 50000",
        priority=priority,
        rules=(
            condition("MinCartTotalCondition", num("minTotal", "50000")),
            action("FixedAmountDiscountAction", num("amount", "5000")),
        ),
    )


@dataclass
class FakeStore:
    """In-memory replacement for every repository function the services call."""

    carts: Dict[UUID, Cart] = field(default_factory=dict)
    products: Dict[UUID, Product] = field(default_factory=dict)
    dimensions: Dict[UUID, ProductDimension] = field(default_factory=dict)
    promotions: List[Promotion] = field(default_factory=list)
    coupons: List[Coupon] = field(default_factory=list)
    payment_discounts: Dict[PaymentMethod, PaymentDiscount] = field(default_factory=dict)
    size_categories: List[SizeCategory] = field(default_factory=list)
    rates: Dict[UUID, ShippingRate] = field(default_factory=dict)
    distances: List[FacilityZoneDistance] = field(default_factory=list)
    facilities: Dict[UUID, Facility] = field(default_factory=dict)
    recorded_orders: list = field(default_factory=list)
    order_error: Optional[str] = None
    product_batch_calls: int = 0
    dimension_batch_calls: int = 0

    def set_cart(self, *items: tuple, zone_id: Optional[str] = "Z1") -> UUID:
        self.carts[CART_ID] = Cart(
            cart_id=CART_ID,
            items=tuple(CartItem(product_id=pid, quantity=qty) for pid, qty in items),
            shipping_address=ShippingAddress(street="Av. Siempre Viva 742", city="Santiago", zone_id=zone_id),
        )
        return CART_ID

    # --- repository stand-ins ---------------------------------------------

    def get_cart_by_id(self, cart_id):
        return self.carts.get(cart_id)

    def get_products_by_ids(self, ids):
        self.product_batch_calls += 1
        return {pid: self.products[pid] for pid in ids if pid in self.products}

    def get_dimensions_for_products(self, ids):
        self.dimension_batch_calls += 1
        return {pid: self.dimensions[pid] for pid in ids if pid in self.dimensions}

    def list_active_promotions(self):
        return [p for p in self.promotions if p.active]

    def find_coupons_by_codes(self, codes):
        wanted = {c.upper() for c in codes}
        return [c for c in self.coupons if c.code.upper() in wanted]

    def get_payment_discount(self, method):
        return self.payment_discounts.get(method)

    def list_size_categories(self):
        return sorted(self.size_categories, key=lambda c: c.min_volume)

    def get_shipping_rate(self, category_id):
        return self.rates.get(category_id)

    def find_nearest_facility_distance(self, zone_id):
        matches = [d for d in self.distances if d.zone_id == zone_id]
        return min(matches, key=lambda d: d.distance) if matches else None

    def get_facility_by_id(self, facility_id):
        return self.facilities.get(facility_id)

    def record_checkout_order(self, order_id, calculation, created_at):
        if self.order_error is not None:
            return AtomicOrderResult(
                success=False,
                order_id=None,
                error_code=self.order_error,
                error_message="rejected",
            )
        self.recorded_orders.append((order_id, calculation, created_at))
        return AtomicOrderResult(success=True, order_id=order_id, error_code=None, error_message=None)


def _seed(store: FakeStore) -> None:
    store.products = {
        P_001: Product(product_id=P_001, sku="p-001", unit_price=Decimal("10000")),
        P_010: Product(product_id=P_010, sku="p-010", unit_price=Decimal("5000")),
        P_003: Product(product_id=P_003, sku="p-003", unit_price=Decimal("20000")),
    }
    store.dimensions = {
        P_001: ProductDimension(P_001, Decimal("10"), Decimal("5"), Decimal("2")),
        P_010: ProductDimension(P_010, Decimal("15"), Decimal("20"), Decimal("3")),
        P_003: ProductDimension(P_003, Decimal("25"), Decimal("10"), Decimal("4")),
    }
    store.size_categories = [
        SizeCategory(CAT_XS, "XS", Decimal("0"), Decimal("1000")),
        SizeCategory(CAT_S, "S", Decimal("1001"), Decimal("10000")),
        SizeCategory(CAT_M, "M", Decimal("10001"), Decimal("50000")),
        SizeCategory(CAT_L, "L", Decimal("50001"), Decimal("100000")),
        SizeCategory(CAT_XL, "XL", Decimal("100001"), None),
    ]
    store.rates = {
        CAT_XS: ShippingRate(CAT_XS, Decimal("1000"), Decimal("50")),
        CAT_S: ShippingRate(CAT_S, Decimal("2000"), Decimal("100")),
        CAT_M: ShippingRate(CAT_M, Decimal("3000"), Decimal("150")),
        CAT_L: ShippingRate(CAT_L, Decimal("4000"), Decimal("200")),
        CAT_XL: ShippingRate(CAT_XL, Decimal("5000"), Decimal("250")),
    }
    store.facilities = {
        STORE_ID: Facility(
            facility_id=STORE_ID,
            name="Tienda Centro",
            facility_type=FacilityType.STORE,
            pickup_available=True,
            logistic_address=ShippingAddress(street="Ahumada 100", city="Santiago", zone_id="Z1"),
        ),
        WAREHOUSE_ID: Facility(
            facility_id=WAREHOUSE_ID,
            name="Bodega Norte",
            facility_type=FacilityType.WAREHOUSE,
            pickup_available=False,
        ),
    }
    store.distances = [
        FacilityZoneDistance(WAREHOUSE_ID, "Z1", Decimal("25")),
        FacilityZoneDistance(STORE_ID, "Z1", Decimal("10")),
    ]


@pytest.fixture
def store(monkeypatch) -> FakeStore:
    """Seeded in-memory data installed over the repository functions used by the services."""

    fake = FakeStore()
    _seed(fake)

    targets = {
        "services.checkout_service.get_cart_by_id": fake.get_cart_by_id,
        "services.checkout_service.get_products_by_ids": fake.get_products_by_ids,
        "services.checkout_service.get_payment_discount": fake.get_payment_discount,
        "services.checkout_service.get_facility_by_id": fake.get_facility_by_id,
        "services.checkout_service.record_checkout_order": fake.record_checkout_order,
        "services.promotion_engine.list_active_promotions": fake.list_active_promotions,
        "services.coupon_service.find_coupons_by_codes": fake.find_coupons_by_codes,
        "services.shipping_service.get_dimensions_for_products": fake.get_dimensions_for_products,
        "services.shipping_service.list_size_categories": fake.list_size_categories,
        "services.shipping_service.get_shipping_rate": fake.get_shipping_rate,
        "services.shipping_service.find_nearest_facility_distance": fake.find_nearest_facility_distance,
    }
    for target, replacement in targets.items():
        monkeypatch.setattr(target, replacement)

    return fake

