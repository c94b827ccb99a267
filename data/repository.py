# data/repository.py
import copy
from decimal import Decimal

from models.coupon import Coupon, CouponKind
from models.membership import MembershipTier, UserLedger
from models.order import Order
from models.product import Product


def _seed_products() -> list[Product]:
    return [
        Product("p1", "Oak Lounge Chair", Decimal("1299"), "living-chairs", stock=12),
        Product("p2", "Linen Sofa Throw", Decimal("189"), "living-textiles", stock=40),
        Product("p3", "Memory Foam Pillow", Decimal("159"), "bedroom-bedding", stock=60),
        Product("p4", "Blackout Curtain Set", Decimal("329"), "bedroom-textiles", stock=25),
        Product("p5", "Cast Iron Dutch Oven", Decimal("499"), "kitchen-cookware", stock=8),
        Product("p6", "Bamboo Cutting Board", Decimal("79"), "kitchen-tools", stock=3),
        Product("p7", "Adjustable Desk Lamp", Decimal("239"), "workspace-lighting", stock=18),
        Product("p8", "Kids Storage Bench", Decimal("599"), "kids-storage", stock=4, is_on_shelf=False),
    ]


def _seed_coupons() -> list[Coupon]:
    return [
        Coupon(
            id="cp1", title="Welcome Gift", description="¥20 off orders over ¥100",
            kind=CouponKind.FIXED_AMOUNT_OFF, value=Decimal("20"), minimum_spend=Decimal("100"),
            eligible_tiers=frozenset({MembershipTier.RESIDENT}),
        ),
        Coupon(
            id="cp2", title="Manager Exclusive", description="10% off everything",
            kind=CouponKind.PERCENTAGE_OFF, value=Decimal("0.9"), minimum_spend=Decimal("0"),
            eligible_tiers=frozenset({
                MembershipTier.MANAGER_L1, MembershipTier.MANAGER_L2, MembershipTier.GOD,
            }),
        ),
        Coupon(
            id="cp3", title="Storewide Coupon", description="¥50 off orders over ¥500",
            kind=CouponKind.FIXED_AMOUNT_OFF, value=Decimal("50"), minimum_spend=Decimal("500"),
        ),
    ]


class MockDataRepository:
    # Session-scoped in-memory store. Nothing here outlives the process;
    # every instance starts again from the seed data.

    def __init__(self, products=None, coupons=None, user=None):
        self._products: list[Product] = list(products) if products is not None else _seed_products()
        self._coupons: list[Coupon] = list(coupons) if coupons is not None else _seed_coupons()
        self._orders: list[Order] = []
        self._user: UserLedger = user or UserLedger(user_id="u1", name="Emson")

    def get_products(self) -> list[Product]:
        return list(self._products)

    def get_products_map(self) -> dict[str, Product]:
        return {p.id: p for p in self._products}

    def save_products(self, products: list[Product]) -> None:
        self._products = list(products)

    def get_coupons(self) -> list[Coupon]:
        # copies, so a catalog can mutate status without touching the seed
        return [copy.copy(c) for c in self._coupons]

    def get_orders(self) -> list[Order]:
        return list(self._orders)

    def save_orders(self, orders: list[Order]) -> None:
        self._orders = list(orders)

    def get_user(self) -> UserLedger:
        return self._user

    def save_user(self, user: UserLedger) -> None:
        self._user = user
