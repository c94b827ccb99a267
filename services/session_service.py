# services/session_service.py
"""
session_service.py

The one object a front end holds for a storefront session.

It owns the repository, the user's membership ledger, the coupon catalog,
the cart and the currently selected coupon. Front ends call its methods and
never touch those pieces directly. The cart summary is recomputed on every
call from the current cart, tier and coupon; nothing is cached.
"""

import logging
from datetime import datetime
from typing import Any, Callable

from models.cart import Cart
from models.coupon import Coupon
from models.membership import UserLedger
from models.order import Order
from models.pricing import PriceBreakdown
from models.product import Product
from services.checkout_service import CheckoutService
from services.coupon_service import CouponCatalog
from services.membership_service import MembershipService
from services.pricing_service import PricingService
from services.report_service import ReportService
from utils.errors import CouponNotEligible

logger = logging.getLogger("storefront.session")


class StorefrontSession:
    def __init__(self, repo, now: Callable[[], datetime] | None = None):
        self.repo = repo
        self.pricing = PricingService()
        self.membership = MembershipService(repo.get_user(), now=now)
        self.catalog = CouponCatalog(repo.get_coupons())
        self.checkout_service = CheckoutService(repo, self.pricing)
        self.reports = ReportService(repo)
        self.cart = Cart()
        self.active_coupon_id: str | None = None

    # membership

    @property
    def ledger(self) -> UserLedger:
        return self.membership.ledger

    def record_spend(self, lifetime, annual) -> UserLedger:
        ledger = self.membership.record_spend(lifetime, annual)
        self.repo.save_user(ledger)
        self._drop_unselectable_coupon()
        return ledger

    def advance_one_year(self) -> UserLedger:
        ledger = self.membership.advance_one_year()
        self.repo.save_user(ledger)
        self._drop_unselectable_coupon()
        return ledger

    # coupons

    def list_eligible_coupons(self) -> list[Coupon]:
        return self.catalog.list_eligible_coupons(self.ledger)

    def coupon_center(self) -> list[tuple[Coupon, bool]]:
        return self.catalog.coupon_center(self.ledger)

    def push_coupon(self, definition: dict[str, Any] | Coupon) -> Coupon:
        return self.catalog.add_coupon(definition)

    def claim_coupon(self, coupon_id: str) -> Coupon:
        return self.catalog.claim(coupon_id, self.ledger)

    def apply_coupon_to_cart(self, coupon_id: str | None) -> None:
        if coupon_id is None:
            self.active_coupon_id = None
            return
        coupon = self.catalog.get(coupon_id)
        if not self.catalog.is_selectable(coupon, self.ledger.tier):
            raise CouponNotEligible(
                f"Coupon {coupon_id} cannot be selected ({coupon.status.value}, tier {self.ledger.tier.value})"
            )
        self.active_coupon_id = coupon_id
        logger.info(f"Coupon selected: {coupon_id}")

    @property
    def active_coupon(self) -> Coupon | None:
        if self.active_coupon_id is None:
            return None
        return self.catalog.get(self.active_coupon_id)

    def _drop_unselectable_coupon(self):
        # A tier change can lock the selected coupon; unselect it rather than
        # keep pricing with a coupon the user may no longer pick.
        coupon = self.active_coupon
        if coupon is not None and not self.catalog.is_selectable(coupon, self.ledger.tier):
            logger.info(f"Coupon {coupon.id} no longer selectable for tier {self.ledger.tier.value}")
            self.active_coupon_id = None

    # cart

    def list_products(self, on_shelf_only: bool = True) -> list[Product]:
        products = self.repo.get_products()
        if on_shelf_only:
            products = [p for p in products if p.is_on_shelf]
        return products

    def add_to_cart(self, product_id: str) -> None:
        line = self.cart.find(product_id)
        if line is not None:
            line.quantity += 1
            return
        product = self.repo.get_products_map().get(product_id)
        if product is None or not product.is_on_shelf:
            logger.info(f"Ignored add_to_cart for unavailable product {product_id}")
            return
        self.cart.add(product, 1)

    def remove_from_cart(self, product_id: str) -> None:
        self.cart.remove(product_id)

    def update_cart_quantity(self, product_id: str, delta: int) -> None:
        self.cart.update_quantity(product_id, delta)

    def clear_cart(self) -> None:
        self.cart.clear()

    def cart_summary(self) -> PriceBreakdown:
        return self.pricing.compute_total(self.cart.lines, self.ledger.tier, self.active_coupon)

    def checkout(self) -> Order:
        order = self.checkout_service.checkout(
            self.cart, self.membership, self.catalog, self.active_coupon
        )
        self.repo.save_user(self.ledger)
        self.active_coupon_id = None
        return order

    # orders

    def list_orders(self) -> list[Order]:
        return self.repo.get_orders()

    def pay_order(self, order_id: str) -> Order:
        return self.checkout_service.pay_order(order_id)

    def ship_order(self, order_id: str, tracking_number: str) -> Order:
        return self.checkout_service.ship_order(order_id, tracking_number)

    def confirm_receipt(self, order_id: str) -> Order:
        return self.checkout_service.confirm_receipt(order_id)

    def refund_order(self, order_id: str) -> Order:
        return self.checkout_service.refund_order(order_id)
