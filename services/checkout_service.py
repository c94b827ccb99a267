# services/checkout_service.py

import logging
from datetime import datetime

from models.cart import Cart
from models.coupon import Coupon
from models.order import Order, OrderItem, OrderStatus
from services.coupon_service import CouponCatalog
from services.membership_service import MembershipService
from services.pricing_service import PricingService
from utils.errors import CheckoutError, UnknownOrder, UnknownProduct
from utils.money import round_money

logger = logging.getLogger("storefront.checkout")


class CheckoutService:
    def __init__(self, repo, pricing_service: PricingService):
        self.repo = repo
        self.pricing = pricing_service

    def checkout(
        self,
        cart: Cart,
        membership: MembershipService,
        catalog: CouponCatalog,
        coupon: Coupon | None = None,
    ) -> Order:
        if not cart.lines:
            raise CheckoutError("Cart is empty.")

        # Validate stock and product existence
        products_map = self.repo.get_products_map()
        for line in cart.lines:
            product = products_map.get(line.product.id)
            if product is None:
                raise UnknownProduct(line.product.id)
            if product.stock < line.quantity:
                raise CheckoutError(f"Insufficient stock for {product.id}")

        ledger = membership.ledger
        breakdown = self.pricing.compute_total(cart.lines, ledger.tier, coupon)

        order_items = [
            OrderItem(
                product_id=line.product.id,
                qty=line.quantity,
                unit_price=round_money(line.unit_price),
                subtotal=round_money(line.line_subtotal),
            )
            for line in cart.lines
        ]

        # Deduct stock
        for line in cart.lines:
            products_map[line.product.id].stock -= line.quantity

        orders = self.repo.get_orders()
        order = Order(
            order_id=f"ORD-{len(orders)+1:06d}",
            user_id=ledger.user_id,
            created_at=datetime.now(),
            items=order_items,
            breakdown=breakdown,
        )
        orders.append(order)
        self.repo.save_orders(orders)

        if breakdown.applied_coupon_id is not None:
            catalog.mark_used(breakdown.applied_coupon_id)

        # The paid amount counts toward both spend totals.
        membership.record_spend(
            ledger.lifetime_spend + order.total,
            ledger.annual_spend + order.total,
        )

        cart.clear()

        logger.info(
            f"Checkout success order_id={order.order_id}, user={ledger.user_id}, "
            f"total={order.total}, coupon={breakdown.applied_coupon_id}"
        )
        return order

    # Order lifecycle used by the order screens.

    def _find(self, order_id: str) -> Order:
        for o in self.repo.get_orders():
            if o.order_id == order_id:
                return o
        raise UnknownOrder(order_id)

    def _move(self, order_id: str, allowed: set[OrderStatus], target: OrderStatus) -> Order:
        order = self._find(order_id)
        if order.status not in allowed:
            raise CheckoutError(
                f"Order {order_id} cannot go from {order.status.value} to {target.value}"
            )
        order.status = target
        logger.info(f"Order {order_id} -> {target.value}")
        return order

    def pay_order(self, order_id: str) -> Order:
        return self._move(order_id, {OrderStatus.UNPAID}, OrderStatus.PENDING_SHIPMENT)

    def ship_order(self, order_id: str, tracking_number: str) -> Order:
        order = self._move(order_id, {OrderStatus.PENDING_SHIPMENT}, OrderStatus.SHIPPED)
        order.tracking_number = tracking_number
        return order

    def confirm_receipt(self, order_id: str) -> Order:
        return self._move(order_id, {OrderStatus.SHIPPED}, OrderStatus.COMPLETED)

    def refund_order(self, order_id: str) -> Order:
        return self._move(
            order_id,
            {OrderStatus.PENDING_SHIPMENT, OrderStatus.SHIPPED, OrderStatus.COMPLETED},
            OrderStatus.REFUNDED,
        )
