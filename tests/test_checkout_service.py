from decimal import Decimal

import pytest

from models.coupon import CouponStatus
from models.membership import MembershipTier
from models.order import OrderStatus
from services.report_service import ReportService
from utils.errors import CheckoutError


def test_checkout_creates_order_and_records_spend(session, repo):
    session.record_spend(500, 900)  # manager_l1
    session.add_to_cart("p1")  # 1299
    session.apply_coupon_to_cart("cp2")

    order = session.checkout()

    # 1299 * 0.95 = 1234.05, then 10% off
    assert order.order_id == "ORD-000001"
    assert order.total == Decimal("1110.65")
    assert order.status == OrderStatus.UNPAID
    assert order.items[0].product_id == "p1"
    assert order.items[0].subtotal == Decimal("1299.00")

    assert session.cart.lines == []
    assert session.active_coupon_id is None
    assert session.catalog.get("cp2").status == CouponStatus.USED
    assert repo.get_products_map()["p1"].stock == 11

    assert session.ledger.lifetime_spend == Decimal("1610.65")
    assert session.ledger.annual_spend == Decimal("2010.65")
    assert session.ledger.tier == MembershipTier.GOD
    assert repo.get_user() == session.ledger


def test_unapplied_coupon_stays_active(session):
    session.add_to_cart("p2")  # 189, below cp3's 500
    session.apply_coupon_to_cart("cp3")
    order = session.checkout()
    assert order.breakdown.applied_coupon_id is None
    assert session.catalog.get("cp3").status == CouponStatus.ACTIVE


def test_empty_cart_cannot_checkout(session):
    with pytest.raises(CheckoutError):
        session.checkout()


def test_insufficient_stock(session, repo):
    session.add_to_cart("p6")
    session.update_cart_quantity("p6", 5)  # 6 wanted, 3 in stock
    with pytest.raises(CheckoutError):
        session.checkout()
    assert repo.get_products_map()["p6"].stock == 3
    assert repo.get_orders() == []
    assert session.cart.find("p6").quantity == 6


def test_order_lifecycle(session):
    session.add_to_cart("p7")
    order = session.checkout()

    with pytest.raises(CheckoutError):
        session.ship_order(order.order_id, "SF123")

    session.pay_order(order.order_id)
    session.ship_order(order.order_id, "SF123")
    assert order.tracking_number == "SF123"
    session.confirm_receipt(order.order_id)
    assert order.status == OrderStatus.COMPLETED
    session.refund_order(order.order_id)
    assert order.status == OrderStatus.REFUNDED


def test_sales_summary_counts_paid_orders_only(session, repo):
    reports = ReportService(repo)

    session.add_to_cart("p3")
    session.add_to_cart("p3")
    first = session.checkout()  # 318, unpaid
    assert reports.sales_summary()["revenue"] == 0

    session.pay_order(first.order_id)
    session.add_to_cart("p2")
    second = session.checkout()
    session.pay_order(second.order_id)

    summary = reports.sales_summary()
    assert summary["orders"] == 2
    assert summary["revenue"] == first.total + second.total
    assert summary["top5"][0] == ("p3", 2)

    session.refund_order(second.order_id)
    assert reports.sales_summary()["revenue"] == first.total


def test_sales_summary_date_range(session, repo):
    session.add_to_cart("p2")
    order = session.checkout()
    session.pay_order(order.order_id)
    reports = ReportService(repo)
    assert reports.sales_summary(end="2000-01-01T00:00:00")["orders"] == 0
    assert reports.sales_summary(start="2000-01-01T00:00:00")["orders"] == 1


def test_low_stock(repo):
    low = dict(ReportService(repo).low_stock(threshold=5))
    assert low == {"p6": 3, "p8": 4}
