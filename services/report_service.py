# services/report_service.py
from collections import Counter
from datetime import datetime
from decimal import Decimal

from models.order import OrderStatus
from models.product import Product
from utils.config import Config
from utils.money import round_money

# Orders that count as revenue: paid and not refunded.
PAID_STATUSES = {OrderStatus.PENDING_SHIPMENT, OrderStatus.SHIPPED, OrderStatus.COMPLETED}


class ReportService:
    def __init__(self, repo):
        self.repo = repo

    def sales_summary(self, start: str | None = None, end: str | None = None) -> dict:
        # start / end are ISO datetime strings, e.g. "2025-11-01T00:00:00".
        # If omitted, all paid orders are included.
        orders = [o for o in self.repo.get_orders() if o.status in PAID_STATUSES]
        if start or end:
            def in_range(o):
                return (start is None or o.created_at >= datetime.fromisoformat(start)) and \
                       (end   is None or o.created_at <= datetime.fromisoformat(end))
            orders = list(filter(in_range, orders))
        revenue = sum((o.total for o in orders), Decimal("0"))
        counter = Counter()
        for o in orders:
            for it in o.items:
                counter[it.product_id] += it.qty
        top5 = counter.most_common(5)
        return {"revenue": round_money(revenue), "orders": len(orders), "top5": top5}

    def low_stock(self, threshold: int | None = None) -> list[tuple[str, int]]:
        if threshold is None:
            threshold = Config.LOW_STOCK_THRESHOLD
        products: list[Product] = self.repo.get_products()
        return [(p.id, p.stock) for p in products if p.stock <= threshold]
