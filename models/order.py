# models/order.py
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum

from models.pricing import PriceBreakdown


class OrderStatus(str, Enum):
    UNPAID = "unpaid"
    PENDING_SHIPMENT = "pending_shipment"
    SHIPPED = "shipped"
    COMPLETED = "completed"
    REFUNDED = "refunded"


# Order model representing a placed storefront order.
@dataclass
class OrderItem:
    product_id: str
    qty: int
    unit_price: Decimal
    subtotal: Decimal

@dataclass
class Order:
    order_id: str
    user_id: str
    created_at: datetime
    items: list[OrderItem]
    breakdown: PriceBreakdown
    status: OrderStatus = OrderStatus.UNPAID
    tracking_number: str | None = None

    @property
    def total(self) -> Decimal:
        return self.breakdown.final_price
