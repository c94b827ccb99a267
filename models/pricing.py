# models/pricing.py
from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class PriceBreakdown:
    subtotal: Decimal
    member_discount_rate: Decimal
    price_after_member: Decimal
    member_savings: Decimal
    coupon_savings: Decimal
    final_price: Decimal
    # set only when the coupon stage actually ran (minimum spend met)
    applied_coupon_id: str | None = None
    # whatever coupon the caller passed in, applied or not
    selected_coupon_id: str | None = None

    @property
    def total_savings(self) -> Decimal:
        return self.member_savings + self.coupon_savings
