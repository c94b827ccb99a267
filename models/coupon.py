# models/coupon.py
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from models.membership import MembershipTier
from utils.errors import InvalidAmount, InvalidCouponDefinition
from utils.money import D


class CouponKind(str, Enum):
    FIXED_AMOUNT_OFF = "fixed_amount_off"
    # value is the fraction of price retained: 0.9 means 10% off
    PERCENTAGE_OFF = "percentage_off"


class CouponStatus(str, Enum):
    ACTIVE = "active"
    USED = "used"
    EXPIRED = "expired"


@dataclass
class Coupon:
    id: str
    title: str
    description: str
    kind: CouponKind
    value: Decimal
    minimum_spend: Decimal = Decimal("0")
    # None means every tier may use it
    eligible_tiers: frozenset[MembershipTier] | None = None
    target_categories: tuple[str, ...] = ()
    status: CouponStatus = CouponStatus.ACTIVE

    def __post_init__(self):
        # amounts may arrive as int, float or str
        try:
            self.value = D(self.value)
            self.minimum_spend = D(self.minimum_spend)
        except InvalidAmount as e:
            raise InvalidCouponDefinition(f"Coupon {self.id}: {e}")

    def is_open_to(self, tier: MembershipTier) -> bool:
        return self.eligible_tiers is None or tier in self.eligible_tiers
