# services/pricing_service.py

from __future__ import annotations
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from models.cart import CartLine
from models.coupon import Coupon, CouponKind
from models.membership import MembershipTier
from models.pricing import PriceBreakdown
from services.membership_service import member_discount_rate
from utils.errors import InvariantViolation
from utils.money import Money, round_money

logger = logging.getLogger("storefront.pricing")

ZERO = Decimal("0")


@dataclass(frozen=True)
class StageResult:
    price: Money
    savings: Money
    applied: bool = True


class DiscountRule(ABC):
    # One pricing stage. Each stage gets the price left over by the stage
    # before it, so discounts stack instead of all working off the subtotal.

    @abstractmethod
    def apply(self, price: Money, tier: MembershipTier, coupon: Coupon | None) -> StageResult:
        pass


class MembershipDiscountRule(DiscountRule):
    # resident pays 100%, manager_l1 95%, manager_l2 90%, god 80%

    def apply(self, price, tier, coupon):
        rate = member_discount_rate(tier)
        after = price * rate
        return StageResult(price=after, savings=price - after)


class CouponRule(DiscountRule):
    # Must run after MembershipDiscountRule: minimum_spend is compared to the
    # post-member-discount price, never the raw subtotal.

    def apply(self, price, tier, coupon):
        price_after_member = price
        if coupon is None or price_after_member < coupon.minimum_spend:
            return StageResult(price=price, savings=ZERO, applied=False)

        if coupon.kind == CouponKind.FIXED_AMOUNT_OFF:
            # not clamped here; the final floor keeps the total at >= 0
            savings = coupon.value
        elif coupon.kind == CouponKind.PERCENTAGE_OFF:
            savings = price_after_member * (Decimal("1") - coupon.value)
        else:
            logger.error("Unknown coupon kind %r on coupon %s", coupon.kind, coupon.id)
            raise InvariantViolation(f"Unknown coupon kind: {coupon.kind!r}")

        return StageResult(price=price - savings, savings=savings)


class PricingService:
    # Applies the member discount, then the coupon, then floors at zero.

    def __init__(self):
        self.member_rule = MembershipDiscountRule()
        self.coupon_rule = CouponRule()

    def compute_total(
        self,
        lines: Iterable[CartLine],
        tier: MembershipTier,
        coupon: Coupon | None = None,
    ) -> PriceBreakdown:
        subtotal = sum((line.line_subtotal for line in lines), ZERO)

        member = self.member_rule.apply(subtotal, tier, coupon)
        coupon_stage = self.coupon_rule.apply(member.price, tier, coupon)

        # the only place a negative total is prevented
        final_price = max(ZERO, member.price - coupon_stage.savings)

        # Round the three prices; savings are the differences between the
        # rounded prices so subtotal - member = after_member - coupon = final.
        subtotal_c = round_money(subtotal)
        after_member_c = round_money(member.price)
        final_c = round_money(final_price)
        if coupon_stage.savings > member.price:
            # fixed coupon bigger than the price: report its nominal value
            coupon_savings = round_money(coupon_stage.savings)
        else:
            coupon_savings = after_member_c - final_c

        breakdown = PriceBreakdown(
            subtotal=subtotal_c,
            member_discount_rate=member_discount_rate(tier),
            price_after_member=after_member_c,
            member_savings=subtotal_c - after_member_c,
            coupon_savings=coupon_savings,
            final_price=final_c,
            applied_coupon_id=coupon.id if coupon is not None and coupon_stage.applied else None,
            selected_coupon_id=coupon.id if coupon is not None else None,
        )
        logger.debug(
            f"Priced cart: subtotal={breakdown.subtotal}, tier={MembershipTier(tier).value}, "
            f"coupon={breakdown.selected_coupon_id}, final={breakdown.final_price}"
        )
        return breakdown


_default_engine = PricingService()


def compute_total(lines, tier, coupon=None) -> PriceBreakdown:
    return _default_engine.compute_total(lines, tier, coupon)
