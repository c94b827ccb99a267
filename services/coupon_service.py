# services/coupon_service.py
import logging
from decimal import Decimal
from typing import Any, Iterable

from models.coupon import Coupon, CouponKind, CouponStatus
from models.membership import MembershipTier, UserLedger
from utils.errors import CouponNotEligible, InvalidAmount, InvalidCouponDefinition, UnknownCoupon
from utils.money import D

logger = logging.getLogger("storefront.coupons")


def _parse_tiers(raw) -> frozenset[MembershipTier] | None:
    # None or an empty list both mean "every tier"
    if not raw:
        return None
    try:
        return frozenset(MembershipTier(t) for t in raw)
    except ValueError:
        raise InvalidCouponDefinition(f"Unknown tier in eligible_tiers: {list(raw)!r}")


def coupon_from_definition(data: dict[str, Any]) -> Coupon:
    """
    Build a validated Coupon from an operations-screen payload.

    Accepted keys: id, title, description, kind, value, minimum_spend,
    eligible_tiers, target_categories, status.
    """
    coupon_id = str(data.get("id") or "").strip()
    title = str(data.get("title") or "").strip()
    if not coupon_id:
        raise InvalidCouponDefinition("id is required")
    if not title:
        raise InvalidCouponDefinition("title is required")

    try:
        kind = CouponKind(data.get("kind"))
    except ValueError:
        raise InvalidCouponDefinition("kind must be 'fixed_amount_off' or 'percentage_off'")

    try:
        status = CouponStatus(data.get("status") or CouponStatus.ACTIVE)
    except ValueError:
        raise InvalidCouponDefinition("status must be 'active', 'used' or 'expired'")

    try:
        value = D(data.get("value"))
        minimum_spend = D(data.get("minimum_spend"))
    except InvalidAmount as e:
        raise InvalidCouponDefinition(str(e))

    coupon = Coupon(
        id=coupon_id,
        title=title,
        description=str(data.get("description") or ""),
        kind=kind,
        value=value,
        minimum_spend=minimum_spend,
        eligible_tiers=_parse_tiers(data.get("eligible_tiers")),
        target_categories=tuple(data.get("target_categories") or ()),
        status=status,
    )
    validate_coupon(coupon)
    return coupon


def validate_coupon(coupon: Coupon) -> None:
    if not coupon.value.is_finite() or not coupon.minimum_spend.is_finite():
        raise InvalidCouponDefinition(f"Coupon {coupon.id}: amounts must be finite numbers")
    if coupon.minimum_spend < 0:
        raise InvalidCouponDefinition(f"Coupon {coupon.id}: minimum_spend must be >= 0")
    if coupon.kind == CouponKind.PERCENTAGE_OFF:
        # fraction retained; 1 means no discount at all
        if not (Decimal("0") < coupon.value <= Decimal("1")):
            raise InvalidCouponDefinition(
                f"Coupon {coupon.id}: percentage_off value must be in (0, 1], got {coupon.value}"
            )
    elif coupon.kind == CouponKind.FIXED_AMOUNT_OFF:
        if coupon.value <= 0:
            raise InvalidCouponDefinition(
                f"Coupon {coupon.id}: fixed_amount_off value must be > 0, got {coupon.value}"
            )
    else:
        raise InvalidCouponDefinition(f"Coupon {coupon.id}: unknown kind {coupon.kind!r}")


class CouponCatalog:
    # Coupon templates in display order, newest first.

    def __init__(self, coupons: Iterable[Coupon] = ()):
        self._coupons: list[Coupon] = []
        for c in coupons:
            validate_coupon(c)
            self._coupons.append(c)

    def all(self) -> list[Coupon]:
        return list(self._coupons)

    def get(self, coupon_id: str) -> Coupon:
        for c in self._coupons:
            if c.id == coupon_id:
                return c
        raise UnknownCoupon(coupon_id)

    def add_coupon(self, definition: dict[str, Any] | Coupon) -> Coupon:
        if isinstance(definition, Coupon):
            coupon = definition
            validate_coupon(coupon)
        else:
            coupon = coupon_from_definition(definition)

        if any(c.id == coupon.id for c in self._coupons):
            raise InvalidCouponDefinition(f"Coupon id already exists: {coupon.id}")

        self._coupons.insert(0, coupon)
        logger.info(f"Coupon pushed: {coupon.id} ({coupon.kind.value}, value={coupon.value})")
        return coupon

    def is_selectable(self, coupon: Coupon, tier: MembershipTier) -> bool:
        return coupon.status == CouponStatus.ACTIVE and coupon.is_open_to(tier)

    def list_eligible_coupons(self, ledger: UserLedger) -> list[Coupon]:
        return [c for c in self._coupons if self.is_selectable(c, ledger.tier)]

    def coupon_center(self, ledger: UserLedger) -> list[tuple[Coupon, bool]]:
        # every coupon with a "locked" flag for tiers it is not open to
        return [(c, not c.is_open_to(ledger.tier)) for c in self._coupons]

    def claim(self, coupon_id: str, ledger: UserLedger) -> Coupon:
        coupon = self.get(coupon_id)
        if not coupon.is_open_to(ledger.tier):
            raise CouponNotEligible(
                f"Coupon {coupon_id} is not available for tier {ledger.tier.value}"
            )
        logger.info(f"Coupon claimed: {coupon_id} by {ledger.user_id}")
        return coupon

    def mark_used(self, coupon_id: str) -> Coupon:
        coupon = self.get(coupon_id)
        coupon.status = CouponStatus.USED
        logger.info(f"Coupon used: {coupon_id}")
        return coupon

    def expire(self, coupon_id: str) -> Coupon:
        coupon = self.get(coupon_id)
        coupon.status = CouponStatus.EXPIRED
        logger.info(f"Coupon expired: {coupon_id}")
        return coupon
