# services/membership_service.py
"""
membership_service.py

Membership tiers for storefront users.

Features:
- Compute the membership tier from lifetime and annual spending.
- Look up the member discount rate for a tier.
- Hold one user's ledger and apply the two operations that may change it:
  an operations "set spend" and the yearly rollover.

Thresholds (first match wins):
    resident   : lifetime < 500 (annual spend is ignored)
    god        : annual >= 2000
    manager_l2 : annual >= 1000
    manager_l1 : everything else once lifetime >= 500
"""

import logging
from dataclasses import replace
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Callable

from models.membership import MembershipTier, UserLedger
from utils.errors import InvariantViolation
from utils.money import Money, non_negative

logger = logging.getLogger("storefront.membership")

LIFETIME_GATE = Decimal("500")
GOD_ANNUAL = Decimal("2000")
MANAGER_L2_ANNUAL = Decimal("1000")

MEMBERSHIP_TERM = timedelta(days=365)

# Fraction of the price the member still pays.
TIER_RATES: dict[MembershipTier, Decimal] = {
    MembershipTier.RESIDENT: Decimal("1.00"),
    MembershipTier.MANAGER_L1: Decimal("0.95"),
    MembershipTier.MANAGER_L2: Decimal("0.90"),
    MembershipTier.GOD: Decimal("0.80"),
}


def compute_tier(lifetime_spend, annual_spend) -> MembershipTier:
    lifetime = non_negative(lifetime_spend, "lifetime spend")
    annual = non_negative(annual_spend, "annual spend")

    if lifetime < LIFETIME_GATE:
        return MembershipTier.RESIDENT
    elif annual >= GOD_ANNUAL:
        return MembershipTier.GOD
    elif annual >= MANAGER_L2_ANNUAL:
        return MembershipTier.MANAGER_L2
    else:
        return MembershipTier.MANAGER_L1


def member_discount_rate(tier: MembershipTier) -> Decimal:
    try:
        return TIER_RATES[MembershipTier(tier)]
    except (KeyError, ValueError):
        logger.error("No discount rate for tier %r", tier)
        raise InvariantViolation(f"Unknown membership tier: {tier!r}")


def new_ledger(user_id: str, name: str) -> UserLedger:
    return UserLedger(user_id=user_id, name=name)


class MembershipService:
    # Owns a single UserLedger. All mutations go through record_spend and
    # advance_one_year, each of which stores a new snapshot in one step.

    def __init__(self, ledger: UserLedger, now: Callable[[], datetime] | None = None):
        self._ledger = ledger
        # injectable clock, same idea as passing "now" in the pricing context
        self._now = now or datetime.now

    @property
    def ledger(self) -> UserLedger:
        return self._ledger

    @property
    def tier(self) -> MembershipTier:
        return self._ledger.tier

    def record_spend(self, lifetime, annual) -> UserLedger:
        # Absolute totals, not deltas.
        lifetime: Money = non_negative(lifetime, "lifetime spend")
        annual: Money = non_negative(annual, "annual spend")

        prev = self._ledger
        new_tier = compute_tier(lifetime, annual)

        expiry = prev.expiry_date
        if new_tier != MembershipTier.RESIDENT and prev.tier == MembershipTier.RESIDENT:
            expiry = self._now() + MEMBERSHIP_TERM
            logger.info(
                f"Membership granted to {prev.user_id}: {new_tier.value}, expires {expiry.isoformat()}"
            )

        self._ledger = replace(
            prev,
            lifetime_spend=lifetime,
            annual_spend=annual,
            tier=new_tier,
            expiry_date=expiry,
        )

        if new_tier != prev.tier:
            logger.info(f"Tier change for {prev.user_id}: {prev.tier.value} -> {new_tier.value}")
        logger.debug(f"Spend recorded for {prev.user_id}: lifetime={lifetime}, annual={annual}")
        return self._ledger

    def advance_one_year(self) -> UserLedger:
        # Yearly rollover: paid tiers fall back to manager_l1 and annual spend
        # starts over. Residents are left exactly as they are.
        prev = self._ledger
        if prev.tier == MembershipTier.RESIDENT:
            logger.info(f"Year rollover for {prev.user_id}: resident, nothing to reset")
            return prev

        self._ledger = replace(
            prev,
            annual_spend=Decimal("0"),
            tier=MembershipTier.MANAGER_L1,
        )
        logger.info(
            f"Year rollover for {prev.user_id}: {prev.tier.value} -> {MembershipTier.MANAGER_L1.value}"
        )
        return self._ledger
