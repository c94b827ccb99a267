from dataclasses import FrozenInstanceError
from datetime import timedelta
from decimal import Decimal

import pytest

from conftest import FIXED_NOW, fixed_clock
from models.membership import MembershipTier, UserLedger
from services.membership_service import (
    MembershipService,
    compute_tier,
    member_discount_rate,
    new_ledger,
)
from utils.errors import InvalidAmount, InvariantViolation


@pytest.mark.parametrize("lifetime, annual, expected", [
    (499, 999999, MembershipTier.RESIDENT),
    (500, 0, MembershipTier.MANAGER_L1),
    (500, 999.99, MembershipTier.MANAGER_L1),
    (500, 1000, MembershipTier.MANAGER_L2),
    (500, 1999.99, MembershipTier.MANAGER_L2),
    (500, 2000, MembershipTier.GOD),
    (0, 0, MembershipTier.RESIDENT),
    ("12000", "50", MembershipTier.MANAGER_L1),
])
def test_compute_tier_thresholds(lifetime, annual, expected):
    assert compute_tier(lifetime, annual) == expected


def test_lifetime_gate_ignores_annual_spend():
    for annual in (0, 999, 1000, 2000, 10**6):
        assert compute_tier(Decimal("499.99"), annual) == MembershipTier.RESIDENT


def test_tier_never_drops_as_annual_spend_rises():
    tiers = [compute_tier(800, a) for a in range(0, 3001, 50)]
    assert tiers == sorted(tiers)
    assert tiers[0] == MembershipTier.MANAGER_L1
    assert tiers[-1] == MembershipTier.GOD


@pytest.mark.parametrize("lifetime, annual", [(-1, 0), (600, -0.01), ("abc", 0)])
def test_compute_tier_rejects_bad_amounts(lifetime, annual):
    with pytest.raises(InvalidAmount):
        compute_tier(lifetime, annual)


def test_rate_table():
    assert member_discount_rate(MembershipTier.RESIDENT) == Decimal("1")
    assert member_discount_rate(MembershipTier.MANAGER_L1) == Decimal("0.95")
    assert member_discount_rate(MembershipTier.MANAGER_L2) == Decimal("0.90")
    assert member_discount_rate(MembershipTier.GOD) == Decimal("0.80")
    assert member_discount_rate("god") == Decimal("0.80")


def test_unknown_tier_is_invariant_violation():
    with pytest.raises(InvariantViolation):
        member_discount_rate("platinum")


def test_tiers_are_ordered():
    assert MembershipTier.RESIDENT < MembershipTier.MANAGER_L1 < MembershipTier.MANAGER_L2 < MembershipTier.GOD


def make_service():
    return MembershipService(new_ledger("u1", "Emson"), now=fixed_clock)


def test_new_ledger_starts_as_resident():
    ledger = make_service().ledger
    assert ledger.tier == MembershipTier.RESIDENT
    assert ledger.lifetime_spend == 0
    assert ledger.annual_spend == 0
    assert ledger.expiry_date is None


def test_record_spend_replaces_totals():
    svc = make_service()
    svc.record_spend(300, 100)
    ledger = svc.record_spend(200, 50)
    assert ledger.lifetime_spend == 200
    assert ledger.annual_spend == 50
    assert ledger.tier == MembershipTier.RESIDENT
    assert ledger.expiry_date is None


def test_first_promotion_sets_expiry_once():
    svc = make_service()
    ledger = svc.record_spend(500, 0)
    assert ledger.tier == MembershipTier.MANAGER_L1
    assert ledger.expiry_date == FIXED_NOW + timedelta(days=365)

    # later clock, higher tier: expiry must stay put
    svc._now = lambda: FIXED_NOW + timedelta(days=100)
    ledger = svc.record_spend(3000, 2500)
    assert ledger.tier == MembershipTier.GOD
    assert ledger.expiry_date == FIXED_NOW + timedelta(days=365)


def test_tier_always_matches_recorded_spend():
    svc = make_service()
    for lifetime, annual in [(100, 0), (600, 1200), (600, 300), (5000, 2100)]:
        ledger = svc.record_spend(lifetime, annual)
        assert ledger.tier == compute_tier(lifetime, annual)


def test_record_spend_rejects_negative_and_keeps_ledger():
    svc = make_service()
    before = svc.record_spend(600, 100)
    with pytest.raises(InvalidAmount):
        svc.record_spend(-5, 100)
    assert svc.ledger == before


@pytest.mark.parametrize("annual", [1000, 2500])
def test_advance_one_year_downgrades_paid_tiers(annual):
    svc = make_service()
    svc.record_spend(4000, annual)
    expiry = svc.ledger.expiry_date

    ledger = svc.advance_one_year()
    assert ledger.tier == MembershipTier.MANAGER_L1
    assert ledger.annual_spend == 0
    assert ledger.lifetime_spend == 4000
    assert ledger.expiry_date == expiry


def test_advance_one_year_keeps_resident_untouched():
    svc = make_service()
    svc.record_spend(300, 250)
    ledger = svc.advance_one_year()
    assert ledger.tier == MembershipTier.RESIDENT
    assert ledger.annual_spend == 250
    assert ledger.lifetime_spend == 300
    assert ledger.expiry_date is None


def test_advance_one_year_on_manager_l1_resets_annual():
    svc = make_service()
    svc.record_spend(700, 400)
    ledger = svc.advance_one_year()
    assert ledger.tier == MembershipTier.MANAGER_L1
    assert ledger.annual_spend == 0


def test_ledger_snapshots_are_immutable():
    ledger = UserLedger(user_id="u9", name="Test")
    with pytest.raises(FrozenInstanceError):
        ledger.tier = MembershipTier.GOD
