from decimal import Decimal

import pytest

from data.repository import MockDataRepository
from models.coupon import Coupon, CouponKind, CouponStatus
from models.membership import MembershipTier, UserLedger
from services.coupon_service import CouponCatalog, coupon_from_definition
from utils.errors import CouponNotEligible, InvalidCouponDefinition, UnknownCoupon


def ledger(tier):
    return UserLedger(user_id="u1", name="Emson", tier=tier)


@pytest.fixture
def catalog():
    return CouponCatalog(MockDataRepository().get_coupons())


def ids(coupons):
    return [c.id for c in coupons]


def test_seeded_eligibility_by_tier(catalog):
    assert ids(catalog.list_eligible_coupons(ledger(MembershipTier.RESIDENT))) == ["cp1", "cp3"]
    for tier in (MembershipTier.MANAGER_L1, MembershipTier.MANAGER_L2, MembershipTier.GOD):
        assert ids(catalog.list_eligible_coupons(ledger(tier))) == ["cp2", "cp3"]


def test_only_active_coupons_are_selectable(catalog):
    catalog.mark_used("cp3")
    catalog.expire("cp1")
    assert ids(catalog.list_eligible_coupons(ledger(MembershipTier.RESIDENT))) == []
    assert catalog.get("cp3").status == CouponStatus.USED
    assert catalog.get("cp1").status == CouponStatus.EXPIRED


def test_add_coupon_goes_first(catalog):
    coupon = catalog.add_coupon({
        "id": "cp4", "title": "Spring Sale", "kind": "percentage_off",
        "value": "0.88", "minimum_spend": 200,
    })
    assert coupon.value == Decimal("0.88")
    assert coupon.eligible_tiers is None
    assert coupon.status == CouponStatus.ACTIVE
    assert ids(catalog.all())[0] == "cp4"


def test_add_coupon_with_tiers(catalog):
    coupon = catalog.add_coupon({
        "id": "vip", "title": "God only", "kind": "fixed_amount_off",
        "value": 300, "minimum_spend": 2000, "eligible_tiers": ["god"],
    })
    assert coupon.eligible_tiers == frozenset({MembershipTier.GOD})
    assert "vip" not in ids(catalog.list_eligible_coupons(ledger(MembershipTier.MANAGER_L2)))
    assert "vip" in ids(catalog.list_eligible_coupons(ledger(MembershipTier.GOD)))


@pytest.mark.parametrize("value", ["0", "-0.1", "1.01", "90"])
def test_percentage_value_outside_range_rejected(catalog, value):
    with pytest.raises(InvalidCouponDefinition):
        catalog.add_coupon({"id": "bad", "title": "Bad", "kind": "percentage_off", "value": value})
    assert "bad" not in ids(catalog.all())


@pytest.mark.parametrize("definition", [
    {"id": "x", "title": "X", "kind": "fixed_amount_off", "value": 0},
    {"id": "x", "title": "X", "kind": "fixed_amount_off", "value": 10, "minimum_spend": -1},
    {"id": "x", "title": "X", "kind": "buy_one_get_one", "value": 10},
    {"id": "x", "title": "X", "kind": "fixed_amount_off", "value": "ten"},
    {"id": "x", "title": "X", "kind": "fixed_amount_off", "value": 10, "eligible_tiers": ["vip"]},
    {"id": "x", "title": "X", "kind": "fixed_amount_off", "value": 10, "status": "pending"},
    {"id": "", "title": "X", "kind": "fixed_amount_off", "value": 10},
    {"id": "x", "title": "", "kind": "fixed_amount_off", "value": 10},
])
def test_invalid_definitions_rejected(definition):
    with pytest.raises(InvalidCouponDefinition):
        coupon_from_definition(definition)


def test_duplicate_id_rejected(catalog):
    with pytest.raises(InvalidCouponDefinition):
        catalog.add_coupon({"id": "cp1", "title": "Again", "kind": "fixed_amount_off", "value": 5})


def test_add_coupon_accepts_coupon_objects(catalog):
    coupon = Coupon("obj", "Object", "", CouponKind.PERCENTAGE_OFF, Decimal("1.5"))
    with pytest.raises(InvalidCouponDefinition):
        catalog.add_coupon(coupon)


def test_percentage_of_one_is_valid(catalog):
    coupon = catalog.add_coupon({"id": "noop", "title": "Nothing", "kind": "percentage_off", "value": 1})
    assert coupon.value == Decimal("1")


def test_coupon_center_flags_locked(catalog):
    center = {c.id: locked for c, locked in catalog.coupon_center(ledger(MembershipTier.RESIDENT))}
    assert center == {"cp1": False, "cp2": True, "cp3": False}


def test_claim_locked_coupon_raises(catalog):
    with pytest.raises(CouponNotEligible):
        catalog.claim("cp2", ledger(MembershipTier.RESIDENT))
    assert catalog.claim("cp2", ledger(MembershipTier.GOD)).id == "cp2"


def test_unknown_coupon(catalog):
    with pytest.raises(UnknownCoupon):
        catalog.get("nope")


def test_add_coupon_with_float_amounts(catalog):
    coupon = catalog.add_coupon(Coupon("fl", "Float", "", CouponKind.PERCENTAGE_OFF, 0.9, 50.5))
    assert coupon.value == Decimal("0.9")
    assert coupon.minimum_spend == Decimal("50.5")


def test_float_coupon_out_of_range_rejected(catalog):
    with pytest.raises(InvalidCouponDefinition):
        catalog.add_coupon(Coupon("fl", "Float", "", CouponKind.PERCENTAGE_OFF, 1.5))


def test_non_numeric_coupon_amount_rejected():
    with pytest.raises(InvalidCouponDefinition):
        Coupon("bad", "Bad", "", CouponKind.FIXED_AMOUNT_OFF, "ten")
