# models/membership.py
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum


class MembershipTier(str, Enum):
    # Declared in ascending order of discount generosity.
    RESIDENT = "resident"
    MANAGER_L1 = "manager_l1"
    MANAGER_L2 = "manager_l2"
    GOD = "god"

    @property
    def rank(self) -> int:
        return list(MembershipTier).index(self)

    def __lt__(self, other):
        if not isinstance(other, MembershipTier):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, MembershipTier):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, MembershipTier):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, MembershipTier):
            return NotImplemented
        return self.rank >= other.rank


# One user's membership state. Frozen: MembershipService swaps in a new
# snapshot on every mutation so tier always matches the spend it came from.
@dataclass(frozen=True)
class UserLedger:
    user_id: str
    name: str
    lifetime_spend: Decimal = Decimal("0")
    annual_spend: Decimal = Decimal("0")
    tier: MembershipTier = MembershipTier.RESIDENT
    expiry_date: datetime | None = None
    points: int = 0
