"""
Storage contracts consumed by the referral core.

The graph walker and stats aggregator depend only on these protocols, so
any store that implements them (SQL repositories, in-memory fakes) can be
plugged in.
"""

from collections.abc import Iterable
from datetime import datetime
from typing import NamedTuple, Protocol

from app.models.referral_stats import ReferralStats
from app.models.user import User


class ReferralNode(NamedTuple):
    """A child in the referral forest: its id and its own referral code."""

    id: int
    referral_code: str


class UserDirectory(Protocol):
    """Read access to users plus the denormalized points field."""

    async def get_by_id(self, id: int) -> User | None: ...

    async def get_by_referral_code(self, referral_code: str) -> User | None: ...

    async def get_children_of_code(
        self, referral_code: str
    ) -> list[ReferralNode]: ...

    async def get_children_of_codes(
        self, referral_codes: Iterable[str]
    ) -> list[ReferralNode]: ...

    async def get_direct_referrals(self, referral_code: str) -> list[User]: ...

    async def set_points(self, user_id: int, points: int) -> None: ...


class StatsStore(Protocol):
    """Persistence of one aggregated stats record per user."""

    async def upsert(
        self,
        user_id: int,
        *,
        referral_code: str,
        direct_referrals: int,
        total_referrals: int,
        referral_tree: list[int],
        generation_stats: dict[int, int],
        points: int,
        last_updated: datetime,
    ) -> ReferralStats: ...

    async def get_by_user_id(self, user_id: int) -> ReferralStats | None: ...


class UnitOfWork(Protocol):
    """Commit boundary shared by the directory and the stats store."""

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...

