"""
Referral stats repository.

Data access layer for ReferralStats model. Implements the StatsStore contract.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import and_, func, or_, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.referral_stats import ReferralStats
from app.models.user import User
from app.repositories.base import BaseRepository

LEADERBOARD_ORDERINGS = {
    # (column, descending) in priority order, id last for a total order
    "points": (
        (ReferralStats.points, True),
        (ReferralStats.total_referrals, True),
        (ReferralStats.created_at, False),
        (ReferralStats.id, False),
    ),
    "referrals": (
        (ReferralStats.total_referrals, True),
        (ReferralStats.points, True),
        (ReferralStats.created_at, False),
        (ReferralStats.id, False),
    ),
}


def _ordering(sort_by: str):
    ordering = LEADERBOARD_ORDERINGS.get(sort_by)
    if ordering is None:
        raise ValueError(f"Unknown leaderboard sort: {sort_by}")
    return ordering


class ReferralStatsRepository(BaseRepository[ReferralStats]):
    """Referral stats repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize referral stats repository."""
        super().__init__(ReferralStats, session)

    async def get_by_user_id(
        self, user_id: int
    ) -> Optional[ReferralStats]:
        """
        Get stats for a user.

        Args:
            user_id: User ID

        Returns:
            ReferralStats or None
        """
        return await self.get_by(user_id=user_id)

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
    ) -> ReferralStats:
        """
        Create or overwrite the stats record for a user.

        All derived fields are written in a single statement.

        Returns:
            The stored ReferralStats
        """
        values = {
            "referral_code": referral_code,
            "direct_referrals": direct_referrals,
            "total_referrals": total_referrals,
            "referral_tree": referral_tree,
            "generation_stats": generation_stats,
            "points": points,
            "last_updated": last_updated,
        }

        stmt = (
            insert(ReferralStats)
            .values(user_id=user_id, **values)
            .on_conflict_do_update(
                index_elements=[ReferralStats.user_id],
                set_={**values, "updated_at": last_updated},
            )
            .returning(ReferralStats)
        )
        result = await self.session.scalars(
            stmt, execution_options={"populate_existing": True}
        )
        return result.one()

    async def get_leaderboard(
        self,
        limit: int | None = 100,
        offset: int = 0,
        sort_by: str = "points",
    ) -> List[tuple[ReferralStats, str | None]]:
        """
        Get stats rows ordered for the leaderboard.

        Args:
            limit: Max rows (None for all)
            offset: Rows to skip
            sort_by: "points" or "referrals"

        Returns:
            List of (stats, username) tuples

        Raises:
            ValueError: If sort_by is unknown
        """
        ordering = _ordering(sort_by)

        stmt = (
            select(ReferralStats, User.username)
            .outerjoin(User, User.id == ReferralStats.user_id)
            .order_by(
                *(
                    column.desc() if descending else column.asc()
                    for column, descending in ordering
                )
            )
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return [(row[0], row[1]) for row in result.all()]

    async def get_rank(
        self, user_id: int, sort_by: str = "points"
    ) -> Optional[int]:
        """
        Get a user's 1-based leaderboard position.

        Counts the rows that sort ahead of the user's row under the same
        ordering as get_leaderboard.

        Returns:
            Rank, or None when the user has no stats

        Raises:
            ValueError: If sort_by is unknown
        """
        ordering = _ordering(sort_by)
        stats = await self.get_by_user_id(user_id)
        if stats is None:
            return None

        ahead = []
        for index, (column, descending) in enumerate(ordering):
            value = getattr(stats, column.key)
            ties = [
                earlier == getattr(stats, earlier.key)
                for earlier, _ in ordering[:index]
            ]
            better = column > value if descending else column < value
            ahead.append(and_(*ties, better))

        stmt = select(func.count()).select_from(ReferralStats).where(or_(*ahead))
        result = await self.session.execute(stmt)
        return (result.scalar() or 0) + 1

    async def get_total_referrals_sum(self) -> int:
        """
        Sum of total_referrals across all users.

        Returns:
            Sum (0 when there are no rows)
        """
        stmt = select(func.coalesce(func.sum(ReferralStats.total_referrals), 0))
        result = await self.session.execute(stmt)
        return int(result.scalar() or 0)

    async def get_top_referrer(self) -> Optional[ReferralStats]:
        """
        Get stats row with the most total referrals.

        Returns:
            ReferralStats or None
        """
        stmt = (
            select(ReferralStats)
            .order_by(
                ReferralStats.total_referrals.desc(),
                ReferralStats.created_at.asc(),
            )
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()
