"""
Leaderboard service.

Ranks users by points or by total referrals.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from app.config.settings import settings
from app.repositories.referral_stats_repository import ReferralStatsRepository

# Same bounds as settings.leaderboard_default_limit
MAX_LEADERBOARD_LIMIT = 1000


class LeaderboardService:
    """Leaderboard over stored referral stats."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize leaderboard service."""
        self.session = session
        self.stats_repo = ReferralStatsRepository(session)

    async def get_leaderboard(
        self,
        limit: int | None = None,
        offset: int = 0,
        sort_by: str = "points",
    ) -> list[dict]:
        """
        Get leaderboard entries.

        Ties on the primary key fall back to the secondary key, then to the
        earliest stats record.

        Args:
            limit: Number of entries (defaults to settings, clamped to
                1..MAX_LEADERBOARD_LIMIT)
            offset: Entries to skip
            sort_by: "points" or "referrals"

        Returns:
            List of dicts with rank, user and stats fields

        Raises:
            ValueError: If sort_by is unknown
        """
        if limit is None:
            limit = settings.leaderboard_default_limit
        limit = max(1, min(limit, MAX_LEADERBOARD_LIMIT))
        offset = max(0, offset)

        rows = await self.stats_repo.get_leaderboard(
            limit=limit, offset=offset, sort_by=sort_by
        )

        return [
            {
                "rank": offset + index,
                "user_id": stats.user_id,
                "username": username or "Unknown",
                "referral_code": stats.referral_code,
                "direct_referrals": stats.direct_referrals,
                "total_referrals": stats.total_referrals,
                "points": stats.points or 0,
                "generation_stats": dict(stats.generation_stats),
            }
            for index, (stats, username) in enumerate(rows, 1)
        ]

    async def get_user_rank(self, user_id: int, sort_by: str = "points") -> int | None:
        """
        Get a user's 1-based leaderboard position.

        Returns:
            Rank, or None when the user has no stats
        """
        return await self.stats_repo.get_rank(user_id, sort_by=sort_by)
