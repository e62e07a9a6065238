"""
Referral stats service.

Recomputes aggregated referral stats for a user and propagates the update
up the chain of referrers to the root of the user's tree.
"""

from datetime import UTC, datetime
from typing import Any

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.referral_stats import ReferralStats
from app.models.user import User
from app.repositories.protocols import StatsStore, UnitOfWork, UserDirectory
from app.repositories.referral_stats_repository import ReferralStatsRepository
from app.repositories.user_repository import UserRepository
from app.services.points_calculator import calculate_points
from app.services.referral_graph import (
    ReferralGraphWalker,
    flatten_generations,
    generation_counts,
)
from app.utils.exceptions import (
    ReferralCycleError,
    ReferrerNotFoundError,
    StatsNotFoundError,
    UserNotFoundError,
)


class ReferralStatsService:
    """Stats aggregator over a user directory and a stats store."""

    def __init__(
        self,
        directory: UserDirectory,
        stats_store: StatsStore,
        unit_of_work: UnitOfWork | None = None,
    ) -> None:
        """
        Initialize referral stats service.

        Args:
            directory: User directory (read users, write points)
            stats_store: Stats persistence
            unit_of_work: Commit boundary; each user's update is committed
                before moving to its referrer when provided
        """
        self.directory = directory
        self.stats_store = stats_store
        self.unit_of_work = unit_of_work
        self.walker = ReferralGraphWalker(directory)

    @classmethod
    def from_session(cls, session: AsyncSession) -> "ReferralStatsService":
        """Build the service on top of SQL repositories sharing a session."""
        return cls(
            UserRepository(session),
            ReferralStatsRepository(session),
            unit_of_work=session,
        )

    async def initialize_user_stats(
        self, user_id: int, referral_code: str
    ) -> ReferralStats:
        """
        Create a zeroed stats record for a newly registered user.

        Args:
            user_id: User ID
            referral_code: User's referral code

        Returns:
            Created ReferralStats
        """
        logger.info(f"[ReferralStats] Initializing stats for user {user_id}")

        stats = await self.stats_store.upsert(
            user_id,
            referral_code=referral_code,
            direct_referrals=0,
            total_referrals=0,
            referral_tree=[],
            generation_stats={},
            points=0,
            last_updated=datetime.now(UTC),
        )
        return stats

    async def recompute(self, user_id: int) -> ReferralStats:
        """
        Recompute stats for a user and every ancestor up to the root.

        Each user's derived fields are stored together. A failure on an
        ancestor leaves the already processed users updated and the rest
        stale until the next trigger.

        Args:
            user_id: User ID

        Returns:
            Stats of the user the call started from

        Raises:
            UserNotFoundError: If user_id does not exist
            ReferrerNotFoundError: If a referred_by code does not resolve
            ReferralCycleError: If the referred_by chain loops
        """
        user = await self._get_user(user_id)

        chain: list[int] = []
        started_stats: ReferralStats | None = None

        while True:
            if user.id in chain:
                logger.error(
                    "Referral cycle detected while propagating stats",
                    extra={"user_id": user.id, "chain": chain},
                )
                raise ReferralCycleError(user.id, chain)
            chain.append(user.id)

            stats = await self._recompute_user(user)
            if started_stats is None:
                started_stats = stats

            if not user.referred_by:
                break

            referrer = await self.directory.get_by_referral_code(user.referred_by)
            if referrer is None:
                logger.warning(
                    f"[ReferralStats] Referrer not found for code: {user.referred_by}"
                )
                raise ReferrerNotFoundError(user.id, user.referred_by)

            logger.debug(
                f"[ReferralStats] Propagating to ancestor {referrer.id} "
                f"({referrer.referral_code})"
            )
            user = referrer

        logger.info(
            "Referral stats propagated",
            extra={"user_id": user_id, "chain_length": len(chain)},
        )

        return started_stats

    async def recompute_single(self, user_id: int) -> ReferralStats:
        """
        Recompute stats for one user without touching ancestors.

        Args:
            user_id: User ID

        Returns:
            Updated ReferralStats

        Raises:
            UserNotFoundError: If user_id does not exist
        """
        user = await self._get_user(user_id)
        return await self._recompute_user(user)

    async def get_stats(self, user_id: int) -> ReferralStats:
        """
        Get stored stats for a user.

        Raises:
            StatsNotFoundError: If the user has no stats record
        """
        stats = await self.stats_store.get_by_user_id(user_id)
        if stats is None:
            raise StatsNotFoundError(user_id)
        return stats

    async def get_referral_tree(self, user_id: int) -> dict[str, Any]:
        """
        Get nested referral tree below a user.

        Raises:
            UserNotFoundError: If user_id does not exist
        """
        user = await self._get_user(user_id)
        return await self.walker.build_tree(user)

    async def _get_user(self, user_id: int) -> User:
        user = await self.directory.get_by_id(user_id)
        if user is None:
            logger.error(f"[ReferralStats] User {user_id} not found")
            raise UserNotFoundError(user_id)
        return user

    async def _recompute_user(self, user: User) -> ReferralStats:
        """Walk, score and store stats for a single resolved user."""
        try:
            generations = await self.walker.walk(user.referral_code)
            counts = generation_counts(generations)
            descendants = flatten_generations(generations)
            points = calculate_points(counts)

            stats = await self.stats_store.upsert(
                user.id,
                referral_code=user.referral_code,
                direct_referrals=counts.get(1, 0),
                total_referrals=len(descendants),
                referral_tree=sorted(descendants),
                generation_stats=counts,
                points=points,
                last_updated=datetime.now(UTC),
            )
            await self.directory.set_points(user.id, points)
            if self.unit_of_work is not None:
                await self.unit_of_work.commit()
        except Exception:
            if self.unit_of_work is not None:
                await self.unit_of_work.rollback()
            raise

        logger.info(
            "Referral stats updated",
            extra={
                "user_id": user.id,
                "direct": stats.direct_referrals,
                "total": stats.total_referrals,
                "points": stats.points,
                "generation_stats": counts,
            },
        )

        return stats
