"""
Referral event triggers.

Entry points fired by registration, referrer attachment and admin refresh.
Recomputes run inline or are handed to the task queue depending on
settings.referral_stats_deferred.
"""

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.settings import settings
from app.services.admin_service import AdminService
from app.services.referral_stats_service import ReferralStatsService


class ReferralEvents:
    """Dispatches referral mutation events to the stats aggregator."""

    def __init__(
        self, session: AsyncSession, deferred: bool | None = None
    ) -> None:
        """
        Initialize referral events.

        Args:
            session: Database session used for inline recomputes
            deferred: Override settings.referral_stats_deferred
        """
        self.session = session
        self.deferred = (
            settings.referral_stats_deferred if deferred is None else deferred
        )

    async def on_user_registered(self, user_id: int) -> None:
        """New user created, possibly under a referrer."""
        await self._recompute(user_id, reason="user_registered")

    async def on_referrer_attached(self, user_id: int) -> None:
        """Existing user got a referrer."""
        await self._recompute(user_id, reason="referrer_attached")

    async def on_admin_full_refresh(self) -> dict | None:
        """
        Recompute stats for every user.

        Returns:
            Sweep summary when run inline, None when enqueued
        """
        if self.deferred:
            from jobs.tasks.referral_stats import refresh_all_referral_stats

            refresh_all_referral_stats.send()
            logger.info("Full referral stats refresh enqueued")
            return None

        return await AdminService(self.session).refresh_all_stats()

    async def _recompute(self, user_id: int, reason: str) -> None:
        if self.deferred:
            from jobs.tasks.referral_stats import recompute_referral_stats

            recompute_referral_stats.send(user_id)
            logger.info(
                "Referral stats recompute enqueued",
                extra={"user_id": user_id, "reason": reason},
            )
            return

        service = ReferralStatsService.from_session(self.session)
        await service.recompute(user_id)
