"""
Admin service.

Handles system-wide referral maintenance and dashboard figures.
"""

from typing import Any

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.settings import settings
from app.repositories.referral_stats_repository import ReferralStatsRepository
from app.repositories.user_repository import UserRepository
from app.services.referral_stats_service import ReferralStatsService


class AdminService:
    """Admin service for stats refresh sweeps and dashboard stats."""

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize admin service.

        Args:
            session: Database session
        """
        self.session = session
        self.user_repo = UserRepository(session)
        self.stats_repo = ReferralStatsRepository(session)
        self.stats_service = ReferralStatsService.from_session(session)

    async def refresh_all_stats(self) -> dict[str, Any]:
        """
        Recompute referral stats for every user.

        Each user is recomputed independently. A failure for one user is
        logged and counted, and the sweep continues with the rest.

        Returns:
            Dict with updated, failed and message
        """
        user_ids = await self.user_repo.get_all_ids()
        updated = 0
        failed = 0

        logger.info(
            f"[AdminService] Starting stats refresh for {len(user_ids)} users..."
        )

        for user_id in user_ids:
            try:
                await self.stats_service.recompute_single(user_id)
                updated += 1

                if updated % settings.refresh_progress_every == 0:
                    logger.info(
                        f"[AdminService] Progress: {updated}/{len(user_ids)} "
                        "users updated"
                    )
            except Exception as e:
                failed += 1
                logger.exception(
                    f"Failed to update stats for user {user_id}: {e}"
                )
                # Leave the session usable for the next user
                await self.session.rollback()

        logger.info(
            f"[AdminService] Completed: {updated} succeeded, {failed} failed"
        )

        message = f"Successfully updated stats for {updated} users"
        if failed:
            message += f", {failed} failed"

        return {
            "updated": updated,
            "failed": failed,
            "message": message,
        }

    async def get_dashboard_stats(self) -> dict[str, Any]:
        """
        Get admin dashboard figures.

        Returns:
            Dict with total_users, admin_users, total_referrals, top_referrer
        """
        total_users = await self.user_repo.count()
        admin_users = await self.user_repo.count(is_admin=True)
        total_referrals = await self.stats_repo.get_total_referrals_sum()

        top_referrer_data = None
        top_referrer = await self.stats_repo.get_top_referrer()
        if top_referrer and top_referrer.total_referrals > 0:
            top_user = await self.user_repo.get_by_id(top_referrer.user_id)
            top_referrer_data = {
                "username": top_user.username if top_user else "Unknown",
                "referrals": top_referrer.total_referrals,
            }

        return {
            "total_users": total_users,
            "admin_users": admin_users,
            "total_referrals": total_referrals,
            "top_referrer": top_referrer_data,
        }
