"""
Referral stats tasks.

Deferred stats recomputation so that long ancestor chains do not block
the request that triggered them.
"""

import asyncio

import dramatiq
from loguru import logger

from jobs.broker import broker  # noqa: F401
from app.config.database import async_session_maker
from app.services.admin_service import AdminService
from app.services.referral_stats_service import ReferralStatsService
from app.utils.exceptions import NotFoundError, ReferralCycleError


# Missing users and cycles will not fix themselves on retry
@dramatiq.actor(
    max_retries=3,
    time_limit=300_000,
    throws=(NotFoundError, ReferralCycleError),
)
def recompute_referral_stats(user_id: int) -> dict:
    """
    Recompute stats for a user and its ancestors.

    Args:
        user_id: User whose referral tree changed

    Returns:
        Dict with user_id, direct_referrals, total_referrals, points
    """
    logger.info(f"Recomputing referral stats for user {user_id}...")

    try:
        result = asyncio.run(_recompute_async(user_id))
    except Exception as e:
        logger.exception(f"Referral stats recompute failed for user {user_id}: {e}")
        raise

    logger.info(
        f"Referral stats recomputed for user {user_id}: "
        f"{result['total_referrals']} referrals, {result['points']} points"
    )
    return result


async def _recompute_async(user_id: int) -> dict:
    """Async implementation of the recompute."""
    async with async_session_maker() as session:
        service = ReferralStatsService.from_session(session)
        stats = await service.recompute(user_id)

        return {
            "user_id": user_id,
            "direct_referrals": stats.direct_referrals,
            "total_referrals": stats.total_referrals,
            "points": stats.points,
        }


@dramatiq.actor(max_retries=1, time_limit=3_600_000)  # 1 hour timeout
def refresh_all_referral_stats() -> dict:
    """
    Recompute stats for every user.

    Returns:
        Dict with updated, failed, message

    Raises:
        Exception: If the sweep itself crashes (retried once)
    """
    logger.info("Starting full referral stats refresh...")

    try:
        result = asyncio.run(_refresh_all_async())
    except Exception as e:
        # Per-user failures are handled inside the sweep
        logger.exception(f"Full referral stats refresh failed: {e}")
        raise

    logger.info(f"Full referral stats refresh complete: {result['message']}")
    return result


async def _refresh_all_async() -> dict:
    """Async implementation of the full refresh."""
    async with async_session_maker() as session:
        return await AdminService(session).refresh_all_stats()
