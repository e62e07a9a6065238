#!/usr/bin/env python3
"""
Refresh referral stats.

Recomputes stats for every user, or for one user and its ancestors.

Run: python scripts/refresh_referral_stats.py [--user-id ID] [--enqueue]
"""

import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from loguru import logger  # noqa: E402

from app.config.database import async_session_maker, close_db  # noqa: E402
from app.config.logging import setup_logging  # noqa: E402
from app.services.admin_service import AdminService  # noqa: E402
from app.services.referral_stats_service import ReferralStatsService  # noqa: E402


async def refresh(user_id: int | None = None) -> int:
    """
    Run the refresh inline.

    Returns:
        Process exit code
    """
    try:
        async with async_session_maker() as session:
            if user_id is not None:
                stats = await ReferralStatsService.from_session(session).recompute(
                    user_id
                )
                logger.info(
                    f"User {user_id}: direct={stats.direct_referrals}, "
                    f"total={stats.total_referrals}, points={stats.points}"
                )
                return 0

            result = await AdminService(session).refresh_all_stats()
            logger.info(result["message"])
            return 1 if result["failed"] else 0
    finally:
        await close_db()


def enqueue(user_id: int | None = None) -> None:
    """Hand the refresh to the Dramatiq workers."""
    from jobs.tasks.referral_stats import (
        recompute_referral_stats,
        refresh_all_referral_stats,
    )

    if user_id is not None:
        recompute_referral_stats.send(user_id)
    else:
        refresh_all_referral_stats.send()
    logger.info("Referral stats refresh enqueued")


def main() -> int:
    """Main entry point."""
    import argparse

    parser = argparse.ArgumentParser(description="Refresh referral stats")
    parser.add_argument(
        "--user-id",
        type=int,
        default=None,
        help="Recompute one user and its ancestors (default: all users)",
    )
    parser.add_argument(
        "--enqueue",
        action="store_true",
        help="Send the refresh to the task queue instead of running it here",
    )

    args = parser.parse_args()

    setup_logging()

    if args.enqueue:
        enqueue(args.user_id)
        return 0

    return asyncio.run(refresh(args.user_id))


if __name__ == "__main__":
    sys.exit(main())
