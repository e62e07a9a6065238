"""
Periodic jobs.

Enqueues the nightly referral stats sweep. The scheduler only sends
messages; the Dramatiq workers do the recomputation.

Run: python -m jobs.scheduler
"""

import asyncio

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from loguru import logger

from app.config.settings import settings
from jobs.tasks.referral_stats import refresh_all_referral_stats

REFRESH_JOB_ID = "referral_stats_refresh"


def create_scheduler() -> AsyncIOScheduler:
    """Build a scheduler with the nightly sweep registered (not started)."""
    scheduler = AsyncIOScheduler(timezone="UTC")

    # A sweep missed while down is run once on restart, not replayed
    scheduler.add_job(
        refresh_all_referral_stats.send,
        trigger=CronTrigger(hour=settings.referral_refresh_cron_hour, minute=0),
        id=REFRESH_JOB_ID,
        name="Referral stats full refresh",
        coalesce=True,
        misfire_grace_time=3600,
        replace_existing=True,
    )

    logger.info(
        f"Referral stats sweep scheduled daily at "
        f"{settings.referral_refresh_cron_hour:02d}:00 UTC"
    )
    return scheduler


async def main() -> None:
    from app.config.logging import setup_logging

    setup_logging(log_file="logs/scheduler.log")
    scheduler = create_scheduler()
    scheduler.start()
    try:
        await asyncio.Event().wait()
    finally:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")


if __name__ == "__main__":
    asyncio.run(main())
