"""
Health checks.

Each check reports ``{"status": "healthy" | "unhealthy", "message": ...}``
and never raises.
"""

from typing import Any

from loguru import logger
from sqlalchemy import text

from app.config.database import async_session_maker
from app.config.settings import settings

HEALTHY = "healthy"
UNHEALTHY = "unhealthy"


def _report(name: str, error: Exception | None = None) -> dict[str, Any]:
    if error is None:
        return {"status": HEALTHY, "message": f"{name} reachable"}
    logger.error(f"{name} health check failed: {error}")
    return {"status": UNHEALTHY, "message": f"{name} unreachable: {error}"}


async def check_database() -> dict[str, Any]:
    """Run ``SELECT 1`` on a fresh session."""
    try:
        async with async_session_maker() as session:
            await session.scalar(text("SELECT 1"))
    except Exception as e:
        return _report("PostgreSQL", e)
    return _report("PostgreSQL")


async def check_redis() -> dict[str, Any]:
    """Ping the Redis instance backing the task queue."""
    import redis.asyncio as redis

    client = redis.Redis(
        host=settings.redis_host,
        port=settings.redis_port,
        password=settings.redis_password,
        db=settings.redis_db,
    )
    try:
        await client.ping()
    except Exception as e:
        return _report("Redis", e)
    finally:
        await client.aclose()
    return _report("Redis")


async def check_all() -> dict[str, Any]:
    """
    Run every check relevant to the current mode.

    Redis only matters when stats recomputes go through the task queue.

    Returns:
        Dict with overall status ("healthy" or "degraded") and per-check
        results
    """
    checks = {"database": await check_database()}
    if settings.referral_stats_deferred:
        checks["redis"] = await check_redis()

    healthy = all(check["status"] == HEALTHY for check in checks.values())
    return {
        "status": HEALTHY if healthy else "degraded",
        "checks": checks,
    }
