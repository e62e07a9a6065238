#!/usr/bin/env python3
"""Initialize database tables."""

import asyncio
import sys
from pathlib import Path

from sqlalchemy.ext.asyncio import create_async_engine

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.config.settings import settings  # noqa: E402
from app.models import Base, ReferralStats, User  # noqa: E402, F401


async def init_db():
    """Create all database tables."""
    print("Creating database tables...")

    engine = create_async_engine(settings.async_database_url, echo=True)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    await engine.dispose()

    print("Database tables created successfully")


if __name__ == "__main__":
    asyncio.run(init_db())
