"""
Repositories.

Data access layer for all models.
"""

from app.repositories.base import BaseRepository
from app.repositories.protocols import (
    ReferralNode,
    StatsStore,
    UnitOfWork,
    UserDirectory,
)
from app.repositories.referral_stats_repository import (
    ReferralStatsRepository,
)
from app.repositories.user_repository import UserRepository

__all__ = [
    # Base
    "BaseRepository",
    # Contracts
    "ReferralNode",
    "StatsStore",
    "UnitOfWork",
    "UserDirectory",
    # Core
    "UserRepository",
    "ReferralStatsRepository",
]
