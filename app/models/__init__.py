"""
Database models.

Exports all SQLAlchemy models for easy imports.
"""

from app.models.base import Base
from app.models.referral_stats import ReferralStats
from app.models.user import User

__all__ = [
    # Base
    "Base",
    # Core Models
    "User",
    "ReferralStats",
]
