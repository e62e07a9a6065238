"""
Services.

Business logic layer.
"""

# Core Services
from app.services.points_calculator import calculate_points
from app.services.referral_graph import ReferralGraphWalker
from app.services.referral_stats_service import ReferralStatsService

# Boundary Services
from app.services.admin_service import AdminService
from app.services.leaderboard_service import LeaderboardService
from app.services.referral_events import ReferralEvents
from app.services.user_service import UserService

__all__ = [
    # Core
    "calculate_points",
    "ReferralGraphWalker",
    "ReferralStatsService",
    # Boundary
    "AdminService",
    "LeaderboardService",
    "ReferralEvents",
    "UserService",
]
