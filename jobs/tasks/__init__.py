"""
Background tasks.

Dramatiq task definitions.
"""

from jobs.tasks.referral_stats import (
    recompute_referral_stats,
    refresh_all_referral_stats,
)

__all__ = [
    "recompute_referral_stats",
    "refresh_all_referral_stats",
]
