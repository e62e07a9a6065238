"""
Referral stats model.

Aggregated referral counts and points, one record per user.
"""

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base
from app.models.types import GenerationStatsType, IdListType

if TYPE_CHECKING:
    from app.models.user import User


class ReferralStats(Base):
    """Referral stats model - recomputed by ReferralStatsService."""

    __tablename__ = "referral_stats"
    __table_args__ = (
        # Leaderboard queries
        Index("idx_referral_stats_points_created", "points", "created_at"),
        Index(
            "idx_referral_stats_total_created", "total_referrals", "created_at"
        ),
    )

    # Primary key
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    # Owner
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )
    referral_code: Mapped[str] = mapped_column(
        String(20), nullable=False, unique=True, index=True
    )

    # Counts
    direct_referrals: Mapped[int] = mapped_column(
        Integer, default=0, nullable=False
    )
    total_referrals: Mapped[int] = mapped_column(
        Integer, default=0, nullable=False, index=True
    )

    # All descendant user ids, flat
    referral_tree: Mapped[list[int]] = mapped_column(
        IdListType, default=list, nullable=False
    )

    # generation -> count of descendants at that generation
    generation_stats: Mapped[dict[int, int]] = mapped_column(
        GenerationStatsType, default=dict, nullable=False
    )

    points: Mapped[int] = mapped_column(
        Integer, default=0, nullable=False, index=True
    )

    # Timestamps
    last_updated: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False
    )

    # Relationships
    user: Mapped["User"] = relationship(
        "User",
        back_populates="referral_stats",
    )

    @property
    def indirect_referrals(self) -> int:
        """Descendants at generation 2 and deeper."""
        return self.total_referrals - self.direct_referrals

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<ReferralStats(user_id={self.user_id}, "
            f"direct={self.direct_referrals}, total={self.total_referrals}, "
            f"points={self.points})>"
        )
