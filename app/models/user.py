"""
User model.

Represents a registered user and their position in the referral forest.
"""

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base

if TYPE_CHECKING:
    from app.models.referral_stats import ReferralStats


class User(Base):
    """User model - registered users."""

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint(
            'points >= 0', name='check_user_points_non_negative'
        ),
        CheckConstraint(
            'referred_by IS NULL OR referred_by <> referral_code',
            name='check_user_no_self_referral',
        ),
    )

    # Primary key
    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    # Profile
    username: Mapped[str] = mapped_column(
        String(30), unique=True, index=True, nullable=False
    )
    email: Mapped[str] = mapped_column(
        String(255), unique=True, index=True, nullable=False
    )

    # Referral
    referral_code: Mapped[str] = mapped_column(
        String(20), unique=True, index=True, nullable=False
    )
    # Referrer's referral_code, not id
    referred_by: Mapped[str | None] = mapped_column(
        String(20), nullable=True, index=True
    )

    # Mirror of ReferralStats.points
    points: Mapped[int] = mapped_column(
        Integer, default=0, nullable=False, index=True
    )

    # Status flags
    is_admin: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False, index=True
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False
    )

    # Relationships
    referral_stats: Mapped["ReferralStats | None"] = relationship(
        "ReferralStats",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<User(id={self.id}, username={self.username}, "
            f"referral_code={self.referral_code}, "
            f"referred_by={self.referred_by})>"
        )
