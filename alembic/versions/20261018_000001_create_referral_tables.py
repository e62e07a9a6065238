"""Create users and referral_stats tables.

Revision ID: 20261018_000001
Revises:
Create Date: 2026-10-18 00:00:01

"""

from typing import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "20261018_000001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Upgrade database schema."""
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("username", sa.String(length=30), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("referral_code", sa.String(length=20), nullable=False),
        sa.Column("referred_by", sa.String(length=20), nullable=True),
        sa.Column(
            "points", sa.Integer(), server_default="0", nullable=False
        ),
        sa.Column(
            "is_admin", sa.Boolean(), server_default=sa.false(), nullable=False
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "points >= 0", name="check_user_points_non_negative"
        ),
        sa.CheckConstraint(
            "referred_by IS NULL OR referred_by <> referral_code",
            name="check_user_no_self_referral",
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index(
        "ix_users_referral_code", "users", ["referral_code"], unique=True
    )
    op.create_index(
        "ix_users_referred_by", "users", ["referred_by"], unique=False
    )
    op.create_index("ix_users_points", "users", ["points"], unique=False)
    op.create_index("ix_users_is_admin", "users", ["is_admin"], unique=False)

    op.create_table(
        "referral_stats",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("referral_code", sa.String(length=20), nullable=False),
        sa.Column(
            "direct_referrals", sa.Integer(), server_default="0", nullable=False
        ),
        sa.Column(
            "total_referrals", sa.Integer(), server_default="0", nullable=False
        ),
        # Flat list of descendant user ids
        sa.Column(
            "referral_tree", sa.JSON(), server_default="[]", nullable=False
        ),
        # {"<generation>": count}
        sa.Column(
            "generation_stats", sa.JSON(), server_default="{}", nullable=False
        ),
        sa.Column(
            "points", sa.Integer(), server_default="0", nullable=False
        ),
        sa.Column("last_updated", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ["user_id"],
            ["users.id"],
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_referral_stats_user_id", "referral_stats", ["user_id"], unique=True
    )
    op.create_index(
        "ix_referral_stats_referral_code",
        "referral_stats",
        ["referral_code"],
        unique=True,
    )
    op.create_index(
        "ix_referral_stats_total_referrals",
        "referral_stats",
        ["total_referrals"],
        unique=False,
    )
    op.create_index(
        "ix_referral_stats_points", "referral_stats", ["points"], unique=False
    )
    # Leaderboard orderings
    op.create_index(
        "idx_referral_stats_points_created",
        "referral_stats",
        ["points", "created_at"],
        unique=False,
    )
    op.create_index(
        "idx_referral_stats_total_created",
        "referral_stats",
        ["total_referrals", "created_at"],
        unique=False,
    )


def downgrade() -> None:
    """Downgrade database schema."""
    op.drop_index(
        "idx_referral_stats_total_created", table_name="referral_stats"
    )
    op.drop_index(
        "idx_referral_stats_points_created", table_name="referral_stats"
    )
    op.drop_index("ix_referral_stats_points", table_name="referral_stats")
    op.drop_index(
        "ix_referral_stats_total_referrals", table_name="referral_stats"
    )
    op.drop_index(
        "ix_referral_stats_referral_code", table_name="referral_stats"
    )
    op.drop_index("ix_referral_stats_user_id", table_name="referral_stats")
    op.drop_table("referral_stats")

    op.drop_index("ix_users_is_admin", table_name="users")
    op.drop_index("ix_users_points", table_name="users")
    op.drop_index("ix_users_referred_by", table_name="users")
    op.drop_index("ix_users_referral_code", table_name="users")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_index("ix_users_username", table_name="users")
    op.drop_table("users")
