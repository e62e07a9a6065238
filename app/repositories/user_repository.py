"""
User repository.

Data access layer for User model. Implements the UserDirectory contract.
"""

from collections.abc import Iterable
from typing import List, Optional

from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User
from app.repositories.base import BaseRepository
from app.repositories.protocols import ReferralNode


class UserRepository(BaseRepository[User]):
    """User repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize user repository."""
        super().__init__(User, session)

    async def get_by_referral_code(
        self, referral_code: str
    ) -> Optional[User]:
        """
        Get user by referral code.

        Args:
            referral_code: Referral code

        Returns:
            User or None
        """
        return await self.get_by(referral_code=referral_code)

    async def get_by_username_or_email(
        self, username: str, email: str
    ) -> Optional[User]:
        """
        Get user matching either username or email.

        Args:
            username: Username
            email: Email address

        Returns:
            User or None
        """
        stmt = (
            select(User)
            .where(or_(User.username == username, User.email == email))
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_children_of_code(
        self, referral_code: str
    ) -> List[ReferralNode]:
        """
        Get direct referrals of a code.

        Args:
            referral_code: Referrer's referral code

        Returns:
            List of (id, referral_code) for users referred by the code
        """
        return await self.get_children_of_codes([referral_code])

    async def get_children_of_codes(
        self, referral_codes: Iterable[str]
    ) -> List[ReferralNode]:
        """
        Get direct referrals of any code in a frontier.

        Args:
            referral_codes: Referrer codes

        Returns:
            List of (id, referral_code) ordered by id
        """
        codes = list(referral_codes)
        if not codes:
            return []

        stmt = (
            select(User.id, User.referral_code)
            .where(User.referred_by.in_(codes))
            .order_by(User.id)
        )
        result = await self.session.execute(stmt)
        return [
            ReferralNode(id=row.id, referral_code=row.referral_code)
            for row in result.all()
        ]

    async def get_direct_referrals(
        self, referral_code: str
    ) -> List[User]:
        """
        Get full user records of direct referrals.

        Args:
            referral_code: Referrer's referral code

        Returns:
            List of users ordered by registration time
        """
        stmt = (
            select(User)
            .where(User.referred_by == referral_code)
            .order_by(User.created_at, User.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def set_points(self, user_id: int, points: int) -> None:
        """
        Mirror aggregated points onto the user record.

        Args:
            user_id: User ID
            points: Points value
        """
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(points=points)
            .execution_options(synchronize_session="fetch")
        )
        await self.session.execute(stmt)

    async def get_all_ids(self) -> List[int]:
        """
        Get all user IDs.

        Returns:
            List of user IDs ordered by id
        """
        stmt = select(User.id).order_by(User.id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

