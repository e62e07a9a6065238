"""
User service.

Business logic for user registration and referrer attachment.
"""

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.settings import settings
from app.models.user import User
from app.repositories.user_repository import UserRepository
from app.services.referral_events import ReferralEvents
from app.services.referral_graph import ReferralGraphWalker
from app.services.referral_stats_service import ReferralStatsService
from app.utils.exceptions import (
    InvalidReferralError,
    ReferrerAlreadySetError,
    SelfReferralError,
    UserNotFoundError,
)
from app.utils.validation import (
    generate_referral_code,
    normalize_email,
    sanitize_input,
    validate_referral_code,
    validate_username,
)

# Attempts to find an unused referral code before giving up
MAX_CODE_ATTEMPTS = 10


class UserService:
    """
    User service.

    Handles user registration and referral attachment.
    """

    def __init__(
        self, session: AsyncSession, deferred: bool | None = None
    ) -> None:
        """
        Initialize user service.

        Args:
            session: Database session
            deferred: Override settings.referral_stats_deferred
        """
        self.session = session
        self.user_repo = UserRepository(session)
        self.stats_service = ReferralStatsService.from_session(session)
        self.events = ReferralEvents(session, deferred=deferred)

    async def get_by_id(self, user_id: int) -> User | None:
        """
        Get user by ID.

        Args:
            user_id: User ID

        Returns:
            User or None
        """
        return await self.user_repo.get_by_id(user_id)

    async def get_by_referral_code(
        self, referral_code: str
    ) -> User | None:
        """
        Get user by referral code.

        Args:
            referral_code: Referral code

        Returns:
            User or None
        """
        return await self.user_repo.get_by_referral_code(referral_code)

    async def validate_referral_code(self, referral_code: str) -> User | None:
        """
        Resolve a referral code to its owner.

        Args:
            referral_code: Code entered by a user

        Returns:
            Referrer or None when the code is unknown
        """
        code = sanitize_input(referral_code, max_length=20)
        if not validate_referral_code(code):
            return None
        return await self.user_repo.get_by_referral_code(code)

    async def register_user(
        self,
        username: str,
        email: str,
        referral_code: str | None = None,
        is_admin: bool = False,
    ) -> User:
        """
        Register new user with referral support.

        Args:
            username: Username (3-30 chars)
            email: Email address
            referral_code: Referrer's code (optional)
            is_admin: Admin flag

        Returns:
            Created user

        Raises:
            ValueError: If input is invalid or user already exists
            InvalidReferralError: If the referral code is unknown
        """
        username = sanitize_input(username, max_length=30)
        if not validate_username(username):
            raise ValueError(f"Invalid username: {username}")
        email = normalize_email(email)

        existing = await self.user_repo.get_by_username_or_email(username, email)
        if existing:
            raise ValueError("User already registered")

        referred_by = None
        if referral_code:
            referrer = await self.validate_referral_code(referral_code)
            if referrer is None:
                raise InvalidReferralError("Invalid referral code")
            referred_by = referrer.referral_code

        user = await self.user_repo.create(
            username=username,
            email=email,
            referral_code=await self._generate_unique_code(),
            referred_by=referred_by,
            is_admin=is_admin,
        )
        await self.stats_service.initialize_user_stats(
            user.id, user.referral_code
        )
        await self.session.commit()

        logger.info(
            "User registered",
            extra={
                "user_id": user.id,
                "referral_code": user.referral_code,
                "referred_by": referred_by,
            },
        )

        if referred_by:
            await self.events.on_user_registered(user.id)

        return user

    async def attach_referrer(
        self, user_id: int, referral_code: str
    ) -> User:
        """
        Attach a referrer to a user who registered without one.

        Args:
            user_id: User ID
            referral_code: Referrer's code

        Returns:
            Updated user

        Raises:
            UserNotFoundError: If user does not exist
            ReferrerAlreadySetError: If the user already has a referrer
            SelfReferralError: If the code is the user's own
            InvalidReferralError: If the code is unknown or belongs to
                one of the user's descendants
        """
        if not referral_code:
            raise InvalidReferralError("Referral code is required")

        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError(user_id)

        if user.referred_by:
            logger.info(
                f"[Add Referrer] User {user.username} already has referrer: "
                f"{user.referred_by}"
            )
            raise ReferrerAlreadySetError()

        code = sanitize_input(referral_code, max_length=20)
        if code == user.referral_code:
            logger.info(f"[Add Referrer] User {user.username} tried to refer themselves")
            raise SelfReferralError()

        referrer = await self.user_repo.get_by_referral_code(code)
        if referrer is None:
            raise InvalidReferralError("Invalid referral code")

        descendants = await ReferralGraphWalker(self.user_repo).all_descendants(
            user.referral_code
        )
        if referrer.id in descendants:
            logger.warning(
                "Referral loop rejected",
                extra={"user_id": user.id, "referrer_id": referrer.id},
            )
            raise InvalidReferralError(
                "Cannot create a circular referral chain"
            )

        user.referred_by = referrer.referral_code
        await self.session.flush()
        await self.session.commit()

        logger.info(
            "Referrer attached",
            extra={"user_id": user.id, "referrer_id": referrer.id},
        )

        await self.events.on_referrer_attached(user.id)

        return user

    async def _generate_unique_code(self) -> str:
        """Generate a referral code that no user holds yet."""
        for _ in range(MAX_CODE_ATTEMPTS):
            code = generate_referral_code(settings.referral_code_length)
            if not await self.user_repo.get_by_referral_code(code):
                return code
        raise RuntimeError("Could not generate a unique referral code")
