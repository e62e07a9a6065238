"""
Referral domain exceptions.

Defines categorized exception types raised by the referral services.
"""


class ReferralError(Exception):
    """Base class for referral domain errors."""
    pass


class NotFoundError(ReferralError):
    """Raised when a required record does not exist."""
    pass


class UserNotFoundError(NotFoundError):
    """Raised when a user id cannot be resolved."""

    def __init__(self, user_id: int) -> None:
        self.user_id = user_id
        super().__init__(f"User {user_id} not found")


class ReferrerNotFoundError(NotFoundError):
    """Raised when a user's referred_by code does not resolve to a user."""

    def __init__(self, user_id: int, referral_code: str) -> None:
        self.user_id = user_id
        self.referral_code = referral_code
        super().__init__(
            f"Referrer with code {referral_code} not found "
            f"(referenced by user {user_id})"
        )


class StatsNotFoundError(NotFoundError):
    """Raised when a user has no referral stats record."""

    def __init__(self, user_id: int) -> None:
        self.user_id = user_id
        super().__init__(f"Stats not found for user {user_id}")


class InvalidReferralError(ReferralError, ValueError):
    """Raised when a referral code cannot be attached to a user."""
    pass


class SelfReferralError(InvalidReferralError):
    """Raised when a user tries to use their own referral code."""

    def __init__(self) -> None:
        super().__init__("You cannot refer yourself")


class ReferrerAlreadySetError(InvalidReferralError):
    """Raised when a user already has a referrer."""

    def __init__(self) -> None:
        super().__init__("You already have a referrer")


class ReferralCycleError(ReferralError):
    """Raised when the referred_by chain loops back on itself."""

    def __init__(self, user_id: int, chain: list[int]) -> None:
        self.user_id = user_id
        self.chain = chain
        super().__init__(
            f"Referral cycle detected at user {user_id}: {chain}"
        )


class InvalidGenerationStatsError(ReferralError, ValueError):
    """Raised when a generation -> count mapping is malformed."""
    pass

