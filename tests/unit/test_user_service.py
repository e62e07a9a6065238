"""
Unit tests for UserService referrer attachment.

Repositories and event dispatch are replaced by in-memory fakes.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from app.services import referral_events
from app.services.referral_events import ReferralEvents
from app.services.user_service import UserService
from app.utils.exceptions import (
    InvalidReferralError,
    ReferrerAlreadySetError,
    SelfReferralError,
    UserNotFoundError,
)


@pytest.fixture
def user_service(directory):
    """UserService over the in-memory directory with mocked events."""
    service = UserService(AsyncMock(), deferred=False)
    service.user_repo = directory
    service.events = AsyncMock()
    return service


@pytest.mark.asyncio
async def test_attach_referrer(fan_out_forest, user_service):
    """A free user gets the referrer's code and triggers a recompute."""
    fan_out_forest.add(8, "LONER")

    user = await user_service.attach_referrer(8, "A")

    assert user.referred_by == "A"
    user_service.events.on_referrer_attached.assert_awaited_once_with(8)
    user_service.session.commit.assert_awaited()


@pytest.mark.asyncio
async def test_attach_referrer_strips_input(fan_out_forest, user_service):
    """Surrounding whitespace is ignored."""
    fan_out_forest.add(8, "LONER")

    user = await user_service.attach_referrer(8, "  B ")

    assert user.referred_by == "B"


@pytest.mark.asyncio
async def test_attach_requires_code(user_service):
    """Empty codes are rejected before any lookup."""
    with pytest.raises(InvalidReferralError, match="required"):
        await user_service.attach_referrer(1, "")


@pytest.mark.asyncio
async def test_attach_unknown_user(user_service):
    """Unknown users raise."""
    with pytest.raises(UserNotFoundError):
        await user_service.attach_referrer(999, "ROOT")


@pytest.mark.asyncio
async def test_attach_already_set(fan_out_forest, user_service):
    """A user with a referrer cannot get another."""
    with pytest.raises(ReferrerAlreadySetError):
        await user_service.attach_referrer(2, "B")

    assert fan_out_forest.users[2].referred_by == "ROOT"
    user_service.events.on_referrer_attached.assert_not_awaited()


@pytest.mark.asyncio
async def test_attach_self_referral(fan_out_forest, user_service):
    """Own code is rejected."""
    with pytest.raises(SelfReferralError, match="cannot refer yourself"):
        await user_service.attach_referrer(1, "ROOT")

    assert fan_out_forest.users[1].referred_by is None


@pytest.mark.asyncio
async def test_attach_unknown_code(fan_out_forest, user_service):
    """Codes nobody owns are rejected."""
    with pytest.raises(InvalidReferralError, match="Invalid referral code"):
        await user_service.attach_referrer(1, "NOBODY")


@pytest.mark.asyncio
async def test_attach_descendant_rejected(fan_out_forest, user_service):
    """Attaching under one's own descendant would close a loop."""
    with pytest.raises(InvalidReferralError, match="circular"):
        await user_service.attach_referrer(1, "E")

    assert fan_out_forest.users[1].referred_by is None
    user_service.events.on_referrer_attached.assert_not_awaited()


@pytest.mark.asyncio
async def test_validate_referral_code(fan_out_forest, user_service):
    """Codes are format-checked before lookup."""
    fan_out_forest.add(8, "ABCDEF123")

    referrer = await user_service.validate_referral_code(" ABCDEF123 ")

    assert referrer.id == 8
    assert await user_service.validate_referral_code("ROOT") is None
    assert await user_service.validate_referral_code("bad code!") is None
    assert await user_service.validate_referral_code("") is None


@pytest.mark.asyncio
async def test_attach_referrer_propagates_to_root(
    fan_out_forest, user_service, stats_service, stats_store, monkeypatch
):
    """Attaching under a grandchild adds one referral for every ancestor."""
    factory = MagicMock()
    factory.from_session.return_value = stats_service
    monkeypatch.setattr(referral_events, "ReferralStatsService", factory)
    user_service.events = ReferralEvents(AsyncMock(), deferred=False)

    await stats_service.recompute(1)
    assert stats_store.stats[1].total_referrals == 6
    fan_out_forest.add(8, "LONER")

    await user_service.attach_referrer(8, "C")

    root = stats_store.stats[1]
    assert root.total_referrals == 7
    assert root.generation_stats == {1: 2, 2: 4, 3: 1}
    assert stats_store.stats[4].generation_stats == {1: 1}
    assert stats_store.stats[2].total_referrals == 3
