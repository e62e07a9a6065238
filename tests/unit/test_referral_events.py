"""
Unit tests for ReferralEvents.

Tests inline and deferred dispatch of recomputes.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from app.services import referral_events
from app.services.referral_events import ReferralEvents
from jobs.tasks.referral_stats import (
    recompute_referral_stats,
    refresh_all_referral_stats,
)


@pytest.fixture
def inline_service(monkeypatch, stats_service):
    """Route inline recomputes to the in-memory stats service."""
    factory = MagicMock()
    factory.from_session.return_value = stats_service
    monkeypatch.setattr(referral_events, "ReferralStatsService", factory)
    return stats_service


@pytest.mark.asyncio
async def test_inline_registration_recomputes(
    fan_out_forest, inline_service, stats_store
):
    """Inline mode recomputes the new user and its ancestors."""
    events = ReferralEvents(AsyncMock(), deferred=False)

    await events.on_user_registered(4)

    assert stats_store.upserts == [4, 2, 1]


@pytest.mark.asyncio
async def test_inline_referrer_attached_recomputes(
    fan_out_forest, inline_service, stats_store
):
    """Attaching a referrer recomputes the same way."""
    events = ReferralEvents(AsyncMock(), deferred=False)

    await events.on_referrer_attached(6)

    assert stats_store.upserts == [6, 3, 1]


@pytest.mark.asyncio
async def test_deferred_registration_enqueues(monkeypatch):
    """Deferred mode sends the recompute to the task queue."""
    send = MagicMock()
    monkeypatch.setattr(recompute_referral_stats, "send", send)
    events = ReferralEvents(AsyncMock(), deferred=True)

    await events.on_user_registered(42)
    await events.on_referrer_attached(43)

    assert [call.args for call in send.call_args_list] == [(42,), (43,)]


@pytest.mark.asyncio
async def test_deferred_full_refresh_enqueues(monkeypatch):
    """Deferred full refresh returns nothing and enqueues the sweep."""
    send = MagicMock()
    monkeypatch.setattr(refresh_all_referral_stats, "send", send)
    events = ReferralEvents(AsyncMock(), deferred=True)

    result = await events.on_admin_full_refresh()

    assert result is None
    send.assert_called_once_with()


@pytest.mark.asyncio
async def test_inline_full_refresh_runs_sweep(monkeypatch):
    """Inline full refresh returns the sweep summary."""
    summary = {"updated": 3, "failed": 0, "message": "ok"}
    admin = MagicMock()
    admin.return_value.refresh_all_stats = AsyncMock(return_value=summary)
    monkeypatch.setattr(referral_events, "AdminService", admin)
    events = ReferralEvents(AsyncMock(), deferred=False)

    assert await events.on_admin_full_refresh() == summary


def test_deferred_defaults_to_settings(monkeypatch):
    """Mode follows settings unless overridden."""
    monkeypatch.setattr(
        referral_events.settings, "referral_stats_deferred", True
    )

    assert ReferralEvents(AsyncMock()).deferred is True
    assert ReferralEvents(AsyncMock(), deferred=False).deferred is False
