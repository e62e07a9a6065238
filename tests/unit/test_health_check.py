"""Unit tests for the health check endpoint."""

import json

import pytest

from app import http_health_server
from app.utils import health_check


async def healthy():
    return {"status": "healthy", "message": "ok"}


async def unhealthy():
    return {"status": "unhealthy", "message": "down"}


@pytest.mark.asyncio
async def test_check_all_healthy(monkeypatch):
    """Database only when stats are computed inline."""
    monkeypatch.setattr(health_check, "check_database", healthy)
    monkeypatch.setattr(
        health_check.settings, "referral_stats_deferred", False
    )

    result = await health_check.check_all()

    assert result["status"] == "healthy"
    assert set(result["checks"]) == {"database"}


@pytest.mark.asyncio
async def test_check_all_includes_redis_when_deferred(monkeypatch):
    """Redis is checked when recomputes go through the queue."""
    monkeypatch.setattr(health_check, "check_database", healthy)
    monkeypatch.setattr(health_check, "check_redis", unhealthy)
    monkeypatch.setattr(
        health_check.settings, "referral_stats_deferred", True
    )

    result = await health_check.check_all()

    assert result["status"] == "degraded"
    assert result["checks"]["redis"]["status"] == "unhealthy"


@pytest.mark.asyncio
async def test_health_handler_status_codes(monkeypatch):
    """200 when healthy, 503 otherwise."""

    async def all_healthy():
        return {"status": "healthy", "checks": {}}

    async def degraded():
        return {"status": "degraded", "checks": {}}

    monkeypatch.setattr(http_health_server, "check_all", all_healthy)
    response = await http_health_server.health_handler(None)
    assert response.status == 200
    assert json.loads(response.text)["status"] == "healthy"

    monkeypatch.setattr(http_health_server, "check_all", degraded)
    response = await http_health_server.health_handler(None)
    assert response.status == 503


@pytest.mark.asyncio
async def test_health_handler_error(monkeypatch):
    """Unexpected errors are reported as unhealthy."""

    async def broken():
        raise RuntimeError("boom")

    monkeypatch.setattr(http_health_server, "check_all", broken)

    response = await http_health_server.health_handler(None)

    assert response.status == 503
    assert json.loads(response.text)["error"] == "boom"


def test_health_app_routes():
    """The app serves /health."""
    app = http_health_server.create_health_app()

    paths = [route.resource.canonical for route in app.router.routes()]

    assert "/health" in paths
