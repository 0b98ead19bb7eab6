"""Tests for the health endpoints."""

import pytest
from httpx import ASGITransport, AsyncClient

from fitbill.api.dependencies import get_dispatcher
from fitbill.api.main import app
from fitbill.core.services import EmailDispatcher


@pytest.fixture
async def client():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


class TestHealthEndpoints:
    async def test_root_health(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "version": "1.0.0"}

    async def test_api_health_has_uptime(self, client):
        response = await client.get("/api/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["uptime_seconds"] >= 0

    async def test_db_health(self, client, sqlite_pool):
        response = await client.get("/api/health/db")

        data = response.json()
        assert data["status"] == "healthy"
        assert data["database"]["name"] == "sqlite"
        assert data["database"]["available"] is True
        assert data["database"]["latency_ms"] >= 0
        assert data["database"]["details"]["pool_size"] == 2
        assert data["database"]["details"]["in_use"] == 0

    async def test_email_health_configured(self, client, dispatcher):
        app.dependency_overrides[get_dispatcher] = lambda: dispatcher

        response = await client.get("/api/health/email")

        data = response.json()
        assert data["status"] == "healthy"
        assert data["email"]["name"] == "primary"
        assert data["email"]["details"] == {"simulated": False}

    async def test_email_health_simulated_is_degraded(self, client, make_provider):
        app.dependency_overrides[get_dispatcher] = lambda: EmailDispatcher(
            [make_provider(configured=False)]
        )

        response = await client.get("/api/health/email")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "degraded"
        assert data["email"]["name"] == "simulated"
        assert data["email"]["available"] is False

    async def test_unknown_route_uses_error_format(self, client):
        response = await client.get("/api/nothing-here")

        assert response.status_code == 404
        assert response.json()["error_code"] == "NOT_FOUND"
