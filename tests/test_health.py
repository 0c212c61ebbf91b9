# ==============================================================================
# HEALTH ENDPOINT TESTS
# ==============================================================================

import pytest
from httpx import AsyncClient

from storefront.database.factory import DatabaseFactory


class TestHealth:
    """Tests for health and root endpoints."""

    @pytest.mark.asyncio
    async def test_health_check(self, client: AsyncClient):
        response = await client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["database"] == "connected"
        assert data["database_type"] == "sqlite"
        assert "version" in data

    @pytest.mark.asyncio
    async def test_health_reports_degraded_without_adapter(self, client: AsyncClient):
        """The database is probed per call; nothing is cached."""
        adapter = DatabaseFactory.get_adapter()
        DatabaseFactory.reset()
        try:
            response = await client.get("/health")
        finally:
            DatabaseFactory._adapter = adapter

        assert response.status_code == 200
        assert response.json()["status"] == "degraded"
        assert response.json()["database"] == "disconnected"

    @pytest.mark.asyncio
    async def test_root_endpoint(self, client: AsyncClient):
        response = await client.get("/")

        assert response.status_code == 200
        data = response.json()
        assert "name" in data
        assert data["health"] == "/health"

    @pytest.mark.asyncio
    async def test_request_headers(self, client: AsyncClient):
        response = await client.get("/health")

        assert "x-request-id" in response.headers
        assert response.headers["x-response-time"].endswith("ms")

    @pytest.mark.asyncio
    async def test_unknown_route_uses_error_envelope(self, client: AsyncClient):
        response = await client.get("/api/does-not-exist")

        assert response.status_code == 404
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == "HTTP_404"
