# ==============================================================================
# LOG ENDPOINT TESTS
# ==============================================================================

from datetime import timedelta

import pytest

from storefront.utils.helpers import utc_now
from tests.conftest import API


class TestClientErrors:
    @pytest.mark.asyncio
    async def test_anonymous_report(self, client, admin_client):
        admin, _ = admin_client

        response = await client.post(
            f"{API}/logs/client-error",
            json={"message": "TypeError: x is undefined", "url": "/checkout"},
            headers={"User-Agent": "pytest-browser"},
        )

        assert response.status_code == 201
        entry = response.json()["data"]
        assert entry["level"] == "error"
        assert entry["source"] == "client"
        assert entry["meta"]["url"] == "/checkout"
        assert entry["meta"]["user_agent"] == "pytest-browser"
        assert entry["meta"].get("user") is None

    @pytest.mark.asyncio
    async def test_report_records_user(self, auth_client):
        user_client, user = auth_client

        response = await user_client.post(
            f"{API}/logs/client-error",
            json={"message": "Checkout failed", "additional_info": {"step": 3}},
        )

        entry = response.json()["data"]
        assert entry["meta"]["user"] == user["id"]
        assert entry["meta"]["additional_info"] == {"step": 3}

    @pytest.mark.asyncio
    async def test_empty_message_rejected(self, client):
        response = await client.post(f"{API}/logs/client-error", json={"message": ""})
        assert response.status_code == 400


class TestLogAdministration:
    """Tests for admin log endpoints."""

    @pytest.mark.asyncio
    async def test_requires_admin(self, auth_client):
        user_client, _ = auth_client

        response = await user_client.get(f"{API}/logs")
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_create_and_filter(self, admin_client, client):
        admin, _ = admin_client
        created = await admin.post(
            f"{API}/logs",
            json={"level": "warn", "message": "Payment gateway slow"},
        )
        assert created.status_code == 201
        assert created.json()["data"]["source"] == "server"
        await client.post(f"{API}/logs/client-error", json={"message": "Image failed to load"})

        everything = await admin.get(f"{API}/logs")
        assert everything.json()["data"]["total"] == 2

        by_level = await admin.get(f"{API}/logs", params={"level": "warn"})
        assert [e["message"] for e in by_level.json()["data"]["items"]] == ["Payment gateway slow"]

        by_source = await admin.get(f"{API}/logs", params={"source": "client"})
        assert by_source.json()["data"]["total"] == 1

        by_text = await admin.get(f"{API}/logs", params={"search": "gateway"})
        assert by_text.json()["data"]["total"] == 1

    @pytest.mark.asyncio
    async def test_invalid_level(self, admin_client):
        admin, _ = admin_client

        response = await admin.post(f"{API}/logs", json={"level": "verbose", "message": "x"})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_clear_before(self, admin_client):
        admin, _ = admin_client
        await admin.post(f"{API}/logs", json={"level": "info", "message": "Nightly job done"})

        past = (utc_now() - timedelta(days=1)).isoformat()
        kept = await admin.delete(f"{API}/logs", params={"before": past})
        assert kept.json()["data"]["deleted"] == 0

        future = (utc_now() + timedelta(days=1)).isoformat()
        cleared = await admin.delete(f"{API}/logs", params={"before": future})
        assert cleared.json()["data"]["deleted"] == 1

    @pytest.mark.asyncio
    async def test_clear_all(self, admin_client):
        admin, _ = admin_client
        for level in ("info", "error"):
            await admin.post(f"{API}/logs", json={"level": level, "message": "entry"})

        response = await admin.delete(f"{API}/logs")

        assert response.json()["data"]["deleted"] == 2
        remaining = await admin.get(f"{API}/logs")
        assert remaining.json()["data"]["total"] == 0
