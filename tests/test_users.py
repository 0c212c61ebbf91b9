# ==============================================================================
# USERS ENDPOINT TESTS
# ==============================================================================
# Tests for own profile management and user administration
# ==============================================================================

import pytest
from httpx import AsyncClient

from tests.conftest import API, DEFAULT_PASSWORD, make_client, register_user


class TestOwnProfile:
    """Tests for /users/me endpoints."""

    @pytest.mark.asyncio
    async def test_get_current_user(self, auth_client):
        user_client, user = auth_client

        response = await user_client.get(f"{API}/users/me")

        assert response.status_code == 200
        assert response.json()["data"]["email"] == user["email"]

    @pytest.mark.asyncio
    async def test_update_profile(self, auth_client):
        user_client, _ = auth_client

        response = await user_client.patch(
            f"{API}/users/me",
            json={"name": "Renamed", "phone": "+1 555 0199"},
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["name"] == "Renamed"
        assert data["phone"] == "+1 555 0199"

    @pytest.mark.asyncio
    async def test_update_profile_email_taken(self, client: AsyncClient, auth_client):
        user_client, _ = auth_client
        await register_user(client, email="taken@example.com")

        response = await user_client.patch(f"{API}/users/me", json={"email": "taken@example.com"})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "CONFLICT"

    @pytest.mark.asyncio
    async def test_update_profile_without_fields(self, auth_client):
        user_client, _ = auth_client

        response = await user_client.patch(f"{API}/users/me", json={})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_change_password(self, app, client: AsyncClient):
        auth = await register_user(client, email="changer@example.com")

        async with make_client(app, auth["access_token"]) as user_client:
            response = await user_client.post(
                f"{API}/users/me/password",
                json={"current_password": DEFAULT_PASSWORD, "new_password": "ChangedPass9"},
            )

        assert response.status_code == 200
        fresh = response.json()["data"]["access_token"]

        async with make_client(app, fresh) as fresh_client:
            me = await fresh_client.get(f"{API}/users/me")
        assert me.status_code == 200

        login = await client.post(
            f"{API}/auth/login",
            json={"email": "changer@example.com", "password": "ChangedPass9"},
        )
        assert login.status_code == 200

    @pytest.mark.asyncio
    async def test_change_password_revokes_tokens_immediately(self, app, client: AsyncClient):
        auth = await register_user(client, email="quick@example.com")

        async with make_client(app, auth["access_token"]) as user_client:
            changed = await user_client.post(
                f"{API}/users/me/password",
                json={"current_password": DEFAULT_PASSWORD, "new_password": "ChangedPass9"},
            )
            assert changed.status_code == 200

            # Issued moments before the change
            stale = await user_client.get(f"{API}/users/me")
        assert stale.status_code == 401

        refreshed = await client.post(
            f"{API}/auth/refresh",
            json={"refresh_token": auth["refresh_token"]},
        )
        assert refreshed.status_code == 401

        new_refresh = await client.post(
            f"{API}/auth/refresh",
            json={"refresh_token": changed.json()["data"]["refresh_token"]},
        )
        assert new_refresh.status_code == 200

    @pytest.mark.asyncio
    async def test_change_password_wrong_current(self, auth_client):
        user_client, _ = auth_client

        response = await user_client.post(
            f"{API}/users/me/password",
            json={"current_password": "NotMyPass1", "new_password": "ChangedPass9"},
        )
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_delete_account_deactivates(self, auth_client, client: AsyncClient):
        user_client, user = auth_client

        response = await user_client.delete(f"{API}/users/me")
        assert response.status_code == 200

        again = await user_client.get(f"{API}/users/me")
        assert again.status_code == 401

        login = await client.post(
            f"{API}/auth/login",
            json={"email": user["email"], "password": DEFAULT_PASSWORD},
        )
        assert login.status_code == 401


class TestUserAdministration:
    """Tests for admin user endpoints."""

    @pytest.mark.asyncio
    async def test_regular_user_forbidden(self, auth_client):
        user_client, _ = auth_client

        response = await user_client.get(f"{API}/users")

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "AUTHORIZATION_ERROR"

    @pytest.mark.asyncio
    async def test_list_users(self, admin_client, auth_client):
        admin, _ = admin_client

        response = await admin.get(f"{API}/users", params={"page_size": 50})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["total"] == 2
        assert data["page"] == 1
        assert len(data["items"]) == 2

    @pytest.mark.asyncio
    async def test_list_users_filters(self, admin_client, auth_client):
        admin, admin_user = admin_client
        _, user = auth_client

        by_role = await admin.get(f"{API}/users", params={"role": "admin"})
        assert [u["id"] for u in by_role.json()["data"]["items"]] == [admin_user["id"]]

        by_search = await admin.get(f"{API}/users", params={"search": user["email"][:10]})
        assert [u["id"] for u in by_search.json()["data"]["items"]] == [user["id"]]

    @pytest.mark.asyncio
    async def test_get_user(self, admin_client, auth_client):
        admin, _ = admin_client
        _, user = auth_client

        response = await admin.get(f"{API}/users/{user['id']}")

        assert response.status_code == 200
        assert response.json()["data"]["email"] == user["email"]

    @pytest.mark.asyncio
    async def test_get_missing_user(self, admin_client):
        admin, _ = admin_client

        response = await admin.get(f"{API}/users/does-not-exist")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"

    @pytest.mark.asyncio
    async def test_promote_and_deactivate(self, admin_client, auth_client):
        admin, _ = admin_client
        user_client, user = auth_client

        response = await admin.patch(f"{API}/users/{user['id']}", json={"role": "seller"})
        assert response.status_code == 200
        assert response.json()["data"]["role"] == "seller"

        response = await admin.patch(f"{API}/users/{user['id']}", json={"is_active": False})
        assert response.json()["data"]["is_active"] is False

        blocked = await user_client.get(f"{API}/users/me")
        assert blocked.status_code == 401

    @pytest.mark.asyncio
    async def test_admin_cannot_demote_self(self, admin_client):
        admin, admin_user = admin_client

        response = await admin.patch(f"{API}/users/{admin_user['id']}", json={"role": "user"})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_delete_user(self, admin_client, auth_client):
        admin, _ = admin_client
        _, user = auth_client

        response = await admin.delete(f"{API}/users/{user['id']}")
        assert response.status_code == 200

        missing = await admin.get(f"{API}/users/{user['id']}")
        assert missing.status_code == 404

    @pytest.mark.asyncio
    async def test_admin_cannot_delete_self(self, admin_client):
        admin, admin_user = admin_client

        response = await admin.delete(f"{API}/users/{admin_user['id']}")
        assert response.status_code == 400
