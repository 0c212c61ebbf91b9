# ==============================================================================
# CONFTEST - Pytest Fixtures and Configuration
# ==============================================================================
# Shared fixtures for all tests
# ==============================================================================

from __future__ import annotations

import os
import shutil
import tempfile
from typing import Any, AsyncGenerator, Dict, Optional, Tuple
from uuid import uuid4

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Set test environment before importing the app
_TMP_DIR = tempfile.mkdtemp(prefix="storefront-tests-")
TEST_DB_PATH = os.path.join(_TMP_DIR, "test_storefront.db")
TEST_UPLOAD_DIR = os.path.join(_TMP_DIR, "uploads")

os.environ["ENVIRONMENT"] = "development"
os.environ["DEBUG"] = "true"
os.environ["DATABASE_TYPE"] = "sqlite"
os.environ["SQLITE_URL"] = f"sqlite+aiosqlite:///{TEST_DB_PATH}"
os.environ["SECRET_KEY"] = "test-secret-key-for-testing-only-32chars!"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["UPLOAD_DIR"] = TEST_UPLOAD_DIR
os.environ["LOG_LEVEL"] = "WARNING"
os.environ.pop("ADMIN_EMAIL", None)
os.environ.pop("ADMIN_PASSWORD", None)

API = "/api"
DEFAULT_PASSWORD = "TestPassword123"

SHIPPING_ADDRESS = {
    "full_name": "Test Customer",
    "address": "1 Market Street",
    "city": "Springfield",
    "postal_code": "12345",
    "country": "US",
    "phone": "+1 555 0100",
}


def _remove_db() -> None:
    if os.path.exists(TEST_DB_PATH):
        try:
            os.remove(TEST_DB_PATH)
        except OSError:
            pass


def pytest_sessionfinish(session, exitstatus) -> None:
    shutil.rmtree(_TMP_DIR, ignore_errors=True)


# ==============================================================================
# DATABASE / HTTP CLIENT FIXTURES
# ==============================================================================

@pytest_asyncio.fixture
async def adapter():
    """Fresh database bound to the factory for one test."""
    from storefront.database.factory import DatabaseFactory

    DatabaseFactory.reset()
    _remove_db()

    bound = await DatabaseFactory.initialize()
    yield bound

    await DatabaseFactory.shutdown()
    DatabaseFactory.reset()
    _remove_db()


@pytest.fixture
def app(adapter):
    # Import app after environment is set
    from storefront.main import app as application
    return application


def make_client(app, token: Optional[str] = None) -> AsyncClient:
    headers = {"Authorization": f"Bearer {token}"} if token else None
    return AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers=headers,
        timeout=30.0,
    )


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Anonymous async HTTP client."""
    async with make_client(app) as async_client:
        yield async_client


async def register_user(
    client: AsyncClient,
    email: Optional[str] = None,
    password: str = DEFAULT_PASSWORD,
    name: str = "Test User",
) -> Dict[str, Any]:
    """Register through the API and return the AuthResponse payload."""
    response = await client.post(
        f"{API}/auth/register",
        json={
            "name": name,
            "email": email or f"user_{uuid4().hex[:8]}@example.com",
            "password": password,
        },
    )
    assert response.status_code == 201, f"Failed to register: {response.text}"
    # Keep the shared client anonymous
    client.cookies.clear()
    return response.json()["data"]


@pytest_asyncio.fixture
async def auth_client(app, client) -> AsyncGenerator[Tuple[AsyncClient, Dict[str, Any]], None]:
    """
    Client authenticated as a regular user.

    Returns:
        Tuple of (client, user)
    """
    auth = await register_user(client)
    async with make_client(app, auth["access_token"]) as user_client:
        yield user_client, auth["user"]


@pytest_asyncio.fixture
async def other_client(app, client) -> AsyncGenerator[Tuple[AsyncClient, Dict[str, Any]], None]:
    """A second regular user."""
    auth = await register_user(client, name="Other User")
    async with make_client(app, auth["access_token"]) as user_client:
        yield user_client, auth["user"]


@pytest_asyncio.fixture
async def admin_client(app, client, adapter) -> AsyncGenerator[Tuple[AsyncClient, Dict[str, Any]], None]:
    """Client authenticated as an administrator."""
    auth = await register_user(client, name="Admin User")
    await adapter.bulk_update("users", {"id": auth["user"]["id"]}, {"role": "admin"})
    async with make_client(app, auth["access_token"]) as admin:
        yield admin, {**auth["user"], "role": "admin"}


# ==============================================================================
# SAMPLE DATA FIXTURES
# ==============================================================================

async def create_product(admin: AsyncClient, **overrides: Any) -> Dict[str, Any]:
    payload = {
        "name": f"Product {uuid4().hex[:6]}",
        "description": "A sample product",
        "price": "10.00",
        "stock": 5,
    }
    payload.update(overrides)
    response = await admin.post(f"{API}/products", json=payload)
    assert response.status_code == 201, response.text
    return response.json()["data"]


@pytest_asyncio.fixture
async def category(admin_client) -> Dict[str, Any]:
    admin, _ = admin_client
    response = await admin.post(f"{API}/categories", json={"name": "Home Office"})
    assert response.status_code == 201, response.text
    return response.json()["data"]


@pytest_asyncio.fixture
async def product(admin_client) -> Dict[str, Any]:
    """Active product priced 10.00 with 5 units in stock."""
    admin, _ = admin_client
    return await create_product(admin, name="Desk Lamp")


@pytest.fixture
def order_payload():
    def build(product_id: str, quantity: int = 1, **overrides: Any) -> Dict[str, Any]:
        payload = {
            "items": [{"product_id": product_id, "quantity": quantity}],
            "shipping_address": dict(SHIPPING_ADDRESS),
            "payment_method": "credit_card",
            "shipping_method": "standard",
        }
        payload.update(overrides)
        return payload

    return build
