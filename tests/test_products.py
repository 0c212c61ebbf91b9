# ==============================================================================
# PRODUCT ENDPOINT TESTS
# ==============================================================================
# Tests for catalog browsing, effective pricing and admin management
# ==============================================================================

from datetime import timedelta
from decimal import Decimal

import pytest
from httpx import AsyncClient

from storefront.database.repositories import ProductRepository
from storefront.services.product_service import effective_price, rating_summary
from storefront.utils.helpers import as_utc, utc_now
from tests.conftest import API, create_product


class TestEffectivePrice:
    """Unit tests for discount window pricing."""

    def test_no_discount(self):
        assert effective_price({"price": Decimal("10.00")}) == Decimal("10.00")

    def test_open_ended_discount(self):
        product = {"price": Decimal("10.00"), "discount_price": Decimal("7.50")}
        assert effective_price(product) == Decimal("7.50")

    def test_window(self):
        now = utc_now()
        product = {
            "price": Decimal("10.00"),
            "discount_price": Decimal("7.50"),
            "discount_starts_at": now - timedelta(days=1),
            "discount_ends_at": now + timedelta(days=1),
        }
        assert effective_price(product, now) == Decimal("7.50")
        assert effective_price(product, now + timedelta(days=2)) == Decimal("10.00")
        assert effective_price(product, now - timedelta(days=2)) == Decimal("10.00")

    def test_rating_summary(self):
        summary = rating_summary([{"rating": 5}, {"rating": 4}, {"rating": 4}])

        assert summary["count"] == 3
        assert summary["average"] == 4.3
        assert summary["distribution"] == {1: 0, 2: 0, 3: 0, 4: 2, 5: 1}


class TestProductCatalog:
    """Tests for public product endpoints."""

    @pytest.mark.asyncio
    async def test_list_only_active(self, client: AsyncClient, admin_client):
        admin, _ = admin_client
        active = await create_product(admin, name="Visible")
        await create_product(admin, name="Hidden", status="draft")

        response = await client.get(f"{API}/products")

        assert response.status_code == 200
        items = response.json()["data"]["items"]
        assert [p["id"] for p in items] == [active["id"]]

    @pytest.mark.asyncio
    async def test_get_product(self, client: AsyncClient, product):
        response = await client.get(f"{API}/products/{product['id']}")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["name"] == "Desk Lamp"
        assert Decimal(data["effective_price"]) == Decimal("10.00")
        assert data["in_stock"] is True

    @pytest.mark.asyncio
    async def test_get_missing_product(self, client: AsyncClient):
        response = await client.get(f"{API}/products/missing")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "PRODUCT_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_inactive_product_hidden_from_public(self, client: AsyncClient, admin_client):
        admin, _ = admin_client
        hidden = await create_product(admin, status="inactive")

        response = await client.get(f"{API}/products/{hidden['id']}")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_search_and_price_filters(self, client: AsyncClient, admin_client):
        admin, _ = admin_client
        await create_product(admin, name="Oak Desk", price="250.00")
        await create_product(admin, name="Pine Desk", price="120.00")
        await create_product(admin, name="Office Chair", price="90.00")

        search = await client.get(f"{API}/products", params={"search": "desk"})
        assert {p["name"] for p in search.json()["data"]["items"]} == {"Oak Desk", "Pine Desk"}

        priced = await client.get(
            f"{API}/products",
            params={"min_price": "100", "max_price": "200"},
        )
        assert [p["name"] for p in priced.json()["data"]["items"]] == ["Pine Desk"]

    @pytest.mark.asyncio
    async def test_invalid_price_range(self, client: AsyncClient):
        response = await client.get(
            f"{API}/products",
            params={"min_price": "200", "max_price": "100"},
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_featured_and_stock_filters(self, client: AsyncClient, admin_client):
        admin, _ = admin_client
        await create_product(admin, name="Featured", is_featured=True)
        await create_product(admin, name="Sold Out", stock=0)

        featured = await client.get(f"{API}/products", params={"featured": "true"})
        assert [p["name"] for p in featured.json()["data"]["items"]] == ["Featured"]

        sold_out = await client.get(f"{API}/products", params={"in_stock": "false"})
        assert [p["name"] for p in sold_out.json()["data"]["items"]] == ["Sold Out"]

    @pytest.mark.asyncio
    async def test_sort_by_price(self, client: AsyncClient, admin_client):
        admin, _ = admin_client
        for price in ("30.00", "10.00", "20.00"):
            await create_product(admin, price=price)

        response = await client.get(f"{API}/products", params={"sort": "price_asc"})
        prices = [Decimal(p["price"]) for p in response.json()["data"]["items"]]
        assert prices == sorted(prices)

        response = await client.get(f"{API}/products", params={"sort": "price_desc"})
        prices = [Decimal(p["price"]) for p in response.json()["data"]["items"]]
        assert prices == sorted(prices, reverse=True)

    @pytest.mark.asyncio
    async def test_unknown_sort(self, client: AsyncClient):
        response = await client.get(f"{API}/products", params={"sort": "cheapest"})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "BAD_REQUEST"

    @pytest.mark.asyncio
    async def test_pagination(self, client: AsyncClient, admin_client):
        admin, _ = admin_client
        for _ in range(3):
            await create_product(admin)

        response = await client.get(f"{API}/products", params={"page": 2, "page_size": 2})

        data = response.json()["data"]
        assert data["total"] == 3
        assert data["pages"] == 2
        assert len(data["items"]) == 1

    @pytest.mark.asyncio
    async def test_rating_distribution_empty(self, client: AsyncClient, product):
        response = await client.get(f"{API}/products/{product['id']}/ratings")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["count"] == 0
        assert data["average"] == 0.0
        assert set(data["distribution"]) == {"1", "2", "3", "4", "5"}


class TestStockCounters:
    """Guarded stock changes at the repository level."""

    @pytest.mark.asyncio
    async def test_adjust_stock_touches_updated_at(self, adapter, product):
        stale = utc_now() - timedelta(days=1)
        await adapter.bulk_update("products", {"id": product["id"]}, {"updated_at": stale})

        updated = await ProductRepository(adapter).adjust_stock(product["id"], -2, sales_delta=2)

        assert updated["stock"] == 3
        assert updated["total_sales"] == 2
        assert as_utc(updated["updated_at"]) > stale + timedelta(hours=1)

    @pytest.mark.asyncio
    async def test_adjust_stock_guard(self, adapter, product):
        repository = ProductRepository(adapter)

        assert await repository.adjust_stock(product["id"], -6) is None
        assert (await repository.get_by_id(product["id"]))["stock"] == 5


class TestProductAdministration:
    """Tests for admin product endpoints."""

    @pytest.mark.asyncio
    async def test_create_requires_admin(self, auth_client):
        user_client, _ = auth_client

        response = await user_client.post(f"{API}/products", json={"name": "X", "price": "1.00"})
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_create_requires_authentication(self, client: AsyncClient):
        response = await client.post(f"{API}/products", json={"name": "X", "price": "1.00"})
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_create_with_discount(self, admin_client):
        admin, _ = admin_client

        product = await create_product(admin, price="50.00", discount_price="40.00")

        assert Decimal(product["effective_price"]) == Decimal("40.00")
        assert product["rating_average"] == 0.0
        assert product["total_sales"] == 0

    @pytest.mark.asyncio
    async def test_create_rejects_discount_above_price(self, admin_client):
        admin, _ = admin_client

        response = await admin.post(
            f"{API}/products",
            json={"name": "Bad", "price": "10.00", "discount_price": "12.00"},
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_create_rejects_negative_stock(self, admin_client):
        admin, _ = admin_client

        response = await admin.post(
            f"{API}/products",
            json={"name": "Bad", "price": "10.00", "stock": -1},
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_create_with_unknown_category(self, admin_client):
        admin, _ = admin_client

        response = await admin.post(
            f"{API}/products",
            json={"name": "Orphan", "price": "10.00", "category_id": "missing"},
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_partial_update(self, admin_client, product):
        admin, _ = admin_client

        response = await admin.patch(f"{API}/products/{product['id']}", json={"stock": 42})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["stock"] == 42
        assert data["name"] == product["name"]
        assert Decimal(data["price"]) == Decimal(product["price"])

    @pytest.mark.asyncio
    async def test_update_checks_merged_pricing(self, admin_client, product):
        admin, _ = admin_client

        response = await admin.put(
            f"{API}/products/{product['id']}",
            json={"discount_price": "15.00"},
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_clear_discount(self, admin_client):
        admin, _ = admin_client
        product = await create_product(admin, price="50.00", discount_price="40.00")

        response = await admin.patch(
            f"{API}/products/{product['id']}",
            json={"discount_price": None},
        )

        data = response.json()["data"]
        assert data["discount_price"] is None
        assert Decimal(data["effective_price"]) == Decimal("50.00")

    @pytest.mark.asyncio
    async def test_update_missing(self, admin_client):
        admin, _ = admin_client

        response = await admin.patch(f"{API}/products/missing", json={"stock": 1})
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_delete(self, admin_client, product, client: AsyncClient):
        admin, _ = admin_client

        response = await admin.delete(f"{API}/products/{product['id']}")
        assert response.status_code == 200

        missing = await client.get(f"{API}/products/{product['id']}")
        assert missing.status_code == 404

    @pytest.mark.asyncio
    async def test_admin_list_includes_every_status(self, admin_client):
        admin, _ = admin_client
        await create_product(admin, status="active")
        await create_product(admin, status="draft")
        await create_product(admin, status="inactive")

        everything = await admin.get(f"{API}/products/admin/all")
        assert everything.json()["data"]["total"] == 3

        drafts = await admin.get(f"{API}/products/admin/all", params={"status": "draft"})
        assert drafts.json()["data"]["total"] == 1
