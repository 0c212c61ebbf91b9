# ==============================================================================
# CART & WISHLIST ENDPOINT TESTS
# ==============================================================================

from decimal import Decimal

import pytest

from storefront.database.repositories import CartRepository
from tests.conftest import API, create_product


class TestCartTotals:
    def test_compute_totals(self):
        items = [
            {"price": Decimal("2.50"), "quantity": 3},
            {"price": "1.99", "quantity": 1},
        ]

        totals = CartRepository.compute_totals(items)

        assert totals["total_items"] == 4
        assert totals["total_price"] == Decimal("9.49")
        assert items[0]["total_price"] == Decimal("7.50")


class TestCart:
    """Tests for /cart endpoints."""

    @pytest.mark.asyncio
    async def test_cart_created_on_first_read(self, auth_client):
        user_client, user = auth_client

        response = await user_client.get(f"{API}/cart")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["user_id"] == user["id"]
        assert data["items"] == []
        assert data["total_items"] == 0

    @pytest.mark.asyncio
    async def test_requires_authentication(self, client):
        response = await client.get(f"{API}/cart")
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_add_item(self, auth_client, product):
        user_client, _ = auth_client

        response = await user_client.post(
            f"{API}/cart/items",
            json={"product_id": product["id"], "quantity": 2},
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert len(data["items"]) == 1
        line = data["items"][0]
        assert line["name"] == "Desk Lamp"
        assert Decimal(line["total_price"]) == Decimal("20.00")
        assert data["total_items"] == 2
        assert Decimal(data["total_price"]) == Decimal("20.00")

    @pytest.mark.asyncio
    async def test_same_product_merges(self, auth_client, product):
        user_client, _ = auth_client
        payload = {"product_id": product["id"], "quantity": 2}

        await user_client.post(f"{API}/cart/items", json=payload)
        response = await user_client.post(f"{API}/cart/items", json=payload)

        items = response.json()["data"]["items"]
        assert len(items) == 1
        assert items[0]["quantity"] == 4

    @pytest.mark.asyncio
    async def test_variants_make_separate_lines(self, auth_client, admin_client):
        user_client, _ = auth_client
        admin, _ = admin_client
        shirt = await create_product(
            admin,
            name="Shirt",
            variants=[{"name": "size", "options": ["S", "M"]}],
        )

        for size in ("S", "M"):
            response = await user_client.post(
                f"{API}/cart/items",
                json={"product_id": shirt["id"], "variants": {"size": size}},
            )
        assert len(response.json()["data"]["items"]) == 2

        bad = await user_client.post(
            f"{API}/cart/items",
            json={"product_id": shirt["id"], "variants": {"size": "XXL"}},
        )
        assert bad.status_code == 400

    @pytest.mark.asyncio
    async def test_merged_quantity_checked_against_stock(self, auth_client, product):
        user_client, _ = auth_client

        await user_client.post(f"{API}/cart/items", json={"product_id": product["id"], "quantity": 4})
        response = await user_client.post(
            f"{API}/cart/items",
            json={"product_id": product["id"], "quantity": 2},
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INSUFFICIENT_STOCK"

    @pytest.mark.asyncio
    async def test_inactive_product_rejected(self, auth_client, admin_client):
        user_client, _ = auth_client
        admin, _ = admin_client
        hidden = await create_product(admin, status="inactive")

        response = await user_client.post(f"{API}/cart/items", json={"product_id": hidden["id"]})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_missing_product(self, auth_client):
        user_client, _ = auth_client

        response = await user_client.post(f"{API}/cart/items", json={"product_id": "missing"})

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "PRODUCT_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_update_quantity(self, auth_client, product):
        user_client, _ = auth_client
        added = await user_client.post(f"{API}/cart/items", json={"product_id": product["id"]})
        item_id = added.json()["data"]["items"][0]["id"]

        response = await user_client.put(f"{API}/cart/items/{item_id}", json={"quantity": 3})
        assert response.json()["data"]["total_items"] == 3

        too_many = await user_client.put(f"{API}/cart/items/{item_id}", json={"quantity": 6})
        assert too_many.status_code == 400

    @pytest.mark.asyncio
    async def test_zero_quantity_removes_line(self, auth_client, product):
        user_client, _ = auth_client
        added = await user_client.post(f"{API}/cart/items", json={"product_id": product["id"]})
        item_id = added.json()["data"]["items"][0]["id"]

        response = await user_client.put(f"{API}/cart/items/{item_id}", json={"quantity": 0})

        assert response.status_code == 200
        assert response.json()["data"]["items"] == []

    @pytest.mark.asyncio
    async def test_remove_item(self, auth_client, product):
        user_client, _ = auth_client
        added = await user_client.post(f"{API}/cart/items", json={"product_id": product["id"]})
        item_id = added.json()["data"]["items"][0]["id"]

        response = await user_client.delete(f"{API}/cart/items/{item_id}")
        assert response.json()["data"]["total_items"] == 0

        again = await user_client.delete(f"{API}/cart/items/{item_id}")
        assert again.status_code == 404

    @pytest.mark.asyncio
    async def test_clear(self, auth_client, product):
        user_client, _ = auth_client
        await user_client.post(f"{API}/cart/items", json={"product_id": product["id"], "quantity": 2})

        response = await user_client.delete(f"{API}/cart")

        data = response.json()["data"]
        assert data["items"] == []
        assert Decimal(data["total_price"]) == Decimal("0")

    @pytest.mark.asyncio
    async def test_carts_are_per_user(self, auth_client, other_client, product):
        user_client, _ = auth_client
        other, _ = other_client
        await user_client.post(f"{API}/cart/items", json={"product_id": product["id"]})

        response = await other.get(f"{API}/cart")
        assert response.json()["data"]["items"] == []


class TestWishlist:
    """Tests for /wishlist endpoints."""

    @pytest.mark.asyncio
    async def test_add_and_get(self, auth_client, product):
        user_client, _ = auth_client

        response = await user_client.post(f"{API}/wishlist", json={"product_id": product["id"]})
        assert response.status_code == 201

        wishlist = await user_client.get(f"{API}/wishlist")
        items = wishlist.json()["data"]["items"]
        assert len(items) == 1
        assert items[0]["product_id"] == product["id"]
        assert items[0]["added_at"]
        assert items[0]["product"]["name"] == "Desk Lamp"

    @pytest.mark.asyncio
    async def test_duplicate(self, auth_client, product):
        user_client, _ = auth_client
        await user_client.post(f"{API}/wishlist", json={"product_id": product["id"]})

        response = await user_client.post(f"{API}/wishlist", json={"product_id": product["id"]})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "CONFLICT"

    @pytest.mark.asyncio
    async def test_missing_product(self, auth_client):
        user_client, _ = auth_client

        response = await user_client.post(f"{API}/wishlist", json={"product_id": "missing"})
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_remove(self, auth_client, product):
        user_client, _ = auth_client
        await user_client.post(f"{API}/wishlist", json={"product_id": product["id"]})

        response = await user_client.delete(f"{API}/wishlist/{product['id']}")
        assert response.status_code == 200
        assert response.json()["data"]["items"] == []

        again = await user_client.delete(f"{API}/wishlist/{product['id']}")
        assert again.status_code == 404
