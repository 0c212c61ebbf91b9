# ==============================================================================
# ORDER ENDPOINT TESTS
# ==============================================================================
# Tests for placement, stock reservation, status lifecycle and payment
# ==============================================================================

import asyncio
import re
from datetime import datetime, timezone
from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import AsyncClient

from storefront.core.exceptions import BadRequestError, InvalidTransitionError
from storefront.services.order_service import check_transition, generate_order_number
from storefront.services.shipping import FlatRateShippingPolicy
from tests.conftest import API, create_product, make_client, register_user

ORDER_NUMBER = re.compile(r"^ORD-\d{13}-[0-9A-Z-]{4}$")


async def _stock(client: AsyncClient, product_id: str) -> int:
    response = await client.get(f"{API}/products/{product_id}")
    return response.json()["data"]["stock"]


async def _set_status(admin: AsyncClient, order_id: str, target: str):
    return await admin.patch(f"{API}/orders/{order_id}/status", json={"status": target})


@pytest_asyncio.fixture
async def placed_order(auth_client, product, order_payload):
    """Pending order for 2 units of the sample product."""
    user_client, _ = auth_client
    response = await user_client.post(f"{API}/orders", json=order_payload(product["id"], 2))
    assert response.status_code == 201, response.text
    return response.json()["data"]


class TestOrderHelpers:
    """Unit tests for order numbering, transitions and shipping quotes."""

    def test_order_number_format(self):
        moment = datetime(2024, 6, 10, 6, 13, 20, tzinfo=timezone.utc)

        number = generate_order_number("5f1c2a7e", moment)

        assert number == f"ORD-{int(moment.timestamp() * 1000)}-2A7E"

    def test_same_status_is_noop(self):
        assert check_transition("pending", "pending") is False
        assert check_transition("delivered", "delivered") is False

    def test_forward_moves(self):
        assert check_transition("pending", "processing") is True
        assert check_transition("processing", "shipped") is True
        assert check_transition("shipped", "delivered") is True
        assert check_transition("shipped", "refunded") is True

    @pytest.mark.parametrize(
        ("current", "target"),
        [
            ("shipped", "pending"),
            ("shipped", "cancelled"),
            ("processing", "pending"),
            ("delivered", "refunded"),
            ("cancelled", "processing"),
            ("refunded", "pending"),
        ],
    )
    def test_rejected_moves(self, current: str, target: str):
        with pytest.raises(InvalidTransitionError):
            check_transition(current, target)

    def test_flat_rate_quotes(self):
        policy = FlatRateShippingPolicy()

        assert policy.quote("standard", Decimal("50"), 1) == Decimal("0.00")
        assert policy.quote("express", Decimal("50"), 1) == Decimal("20.00")
        assert policy.quote("pickup", Decimal("50"), 1) == Decimal("0.00")

    def test_custom_rates(self):
        policy = FlatRateShippingPolicy({"courier": Decimal("7.5")})

        assert policy.methods == {"courier": Decimal("7.50")}

        assert policy.quote("courier", Decimal("1"), 1) == Decimal("7.50")
        with pytest.raises(BadRequestError):
            policy.quote("standard", Decimal("1"), 1)


class TestOrderPlacement:
    """Tests for POST /orders."""

    @pytest.mark.asyncio
    async def test_place_order(self, auth_client, product, order_payload, client):
        user_client, user = auth_client

        response = await user_client.post(f"{API}/orders", json=order_payload(product["id"], 3))

        assert response.status_code == 201
        order = response.json()["data"]
        assert order["user_id"] == user["id"]
        assert order["status"] == "pending"
        assert order["payment_status"] == "pending"
        assert order["is_paid"] is False
        assert ORDER_NUMBER.match(order["order_number"])
        assert Decimal(order["items"][0]["unit_price"]) == Decimal("10.00")
        assert Decimal(order["items_price"]) == Decimal("30.00")
        assert Decimal(order["shipping_price"]) == Decimal("0.00")
        assert Decimal(order["total_price"]) == Decimal("30.00")

        detail = await client.get(f"{API}/products/{product['id']}")
        assert detail.json()["data"]["stock"] == 2
        assert detail.json()["data"]["total_sales"] == 3

    @pytest.mark.asyncio
    async def test_insufficient_stock_leaves_stock_untouched(
        self, auth_client, product, order_payload, client
    ):
        user_client, _ = auth_client
        await user_client.post(f"{API}/orders", json=order_payload(product["id"], 3))

        response = await user_client.post(f"{API}/orders", json=order_payload(product["id"], 3))

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INSUFFICIENT_STOCK"
        assert await _stock(client, product["id"]) == 2

    @pytest.mark.asyncio
    async def test_duplicate_lines_are_summed(self, auth_client, product, order_payload):
        user_client, _ = auth_client
        payload = order_payload(product["id"], 3)
        payload["items"].append({"product_id": product["id"], "quantity": 3})

        response = await user_client.post(f"{API}/orders", json=payload)
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_failed_line_releases_earlier_lines(
        self, auth_client, admin_client, product, order_payload, client
    ):
        user_client, _ = auth_client
        admin, _ = admin_client
        scarce = await create_product(admin, stock=1)
        payload = order_payload(product["id"], 2)
        payload["items"].append({"product_id": scarce["id"], "quantity": 2})

        response = await user_client.post(f"{API}/orders", json=payload)

        assert response.status_code == 400
        assert await _stock(client, product["id"]) == 5
        assert await _stock(client, scarce["id"]) == 1

    @pytest.mark.asyncio
    async def test_empty_items(self, auth_client, order_payload, product):
        user_client, _ = auth_client

        response = await user_client.post(f"{API}/orders", json=order_payload(product["id"], items=[]))

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "BAD_REQUEST"

    @pytest.mark.asyncio
    async def test_missing_product(self, auth_client, order_payload):
        user_client, _ = auth_client

        response = await user_client.post(f"{API}/orders", json=order_payload("missing"))

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "PRODUCT_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_inactive_product(self, auth_client, admin_client, order_payload):
        user_client, _ = auth_client
        admin, _ = admin_client
        draft = await create_product(admin, status="draft")

        response = await user_client.post(f"{API}/orders", json=order_payload(draft["id"]))
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_express_shipping(self, auth_client, product, order_payload):
        user_client, _ = auth_client

        response = await user_client.post(
            f"{API}/orders",
            json=order_payload(product["id"], 1, shipping_method="express"),
        )

        order = response.json()["data"]
        assert Decimal(order["shipping_price"]) == Decimal("20.00")
        assert Decimal(order["total_price"]) == Decimal("30.00")

    @pytest.mark.asyncio
    async def test_discounted_price_is_snapshotted(self, auth_client, admin_client, order_payload):
        user_client, _ = auth_client
        admin, _ = admin_client
        sale = await create_product(admin, price="50.00", discount_price="35.00")

        response = await user_client.post(f"{API}/orders", json=order_payload(sale["id"], 2))

        order = response.json()["data"]
        assert Decimal(order["items"][0]["unit_price"]) == Decimal("35.00")
        assert Decimal(order["total_price"]) == Decimal("70.00")

    @pytest.mark.asyncio
    async def test_clear_cart(self, auth_client, product, order_payload):
        user_client, _ = auth_client
        await user_client.post(f"{API}/cart/items", json={"product_id": product["id"]})

        response = await user_client.post(
            f"{API}/orders",
            json=order_payload(product["id"], 1, clear_cart=True),
        )
        assert response.status_code == 201

        cart = await user_client.get(f"{API}/cart")
        assert cart.json()["data"]["items"] == []

    @pytest.mark.asyncio
    async def test_invalid_payment_method(self, auth_client, product, order_payload):
        user_client, _ = auth_client

        response = await user_client.post(
            f"{API}/orders",
            json=order_payload(product["id"], payment_method="barter"),
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_concurrent_orders_never_oversell(self, app, client, product, order_payload):
        first = await register_user(client)
        second = await register_user(client)

        async with make_client(app, first["access_token"]) as a, make_client(app, second["access_token"]) as b:
            responses = await asyncio.gather(
                a.post(f"{API}/orders", json=order_payload(product["id"], 3)),
                b.post(f"{API}/orders", json=order_payload(product["id"], 3)),
            )

        codes = sorted(r.status_code for r in responses)
        assert codes == [201, 400]
        assert await _stock(client, product["id"]) == 2


class TestOrderAccess:
    """Tests for reading orders."""

    @pytest.mark.asyncio
    async def test_my_orders(self, auth_client, placed_order):
        user_client, _ = auth_client

        response = await user_client.get(f"{API}/orders/my")

        data = response.json()["data"]
        assert data["total"] == 1
        assert data["items"][0]["id"] == placed_order["id"]

        filtered = await user_client.get(f"{API}/orders/my", params={"status": "shipped"})
        assert filtered.json()["data"]["total"] == 0

    @pytest.mark.asyncio
    async def test_owner_can_view(self, auth_client, placed_order):
        user_client, _ = auth_client

        response = await user_client.get(f"{API}/orders/{placed_order['id']}")
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_other_user_forbidden(self, other_client, placed_order):
        other, _ = other_client

        response = await other.get(f"{API}/orders/{placed_order['id']}")

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "AUTHORIZATION_ERROR"

    @pytest.mark.asyncio
    async def test_admin_can_view(self, admin_client, placed_order):
        admin, _ = admin_client

        response = await admin.get(f"{API}/orders/{placed_order['id']}")
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_missing_order(self, auth_client):
        user_client, _ = auth_client

        response = await user_client.get(f"{API}/orders/missing")
        assert response.status_code == 404


class TestOrderLifecycle:
    """Tests for cancellation, payment and admin status changes."""

    @pytest.mark.asyncio
    async def test_cancel_restores_stock(self, auth_client, placed_order, product, client):
        user_client, _ = auth_client

        response = await user_client.post(f"{API}/orders/{placed_order['id']}/cancel")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["status"] == "cancelled"
        assert data["cancelled_at"] is not None
        assert await _stock(client, product["id"]) == 5

    @pytest.mark.asyncio
    async def test_cancel_twice_restocks_once(self, auth_client, admin_client, placed_order, product, client):
        user_client, _ = auth_client
        admin, _ = admin_client

        await user_client.post(f"{API}/orders/{placed_order['id']}/cancel")
        again = await _set_status(admin, placed_order["id"], "cancelled")

        assert again.status_code == 200
        assert await _stock(client, product["id"]) == 5

    @pytest.mark.asyncio
    async def test_cannot_cancel_shipped(self, auth_client, admin_client, placed_order, product, client):
        user_client, _ = auth_client
        admin, _ = admin_client
        await _set_status(admin, placed_order["id"], "shipped")

        response = await user_client.post(f"{API}/orders/{placed_order['id']}/cancel")

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_TRANSITION"
        assert await _stock(client, product["id"]) == 3

    @pytest.mark.asyncio
    async def test_other_user_cannot_cancel(self, other_client, placed_order):
        other, _ = other_client

        response = await other.post(f"{API}/orders/{placed_order['id']}/cancel")
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_delivery_marks_paid(self, admin_client, placed_order):
        admin, _ = admin_client

        await _set_status(admin, placed_order["id"], "processing")
        await _set_status(admin, placed_order["id"], "shipped")
        response = await _set_status(admin, placed_order["id"], "delivered")

        data = response.json()["data"]
        assert data["status"] == "delivered"
        assert data["is_paid"] is True
        assert data["payment_status"] == "completed"
        assert data["paid_at"] is not None
        assert data["delivered_at"] is not None

    @pytest.mark.asyncio
    async def test_terminal_status_is_final(self, admin_client, placed_order):
        admin, _ = admin_client
        await _set_status(admin, placed_order["id"], "delivered")

        rejected = await _set_status(admin, placed_order["id"], "refunded")
        assert rejected.status_code == 400
        assert rejected.json()["error"]["code"] == "INVALID_TRANSITION"

        same = await _set_status(admin, placed_order["id"], "delivered")
        assert same.status_code == 200

    @pytest.mark.asyncio
    async def test_backwards_move_rejected(self, admin_client, placed_order):
        admin, _ = admin_client
        await _set_status(admin, placed_order["id"], "shipped")

        response = await _set_status(admin, placed_order["id"], "pending")
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_refund_restocks_pending_order(self, admin_client, placed_order, product, client):
        admin, _ = admin_client

        response = await _set_status(admin, placed_order["id"], "refunded")

        data = response.json()["data"]
        assert data["status"] == "refunded"
        assert data["payment_status"] == "refunded"
        assert await _stock(client, product["id"]) == 5

    @pytest.mark.asyncio
    async def test_refund_after_shipping_keeps_stock(self, admin_client, placed_order, product, client):
        admin, _ = admin_client
        await _set_status(admin, placed_order["id"], "shipped")

        await _set_status(admin, placed_order["id"], "refunded")
        assert await _stock(client, product["id"]) == 3

    @pytest.mark.asyncio
    async def test_invalid_status_value(self, admin_client, placed_order):
        admin, _ = admin_client

        response = await _set_status(admin, placed_order["id"], "lost")
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_status_update_requires_admin(self, auth_client, placed_order):
        user_client, _ = auth_client

        response = await _set_status(user_client, placed_order["id"], "shipped")
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_mark_paid(self, auth_client, placed_order):
        user_client, _ = auth_client

        response = await user_client.post(
            f"{API}/orders/{placed_order['id']}/pay",
            json={"id": "pay_123", "status": "COMPLETED"},
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["is_paid"] is True
        assert data["payment_status"] == "completed"
        assert data["payment_result"]["id"] == "pay_123"

        again = await user_client.post(f"{API}/orders/{placed_order['id']}/pay")
        assert again.status_code == 400

    @pytest.mark.asyncio
    async def test_cannot_pay_cancelled_order(self, auth_client, placed_order):
        user_client, _ = auth_client
        await user_client.post(f"{API}/orders/{placed_order['id']}/cancel")

        response = await user_client.post(f"{API}/orders/{placed_order['id']}/pay")
        assert response.status_code == 400


class TestOrderAdministration:
    """Tests for admin order endpoints."""

    @pytest.mark.asyncio
    async def test_list_and_filter(self, admin_client, auth_client, placed_order):
        admin, _ = admin_client
        _, user = auth_client

        everything = await admin.get(f"{API}/orders")
        assert everything.json()["data"]["total"] == 1

        by_user = await admin.get(f"{API}/orders", params={"user_id": user["id"]})
        assert by_user.json()["data"]["total"] == 1

        by_status = await admin.get(f"{API}/orders", params={"status": "delivered"})
        assert by_status.json()["data"]["total"] == 0

        by_number = await admin.get(
            f"{API}/orders",
            params={"order_number": placed_order["order_number"][-4:]},
        )
        assert by_number.json()["data"]["items"][0]["id"] == placed_order["id"]

    @pytest.mark.asyncio
    async def test_list_requires_admin(self, auth_client):
        user_client, _ = auth_client

        response = await user_client.get(f"{API}/orders")
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_unknown_sort_field(self, admin_client):
        admin, _ = admin_client

        response = await admin.get(f"{API}/orders", params={"sort_by": "user_password"})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_admin_update(self, admin_client, placed_order):
        admin, _ = admin_client

        response = await admin.patch(
            f"{API}/orders/{placed_order['id']}",
            json={"tracking_number": "1Z999", "notes": "Leave at the door"},
        )

        data = response.json()["data"]
        assert data["tracking_number"] == "1Z999"
        assert data["notes"] == "Leave at the door"
        assert data["status"] == "pending"

    @pytest.mark.asyncio
    async def test_delete_restocks(self, admin_client, placed_order, product, client):
        admin, _ = admin_client

        response = await admin.delete(f"{API}/orders/{placed_order['id']}")
        assert response.status_code == 200
        assert await _stock(client, product["id"]) == 5

        missing = await admin.get(f"{API}/orders/{placed_order['id']}")
        assert missing.status_code == 404
