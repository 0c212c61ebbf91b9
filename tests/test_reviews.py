# ==============================================================================
# REVIEW ENDPOINT TESTS
# ==============================================================================
# Tests for submission, moderation and the product rating aggregate
# ==============================================================================

import pytest
from httpx import AsyncClient

from tests.conftest import API


def _review(product_id: str, rating: int = 5, **extra) -> dict:
    payload = {
        "product_id": product_id,
        "rating": rating,
        "title": "Solid purchase",
        "comment": "Does what it says on the box.",
    }
    payload.update(extra)
    return payload


async def _submit(client: AsyncClient, product_id: str, rating: int = 5, **extra) -> dict:
    response = await client.post(f"{API}/reviews", json=_review(product_id, rating, **extra))
    assert response.status_code == 201, response.text
    return response.json()["data"]


async def _approve(admin: AsyncClient, review_id: str) -> dict:
    response = await admin.patch(f"{API}/reviews/{review_id}/approve")
    assert response.status_code == 200, response.text
    return response.json()["data"]


async def _product(client: AsyncClient, product_id: str) -> dict:
    response = await client.get(f"{API}/products/{product_id}")
    return response.json()["data"]


class TestReviewSubmission:
    """Tests for customer review operations."""

    @pytest.mark.asyncio
    async def test_submit_is_pending(self, auth_client, product):
        user_client, user = auth_client

        response = await user_client.post(f"{API}/reviews", json=_review(product["id"]))

        assert response.status_code == 201
        assert response.json()["message"] == "Review submitted for moderation"
        review = response.json()["data"]
        assert review["status"] == "pending"
        assert review["user_name"] == user["name"]
        assert review["is_verified_purchase"] is False

    @pytest.mark.asyncio
    async def test_one_review_per_product(self, auth_client, product):
        user_client, _ = auth_client
        await _submit(user_client, product["id"])

        response = await user_client.post(f"{API}/reviews", json=_review(product["id"], 3))

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "CONFLICT"

    @pytest.mark.asyncio
    async def test_rating_bounds(self, auth_client, product):
        user_client, _ = auth_client

        response = await user_client.post(f"{API}/reviews", json=_review(product["id"], 6))
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_product(self, auth_client):
        user_client, _ = auth_client

        response = await user_client.post(f"{API}/reviews", json=_review("missing"))
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_verified_purchase(self, auth_client, product, order_payload):
        user_client, _ = auth_client
        placed = await user_client.post(f"{API}/orders", json=order_payload(product["id"]))
        await user_client.post(f"{API}/orders/{placed.json()['data']['id']}/pay")

        review = await _submit(user_client, product["id"])
        assert review["is_verified_purchase"] is True

    @pytest.mark.asyncio
    async def test_unpaid_order_is_not_verified(self, auth_client, product, order_payload):
        user_client, _ = auth_client
        await user_client.post(f"{API}/orders", json=order_payload(product["id"]))

        review = await _submit(user_client, product["id"])
        assert review["is_verified_purchase"] is False

    @pytest.mark.asyncio
    async def test_my_reviews(self, auth_client, product):
        user_client, _ = auth_client
        review = await _submit(user_client, product["id"])

        response = await user_client.get(f"{API}/reviews/my")

        data = response.json()["data"]
        assert data["total"] == 1
        assert data["items"][0]["id"] == review["id"]

    @pytest.mark.asyncio
    async def test_edit_goes_back_to_pending(self, auth_client, admin_client, product, client):
        user_client, _ = auth_client
        admin, _ = admin_client
        review = await _submit(user_client, product["id"], 4)
        await _approve(admin, review["id"])

        response = await user_client.put(f"{API}/reviews/{review['id']}", json={"rating": 2})

        data = response.json()["data"]
        assert data["status"] == "pending"
        assert data["is_edited"] is True
        assert data["rating"] == 2

        rated = await _product(client, product["id"])
        assert rated["rating_count"] == 0

    @pytest.mark.asyncio
    async def test_edit_someone_elses_review(self, auth_client, other_client, product):
        user_client, _ = auth_client
        other, _ = other_client
        review = await _submit(user_client, product["id"])

        response = await other.put(f"{API}/reviews/{review['id']}", json={"rating": 1})
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_delete_own_review(self, auth_client, admin_client, product, client):
        user_client, _ = auth_client
        admin, _ = admin_client
        review = await _submit(user_client, product["id"], 5)
        await _approve(admin, review["id"])

        response = await user_client.delete(f"{API}/reviews/{review['id']}")
        assert response.status_code == 200

        rated = await _product(client, product["id"])
        assert rated["rating_count"] == 0
        assert rated["rating_average"] == 0.0

    @pytest.mark.asyncio
    async def test_delete_someone_elses_review(self, auth_client, other_client, product):
        user_client, _ = auth_client
        other, _ = other_client
        review = await _submit(user_client, product["id"])

        response = await other.delete(f"{API}/reviews/{review['id']}")
        assert response.status_code == 403


class TestReviewVoting:
    """Tests for helpful / not helpful votes."""

    @pytest.mark.asyncio
    async def test_vote(self, auth_client, other_client, admin_client, product):
        user_client, _ = auth_client
        other, _ = other_client
        admin, _ = admin_client
        review = await _submit(user_client, product["id"])
        await _approve(admin, review["id"])

        up = await other.post(f"{API}/reviews/{review['id']}/vote", json={"helpful": True})
        down = await other.post(f"{API}/reviews/{review['id']}/vote", json={"helpful": False})

        assert up.json()["data"]["upvotes"] == 1
        assert down.json()["data"]["downvotes"] == 1

    @pytest.mark.asyncio
    async def test_cannot_vote_on_own_review(self, auth_client, admin_client, product):
        user_client, _ = auth_client
        admin, _ = admin_client
        review = await _submit(user_client, product["id"])
        await _approve(admin, review["id"])

        response = await user_client.post(f"{API}/reviews/{review['id']}/vote", json={"helpful": True})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_cannot_vote_on_pending_review(self, auth_client, other_client, product):
        user_client, _ = auth_client
        other, _ = other_client
        review = await _submit(user_client, product["id"])

        response = await other.post(f"{API}/reviews/{review['id']}/vote", json={"helpful": True})
        assert response.status_code == 400


class TestReviewModeration:
    """Tests for admin moderation and the rating aggregate."""

    @pytest.mark.asyncio
    async def test_approval_updates_product_rating(
        self, auth_client, other_client, admin_client, product, client
    ):
        user_client, _ = auth_client
        other, _ = other_client
        admin, _ = admin_client
        first = await _submit(user_client, product["id"], 5)
        second = await _submit(other, product["id"], 2)

        await _approve(admin, first["id"])
        rated = await _product(client, product["id"])
        assert rated["rating_average"] == 5.0
        assert rated["rating_count"] == 1

        await _approve(admin, second["id"])
        rated = await _product(client, product["id"])
        assert rated["rating_average"] == 3.5
        assert rated["rating_count"] == 2

    @pytest.mark.asyncio
    async def test_product_reviews_lists_approved_only(
        self, auth_client, other_client, admin_client, product, client
    ):
        user_client, _ = auth_client
        other, _ = other_client
        admin, _ = admin_client
        approved = await _submit(user_client, product["id"], 4)
        await _submit(other, product["id"], 1)
        await _approve(admin, approved["id"])

        response = await client.get(f"{API}/reviews/product/{product['id']}")

        data = response.json()["data"]
        assert [r["id"] for r in data["items"]] == [approved["id"]]
        assert data["total"] == 1
        assert data["average"] == 4.0
        assert data["count"] == 1
        assert data["distribution"]["4"] == 1

    @pytest.mark.asyncio
    async def test_product_reviews_filters(self, auth_client, other_client, admin_client, product, client):
        user_client, _ = auth_client
        other, _ = other_client
        admin, _ = admin_client
        plain = await _submit(user_client, product["id"], 4)
        pictured = await _submit(other, product["id"], 5, images=["/uploads/review.png"])
        await _approve(admin, plain["id"])
        await _approve(admin, pictured["id"])

        by_rating = await client.get(f"{API}/reviews/product/{product['id']}", params={"rating": 4})
        assert [r["id"] for r in by_rating.json()["data"]["items"]] == [plain["id"]]

        with_images = await client.get(
            f"{API}/reviews/product/{product['id']}",
            params={"with_images": "true"},
        )
        assert [r["id"] for r in with_images.json()["data"]["items"]] == [pictured["id"]]

        lowest = await client.get(f"{API}/reviews/product/{product['id']}", params={"sort": "lowest"})
        assert [r["rating"] for r in lowest.json()["data"]["items"]] == [4, 5]

        unknown = await client.get(f"{API}/reviews/product/{product['id']}", params={"sort": "random"})
        assert unknown.status_code == 400

    @pytest.mark.asyncio
    async def test_reject_requires_response(self, auth_client, admin_client, product):
        user_client, _ = auth_client
        admin, _ = admin_client
        review = await _submit(user_client, product["id"])

        missing = await admin.patch(f"{API}/reviews/{review['id']}/reject", json={})
        assert missing.status_code == 400

        response = await admin.patch(
            f"{API}/reviews/{review['id']}/reject",
            json={"response": "Please keep reviews on topic"},
        )
        data = response.json()["data"]
        assert data["status"] == "rejected"
        assert data["admin_response"] == "Please keep reviews on topic"
        assert data["admin_response_at"] is not None

    @pytest.mark.asyncio
    async def test_rejecting_approved_review_updates_rating(
        self, auth_client, admin_client, product, client
    ):
        user_client, _ = auth_client
        admin, _ = admin_client
        review = await _submit(user_client, product["id"], 3)
        await _approve(admin, review["id"])

        await admin.patch(f"{API}/reviews/{review['id']}/reject", json={"response": "Spam"})

        rated = await _product(client, product["id"])
        assert rated["rating_count"] == 0

    @pytest.mark.asyncio
    async def test_admin_list(self, auth_client, admin_client, product):
        user_client, _ = auth_client
        admin, _ = admin_client
        await _submit(user_client, product["id"])

        pending = await admin.get(f"{API}/reviews", params={"status": "pending"})
        assert pending.json()["data"]["total"] == 1

        approved = await admin.get(f"{API}/reviews", params={"status": "approved"})
        assert approved.json()["data"]["total"] == 0

    @pytest.mark.asyncio
    async def test_moderation_requires_admin(self, auth_client, product):
        user_client, _ = auth_client
        review = await _submit(user_client, product["id"])

        response = await user_client.patch(f"{API}/reviews/{review['id']}/approve")
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_deleting_product_removes_reviews(self, auth_client, admin_client, product):
        user_client, _ = auth_client
        admin, _ = admin_client
        await _submit(user_client, product["id"])

        await admin.delete(f"{API}/products/{product['id']}")

        remaining = await admin.get(f"{API}/reviews", params={"product_id": product["id"]})
        assert remaining.json()["data"]["total"] == 0
