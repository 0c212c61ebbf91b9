# ==============================================================================
# REVIEW SERVICE - Moderated Product Reviews
# ==============================================================================
# Submission, moderation and the product rating aggregate
# ==============================================================================

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from storefront.core.constants import DatabaseConstants, ErrorMessages, ReviewConstants, UserRoles
from storefront.core.exceptions import (
    AuthorizationError,
    BadRequestError,
    ConflictError,
    ProductNotFoundError,
)
from storefront.database.adapters.base_adapter import BaseDatabaseAdapter
from storefront.database.repositories import (
    OrderRepository,
    ProductRepository,
    Record,
    ReviewRepository,
)
from storefront.schemas.review import (
    ProductReviewsResponse,
    ReviewCreate,
    ReviewResponse,
    ReviewUpdate,
)
from storefront.services.base_service import BaseService
from storefront.services.product_service import rating_summary
from storefront.utils.helpers import calculate_offset, paginate_results, utc_now

logger = logging.getLogger(__name__)


class ReviewService(BaseService[ReviewResponse]):
    """
    Review service.

    Only approved reviews count toward a product's rating. Every change
    that can move a review in or out of the approved set recomputes
    the aggregate from scratch.
    """

    _resource_name = "review"

    def __init__(self, adapter: BaseDatabaseAdapter) -> None:
        self._reviews = ReviewRepository(adapter)
        self._products = ProductRepository(adapter)
        self._orders = OrderRepository(adapter)
        super().__init__(adapter, self._reviews)

    def _to_response(self, record: Record) -> ReviewResponse:
        return ReviewResponse.model_validate(record)

    async def _load(self, review_id: str) -> Record:
        return await self._get_or_404(review_id, ErrorMessages.REVIEW_NOT_FOUND)

    async def _check_product(self, product_id: str) -> None:
        if await self._products.get_by_id(product_id) is None:
            raise ProductNotFoundError(product_id)

    async def _has_purchased(self, user_id: str, product_id: str) -> bool:
        orders = await self._orders.list_paid_for_user(user_id)
        return any(
            item["product_id"] == product_id
            for order in orders
            for item in order["items"]
        )

    async def recompute_rating(self, product_id: str) -> Dict[str, Any]:
        """Store the product's rating aggregate from its approved reviews."""
        summary = rating_summary(await self._reviews.list_approved_for_product(product_id))
        await self._products.set_rating(product_id, summary["average"], summary["count"])
        logger.debug(
            f"Rating of product {product_id}: {summary['average']} ({summary['count']} reviews)"
        )
        return summary

    # ==========================================================================
    # CUSTOMER OPERATIONS
    # ==========================================================================

    async def create(self, user: Record, schema: ReviewCreate) -> ReviewResponse:
        """
        Submit a review; it stays pending until moderated.

        Verified purchase is decided here once and never re-derived.

        Raises:
            ProductNotFoundError: If product missing
            ConflictError: If the user already reviewed the product
        """
        await self._check_product(schema.product_id)

        if await self._reviews.get_for_user_and_product(user["id"], schema.product_id):
            raise ConflictError(
                message="You have already reviewed this product",
                resource_type="review",
                details={"product_id": schema.product_id},
            )

        data = schema.model_dump()
        data.update({
            "user_id": user["id"],
            "user_name": user["name"],
            "is_verified_purchase": await self._has_purchased(user["id"], schema.product_id),
        })
        review = await self._reviews.create(data)
        logger.info(f"Review {review['id']} submitted for product {schema.product_id}")
        return self._to_response(review)

    async def update(self, user: Record, review_id: str, schema: ReviewUpdate) -> ReviewResponse:
        """
        Edit one's own review.

        The review goes back to ``pending`` for re-moderation.

        Raises:
            AuthorizationError: If the caller is not the author
        """
        review = await self._load(review_id)
        if review["user_id"] != user["id"]:
            raise AuthorizationError(message="You can only edit your own reviews")

        data = {k: v for k, v in schema.model_dump(exclude_unset=True).items() if v is not None}
        if not data:
            raise BadRequestError(message="No fields to update")
        data.update({"is_edited": True, "status": "pending"})

        updated = await self._reviews.update(review_id, data)
        if review["status"] == "approved":
            await self.recompute_rating(review["product_id"])
        return self._to_response(updated)

    async def delete_review(self, user: Record, review_id: str) -> bool:
        """Delete a review (author or admin)."""
        review = await self._load(review_id)
        if review["user_id"] != user["id"] and user["role"] != UserRoles.ADMIN:
            logger.warning(f"User {user['id']} denied deleting review {review_id}")
            raise AuthorizationError(message=ErrorMessages.PERMISSION_DENIED)

        await self._reviews.delete(review_id)
        await self.recompute_rating(review["product_id"])
        logger.info(f"Review {review_id} deleted by {user['id']}")
        return True

    async def vote(self, user: Record, review_id: str, helpful: bool) -> ReviewResponse:
        """Count a helpful / not helpful vote on someone else's approved review."""
        review = await self._load(review_id)
        if review["status"] != "approved":
            raise BadRequestError(message="Only approved reviews can be voted on")
        if review["user_id"] == user["id"]:
            raise BadRequestError(message="You cannot vote on your own review")

        field = "upvotes" if helpful else "downvotes"
        updated = await self._reviews.increment(review_id, {field: 1})
        if updated is None:
            raise self._not_found(review_id, ErrorMessages.REVIEW_NOT_FOUND)
        return self._to_response(updated)

    # ==========================================================================
    # QUERIES
    # ==========================================================================

    async def product_reviews(
        self,
        product_id: str,
        page: int,
        page_size: int,
        sort: str = "newest",
        rating: Optional[int] = None,
        verified_only: bool = False,
        with_images: bool = False,
    ) -> ProductReviewsResponse:
        """
        Approved reviews of a product plus its rating summary.

        Raises:
            ProductNotFoundError: If product missing
            BadRequestError: If the sort key is unknown
        """
        if sort not in ReviewConstants.SORT_OPTIONS:
            raise BadRequestError(message=f"Unknown sort option '{sort}'")
        await self._check_product(product_id)

        sort_by, sort_order = ReviewConstants.SORT_OPTIONS[sort]
        filters: Dict[str, Any] = {"product_id": product_id, "status": "approved"}
        if rating is not None:
            filters["rating"] = rating
        if verified_only:
            filters["is_verified_purchase"] = True

        if with_images:
            # Emptiness of a JSON list is not a portable filter; page in memory
            records = await self._reviews.get_all(
                limit=DatabaseConstants.MAX_SCAN_SIZE,
                filters=filters,
                sort_by=sort_by,
                sort_order=sort_order,
            )
            records = [r for r in records if r.get("images")]
            total = len(records)
            offset = calculate_offset(page, page_size)
            records = records[offset:offset + page_size]
        else:
            records, total = await self._reviews.paginate(
                page,
                page_size,
                filters,
                sort_by=sort_by,
                sort_order=sort_order,
            )

        summary = rating_summary(await self._reviews.list_approved_for_product(product_id))
        return ProductReviewsResponse(
            **paginate_results([self._to_response(r) for r in records], page, page_size, total),
            **summary,
        )

    async def list_for_user(self, user_id: str, page: int, page_size: int) -> Dict[str, Any]:
        records, total = await self._reviews.paginate(page, page_size, {"user_id": user_id})
        return self._page(records, total, page, page_size)

    async def list_reviews(
        self,
        page: int,
        page_size: int,
        status: Optional[str] = None,
        product_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Admin listing across moderation states."""
        filters: Dict[str, Any] = {}
        if status:
            filters["status"] = status
        if product_id:
            filters["product_id"] = product_id
        records, total = await self._reviews.paginate(page, page_size, filters)
        return self._page(records, total, page, page_size)

    # ==========================================================================
    # MODERATION
    # ==========================================================================

    async def _moderate(self, review_id: str, status: str, response: Optional[str]) -> ReviewResponse:
        review = await self._load(review_id)

        changes: Dict[str, Any] = {"status": status}
        if response:
            changes["admin_response"] = response
            changes["admin_response_at"] = utc_now()

        updated = await self._reviews.update(review_id, changes)
        await self.recompute_rating(review["product_id"])
        logger.info(f"Review {review_id} {status}")
        return self._to_response(updated)

    async def approve(self, review_id: str, response: Optional[str] = None) -> ReviewResponse:
        return await self._moderate(review_id, "approved", response)

    async def reject(self, review_id: str, response: str) -> ReviewResponse:
        """Reject a review; the response tells the author why."""
        return await self._moderate(review_id, "rejected", response)
