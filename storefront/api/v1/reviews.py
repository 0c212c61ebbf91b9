# ==============================================================================
# REVIEWS ENDPOINTS - Review Routes
# ==============================================================================
# Product reviews, helpfulness votes and moderation
# ==============================================================================

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Query, status

from storefront.api.dependencies import (
    AdminUser,
    CurrentUser,
    PaginationDep,
    ReviewServiceDep,
)
from storefront.core.constants import ReviewConstants, SuccessMessages
from storefront.schemas.base import APIResponse, PaginatedResponse
from storefront.schemas.review import (
    ProductReviewsResponse,
    ReviewApprove,
    ReviewCreate,
    ReviewReject,
    ReviewResponse,
    ReviewUpdate,
    ReviewVote,
)

router = APIRouter(prefix="/reviews", tags=["Reviews"])


@router.post(
    "",
    response_model=APIResponse[ReviewResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Submit review",
    description="Reviews are published once an administrator approves them.",
)
async def create_review(
    schema: ReviewCreate,
    user: CurrentUser,
    service: ReviewServiceDep,
) -> APIResponse[ReviewResponse]:
    review = await service.create(user, schema)
    return APIResponse.ok(data=review, message="Review submitted for moderation")


@router.get(
    "/product/{product_id}",
    response_model=APIResponse[ProductReviewsResponse],
    summary="Reviews of a product",
)
async def product_reviews(
    product_id: str,
    pagination: PaginationDep,
    service: ReviewServiceDep,
    sort: str = Query("newest", description="One of: " + ", ".join(ReviewConstants.SORT_OPTIONS)),
    rating: Optional[int] = Query(None, ge=ReviewConstants.MIN_RATING, le=ReviewConstants.MAX_RATING),
    verified_only: bool = Query(False),
    with_images: bool = Query(False),
) -> APIResponse[ProductReviewsResponse]:
    result = await service.product_reviews(
        product_id,
        pagination.page,
        pagination.page_size,
        sort=sort,
        rating=rating,
        verified_only=verified_only,
        with_images=with_images,
    )
    return APIResponse.ok(data=result)


@router.get(
    "/my",
    response_model=APIResponse[PaginatedResponse[ReviewResponse]],
    summary="My reviews",
)
async def my_reviews(
    user: CurrentUser,
    pagination: PaginationDep,
    service: ReviewServiceDep,
) -> APIResponse[PaginatedResponse[ReviewResponse]]:
    result = await service.list_for_user(user["id"], pagination.page, pagination.page_size)
    return APIResponse.ok(data=result)


@router.put(
    "/{review_id}",
    response_model=APIResponse[ReviewResponse],
    summary="Edit review",
)
async def update_review(
    review_id: str,
    schema: ReviewUpdate,
    user: CurrentUser,
    service: ReviewServiceDep,
) -> APIResponse[ReviewResponse]:
    review = await service.update(user, review_id, schema)
    return APIResponse.ok(data=review, message=SuccessMessages.UPDATED)


@router.delete(
    "/{review_id}",
    response_model=APIResponse[dict],
    summary="Delete review",
)
async def delete_review(
    review_id: str,
    user: CurrentUser,
    service: ReviewServiceDep,
) -> APIResponse[dict]:
    await service.delete_review(user, review_id)
    return APIResponse.ok(message=SuccessMessages.DELETED)


@router.post(
    "/{review_id}/vote",
    response_model=APIResponse[ReviewResponse],
    summary="Vote on review",
)
async def vote_review(
    review_id: str,
    schema: ReviewVote,
    user: CurrentUser,
    service: ReviewServiceDep,
) -> APIResponse[ReviewResponse]:
    review = await service.vote(user, review_id, schema.helpful)
    return APIResponse.ok(data=review, message="Vote recorded")


# ==============================================================================
# MODERATION
# ==============================================================================

@router.get(
    "",
    response_model=APIResponse[PaginatedResponse[ReviewResponse]],
    summary="List reviews",
)
async def list_reviews(
    admin: AdminUser,
    pagination: PaginationDep,
    service: ReviewServiceDep,
    status_filter: Optional[str] = Query(None, alias="status", pattern="^(pending|approved|rejected)$"),
    product_id: Optional[str] = Query(None),
) -> APIResponse[PaginatedResponse[ReviewResponse]]:
    result = await service.list_reviews(
        pagination.page,
        pagination.page_size,
        status=status_filter,
        product_id=product_id,
    )
    return APIResponse.ok(data=result)


@router.patch(
    "/{review_id}/approve",
    response_model=APIResponse[ReviewResponse],
    summary="Approve review",
)
async def approve_review(
    review_id: str,
    admin: AdminUser,
    service: ReviewServiceDep,
    schema: Optional[ReviewApprove] = None,
) -> APIResponse[ReviewResponse]:
    review = await service.approve(review_id, schema.response if schema else None)
    return APIResponse.ok(data=review, message="Review approved")


@router.patch(
    "/{review_id}/reject",
    response_model=APIResponse[ReviewResponse],
    summary="Reject review",
)
async def reject_review(
    review_id: str,
    schema: ReviewReject,
    admin: AdminUser,
    service: ReviewServiceDep,
) -> APIResponse[ReviewResponse]:
    review = await service.reject(review_id, schema.response)
    return APIResponse.ok(data=review, message="Review rejected")
