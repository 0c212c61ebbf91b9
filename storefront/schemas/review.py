# ==============================================================================
# REVIEW SCHEMAS
# ==============================================================================

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import Field

from storefront.schemas.base import BaseSchema, PaginatedResponse, TimestampSchema


class ReviewCreate(BaseSchema):
    """Schema for submitting a review."""

    product_id: str = Field(..., min_length=1)
    rating: int = Field(..., ge=1, le=5)
    title: str = Field(..., min_length=1, max_length=100)
    comment: str = Field(..., min_length=1, max_length=2000)
    pros: List[str] = Field(default_factory=list, max_length=10)
    cons: List[str] = Field(default_factory=list, max_length=10)
    images: List[str] = Field(default_factory=list, max_length=5)


class ReviewUpdate(BaseSchema):
    rating: Optional[int] = Field(None, ge=1, le=5)
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    comment: Optional[str] = Field(None, min_length=1, max_length=2000)
    pros: Optional[List[str]] = Field(None, max_length=10)
    cons: Optional[List[str]] = Field(None, max_length=10)
    images: Optional[List[str]] = Field(None, max_length=5)


class ReviewApprove(BaseSchema):
    response: Optional[str] = Field(None, max_length=1000)


class ReviewReject(BaseSchema):
    """Rejections must explain themselves to the author."""

    response: str = Field(..., min_length=1, max_length=1000)


class ReviewVote(BaseSchema):
    helpful: bool = Field(..., description="True for helpful, False for not helpful")


class ReviewResponse(TimestampSchema):
    id: str
    user_id: str
    user_name: str
    product_id: str
    rating: int
    title: str
    comment: str
    pros: List[str] = Field(default_factory=list)
    cons: List[str] = Field(default_factory=list)
    images: List[str] = Field(default_factory=list)
    status: str
    is_verified_purchase: bool = False
    is_edited: bool = False
    upvotes: int = 0
    downvotes: int = 0
    admin_response: Optional[str] = None
    admin_response_at: Optional[datetime] = None


class ProductReviewsResponse(PaginatedResponse[ReviewResponse]):
    """A page of approved reviews with the product's rating summary."""

    average: float = 0.0
    count: int = 0
    distribution: Dict[int, int] = Field(default_factory=dict)
