# ==============================================================================
# REVIEW MODEL - Product Reviews
# ==============================================================================

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import JSON, Boolean, DateTime, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from storefront.domain_models.base import SQLBase, TimestampMixin


class Review(SQLBase, TimestampMixin):
    """
    Product review, at most one per (user, product).

    Only ``approved`` reviews count toward the product rating.
    """

    __tablename__ = "reviews"
    __table_args__ = (
        UniqueConstraint("user_id", "product_id", name="uq_review_user_product"),
    )

    user_id: Mapped[str] = mapped_column(
        String(36),
        nullable=False,
        index=True,
    )
    user_name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )
    product_id: Mapped[str] = mapped_column(
        String(36),
        nullable=False,
        index=True,
    )

    # Content
    rating: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )
    title: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )
    comment: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    pros: Mapped[List[str]] = mapped_column(
        JSON,
        default=list,
        nullable=False,
    )
    cons: Mapped[List[str]] = mapped_column(
        JSON,
        default=list,
        nullable=False,
    )
    images: Mapped[List[str]] = mapped_column(
        JSON,
        default=list,
        nullable=False,
    )

    # Moderation
    status: Mapped[str] = mapped_column(
        String(20),
        default="pending",
        nullable=False,
        index=True,
    )
    is_verified_purchase: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )
    is_edited: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )
    admin_response: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )
    admin_response_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    # Votes
    upvotes: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )
    downvotes: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )
