# ==============================================================================
# PRODUCT MODEL - E-commerce Catalog
# ==============================================================================
# Product entity with inventory, pricing window and rating aggregate
# ==============================================================================

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, Boolean, DateTime, Float, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from storefront.domain_models.base import SQLBase, TimestampMixin


class Product(SQLBase, TimestampMixin):
    """
    Product model for e-commerce catalog.

    Attributes:
        name: Product display name
        price: Regular selling price
        discount_price: Optional reduced price
        discount_starts_at / discount_ends_at: Optional discount window
        stock: Units available; never negative
        status: active, inactive or draft
        category_id: Owning category (by id)
        images: List of {url, public_id, alt}
        specifications: Free-form key/value pairs
        variants: List of {name, options}
        rating_average / rating_count: Aggregate of approved reviews
        total_sales: Units sold through orders
    """

    __tablename__ = "products"

    # Basic info
    name: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
        index=True,
    )
    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
    )
    brand: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
    )

    # Pricing
    price: Mapped[Decimal] = mapped_column(
        Numeric(precision=12, scale=2),
        nullable=False,
    )
    discount_price: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(precision=12, scale=2),
        nullable=True,
    )
    discount_starts_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    discount_ends_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    # Inventory
    stock: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )
    total_sales: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )

    # Categorization
    category_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        nullable=True,
        index=True,
    )
    status: Mapped[str] = mapped_column(
        String(20),
        default="active",
        nullable=False,
        index=True,
    )
    is_featured: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )

    # Nested documents
    images: Mapped[List[Dict[str, Any]]] = mapped_column(
        JSON,
        default=list,
        nullable=False,
    )
    specifications: Mapped[Dict[str, Any]] = mapped_column(
        JSON,
        default=dict,
        nullable=False,
    )
    variants: Mapped[List[Dict[str, Any]]] = mapped_column(
        JSON,
        default=list,
        nullable=False,
    )

    # Ratings
    rating_average: Mapped[float] = mapped_column(
        Float,
        default=0.0,
        nullable=False,
    )
    rating_count: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, name={self.name})>"
