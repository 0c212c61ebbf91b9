# ==============================================================================
# PRODUCT SCHEMAS - Catalog
# ==============================================================================
# Request/Response schemas for products
# ==============================================================================

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import Field, model_validator

from storefront.schemas.base import BaseSchema, TimestampSchema


class ProductImage(BaseSchema):
    url: str = Field(..., max_length=500)
    public_id: Optional[str] = None
    alt: Optional[str] = Field(None, max_length=200)


class ProductVariant(BaseSchema):
    """A selectable dimension such as size or color."""

    name: str = Field(..., min_length=1, max_length=50)
    options: List[str] = Field(default_factory=list)


class ProductCreate(BaseSchema):
    """Schema for creating a product."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Product display name",
    )
    description: str = Field(
        "",
        max_length=5000,
        description="Detailed product description",
    )
    price: Decimal = Field(
        ...,
        ge=0,
        max_digits=12,
        decimal_places=2,
        description="Regular selling price",
    )
    discount_price: Optional[Decimal] = Field(
        None,
        ge=0,
        max_digits=12,
        decimal_places=2,
        description="Reduced price applied inside the discount window",
    )
    discount_starts_at: Optional[datetime] = None
    discount_ends_at: Optional[datetime] = None
    stock: int = Field(
        0,
        ge=0,
        description="Units available",
    )
    status: str = Field(
        "active",
        pattern="^(active|inactive|draft)$",
    )
    category_id: Optional[str] = None
    brand: Optional[str] = Field(None, max_length=100)
    images: List[ProductImage] = Field(default_factory=list)
    specifications: Dict[str, Any] = Field(default_factory=dict)
    variants: List[ProductVariant] = Field(default_factory=list)
    is_featured: bool = False

    @model_validator(mode="after")
    def validate_discount(self) -> "ProductCreate":
        """Discount must undercut the price and the window must be ordered."""
        if self.discount_price is not None and self.discount_price >= self.price:
            raise ValueError("discount_price must be lower than price")
        if (
            self.discount_starts_at
            and self.discount_ends_at
            and self.discount_ends_at <= self.discount_starts_at
        ):
            raise ValueError("discount_ends_at must be after discount_starts_at")
        return self


class ProductUpdate(BaseSchema):
    """
    Typed partial update; only the fields sent are written.

    Cross-field checks against stored values happen in the service.
    """

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=5000)
    price: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
    discount_price: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
    discount_starts_at: Optional[datetime] = None
    discount_ends_at: Optional[datetime] = None
    stock: Optional[int] = Field(None, ge=0)
    status: Optional[str] = Field(None, pattern="^(active|inactive|draft)$")
    category_id: Optional[str] = None
    brand: Optional[str] = Field(None, max_length=100)
    images: Optional[List[ProductImage]] = None
    specifications: Optional[Dict[str, Any]] = None
    variants: Optional[List[ProductVariant]] = None
    is_featured: Optional[bool] = None


class ProductResponse(TimestampSchema):
    """Schema for product response."""

    id: str
    name: str
    description: str = ""
    price: Decimal
    discount_price: Optional[Decimal] = None
    discount_starts_at: Optional[datetime] = None
    discount_ends_at: Optional[datetime] = None
    effective_price: Decimal = Field(
        ...,
        description="Price charged right now (discount applied when active)",
    )
    stock: int
    in_stock: bool
    status: str
    category_id: Optional[str] = None
    brand: Optional[str] = None
    images: List[ProductImage] = Field(default_factory=list)
    specifications: Dict[str, Any] = Field(default_factory=dict)
    variants: List[ProductVariant] = Field(default_factory=list)
    is_featured: bool = False
    rating_average: float = 0.0
    rating_count: int = 0
    total_sales: int = 0


class RatingDistribution(BaseSchema):
    """Approved review counts per star plus the aggregate."""

    product_id: str
    average: float
    count: int
    distribution: Dict[int, int]
