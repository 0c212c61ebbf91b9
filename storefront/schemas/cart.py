# ==============================================================================
# CART & WISHLIST SCHEMAS
# ==============================================================================

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import Field

from storefront.schemas.base import BaseSchema, TimestampSchema
from storefront.schemas.product import ProductResponse


class CartItemAdd(BaseSchema):
    """Add a product (optionally a specific variant selection) to the cart."""

    product_id: str = Field(..., min_length=1)
    quantity: int = Field(1, ge=1, le=1000)
    variants: Dict[str, str] = Field(
        default_factory=dict,
        description="Selected option per variant, e.g. {\"size\": \"M\"}",
    )


class CartItemUpdate(BaseSchema):
    """New quantity for a line; zero or less removes it."""

    quantity: int = Field(..., le=1000)


class CartItemResponse(BaseSchema):
    id: str
    product_id: str
    name: str
    image: Optional[str] = None
    price: Decimal
    quantity: int
    variants: Dict[str, str] = Field(default_factory=dict)
    total_price: Decimal


class CartResponse(TimestampSchema):
    id: str
    user_id: str
    items: List[CartItemResponse] = Field(default_factory=list)
    total_items: int = 0
    total_price: Decimal = Decimal("0.00")


class WishlistItemAdd(BaseSchema):
    product_id: str = Field(..., min_length=1)


class WishlistItemResponse(BaseSchema):
    product_id: str
    added_at: datetime
    product: Optional[ProductResponse] = None


class WishlistResponse(TimestampSchema):
    id: str
    user_id: str
    items: List[WishlistItemResponse] = Field(default_factory=list)
