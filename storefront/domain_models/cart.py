# ==============================================================================
# CART & WISHLIST MODELS - Per-user Shopping State
# ==============================================================================

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, List

from sqlalchemy import JSON, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from storefront.domain_models.base import SQLBase, TimestampMixin


class Cart(SQLBase, TimestampMixin):
    """
    Shopping cart, one per user.

    Line items are stored as a JSON list; ``total_items`` and
    ``total_price`` are derived from them whenever the cart is saved.
    """

    __tablename__ = "carts"

    user_id: Mapped[str] = mapped_column(
        String(36),
        unique=True,
        index=True,
        nullable=False,
    )
    items: Mapped[List[Dict[str, Any]]] = mapped_column(
        JSON,
        default=list,
        nullable=False,
    )
    total_items: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )
    total_price: Mapped[Decimal] = mapped_column(
        Numeric(precision=12, scale=2),
        default=Decimal("0.00"),
        nullable=False,
    )


class Wishlist(SQLBase, TimestampMixin):
    """Saved products of a user; ``items`` holds {product_id, added_at}."""

    __tablename__ = "wishlists"

    user_id: Mapped[str] = mapped_column(
        String(36),
        unique=True,
        index=True,
        nullable=False,
    )
    items: Mapped[List[Dict[str, Any]]] = mapped_column(
        JSON,
        default=list,
        nullable=False,
    )
