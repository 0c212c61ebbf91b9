# ==============================================================================
# ORDER MODEL - E-commerce Orders
# ==============================================================================
# Order entity with immutable line-item snapshots stored as JSON
# ==============================================================================

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, Boolean, DateTime, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from storefront.domain_models.base import SQLBase, TimestampMixin


class Order(SQLBase, TimestampMixin):
    """
    Order model.

    Attributes:
        order_number: Human readable unique number (ORD-<ms>-<user suffix>)
        items: Snapshots {product_id, name, image, variants, quantity,
            unit_price, total_price} taken when the order was placed
        shipping_address: {full_name, address, city, postal_code, country, phone}
        items_price / shipping_price / discount_price / total_price: Money totals
        status: pending, processing, shipped, delivered, cancelled, refunded
        payment_status: pending, completed, failed, refunded
    """

    __tablename__ = "orders"

    user_id: Mapped[str] = mapped_column(
        String(36),
        nullable=False,
        index=True,
    )
    order_number: Mapped[str] = mapped_column(
        String(50),
        unique=True,
        index=True,
        nullable=False,
    )

    # Contents
    items: Mapped[List[Dict[str, Any]]] = mapped_column(
        JSON,
        nullable=False,
    )
    shipping_address: Mapped[Dict[str, Any]] = mapped_column(
        JSON,
        nullable=False,
    )
    payment_method: Mapped[str] = mapped_column(
        String(30),
        nullable=False,
    )
    shipping_method: Mapped[str] = mapped_column(
        String(20),
        default="standard",
        nullable=False,
    )

    # Totals
    items_price: Mapped[Decimal] = mapped_column(
        Numeric(precision=12, scale=2),
        nullable=False,
    )
    shipping_price: Mapped[Decimal] = mapped_column(
        Numeric(precision=12, scale=2),
        default=Decimal("0.00"),
        nullable=False,
    )
    discount_price: Mapped[Decimal] = mapped_column(
        Numeric(precision=12, scale=2),
        default=Decimal("0.00"),
        nullable=False,
    )
    total_price: Mapped[Decimal] = mapped_column(
        Numeric(precision=12, scale=2),
        nullable=False,
    )

    # Status
    status: Mapped[str] = mapped_column(
        String(20),
        default="pending",
        nullable=False,
        index=True,
    )
    payment_status: Mapped[str] = mapped_column(
        String(20),
        default="pending",
        nullable=False,
    )
    is_paid: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
        index=True,
    )
    paid_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    payment_result: Mapped[Optional[Dict[str, Any]]] = mapped_column(
        JSON,
        nullable=True,
    )

    # Fulfilment
    tracking_number: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
    )
    notes: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )
    delivered_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    cancelled_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<Order(id={self.id}, number={self.order_number}, status={self.status})>"
