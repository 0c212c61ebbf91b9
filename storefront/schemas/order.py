# ==============================================================================
# ORDER SCHEMAS - E-commerce Orders
# ==============================================================================
# Request/Response schemas for order management
# ==============================================================================

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import Field

from storefront.schemas.base import BaseSchema, TimestampSchema

ORDER_STATUS_PATTERN = "^(pending|processing|shipped|delivered|cancelled|refunded)$"
PAYMENT_METHOD_PATTERN = "^(credit_card|bank_transfer|paypal|cash_on_delivery)$"
SHIPPING_METHOD_PATTERN = "^(standard|express|pickup)$"


class ShippingAddress(BaseSchema):
    """Denormalized delivery address stored on the order."""

    full_name: str = Field(..., min_length=1, max_length=100)
    address: str = Field(..., min_length=1, max_length=500)
    city: str = Field(..., min_length=1, max_length=100)
    postal_code: str = Field(..., min_length=1, max_length=20)
    country: str = Field(..., min_length=1, max_length=100)
    phone: Optional[str] = Field(None, max_length=30)


class OrderItemCreate(BaseSchema):
    """Schema for creating an order item."""

    product_id: str = Field(
        ...,
        description="Product ID to order",
    )
    quantity: int = Field(
        ...,
        ge=1,
        description="Quantity to order",
    )
    variants: Dict[str, str] = Field(default_factory=dict)


class OrderCreate(BaseSchema):
    """
    Schema for placing an order.

    An empty ``items`` list is accepted here and rejected by the
    order workflow with a BAD_REQUEST error.
    """

    items: List[OrderItemCreate] = Field(
        default_factory=list,
        description="Order items",
    )
    shipping_address: ShippingAddress
    payment_method: str = Field(
        ...,
        pattern=PAYMENT_METHOD_PATTERN,
    )
    shipping_method: str = Field(
        "standard",
        pattern=SHIPPING_METHOD_PATTERN,
    )
    notes: Optional[str] = Field(
        None,
        max_length=1000,
        description="Order notes",
    )
    clear_cart: bool = Field(
        False,
        description="Empty the cart after the order is placed",
    )


class OrderStatusUpdate(BaseSchema):
    """Admin status transition request."""

    status: str = Field(
        ...,
        pattern=ORDER_STATUS_PATTERN,
        description="Target order status",
    )


class OrderAdminUpdate(BaseSchema):
    """Fields an administrator may edit outside the status workflow."""

    shipping_address: Optional[ShippingAddress] = None
    notes: Optional[str] = Field(None, max_length=1000)
    tracking_number: Optional[str] = Field(None, max_length=100)


class PaymentResult(BaseSchema):
    """Payment confirmation reported by the client or payment provider."""

    id: Optional[str] = Field(None, max_length=200)
    status: Optional[str] = Field(None, max_length=50)
    update_time: Optional[str] = Field(None, max_length=50)
    email_address: Optional[str] = Field(None, max_length=255)


class OrderItemResponse(BaseSchema):
    """Line item snapshot."""

    product_id: str
    name: str
    image: Optional[str] = None
    variants: Dict[str, str] = Field(default_factory=dict)
    quantity: int
    unit_price: Decimal
    total_price: Decimal


class OrderResponse(TimestampSchema):
    """Schema for order response."""

    id: str
    user_id: str
    order_number: str = Field(
        ...,
        description="Human-readable order number",
    )
    items: List[OrderItemResponse] = Field(default_factory=list)
    shipping_address: ShippingAddress
    payment_method: str
    shipping_method: str
    items_price: Decimal
    shipping_price: Decimal
    discount_price: Decimal
    total_price: Decimal
    status: str
    payment_status: str
    is_paid: bool
    paid_at: Optional[datetime] = None
    payment_result: Optional[Dict[str, Any]] = None
    tracking_number: Optional[str] = None
    notes: Optional[str] = None
    delivered_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
