# ==============================================================================
# DASHBOARD SCHEMAS - Admin Statistics
# ==============================================================================

from __future__ import annotations

from decimal import Decimal
from typing import Dict, List

from pydantic import Field

from storefront.schemas.base import BaseSchema
from storefront.schemas.order import OrderResponse
from storefront.schemas.user import UserResponse


class StockStats(BaseSchema):
    total_units: int = 0
    low_stock: int = 0
    out_of_stock: int = 0


class DashboardSummary(BaseSchema):
    total_sales: Decimal = Decimal("0.00")
    paid_orders: int = 0
    total_orders: int = 0
    total_products: int = 0
    total_customers: int = 0
    stock: StockStats = Field(default_factory=StockStats)
    today_sales: Decimal = Decimal("0.00")
    month_sales: Decimal = Decimal("0.00")
    recent_status_counts: Dict[str, int] = Field(
        default_factory=dict,
        description="Order count per status over the last 7 days",
    )
    new_customers: List[UserResponse] = Field(default_factory=list)


class SalesPoint(BaseSchema):
    period: str = Field(..., description="Bucket label (YYYY-MM-DD, YYYY-Www or YYYY-MM)")
    sales: Decimal = Decimal("0.00")
    orders: int = 0


class SalesSeries(BaseSchema):
    granularity: str
    points: List[SalesPoint] = Field(default_factory=list)


class TopProduct(BaseSchema):
    id: str
    name: str
    total_sales: int
    price: Decimal
    stock: int
    revenue: Decimal


class RecentOrders(BaseSchema):
    orders: List[OrderResponse] = Field(default_factory=list)
