# ==============================================================================
# DASHBOARD SERVICE - Admin Statistics
# ==============================================================================
# Totals and counts are pushed down to the backend; only the bucketed
# sales series is assembled in Python, over a date-bounded query
# ==============================================================================

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Dict, List

from storefront.core.constants import DatabaseConstants, OrderConstants, UserRoles
from storefront.core.exceptions import BadRequestError
from storefront.core.settings import settings
from storefront.database.adapters.base_adapter import BaseDatabaseAdapter
from storefront.database.repositories import (
    OrderRepository,
    ProductRepository,
    Record,
    UserRepository,
)
from storefront.schemas.dashboard import (
    DashboardSummary,
    RecentOrders,
    SalesPoint,
    SalesSeries,
    StockStats,
    TopProduct,
)
from storefront.schemas.order import OrderResponse
from storefront.schemas.user import UserResponse
from storefront.utils.helpers import as_utc, quantize_money, to_decimal, utc_now

logger = logging.getLogger(__name__)

GRANULARITIES = ("daily", "weekly", "monthly")

ORDER_STATUSES = tuple(sorted(set(OrderConstants.TRANSITIONS) | OrderConstants.TERMINAL_STATUSES))


def _sale_time(order: Record) -> datetime:
    return as_utc(order.get("paid_at") or order["created_at"])


def _paid_since(moment: datetime) -> Dict[str, Any]:
    return {"is_paid": True, "paid_at": {"$gte": moment}}


def _start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def _month_start(moment: datetime, months_back: int = 0) -> datetime:
    index = moment.year * 12 + (moment.month - 1) - months_back
    return _start_of_day(moment).replace(year=index // 12, month=index % 12 + 1, day=1)


def _bucket_label(moment: datetime, granularity: str) -> str:
    if granularity == "daily":
        return moment.strftime("%Y-%m-%d")
    if granularity == "weekly":
        year, week, _ = moment.isocalendar()
        return f"{year}-W{week:02d}"
    return moment.strftime("%Y-%m")


class DashboardService:
    """Read-only statistics for administrators."""

    def __init__(self, adapter: BaseDatabaseAdapter) -> None:
        self._orders = OrderRepository(adapter)
        self._products = ProductRepository(adapter)
        self._users = UserRepository(adapter)

    # ==========================================================================
    # SUMMARY
    # ==========================================================================

    async def summary(self) -> DashboardSummary:
        """
        Headline numbers for the admin dashboard.

        Sales only count paid orders; a sale is dated by ``paid_at``.
        """
        now = utc_now()
        week_ago = now - timedelta(days=7)
        threshold = settings.LOW_STOCK_THRESHOLD

        paid_orders = await self._orders.count({"is_paid": True})
        total_products = await self._products.count()
        logger.debug(f"Dashboard summary over {paid_orders} paid orders and {total_products} products")

        stock = StockStats(
            total_units=int(await self._products.sum("stock")),
            low_stock=await self._products.count({"stock": {"$gt": 0, "$lt": threshold}}),
            out_of_stock=await self._products.count({"stock": 0}),
        )

        recent_status_counts: Dict[str, int] = {}
        for status in ORDER_STATUSES:
            n = await self._orders.count({"status": status, "created_at": {"$gte": week_ago}})
            if n:
                recent_status_counts[status] = n

        new_customers = await self._users.get_all(
            limit=5,
            filters={"role": UserRoles.USER},
            sort_by="created_at",
            sort_order="desc",
        )

        return DashboardSummary(
            total_sales=quantize_money(await self._orders.sum("total_price", {"is_paid": True})),
            paid_orders=paid_orders,
            total_orders=await self._orders.count(),
            total_products=total_products,
            total_customers=await self._users.count({"role": UserRoles.USER}),
            stock=stock,
            today_sales=quantize_money(
                await self._orders.sum("total_price", _paid_since(_start_of_day(now)))
            ),
            month_sales=quantize_money(
                await self._orders.sum("total_price", _paid_since(_month_start(now)))
            ),
            recent_status_counts=recent_status_counts,
            new_customers=[UserResponse.model_validate(u) for u in new_customers],
        )

    # ==========================================================================
    # SERIES & RANKINGS
    # ==========================================================================

    async def sales_series(self, granularity: str = "daily") -> SalesSeries:
        """
        Paid sales bucketed by day (30), ISO week (12) or month (12).

        Empty buckets are included with zero sales. Only orders paid
        inside the window are read, newest first.

        Raises:
            BadRequestError: If granularity is unknown
        """
        if granularity not in GRANULARITIES:
            raise BadRequestError(
                message=f"Unknown granularity '{granularity}'",
                details={"allowed": list(GRANULARITIES)},
            )

        now = utc_now()
        if granularity == "daily":
            starts = [_start_of_day(now) - timedelta(days=n) for n in range(29, -1, -1)]
        elif granularity == "weekly":
            monday = _start_of_day(now) - timedelta(days=now.weekday())
            starts = [monday - timedelta(weeks=n) for n in range(11, -1, -1)]
        else:
            starts = [_month_start(now, n) for n in range(11, -1, -1)]

        buckets: Dict[str, Dict[str, Any]] = {
            _bucket_label(start, granularity): {"sales": Decimal("0"), "orders": 0}
            for start in starts
        }

        paid = await self._orders.get_all(
            limit=DatabaseConstants.MAX_SCAN_SIZE,
            filters=_paid_since(starts[0]),
            sort_by="paid_at",
            sort_order="desc",
        )
        if len(paid) == DatabaseConstants.MAX_SCAN_SIZE:
            logger.warning(
                f"Sales series ({granularity}) hit the scan limit of "
                f"{DatabaseConstants.MAX_SCAN_SIZE} orders; oldest buckets are partial"
            )

        for order in paid:
            bucket = buckets.get(_bucket_label(_sale_time(order), granularity))
            if bucket is not None:
                bucket["sales"] += to_decimal(order["total_price"])
                bucket["orders"] += 1

        return SalesSeries(
            granularity=granularity,
            points=[
                SalesPoint(period=label, sales=quantize_money(b["sales"]), orders=b["orders"])
                for label, b in buckets.items()
            ],
        )

    async def top_products(self, limit: int = 5) -> List[TopProduct]:
        """Best sellers by units sold; revenue is units times the list price."""
        products = await self._products.get_all(
            limit=limit,
            filters={"total_sales": {"$gt": 0}},
            sort_by="total_sales",
            sort_order="desc",
        )
        return [
            TopProduct(
                id=p["id"],
                name=p["name"],
                total_sales=p["total_sales"],
                price=to_decimal(p["price"]),
                stock=p["stock"],
                revenue=quantize_money(to_decimal(p["price"]) * p["total_sales"]),
            )
            for p in products
        ]

    async def recent_orders(self, limit: int = 10) -> RecentOrders:
        orders = await self._orders.get_all(limit=limit, sort_by="created_at", sort_order="desc")
        return RecentOrders(orders=[OrderResponse.model_validate(o) for o in orders])
