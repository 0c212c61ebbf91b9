# ==============================================================================
# DASHBOARD ENDPOINTS - Admin Statistics Routes
# ==============================================================================

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Query

from storefront.api.dependencies import DashboardServiceDep, require_roles
from storefront.core.constants import UserRoles
from storefront.schemas.base import APIResponse
from storefront.schemas.dashboard import (
    DashboardSummary,
    RecentOrders,
    SalesSeries,
    TopProduct,
)

router = APIRouter(
    prefix="/dashboard",
    tags=["Dashboard"],
    dependencies=[Depends(require_roles(UserRoles.ADMIN))],
)


@router.get(
    "/summary",
    response_model=APIResponse[DashboardSummary],
    summary="Store summary",
    description="Sales totals, catalog and stock counts, recent order status mix and newest customers.",
)
async def summary(service: DashboardServiceDep) -> APIResponse[DashboardSummary]:
    return APIResponse.ok(data=await service.summary())


@router.get(
    "/sales",
    response_model=APIResponse[SalesSeries],
    summary="Sales series",
    description="Paid order totals per day (30), week (12) or month (12).",
)
async def sales(
    service: DashboardServiceDep,
    granularity: str = Query("daily", description="daily, weekly or monthly"),
) -> APIResponse[SalesSeries]:
    return APIResponse.ok(data=await service.sales_series(granularity))


@router.get(
    "/top-products",
    response_model=APIResponse[List[TopProduct]],
    summary="Best sellers",
)
async def top_products(
    service: DashboardServiceDep,
    limit: int = Query(5, ge=1, le=50),
) -> APIResponse[List[TopProduct]]:
    return APIResponse.ok(data=await service.top_products(limit))


@router.get(
    "/recent-orders",
    response_model=APIResponse[RecentOrders],
    summary="Recent orders",
)
async def recent_orders(
    service: DashboardServiceDep,
    limit: int = Query(10, ge=1, le=50),
) -> APIResponse[RecentOrders]:
    return APIResponse.ok(data=await service.recent_orders(limit))
