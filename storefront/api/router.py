# ==============================================================================
# MAIN API ROUTER - Route Aggregation
# ==============================================================================
# Combines all API routers under the configured prefix
# ==============================================================================

from __future__ import annotations

from fastapi import APIRouter

from storefront.api.v1 import (
    auth_router,
    cart_router,
    categories_router,
    dashboard_router,
    logs_router,
    orders_router,
    products_router,
    reviews_router,
    uploads_router,
    users_router,
    wishlist_router,
)
from storefront.core.settings import settings

# Create main API router
api_router = APIRouter()

for v1_router in (
    auth_router,
    users_router,
    products_router,
    categories_router,
    cart_router,
    wishlist_router,
    orders_router,
    reviews_router,
    dashboard_router,
    logs_router,
    uploads_router,
):
    api_router.include_router(v1_router, prefix=settings.API_PREFIX)
