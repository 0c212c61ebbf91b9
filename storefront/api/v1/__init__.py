# ==============================================================================
# API V1 ENDPOINTS PACKAGE
# ==============================================================================

"""
API V1 Endpoints
================

Version 1 API endpoint implementations.
"""

from storefront.api.v1.auth import router as auth_router
from storefront.api.v1.cart import router as cart_router
from storefront.api.v1.cart import wishlist_router
from storefront.api.v1.categories import router as categories_router
from storefront.api.v1.dashboard import router as dashboard_router
from storefront.api.v1.logs import router as logs_router
from storefront.api.v1.orders import router as orders_router
from storefront.api.v1.products import router as products_router
from storefront.api.v1.reviews import router as reviews_router
from storefront.api.v1.uploads import router as uploads_router
from storefront.api.v1.users import router as users_router

__all__ = [
    "auth_router",
    "cart_router",
    "categories_router",
    "dashboard_router",
    "logs_router",
    "orders_router",
    "products_router",
    "reviews_router",
    "uploads_router",
    "users_router",
    "wishlist_router",
]
