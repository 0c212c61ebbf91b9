# ==============================================================================
# SERVICES PACKAGE INITIALIZATION
# ==============================================================================

"""
Service Layer
=============

Business logic for every storefront domain:
- UserService: Authentication and user management
- ProductService / CategoryService: Catalog
- CartService / WishlistService: Per-user collections
- OrderService: Order placement and lifecycle (with ShippingPolicy)
- ReviewService: Moderated reviews and product ratings
- DashboardService: Admin statistics
- LogService: Persisted log entries
- UploadService: Image storage
"""

from storefront.services.base_service import BaseService
from storefront.services.cart_service import CartService, WishlistService
from storefront.services.category_service import CategoryService
from storefront.services.dashboard_service import DashboardService
from storefront.services.log_service import LogService
from storefront.services.order_service import OrderService
from storefront.services.product_service import ProductService
from storefront.services.review_service import ReviewService
from storefront.services.shipping import FlatRateShippingPolicy, ShippingPolicy
from storefront.services.upload_service import UploadService
from storefront.services.user_service import UserService

__all__ = [
    "BaseService",
    "CartService",
    "CategoryService",
    "DashboardService",
    "FlatRateShippingPolicy",
    "LogService",
    "OrderService",
    "ProductService",
    "ReviewService",
    "ShippingPolicy",
    "UploadService",
    "UserService",
    "WishlistService",
]
