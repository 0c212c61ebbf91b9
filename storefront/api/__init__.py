# ==============================================================================
# API PACKAGE INITIALIZATION
# ==============================================================================

"""
API Module
==========

FastAPI routers and endpoint definitions:
- Dependencies: Authentication, roles, pagination, services
- Routers: Auth, Users, Products, Categories, Cart, Wishlist, Orders,
  Reviews, Dashboard, Logs, Uploads
"""

from storefront.api.router import api_router

__all__ = ["api_router"]
