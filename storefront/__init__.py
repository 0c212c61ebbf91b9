# ==============================================================================
# STOREFRONT PACKAGE INITIALIZATION
# ==============================================================================
# E-commerce backend: catalog, cart, orders, reviews, admin dashboard
# Storage: SQLite (SQLAlchemy async) or MongoDB (Motor), bound at startup
# ==============================================================================

"""
Storefront Backend
==================

FastAPI backend for an online store.

Features:
---------
- JWT authentication with role-based authorization
- Product catalog and category tree
- Per-user cart and wishlist
- Order placement with guarded stock reservation
- Moderated product reviews with aggregate ratings
- Admin dashboard, persisted logs and image uploads

Usage:
------
    uvicorn storefront.main:app --reload
"""

__version__ = "1.0.0"
__all__ = ["__version__"]
