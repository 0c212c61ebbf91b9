# ==============================================================================
# DOMAIN MODELS PACKAGE INITIALIZATION
# ==============================================================================

"""
Domain Models
=============

SQLAlchemy ORM models for the relational backend. The document backend
stores the same fields under the same collection names.
"""

from storefront.domain_models.base import SQLBase, TimestampMixin, utc_now
from storefront.domain_models.user import User
from storefront.domain_models.product import Product
from storefront.domain_models.category import Category
from storefront.domain_models.cart import Cart, Wishlist
from storefront.domain_models.order import Order
from storefront.domain_models.review import Review
from storefront.domain_models.log import LogEntry

# Collection name -> ORM model, registered with the SQLite adapter
MODEL_REGISTRY = {
    User.__tablename__: User,
    Product.__tablename__: Product,
    Category.__tablename__: Category,
    Cart.__tablename__: Cart,
    Wishlist.__tablename__: Wishlist,
    Order.__tablename__: Order,
    Review.__tablename__: Review,
    LogEntry.__tablename__: LogEntry,
}

__all__ = [
    "SQLBase",
    "TimestampMixin",
    "utc_now",
    "User",
    "Product",
    "Category",
    "Cart",
    "Wishlist",
    "Order",
    "Review",
    "LogEntry",
    "MODEL_REGISTRY",
]
