# ==============================================================================
# REPOSITORIES PACKAGE
# ==============================================================================

"""
Repositories
============

One repository per aggregate, all built on BaseRepository:
users, products, categories, carts, wishlists, orders, reviews, logs.
"""

from storefront.database.repositories.base_repository import BaseRepository, Record
from storefront.database.repositories.user_repository import UserRepository
from storefront.database.repositories.product_repository import ProductRepository
from storefront.database.repositories.category_repository import CategoryRepository
from storefront.database.repositories.cart_repository import CartRepository, WishlistRepository
from storefront.database.repositories.order_repository import OrderRepository
from storefront.database.repositories.review_repository import ReviewRepository
from storefront.database.repositories.log_repository import LogRepository

__all__ = [
    "BaseRepository",
    "Record",
    "UserRepository",
    "ProductRepository",
    "CategoryRepository",
    "CartRepository",
    "WishlistRepository",
    "OrderRepository",
    "ReviewRepository",
    "LogRepository",
]
