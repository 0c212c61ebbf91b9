# ==============================================================================
# APPLICATION CONSTANTS - Centralized Configuration Values
# ==============================================================================
# Immutable constants used throughout the application
# Organized by category for easy maintenance
# ==============================================================================

from __future__ import annotations

from typing import Final, FrozenSet, List, Tuple


# ==============================================================================
# API CONSTANTS
# ==============================================================================

class APIConstants:
    """API-related constants."""

    # Pagination defaults
    DEFAULT_PAGE_SIZE: Final[int] = 10
    MAX_PAGE_SIZE: Final[int] = 100

    # Response headers
    RATE_LIMIT_HEADER: Final[str] = "X-RateLimit-Limit"
    RATE_LIMIT_REMAINING_HEADER: Final[str] = "X-RateLimit-Remaining"
    RATE_LIMIT_RESET_HEADER: Final[str] = "X-RateLimit-Reset"
    REQUEST_ID_HEADER: Final[str] = "X-Request-ID"
    RESPONSE_TIME_HEADER: Final[str] = "X-Response-Time"


# ==============================================================================
# DATABASE CONSTANTS
# ==============================================================================

class DatabaseConstants:
    """Database-related constants."""

    # Collection/Table names
    USERS_COLLECTION: Final[str] = "users"
    PRODUCTS_COLLECTION: Final[str] = "products"
    CATEGORIES_COLLECTION: Final[str] = "categories"
    CARTS_COLLECTION: Final[str] = "carts"
    WISHLISTS_COLLECTION: Final[str] = "wishlists"
    ORDERS_COLLECTION: Final[str] = "orders"
    REVIEWS_COLLECTION: Final[str] = "reviews"
    LOGS_COLLECTION: Final[str] = "logs"

    # Unique indexes ensured by the document backend
    UNIQUE_INDEXES: Final[List[Tuple[str, Tuple[str, ...]]]] = [
        ("users", ("email",)),
        ("categories", ("name",)),
        ("categories", ("slug",)),
        ("carts", ("user_id",)),
        ("wishlists", ("user_id",)),
        ("orders", ("order_number",)),
        ("reviews", ("user_id", "product_id")),
    ]

    # Query limits
    MAX_SCAN_SIZE: Final[int] = 10000


# ==============================================================================
# SECURITY CONSTANTS
# ==============================================================================

class SecurityConstants:
    """Security-related constants."""

    # Password requirements
    MIN_PASSWORD_LENGTH: Final[int] = 8

    # Token settings
    TOKEN_TYPE_BEARER: Final[str] = "bearer"
    RESET_TOKEN_BYTES: Final[int] = 32


class UserRoles:
    """User role names."""

    USER: Final[str] = "user"
    SELLER: Final[str] = "seller"
    ADMIN: Final[str] = "admin"

    @classmethod
    def all_roles(cls) -> list[str]:
        """Get all valid roles."""
        return [cls.USER, cls.SELLER, cls.ADMIN]


# ==============================================================================
# CATALOG CONSTANTS
# ==============================================================================

class ProductConstants:
    """Catalog constants."""

    STATUS_ACTIVE: Final[str] = "active"

    # Public sort keys -> (field, direction)
    SORT_OPTIONS: Final[dict] = {
        "newest": ("created_at", "desc"),
        "oldest": ("created_at", "asc"),
        "price_asc": ("price", "asc"),
        "price_desc": ("price", "desc"),
        "name_asc": ("name", "asc"),
        "name_desc": ("name", "desc"),
        "popular": ("total_sales", "desc"),
        "rating": ("rating_average", "desc"),
    }


# ==============================================================================
# ORDER CONSTANTS
# ==============================================================================

class OrderConstants:
    """E-commerce order constants."""

    # Order number format: ORD-<epoch ms>-<user suffix>
    NUMBER_PREFIX: Final[str] = "ORD"
    USER_SUFFIX_LENGTH: Final[int] = 4

    # Statuses from which cancel/refund restores stock
    RESTOCKABLE_STATUSES: Final[FrozenSet[str]] = frozenset({"pending", "processing"})

    # No status write leaves these, except rewriting the same status
    TERMINAL_STATUSES: Final[FrozenSet[str]] = frozenset({"delivered", "cancelled", "refunded"})

    # Allowed forward moves per non-terminal status
    TRANSITIONS: Final[dict] = {
        "pending": frozenset({"processing", "shipped", "delivered", "cancelled", "refunded"}),
        "processing": frozenset({"shipped", "delivered", "cancelled", "refunded"}),
        "shipped": frozenset({"delivered", "refunded"}),
    }


# ==============================================================================
# REVIEW CONSTANTS
# ==============================================================================

class ReviewConstants:
    """Review sort keys and rating bounds."""

    MIN_RATING: Final[int] = 1
    MAX_RATING: Final[int] = 5

    SORT_OPTIONS: Final[dict] = {
        "newest": ("created_at", "desc"),
        "oldest": ("created_at", "asc"),
        "highest": ("rating", "desc"),
        "lowest": ("rating", "asc"),
        "helpful": ("upvotes", "desc"),
    }


# ==============================================================================
# ERROR MESSAGES
# ==============================================================================

class ErrorMessages:
    """Standardized error messages."""

    # Authentication
    INVALID_CREDENTIALS: Final[str] = "Invalid email or password"
    TOKEN_EXPIRED: Final[str] = "Authentication token has expired"
    UNAUTHORIZED: Final[str] = "Authentication required"
    ACCOUNT_DISABLED: Final[str] = "Account is disabled"
    PASSWORD_CHANGED: Final[str] = "Password was changed recently, please log in again"

    # Authorization
    PERMISSION_DENIED: Final[str] = "You don't have permission to perform this action"

    # Resources
    USER_NOT_FOUND: Final[str] = "User not found"
    PRODUCT_NOT_FOUND: Final[str] = "Product not found"
    CATEGORY_NOT_FOUND: Final[str] = "Category not found"
    ORDER_NOT_FOUND: Final[str] = "Order not found"
    REVIEW_NOT_FOUND: Final[str] = "Review not found"
    CART_ITEM_NOT_FOUND: Final[str] = "Cart item not found"
    IMAGE_NOT_FOUND: Final[str] = "Image not found"

    # Business rules
    INSUFFICIENT_STOCK: Final[str] = "Insufficient stock available"
    EMPTY_ORDER: Final[str] = "Order must contain at least one item"


# ==============================================================================
# SUCCESS MESSAGES
# ==============================================================================

class SuccessMessages:
    """Standardized success messages."""

    # Generic
    CREATED: Final[str] = "Resource created successfully"
    UPDATED: Final[str] = "Resource updated successfully"
    DELETED: Final[str] = "Resource deleted successfully"

    # Authentication
    LOGIN_SUCCESS: Final[str] = "Login successful"
    LOGOUT_SUCCESS: Final[str] = "Logout successful"
    PASSWORD_CHANGED: Final[str] = "Password changed successfully"
    USER_REGISTERED: Final[str] = "User registered successfully"
    RESET_REQUESTED: Final[str] = "If the email exists, a reset link has been sent"

    # Orders
    ORDER_PLACED: Final[str] = "Order placed successfully"
    ORDER_CANCELLED: Final[str] = "Order cancelled successfully"
    ORDER_STATUS_UPDATED: Final[str] = "Order status updated"
