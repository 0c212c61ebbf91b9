# ==============================================================================
# API DEPENDENCIES - Dependency Injection
# ==============================================================================
# FastAPI dependencies for authentication, roles, pagination and services
# ==============================================================================

from __future__ import annotations

import logging
from typing import Annotated, Any, Callable, Dict, NamedTuple, Optional

from fastapi import Depends, Query, Request
from fastapi.security import OAuth2PasswordBearer

from storefront.core.constants import APIConstants, ErrorMessages, UserRoles
from storefront.core.exceptions import AuthenticationError, AuthorizationError
from storefront.core.settings import settings
from storefront.database.adapters.base_adapter import BaseDatabaseAdapter
from storefront.database.factory import DatabaseFactory
from storefront.services import (
    CartService,
    CategoryService,
    DashboardService,
    LogService,
    OrderService,
    ProductService,
    ReviewService,
    UploadService,
    UserService,
    WishlistService,
)

logger = logging.getLogger(__name__)

# OAuth2 scheme for JWT tokens; the auth cookie is the fallback
oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_PREFIX}/auth/token",
    auto_error=False,
)


# ==============================================================================
# DATABASE DEPENDENCIES
# ==============================================================================

async def get_adapter() -> BaseDatabaseAdapter:
    """
    Get database adapter dependency.

    Returns the adapter bound at startup.
    """
    return DatabaseFactory.get_adapter()


# Annotated type for database adapter
DatabaseDep = Annotated[BaseDatabaseAdapter, Depends(get_adapter)]


# ==============================================================================
# SERVICE DEPENDENCIES
# ==============================================================================

async def get_user_service(adapter: DatabaseDep) -> UserService:
    """Get user service instance."""
    return UserService(adapter)


async def get_product_service(adapter: DatabaseDep) -> ProductService:
    return ProductService(adapter)


async def get_category_service(adapter: DatabaseDep) -> CategoryService:
    return CategoryService(adapter)


async def get_cart_service(adapter: DatabaseDep) -> CartService:
    return CartService(adapter)


async def get_wishlist_service(adapter: DatabaseDep) -> WishlistService:
    return WishlistService(adapter)


async def get_order_service(adapter: DatabaseDep) -> OrderService:
    """Get order service instance with the configured shipping policy."""
    return OrderService(adapter)


async def get_review_service(adapter: DatabaseDep) -> ReviewService:
    return ReviewService(adapter)


async def get_dashboard_service(adapter: DatabaseDep) -> DashboardService:
    return DashboardService(adapter)


async def get_log_service(adapter: DatabaseDep) -> LogService:
    return LogService(adapter)


async def get_upload_service() -> UploadService:
    return UploadService()


# Annotated service types
UserServiceDep = Annotated[UserService, Depends(get_user_service)]
ProductServiceDep = Annotated[ProductService, Depends(get_product_service)]
CategoryServiceDep = Annotated[CategoryService, Depends(get_category_service)]
CartServiceDep = Annotated[CartService, Depends(get_cart_service)]
WishlistServiceDep = Annotated[WishlistService, Depends(get_wishlist_service)]
OrderServiceDep = Annotated[OrderService, Depends(get_order_service)]
ReviewServiceDep = Annotated[ReviewService, Depends(get_review_service)]
DashboardServiceDep = Annotated[DashboardService, Depends(get_dashboard_service)]
LogServiceDep = Annotated[LogService, Depends(get_log_service)]
UploadServiceDep = Annotated[UploadService, Depends(get_upload_service)]


# ==============================================================================
# AUTHENTICATION DEPENDENCIES
# ==============================================================================

def _extract_token(request: Request, bearer: Optional[str]) -> Optional[str]:
    return bearer or request.cookies.get(settings.AUTH_COOKIE_NAME)


async def get_current_user(
    request: Request,
    token: Annotated[Optional[str], Depends(oauth2_scheme)],
    users: UserServiceDep,
) -> Dict[str, Any]:
    """
    Resolve the authenticated user.

    The token comes from ``Authorization: Bearer`` or the auth cookie.
    The user is reloaded on every request.

    Raises:
        AuthenticationError: If no token, bad token, or unusable account
    """
    token = _extract_token(request, token)
    if not token:
        raise AuthenticationError(message=ErrorMessages.UNAUTHORIZED)

    user = await users.resolve_access_token(token)
    request.state.user_id = user["id"]
    return user


async def get_optional_user(
    request: Request,
    token: Annotated[Optional[str], Depends(oauth2_scheme)],
    users: UserServiceDep,
) -> Optional[Dict[str, Any]]:
    """
    Resolve the user if a usable token is present, otherwise None.

    Useful for endpoints that work for both authenticated
    and anonymous callers.
    """
    token = _extract_token(request, token)
    if not token:
        return None
    try:
        return await users.resolve_access_token(token)
    except AuthenticationError:
        return None


# Annotated types
CurrentUser = Annotated[Dict[str, Any], Depends(get_current_user)]
OptionalUser = Annotated[Optional[Dict[str, Any]], Depends(get_optional_user)]


def require_roles(*roles: str) -> Callable:
    """
    Build a dependency admitting only users whose role is in ``roles``.

    Example:
        >>> @router.get("/stats", dependencies=[Depends(require_roles("admin"))])
    """
    allowed = frozenset(roles)

    async def role_checker(user: CurrentUser) -> Dict[str, Any]:
        if user["role"] not in allowed:
            logger.warning(
                f"User {user['id']} with role '{user['role']}' denied; requires {sorted(allowed)}"
            )
            raise AuthorizationError(
                message=ErrorMessages.PERMISSION_DENIED,
                required_permission=",".join(sorted(allowed)),
            )
        return user

    return role_checker


AdminUser = Annotated[Dict[str, Any], Depends(require_roles(UserRoles.ADMIN))]


# ==============================================================================
# PAGINATION
# ==============================================================================

class Pagination(NamedTuple):
    page: int
    page_size: int


async def get_pagination(
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    page_size: int = Query(
        APIConstants.DEFAULT_PAGE_SIZE,
        ge=1,
        le=APIConstants.MAX_PAGE_SIZE,
        description="Items per page",
    ),
) -> Pagination:
    return Pagination(page=page, page_size=page_size)


PaginationDep = Annotated[Pagination, Depends(get_pagination)]
