# ==============================================================================
# USERS ENDPOINTS - User Profile Routes
# ==============================================================================
# Own profile management plus user administration
# ==============================================================================

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Query, Response

from storefront.api.dependencies import (
    AdminUser,
    CurrentUser,
    PaginationDep,
    UserServiceDep,
)
from storefront.api.v1.auth import set_auth_cookie
from storefront.core.constants import SuccessMessages
from storefront.core.settings import settings
from storefront.schemas.base import APIResponse, PaginatedResponse
from storefront.schemas.user import (
    AdminUserUpdate,
    AuthResponse,
    PasswordChange,
    UserResponse,
    UserUpdate,
)

router = APIRouter(prefix="/users", tags=["Users"])


# ==============================================================================
# OWN PROFILE
# ==============================================================================

@router.get(
    "/me",
    response_model=APIResponse[UserResponse],
    summary="Get current user",
    description="Get the profile of the currently authenticated user.",
)
async def get_current_user(user: CurrentUser) -> APIResponse[UserResponse]:
    """Get current user profile."""
    return APIResponse.ok(data=UserResponse.model_validate(user))


@router.patch(
    "/me",
    response_model=APIResponse[UserResponse],
    summary="Update current user",
    description="Update the profile of the currently authenticated user.",
)
async def update_current_user(
    user: CurrentUser,
    schema: UserUpdate,
    service: UserServiceDep,
) -> APIResponse[UserResponse]:
    """Update current user profile."""
    updated = await service.update_profile(user["id"], schema)
    return APIResponse.ok(data=updated, message="Profile updated successfully")


@router.post(
    "/me/password",
    response_model=APIResponse[AuthResponse],
    summary="Change password",
    description="Change the password and receive a fresh token pair; older tokens stop working.",
)
async def change_password(
    user: CurrentUser,
    schema: PasswordChange,
    response: Response,
    service: UserServiceDep,
) -> APIResponse[AuthResponse]:
    result = await service.update_password(user["id"], schema)
    set_auth_cookie(response, result.access_token)
    return APIResponse.ok(data=result, message=SuccessMessages.PASSWORD_CHANGED)


@router.delete(
    "/me",
    response_model=APIResponse[dict],
    summary="Delete own account",
    description="Deactivate the current account and clear the auth cookie.",
)
async def delete_current_user(
    user: CurrentUser,
    response: Response,
    service: UserServiceDep,
) -> APIResponse[dict]:
    await service.deactivate(user["id"])
    response.delete_cookie(settings.AUTH_COOKIE_NAME)
    return APIResponse.ok(message="Account deactivated")


# ==============================================================================
# ADMINISTRATION
# ==============================================================================

@router.get(
    "",
    response_model=APIResponse[PaginatedResponse[UserResponse]],
    summary="List users",
)
async def list_users(
    admin: AdminUser,
    pagination: PaginationDep,
    service: UserServiceDep,
    role: Optional[str] = Query(None, pattern="^(user|seller|admin)$"),
    is_active: Optional[bool] = Query(None),
    search: Optional[str] = Query(None, max_length=100, description="Name or email substring"),
) -> APIResponse[PaginatedResponse[UserResponse]]:
    result = await service.list_users(
        pagination.page,
        pagination.page_size,
        role=role,
        is_active=is_active,
        search=search,
    )
    return APIResponse.ok(data=result)


@router.get(
    "/{user_id}",
    response_model=APIResponse[UserResponse],
    summary="Get user by ID",
)
async def get_user(
    user_id: str,
    admin: AdminUser,
    service: UserServiceDep,
) -> APIResponse[UserResponse]:
    return APIResponse.ok(data=await service.get_by_id(user_id))


@router.patch(
    "/{user_id}",
    response_model=APIResponse[UserResponse],
    summary="Update user",
    description="Change a user's role or active flag.",
)
async def update_user(
    user_id: str,
    schema: AdminUserUpdate,
    admin: AdminUser,
    service: UserServiceDep,
) -> APIResponse[UserResponse]:
    updated = await service.admin_update(admin["id"], user_id, schema)
    return APIResponse.ok(data=updated, message=SuccessMessages.UPDATED)


@router.delete(
    "/{user_id}",
    response_model=APIResponse[dict],
    summary="Delete user",
)
async def delete_user(
    user_id: str,
    admin: AdminUser,
    service: UserServiceDep,
) -> APIResponse[dict]:
    await service.admin_delete(admin["id"], user_id)
    return APIResponse.ok(message=SuccessMessages.DELETED)
