# ==============================================================================
# AUTH ENDPOINTS - Authentication Routes
# ==============================================================================
# Register, login, token refresh, logout and password reset
# ==============================================================================

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from fastapi.security import OAuth2PasswordRequestForm

from storefront.api.dependencies import CurrentUser, UserServiceDep
from storefront.core.constants import SuccessMessages
from storefront.core.settings import settings
from storefront.schemas.base import APIResponse
from storefront.schemas.user import (
    AuthResponse,
    PasswordResetConfirm,
    PasswordResetIssued,
    PasswordResetRequest,
    RefreshRequest,
    TokenResponse,
    UserCreate,
    UserLogin,
    UserResponse,
)

router = APIRouter(prefix="/auth", tags=["Authentication"])


def set_auth_cookie(response: Response, access_token: str) -> None:
    """Mirror the access token into the httpOnly auth cookie."""
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=access_token,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        secure=settings.AUTH_COOKIE_SECURE,
        samesite="lax",
    )


@router.post(
    "/register",
    response_model=APIResponse[AuthResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Register new user",
    description="Create a new user account and sign it in.",
)
async def register(
    schema: UserCreate,
    response: Response,
    service: UserServiceDep,
) -> APIResponse[AuthResponse]:
    """Register a new user."""
    result = await service.register(schema)
    set_auth_cookie(response, result.access_token)
    return APIResponse.ok(data=result, message=SuccessMessages.USER_REGISTERED)


@router.post(
    "/login",
    response_model=APIResponse[AuthResponse],
    summary="User login",
    description="Authenticate with email and password to receive JWT tokens.",
)
async def login(
    credentials: UserLogin,
    response: Response,
    service: UserServiceDep,
) -> APIResponse[AuthResponse]:
    """Authenticate user and return tokens; also sets the auth cookie."""
    result = await service.authenticate(
        email=credentials.email,
        password=credentials.password,
    )
    set_auth_cookie(response, result.access_token)
    return APIResponse.ok(data=result, message=SuccessMessages.LOGIN_SUCCESS)


@router.post(
    "/token",
    response_model=TokenResponse,
    summary="OAuth2 token",
    description="Form-encoded login used by the interactive API docs.",
)
async def token(
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
    service: UserServiceDep,
) -> TokenResponse:
    # OAuth2PasswordRequestForm uses 'username' field for email
    result = await service.authenticate(
        email=form_data.username,
        password=form_data.password,
    )
    return TokenResponse(**result.model_dump(include={"access_token", "refresh_token", "token_type", "expires_in"}))


@router.post(
    "/refresh",
    response_model=APIResponse[AuthResponse],
    summary="Refresh tokens",
)
async def refresh(
    schema: RefreshRequest,
    response: Response,
    service: UserServiceDep,
) -> APIResponse[AuthResponse]:
    """Exchange a refresh token for a new token pair."""
    result = await service.refresh(schema.refresh_token)
    set_auth_cookie(response, result.access_token)
    return APIResponse.ok(data=result)


@router.post(
    "/logout",
    response_model=APIResponse[dict],
    summary="Logout",
)
async def logout(response: Response) -> APIResponse[dict]:
    """Clear the auth cookie."""
    response.delete_cookie(settings.AUTH_COOKIE_NAME)
    return APIResponse.ok(message=SuccessMessages.LOGOUT_SUCCESS)


@router.get(
    "/me",
    response_model=APIResponse[UserResponse],
    summary="Get current user",
)
async def me(user: CurrentUser) -> APIResponse[UserResponse]:
    return APIResponse.ok(data=UserResponse.model_validate(user))


@router.post(
    "/forgot-password",
    response_model=APIResponse[PasswordResetIssued],
    summary="Request password reset",
    description="Issue a reset token. The token is only returned in debug mode.",
)
async def forgot_password(
    schema: PasswordResetRequest,
    service: UserServiceDep,
) -> APIResponse[PasswordResetIssued]:
    issued = await service.forgot_password(schema.email)

    data = PasswordResetIssued()
    if issued is not None and settings.DEBUG:
        data = PasswordResetIssued(reset_token=issued[0], expires_at=issued[1])
    return APIResponse.ok(data=data, message=SuccessMessages.RESET_REQUESTED)


@router.post(
    "/reset-password",
    response_model=APIResponse[AuthResponse],
    summary="Reset password",
)
async def reset_password(
    schema: PasswordResetConfirm,
    response: Response,
    service: UserServiceDep,
) -> APIResponse[AuthResponse]:
    """Set a new password with a reset token and sign in."""
    result = await service.reset_password(schema.token, schema.new_password)
    set_auth_cookie(response, result.access_token)
    return APIResponse.ok(data=result, message=SuccessMessages.PASSWORD_CHANGED)
