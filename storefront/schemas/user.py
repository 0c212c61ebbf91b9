# ==============================================================================
# USER SCHEMAS - Authentication & Profile
# ==============================================================================
# Request/Response schemas for authentication and user management
# ==============================================================================

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field, field_validator

from storefront.core.constants import SecurityConstants, UserRoles
from storefront.schemas.base import BaseSchema, TimestampSchema

ROLE_PATTERN = "^(" + "|".join(UserRoles.all_roles()) + ")$"


def _check_password_strength(v: str) -> str:
    if len(v) < SecurityConstants.MIN_PASSWORD_LENGTH:
        raise ValueError("Password must be at least 8 characters")
    if not any(c.isupper() for c in v):
        raise ValueError("Password must contain at least one uppercase letter")
    if not any(c.islower() for c in v):
        raise ValueError("Password must contain at least one lowercase letter")
    if not any(c.isdigit() for c in v):
        raise ValueError("Password must contain at least one digit")
    return v


class UserCreate(BaseSchema):
    """Schema for user registration."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Display name",
    )
    email: EmailStr = Field(
        ...,
        description="User email address",
        examples=["user@example.com"],
    )
    password: str = Field(
        ...,
        min_length=8,
        max_length=128,
        description="Password (upper, lower and digit, min 8 chars)",
    )

    @field_validator("password")
    @classmethod
    def validate_password_strength(cls, v: str) -> str:
        """Ensure password meets security requirements."""
        return _check_password_strength(v)


class UserLogin(BaseSchema):
    """Schema for user login request."""

    email: EmailStr = Field(
        ...,
        description="User email address",
    )
    password: str = Field(
        ...,
        description="User password",
    )


class UserUpdate(BaseSchema):
    """Profile fields a user may change on their own account."""

    name: Optional[str] = Field(
        None,
        min_length=1,
        max_length=100,
    )
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(
        None,
        max_length=30,
    )
    avatar_url: Optional[str] = Field(
        None,
        max_length=500,
        description="Profile picture URL",
    )


class AdminUserUpdate(BaseSchema):
    """Fields an administrator may change on any account."""

    role: Optional[str] = Field(
        None,
        pattern=ROLE_PATTERN,
    )
    is_active: Optional[bool] = None


class UserResponse(TimestampSchema):
    """Schema for user response (no credentials)."""

    id: str = Field(
        ...,
        description="User unique identifier",
    )
    name: str
    email: EmailStr
    role: str
    is_active: bool
    phone: Optional[str] = None
    avatar_url: Optional[str] = None
    last_login: Optional[datetime] = None


class TokenResponse(BaseSchema):
    """Schema for authentication token response."""

    access_token: str = Field(
        ...,
        description="JWT access token",
    )
    refresh_token: str = Field(
        ...,
        description="JWT refresh token",
    )
    token_type: str = Field(
        "bearer",
        description="Token type",
    )
    expires_in: int = Field(
        ...,
        description="Access token expiry in seconds",
    )


class AuthResponse(TokenResponse):
    """Tokens plus the authenticated user."""

    user: UserResponse


class RefreshRequest(BaseSchema):
    refresh_token: str


class PasswordChange(BaseSchema):
    """Schema for password change request."""

    current_password: str = Field(
        ...,
        description="Current password",
    )
    new_password: str = Field(
        ...,
        min_length=8,
        max_length=128,
        description="New password",
    )

    @field_validator("new_password")
    @classmethod
    def validate_new_password(cls, v: str) -> str:
        """Validate new password strength."""
        return _check_password_strength(v)


class PasswordResetRequest(BaseSchema):
    """Schema for password reset request."""

    email: EmailStr = Field(
        ...,
        description="User email address",
    )


class PasswordResetConfirm(BaseSchema):
    """Schema for password reset confirmation."""

    token: str = Field(
        ...,
        min_length=1,
        description="Reset token",
    )
    new_password: str = Field(
        ...,
        min_length=8,
        max_length=128,
        description="New password",
    )

    @field_validator("new_password")
    @classmethod
    def validate_new_password(cls, v: str) -> str:
        return _check_password_strength(v)


class PasswordResetIssued(BaseSchema):
    """Reset request acknowledgement; the token is only exposed in debug mode."""

    reset_token: Optional[str] = None
    expires_at: Optional[datetime] = None
