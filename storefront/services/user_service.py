# ==============================================================================
# USER SERVICE - Authentication & User Management
# ==============================================================================
# Registration, login, token lifecycle, profile and admin user operations
# ==============================================================================

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, Optional, Tuple

from storefront.core.constants import ErrorMessages, UserRoles
from storefront.core.exceptions import (
    AuthenticationError,
    BadRequestError,
    ConflictError,
)
from storefront.core.security import (
    burn_password_check,
    create_token_pair,
    generate_reset_token,
    hash_password,
    hash_reset_token,
    issued_before,
    verify_access_token,
    verify_password,
    verify_refresh_token,
)
from storefront.core.settings import settings
from storefront.database.adapters.base_adapter import BaseDatabaseAdapter
from storefront.database.repositories import Record, UserRepository
from storefront.schemas.user import (
    AdminUserUpdate,
    AuthResponse,
    PasswordChange,
    UserCreate,
    UserResponse,
    UserUpdate,
)
from storefront.services.base_service import BaseService
from storefront.utils.helpers import utc_now

logger = logging.getLogger(__name__)


class UserService(BaseService[UserResponse]):
    """
    User service for authentication and profile management.

    Tokens carry the user id (``sub``) and role. Every protected
    request reloads the user, so deactivation and password changes
    take effect immediately.
    """

    _resource_name = "user"

    def __init__(self, adapter: BaseDatabaseAdapter) -> None:
        self._users = UserRepository(adapter)
        super().__init__(adapter, self._users)

    def _to_response(self, record: Record) -> UserResponse:
        return UserResponse.model_validate(record)

    def _auth_response(self, user: Record) -> AuthResponse:
        tokens = create_token_pair(
            subject=user["id"],
            additional_claims={"role": user["role"]},
        )
        return AuthResponse(user=self._to_response(user), **tokens)

    @staticmethod
    def _password_fields(password: str) -> Dict[str, Any]:
        """Values written whenever the password changes."""
        return {
            "hashed_password": hash_password(password),
            "password_changed_at": utc_now(),
            "password_reset_token": None,
            "password_reset_expires": None,
        }

    # ==========================================================================
    # AUTHENTICATION
    # ==========================================================================

    async def register(self, schema: UserCreate) -> AuthResponse:
        """
        Register a new user with the ``user`` role.

        Raises:
            ConflictError: If email already registered
        """
        email = schema.email.lower()
        if await self._users.get_by_email(email):
            raise ConflictError(
                message="Email already registered",
                resource_type="user",
            )

        user = await self._users.create({
            "name": schema.name.strip(),
            "email": email,
            "hashed_password": hash_password(schema.password),
            "role": UserRoles.USER,
        })
        logger.info(f"User registered: {user['id']}")
        return self._auth_response(user)

    async def authenticate(self, email: str, password: str) -> AuthResponse:
        """
        Verify credentials, record the login and issue tokens.

        Raises:
            AuthenticationError: If credentials invalid or account disabled
        """
        user = await self._users.get_by_email(email)

        if user is None:
            burn_password_check()
        if not user or not verify_password(password, user["hashed_password"]):
            logger.warning(f"Failed login attempt for {email.lower()}")
            raise AuthenticationError(message=ErrorMessages.INVALID_CREDENTIALS)

        if not user["is_active"]:
            raise AuthenticationError(message=ErrorMessages.ACCOUNT_DISABLED)

        user = await self._users.update(user["id"], {"last_login": utc_now()})
        return self._auth_response(user)

    async def _load_token_user(self, payload: Dict[str, Any]) -> Record:
        user_id = payload.get("sub")
        user = await self._users.get_by_id(user_id) if user_id else None

        if user is None:
            raise AuthenticationError(message="The user of this token no longer exists")
        if not user["is_active"]:
            raise AuthenticationError(message=ErrorMessages.ACCOUNT_DISABLED)
        if issued_before(payload, user.get("password_changed_at")):
            raise AuthenticationError(message=ErrorMessages.PASSWORD_CHANGED)
        return user

    async def resolve_access_token(self, token: str) -> Record:
        """
        Decode an access token and reload its user.

        Raises:
            TokenExpiredError / InvalidTokenError: If the token is unusable
            AuthenticationError: If the user is gone, disabled, or changed
                password after the token was issued
        """
        return await self._load_token_user(verify_access_token(token))

    async def refresh(self, refresh_token: str) -> AuthResponse:
        """Exchange a refresh token for a new token pair."""
        user = await self._load_token_user(verify_refresh_token(refresh_token))
        return self._auth_response(user)

    # ==========================================================================
    # PASSWORD MANAGEMENT
    # ==========================================================================

    async def update_password(self, user_id: str, schema: PasswordChange) -> AuthResponse:
        """
        Change password after verifying the current one.

        Tokens issued before the change stop working; fresh ones are returned.

        Raises:
            AuthenticationError: If current password wrong
        """
        user = await self._get_or_404(user_id)

        if not verify_password(schema.current_password, user["hashed_password"]):
            raise AuthenticationError(message="Current password is incorrect")

        user = await self._users.update(user_id, self._password_fields(schema.new_password))
        logger.info(f"Password changed for user {user_id}")
        return self._auth_response(user)

    async def forgot_password(self, email: str) -> Optional[Tuple[str, datetime]]:
        """
        Start a password reset.

        Only the sha256 digest of the token is stored. Unknown emails
        return None so callers cannot probe for accounts.

        Returns:
            Tuple of (raw token, expiry) or None
        """
        user = await self._users.get_by_email(email)
        if user is None or not user["is_active"]:
            return None

        raw, digest = generate_reset_token()
        expires = utc_now() + timedelta(minutes=settings.PASSWORD_RESET_EXPIRE_MINUTES)
        await self._users.update(user["id"], {
            "password_reset_token": digest,
            "password_reset_expires": expires,
        })
        logger.info(f"Password reset requested for user {user['id']}")
        return raw, expires

    async def reset_password(self, token: str, new_password: str) -> AuthResponse:
        """
        Complete a password reset.

        Raises:
            BadRequestError: If the token is unknown or expired
        """
        user = await self._users.get_by_reset_token(hash_reset_token(token))
        if user is None:
            raise BadRequestError(message="Token is invalid or has expired")

        user = await self._users.update(user["id"], self._password_fields(new_password))
        logger.info(f"Password reset completed for user {user['id']}")
        return self._auth_response(user)

    # ==========================================================================
    # PROFILE
    # ==========================================================================

    async def update_profile(self, user_id: str, schema: UserUpdate) -> UserResponse:
        """
        Update the caller's own profile.

        Raises:
            ConflictError: If the new email belongs to another account
        """
        data = schema.model_dump(exclude_unset=True)
        if not data:
            raise BadRequestError(message="No fields to update")

        if data.get("email"):
            data["email"] = data["email"].lower()
            existing = await self._users.get_by_email(data["email"])
            if existing and existing["id"] != user_id:
                raise ConflictError(message="Email already registered", resource_type="user")
        elif "email" in data:
            data.pop("email")

        if "name" in data and data["name"] is None:
            data.pop("name")

        user = await self._users.update(user_id, data)
        if user is None:
            raise self._not_found(user_id, ErrorMessages.USER_NOT_FOUND)
        return self._to_response(user)

    async def deactivate(self, user_id: str) -> bool:
        """Deactivate the caller's own account."""
        user = await self._users.update(user_id, {"is_active": False})
        if user is None:
            raise self._not_found(user_id, ErrorMessages.USER_NOT_FOUND)
        logger.info(f"User {user_id} deactivated own account")
        return True

    # ==========================================================================
    # ADMINISTRATION
    # ==========================================================================

    async def list_users(
        self,
        page: int,
        page_size: int,
        role: Optional[str] = None,
        is_active: Optional[bool] = None,
        search: Optional[str] = None,
    ) -> Dict[str, Any]:
        filters: Dict[str, Any] = {}
        if role:
            filters["role"] = role
        if is_active is not None:
            filters["is_active"] = is_active
        if search:
            filters["$or"] = [
                {"name": {"$contains": search}},
                {"email": {"$contains": search}},
            ]

        records, total = await self._users.paginate(page, page_size, filters)
        return self._page(records, total, page, page_size)

    async def admin_update(
        self,
        acting_user_id: str,
        user_id: str,
        schema: AdminUserUpdate,
    ) -> UserResponse:
        """
        Change role or active flag of an account.

        Raises:
            BadRequestError: If an admin tries to demote or disable themselves
        """
        data = schema.model_dump(exclude_unset=True, exclude_none=True)
        if not data:
            raise BadRequestError(message="No fields to update")
        if user_id == acting_user_id and (
            data.get("role", UserRoles.ADMIN) != UserRoles.ADMIN
            or data.get("is_active") is False
        ):
            raise BadRequestError(message="You cannot demote or deactivate your own account")

        user = await self._users.update(user_id, data)
        if user is None:
            raise self._not_found(user_id, ErrorMessages.USER_NOT_FOUND)
        logger.info(f"Admin {acting_user_id} updated user {user_id}: {data}")
        return self._to_response(user)

    async def admin_delete(self, acting_user_id: str, user_id: str) -> bool:
        if user_id == acting_user_id:
            raise BadRequestError(message="You cannot delete your own account")
        await self.delete(user_id)
        logger.info(f"Admin {acting_user_id} deleted user {user_id}")
        return True

    async def ensure_admin(self, email: str, password: str) -> UserResponse:
        """
        Make sure a bootstrap administrator exists.

        An existing account with that email is promoted; otherwise one is created.
        """
        user = await self._users.get_by_email(email)
        if user is None:
            user = await self._users.create({
                "name": "Administrator",
                "email": email.lower(),
                "hashed_password": hash_password(password),
                "role": UserRoles.ADMIN,
            })
            logger.info(f"Bootstrap administrator created: {user['email']}")
        elif user["role"] != UserRoles.ADMIN or not user["is_active"]:
            user = await self._users.update(user["id"], {"role": UserRoles.ADMIN, "is_active": True})
            logger.info(f"Existing account promoted to administrator: {user['email']}")
        return self._to_response(user)
