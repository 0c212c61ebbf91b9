# ==============================================================================
# SECURITY MODULE - Authentication & Authorization
# ==============================================================================
# JWT token management, password hashing, password reset tokens
# ==============================================================================

from __future__ import annotations

import hashlib
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Tuple, Union

from jose import JWTError, jwt
from passlib.context import CryptContext

from storefront.core.constants import SecurityConstants
from storefront.core.settings import settings
from storefront.core.exceptions import (
    TokenExpiredError,
    InvalidTokenError,
)


# ==============================================================================
# PASSWORD HASHING
# ==============================================================================

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=12,
)


def hash_password(password: str) -> str:
    """
    Hash a plaintext password using bcrypt.

    Args:
        password: Plaintext password to hash

    Returns:
        Hashed password string safe for storage

    Example:
        >>> hashed = hash_password("Secure123")
        >>> verify_password("Secure123", hashed)
        True
    """
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plaintext password against its hash.

    Args:
        plain_password: Plaintext password to verify
        hashed_password: Stored password hash

    Returns:
        True if password matches, False otherwise
    """
    return pwd_context.verify(plain_password, hashed_password)


def burn_password_check() -> None:
    """Spend about one hash verification when there is no user to check against."""
    pwd_context.dummy_verify()


# ==============================================================================
# JWT TOKEN MANAGEMENT
# ==============================================================================

class TokenType:
    """Token type constants."""
    ACCESS = "access"
    REFRESH = "refresh"


def _epoch_ms(moment: datetime) -> int:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return int(moment.timestamp() * 1000)


def create_access_token(
    subject: Union[str, Any],
    expires_delta: Optional[timedelta] = None,
    additional_claims: Optional[Dict[str, Any]] = None,
) -> str:
    """
    Create a JWT access token.

    Access tokens are short-lived and used for API authentication.
    They carry the user id in ``sub`` plus any extra claims (role).

    Args:
        subject: Token subject (user ID)
        expires_delta: Custom expiration time (default from settings)
        additional_claims: Extra claims to include in token

    Returns:
        Encoded JWT access token string

    Example:
        >>> token = create_access_token(subject="user-uuid-123")
        >>> decode_token(token)["sub"]
        'user-uuid-123'
    """
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))

    to_encode: Dict[str, Any] = {
        "sub": str(subject),
        "exp": expire,
        "iat": now,
        "iat_ms": _epoch_ms(now),
        "type": TokenType.ACCESS,
    }

    if additional_claims:
        to_encode.update(additional_claims)

    return jwt.encode(
        to_encode,
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
    )


def create_refresh_token(
    subject: Union[str, Any],
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Create a JWT refresh token.

    Args:
        subject: Token subject (user ID)
        expires_delta: Custom expiration time (default from settings)

    Returns:
        Encoded JWT refresh token string
    """
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS))

    to_encode: Dict[str, Any] = {
        "sub": str(subject),
        "exp": expire,
        "iat": now,
        "iat_ms": _epoch_ms(now),
        "type": TokenType.REFRESH,
    }

    return jwt.encode(
        to_encode,
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
    )


def decode_token(token: str) -> Dict[str, Any]:
    """
    Decode and validate a JWT token.

    Verifies the token signature and expiration time.

    Raises:
        TokenExpiredError: If token has expired
        InvalidTokenError: If token is invalid or malformed
    """
    try:
        return jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
        )
    except jwt.ExpiredSignatureError:
        raise TokenExpiredError()
    except JWTError as e:
        raise InvalidTokenError(message=f"Invalid token: {str(e)}")


def verify_access_token(token: str) -> Dict[str, Any]:
    """Decode a token and require it to be an access token."""
    payload = decode_token(token)

    if payload.get("type") != TokenType.ACCESS:
        raise InvalidTokenError(message="Invalid token type: expected access token")

    return payload


def verify_refresh_token(token: str) -> Dict[str, Any]:
    """Decode a token and require it to be a refresh token."""
    payload = decode_token(token)

    if payload.get("type") != TokenType.REFRESH:
        raise InvalidTokenError(message="Invalid token type: expected refresh token")

    return payload


def issued_before(payload: Dict[str, Any], moment: Optional[datetime]) -> bool:
    """
    Check whether a decoded token was issued before ``moment``.

    Uses the millisecond ``iat_ms`` claim; tokens without it fall back
    to the whole-second ``iat``.
    """
    if moment is None:
        return False
    issued_ms = payload.get("iat_ms")
    if issued_ms is None:
        iat = payload.get("iat")
        if iat is None:
            return True
        issued_ms = int(iat) * 1000
    return int(issued_ms) < _epoch_ms(moment)


# ==============================================================================
# TOKEN RESPONSE HELPERS
# ==============================================================================

def create_token_pair(
    subject: Union[str, Any],
    additional_claims: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Create both access and refresh tokens.

    Args:
        subject: Token subject (user ID)
        additional_claims: Extra claims for access token

    Returns:
        Dictionary with access_token, refresh_token, token_type and expires_in
    """
    return {
        "access_token": create_access_token(
            subject=subject,
            additional_claims=additional_claims,
        ),
        "refresh_token": create_refresh_token(subject=subject),
        "token_type": SecurityConstants.TOKEN_TYPE_BEARER,
        "expires_in": settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    }


# ==============================================================================
# PASSWORD RESET TOKENS
# ==============================================================================

def hash_reset_token(token: str) -> str:
    """Digest stored in place of a raw reset token."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def generate_reset_token() -> Tuple[str, str]:
    """
    Create a password reset token.

    Returns:
        Tuple of (raw token for the user, sha256 digest for storage)
    """
    raw = secrets.token_hex(SecurityConstants.RESET_TOKEN_BYTES)
    return raw, hash_reset_token(raw)
