# ==============================================================================
# CUSTOM EXCEPTIONS - Application Error Hierarchy
# ==============================================================================
# Structured exception classes for consistent error handling
# Each exception maps to an HTTP status code and a stable error code
# ==============================================================================

from __future__ import annotations

from typing import Any, Dict, Optional


class AppException(Exception):
    """
    Base exception for all application errors.

    Operational errors carry everything the API layer needs to answer
    the client: a message, a machine-readable code, the HTTP status and
    optional context.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable error identifier
        status_code: HTTP status code to return
        details: Additional context dictionary

    Example:
        >>> raise AppException(
        ...     message="Something went wrong",
        ...     error_code="INTERNAL_ERROR",
        ...     status_code=500
        ... )
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        error_code: str = "INTERNAL_ERROR",
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to dictionary format for JSON response.

        Returns:
            Dictionary containing error details
        """
        return {
            "success": False,
            "error": {
                "code": self.error_code,
                "message": self.message,
                "details": self.details,
            }
        }

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message='{self.message}', "
            f"error_code='{self.error_code}', "
            f"status_code={self.status_code})"
        )


# ==============================================================================
# UPSTREAM EXCEPTIONS
# ==============================================================================

class UpstreamError(AppException):
    """
    Raised when a dependency (database, file storage) fails.

    Maps to HTTP 500. The message is safe to show to clients; the
    original error is kept in ``__cause__``.
    """

    def __init__(
        self,
        message: str = "Upstream service failed",
        details: Optional[Dict[str, Any]] = None,
        error_code: str = "UPSTREAM_ERROR",
    ) -> None:
        super().__init__(
            message=message,
            error_code=error_code,
            status_code=500,
            details=details,
        )


class DatabaseError(UpstreamError):
    """
    Raised when database operations fail.

    Covers connection issues and query execution failures.
    """

    def __init__(
        self,
        message: str = "Database operation failed",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, details=details, error_code="DATABASE_ERROR")


class StorageError(UpstreamError):
    """Raised when the file storage backend fails."""

    def __init__(
        self,
        message: str = "File storage operation failed",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, details=details, error_code="STORAGE_ERROR")


# ==============================================================================
# RESOURCE EXCEPTIONS
# ==============================================================================

class NotFoundError(AppException):
    """
    Raised when a requested resource does not exist.

    Maps to HTTP 404 Not Found.

    Attributes:
        resource_type: Type of resource that was not found
        resource_id: Identifier of the missing resource
    """

    def __init__(
        self,
        message: str = "Resource not found",
        resource_type: Optional[str] = None,
        resource_id: Optional[Any] = None,
    ) -> None:
        details = {}
        if resource_type:
            details["resource_type"] = resource_type
        if resource_id:
            details["resource_id"] = str(resource_id)

        super().__init__(
            message=message,
            error_code="NOT_FOUND",
            status_code=404,
            details=details,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class ProductNotFoundError(NotFoundError):
    """Raised when an order or cart references an unknown product."""

    def __init__(self, product_id: Optional[Any] = None) -> None:
        message = "Product not found"
        if product_id:
            message = f"Product not found: {product_id}"
        super().__init__(
            message=message,
            resource_type="product",
            resource_id=product_id,
        )
        self.error_code = "PRODUCT_NOT_FOUND"


class ConflictError(AppException):
    """
    Raised when a write collides with existing data.

    Duplicate email, duplicate review, item already in the wishlist.
    Maps to HTTP 400.
    """

    def __init__(
        self,
        message: str = "Resource already exists",
        resource_type: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        _details = details or {}
        if resource_type:
            _details["resource_type"] = resource_type

        super().__init__(
            message=message,
            error_code="CONFLICT",
            status_code=400,
            details=_details,
        )


# ==============================================================================
# VALIDATION EXCEPTIONS
# ==============================================================================

class ValidationError(AppException):
    """
    Raised when input validation fails.

    Maps to HTTP 400. Contains field-level validation errors.
    """

    def __init__(
        self,
        message: str = "Validation error",
        errors: Optional[Any] = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            status_code=400,
            details={"validation_errors": errors or {}},
        )
        self.errors = errors or {}


class BadRequestError(AppException):
    """
    Raised for malformed or invalid requests.

    Maps to HTTP 400 Bad Request.
    """

    def __init__(
        self,
        message: str = "Bad request",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code="BAD_REQUEST",
            status_code=400,
            details=details,
        )


# ==============================================================================
# AUTHENTICATION & AUTHORIZATION EXCEPTIONS
# ==============================================================================

class AuthenticationError(AppException):
    """
    Raised when authentication fails.

    Maps to HTTP 401 Unauthorized.

    Common causes:
    - Invalid or expired token
    - Missing credentials
    - Disabled account or password changed after the token was issued
    """

    def __init__(
        self,
        message: str = "Authentication failed",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code="AUTHENTICATION_ERROR",
            status_code=401,
            details=details,
        )


class AuthorizationError(AppException):
    """
    Raised when user lacks permission for an action.

    Maps to HTTP 403 Forbidden.
    """

    def __init__(
        self,
        message: str = "Permission denied",
        required_permission: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        _details = details or {}
        if required_permission:
            _details["required_permission"] = required_permission

        super().__init__(
            message=message,
            error_code="AUTHORIZATION_ERROR",
            status_code=403,
            details=_details,
        )


class TokenExpiredError(AuthenticationError):
    """
    Raised when JWT token has expired.
    """

    def __init__(
        self,
        message: str = "Token has expired",
    ) -> None:
        super().__init__(message=message)
        self.error_code = "TOKEN_EXPIRED"


class InvalidTokenError(AuthenticationError):
    """
    Raised when JWT token is invalid or malformed.
    """

    def __init__(
        self,
        message: str = "Invalid token",
    ) -> None:
        super().__init__(message=message)
        self.error_code = "INVALID_TOKEN"


# ==============================================================================
# RATE LIMITING EXCEPTIONS
# ==============================================================================

class RateLimitError(AppException):
    """
    Raised when rate limit is exceeded.

    Maps to HTTP 429 Too Many Requests.

    Attributes:
        retry_after: Seconds until the client can retry
    """

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        retry_after: int = 60,
    ) -> None:
        super().__init__(
            message=message,
            error_code="RATE_LIMIT_EXCEEDED",
            status_code=429,
            details={"retry_after_seconds": retry_after},
        )
        self.retry_after = retry_after


# ==============================================================================
# BUSINESS LOGIC EXCEPTIONS
# ==============================================================================

class BusinessRuleError(AppException):
    """
    Raised when a business rule is violated.

    Maps to HTTP 400 Bad Request.
    """

    def __init__(
        self,
        message: str = "Business rule violation",
        rule: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        error_code: str = "BUSINESS_RULE_ERROR",
    ) -> None:
        _details = details or {}
        if rule:
            _details["violated_rule"] = rule

        super().__init__(
            message=message,
            error_code=error_code,
            status_code=400,
            details=_details,
        )


class InsufficientStockError(BusinessRuleError):
    """
    Raised when a product cannot cover the requested quantity.

    Attributes:
        product_id: Product that ran short
        requested: Quantity asked for
        available: Stock at the time of the check
    """

    def __init__(
        self,
        product_id: str,
        name: str,
        requested: int,
        available: int,
    ) -> None:
        super().__init__(
            message=f"Insufficient stock for {name}",
            details={
                "product_id": product_id,
                "name": name,
                "requested": requested,
                "available": available,
            },
            error_code="INSUFFICIENT_STOCK",
        )
        self.product_id = product_id
        self.requested = requested
        self.available = available


class InvalidTransitionError(BusinessRuleError):
    """Raised when an order cannot move from its current status to the target."""

    def __init__(self, current: str, target: str) -> None:
        super().__init__(
            message=f"Cannot change order status from {current} to {target}",
            details={"current_status": current, "target_status": target},
            error_code="INVALID_TRANSITION",
        )
        self.current = current
        self.target = target
