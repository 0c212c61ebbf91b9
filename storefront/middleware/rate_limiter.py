# ==============================================================================
# RATE LIMITER MIDDLEWARE
# ==============================================================================
# Token bucket rate limiting per client address
# ==============================================================================

from __future__ import annotations

import logging
import time
from typing import Callable, Dict, Optional, Tuple

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from storefront.core.constants import APIConstants
from storefront.core.exceptions import RateLimitError
from storefront.core.settings import settings

logger = logging.getLogger(__name__)

# Paths that are never limited
EXEMPT_PATHS = frozenset({"/", "/health"})


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Rate limiting middleware using a token bucket per client.

    Each client starts with ``requests_limit`` tokens that refill
    linearly over ``window_seconds``. Disabled when
    ``RATE_LIMIT_ENABLED`` is false.

    Attributes:
        requests_limit: Maximum requests per window
        window_seconds: Time window in seconds
        _buckets: Remaining tokens and last refill time per client
    """

    def __init__(
        self,
        app,
        requests_limit: Optional[int] = None,
        window_seconds: Optional[int] = None,
    ) -> None:
        super().__init__(app)
        self.requests_limit = requests_limit or settings.RATE_LIMIT_REQUESTS
        self.window_seconds = window_seconds or settings.RATE_LIMIT_WINDOW
        self._buckets: Dict[str, Tuple[float, float]] = {}

    @staticmethod
    def _get_client_id(request: Request) -> str:
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            return forwarded.split(",")[0].strip()
        if request.client:
            return request.client.host
        return "unknown"

    def _check_rate_limit(self, client_id: str, now: Optional[float] = None) -> Tuple[bool, int, int]:
        """
        Take one token from the client's bucket.

        Returns:
            Tuple of (allowed, remaining, seconds until a token is available)
        """
        now = time.monotonic() if now is None else now
        tokens, last_refill = self._buckets.get(client_id, (float(self.requests_limit), now))

        rate = self.requests_limit / self.window_seconds
        tokens = min(float(self.requests_limit), tokens + (now - last_refill) * rate)

        if tokens >= 1:
            tokens -= 1
            self._buckets[client_id] = (tokens, now)
            reset = int((self.requests_limit - tokens) / rate)
            return True, int(tokens), reset

        self._buckets[client_id] = (tokens, now)
        retry_after = max(1, int((1 - tokens) / rate + 0.999))
        return False, 0, retry_after

    async def dispatch(
        self,
        request: Request,
        call_next: Callable,
    ) -> Response:
        if not settings.RATE_LIMIT_ENABLED or request.url.path in EXEMPT_PATHS:
            return await call_next(request)

        client_id = self._get_client_id(request)
        allowed, remaining, reset = self._check_rate_limit(client_id)

        if not allowed:
            logger.warning(f"Rate limit exceeded for {client_id} on {request.url.path}")
            error = RateLimitError(message="Too many requests", retry_after=reset)
            return JSONResponse(
                status_code=error.status_code,
                content=error.to_dict(),
                headers={
                    APIConstants.RATE_LIMIT_HEADER: str(self.requests_limit),
                    APIConstants.RATE_LIMIT_REMAINING_HEADER: "0",
                    APIConstants.RATE_LIMIT_RESET_HEADER: str(reset),
                    "Retry-After": str(reset),
                },
            )

        response = await call_next(request)
        response.headers[APIConstants.RATE_LIMIT_HEADER] = str(self.requests_limit)
        response.headers[APIConstants.RATE_LIMIT_REMAINING_HEADER] = str(remaining)
        response.headers[APIConstants.RATE_LIMIT_RESET_HEADER] = str(reset)
        return response
