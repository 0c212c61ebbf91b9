# ==============================================================================
# HELPER UTILITIES
# ==============================================================================
# Common utility functions used across the application
# ==============================================================================

from __future__ import annotations

import math
import re
import unicodedata
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Optional, TypeVar
from uuid import uuid4

T = TypeVar("T")

CENTS = Decimal("0.01")


def generate_uuid() -> str:
    """Generate a new UUID string."""
    return str(uuid4())


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Return ``value`` as an aware UTC datetime.

    SQLite hands back naive datetimes; every stored datetime is UTC.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_decimal(value: Any) -> Decimal:
    """Coerce stored money (Decimal, str, int, float) to Decimal."""
    if isinstance(value, Decimal):
        return value
    if value is None:
        return Decimal("0")
    return Decimal(str(value))


def quantize_money(value: Any) -> Decimal:
    """Round a money amount to cents."""
    return to_decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def slugify(value: str) -> str:
    """
    Build a URL slug from a display name.

    Example:
        >>> slugify("Home & Garden")
        'home-garden'
    """
    normalized = unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode("ascii")
    slug = re.sub(r"[^a-zA-Z0-9]+", "-", normalized).strip("-").lower()
    return slug or generate_uuid()[:8]


def paginate_results(
    items: List[T],
    page: int,
    page_size: int,
    total: int,
) -> Dict[str, Any]:
    """
    Create a pagination response dict.

    Args:
        items: List of items for current page
        page: Current page number (1-indexed)
        page_size: Items per page
        total: Total item count

    Returns:
        Pagination metadata dict
    """
    pages = math.ceil(total / page_size) if total > 0 else 0

    return {
        "items": items,
        "total": total,
        "page": page,
        "page_size": page_size,
        "pages": pages,
    }


def calculate_offset(page: int, page_size: int) -> int:
    """Calculate database offset from page number."""
    return (page - 1) * page_size
