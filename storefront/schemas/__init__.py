# ==============================================================================
# SCHEMAS PACKAGE INITIALIZATION
# ==============================================================================

"""
Schemas
=======

Pydantic request/response models for the API layer.
"""

from storefront.schemas.base import (
    APIResponse,
    BaseSchema,
    HealthResponse,
    PaginatedResponse,
    TimestampSchema,
)

__all__ = [
    "APIResponse",
    "BaseSchema",
    "HealthResponse",
    "PaginatedResponse",
    "TimestampSchema",
]
