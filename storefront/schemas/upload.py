# ==============================================================================
# UPLOAD SCHEMAS
# ==============================================================================

from __future__ import annotations

from pydantic import Field

from storefront.schemas.base import BaseSchema


class UploadResult(BaseSchema):
    """Stored image descriptor."""

    public_id: str = Field(..., description="Identifier used to delete the image")
    url: str = Field(..., description="Public URL of the image")
    format: str = Field(..., description="File extension, e.g. png")
    size: int = Field(..., description="Size in bytes")
    content_type: str


class Base64Upload(BaseSchema):
    """Image sent as a data URI: ``data:image/png;base64,...``."""

    data: str = Field(..., min_length=1)
