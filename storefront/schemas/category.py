# ==============================================================================
# CATEGORY SCHEMAS
# ==============================================================================

from __future__ import annotations

from typing import List, Optional

from pydantic import Field

from storefront.schemas.base import BaseSchema, TimestampSchema


class CategoryCreate(BaseSchema):
    """Schema for creating a category; ``slug`` is derived from name when omitted."""

    name: str = Field(..., min_length=1, max_length=100)
    slug: Optional[str] = Field(None, min_length=1, max_length=120, pattern="^[a-z0-9-]+$")
    description: Optional[str] = Field(None, max_length=1000)
    image_url: Optional[str] = Field(None, max_length=500)
    parent_id: Optional[str] = None
    is_active: bool = True


class CategoryUpdate(BaseSchema):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    slug: Optional[str] = Field(None, min_length=1, max_length=120, pattern="^[a-z0-9-]+$")
    description: Optional[str] = Field(None, max_length=1000)
    image_url: Optional[str] = Field(None, max_length=500)
    parent_id: Optional[str] = None
    is_active: Optional[bool] = None


class CategoryResponse(TimestampSchema):
    id: str
    name: str
    slug: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    parent_id: Optional[str] = None
    is_active: bool = True


class CategoryTreeNode(CategoryResponse):
    """Category with its nested subcategories."""

    children: List["CategoryTreeNode"] = Field(default_factory=list)


CategoryTreeNode.model_rebuild()
