# ==============================================================================
# CATEGORY REPOSITORY
# ==============================================================================

from __future__ import annotations

from typing import Optional

from storefront.core.constants import DatabaseConstants
from storefront.database.repositories.base_repository import BaseRepository, Record


class CategoryRepository(BaseRepository):
    """Data access for categories."""

    collection_name = DatabaseConstants.CATEGORIES_COLLECTION
    defaults = {
        "description": None,
        "image_url": None,
        "parent_id": None,
        "is_active": True,
    }

    async def get_by_slug(self, slug: str) -> Optional[Record]:
        return await self.find_one({"slug": slug.lower()})

    async def get_by_id_or_slug(self, key: str) -> Optional[Record]:
        """Resolve a path parameter that may be an id or a slug."""
        category = await self.get_by_id(key)
        if category is None:
            category = await self.get_by_slug(key)
        return category
