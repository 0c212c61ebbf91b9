# ==============================================================================
# REVIEW REPOSITORY
# ==============================================================================

from __future__ import annotations

from typing import List, Optional

from storefront.core.constants import DatabaseConstants
from storefront.database.repositories.base_repository import BaseRepository, Record


class ReviewRepository(BaseRepository):
    """Data access for product reviews."""

    collection_name = DatabaseConstants.REVIEWS_COLLECTION
    defaults = {
        "pros": [],
        "cons": [],
        "images": [],
        "status": "pending",
        "is_verified_purchase": False,
        "is_edited": False,
        "admin_response": None,
        "admin_response_at": None,
        "upvotes": 0,
        "downvotes": 0,
    }

    async def get_for_user_and_product(self, user_id: str, product_id: str) -> Optional[Record]:
        return await self.find_one({"user_id": user_id, "product_id": product_id})

    async def list_approved_for_product(self, product_id: str) -> List[Record]:
        """Every approved review of a product (rating aggregation input)."""
        return await self.get_all(
            limit=DatabaseConstants.MAX_SCAN_SIZE,
            filters={"product_id": product_id, "status": "approved"},
        )
