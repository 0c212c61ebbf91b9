# ==============================================================================
# CART & WISHLIST REPOSITORIES
# ==============================================================================
# Cart totals are derived here, on every save, from the line items
# ==============================================================================

from __future__ import annotations

from typing import Any, Dict, List, Optional

from storefront.core.constants import DatabaseConstants
from storefront.core.exceptions import ConflictError
from storefront.database.repositories.base_repository import BaseRepository, Record
from storefront.utils.helpers import quantize_money, to_decimal


class _PerUserRepository(BaseRepository):
    """One record per user, created lazily."""

    async def get_for_user(self, user_id: str) -> Optional[Record]:
        return await self.find_one({"user_id": user_id})

    async def get_or_create(self, user_id: str) -> Record:
        """
        Return the user's record, creating an empty one on first use.

        Two first reads racing each other both end up with the record the
        unique ``user_id`` index let through.
        """
        record = await self.get_for_user(user_id)
        if record is not None:
            return record
        try:
            return await self.create({"user_id": user_id})
        except ConflictError:
            return await self.get_for_user(user_id)


class CartRepository(_PerUserRepository):
    """Data access for shopping carts."""

    collection_name = DatabaseConstants.CARTS_COLLECTION
    defaults = {
        "items": [],
        "total_items": 0,
        "total_price": quantize_money(0),
    }

    @staticmethod
    def compute_totals(items: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Derive line totals and cart totals from the items."""
        total_items = 0
        total_price = to_decimal(0)
        for item in items:
            line_total = quantize_money(to_decimal(item["price"]) * item["quantity"])
            item["total_price"] = line_total
            total_items += item["quantity"]
            total_price += line_total
        return {
            "items": items,
            "total_items": total_items,
            "total_price": quantize_money(total_price),
        }

    async def save_items(self, cart_id: str, items: List[Dict[str, Any]]) -> Optional[Record]:
        """Replace the cart lines and store the recomputed totals."""
        return await self.update(cart_id, self.compute_totals(items))


class WishlistRepository(_PerUserRepository):
    """Data access for wishlists."""

    collection_name = DatabaseConstants.WISHLISTS_COLLECTION
    defaults = {"items": []}

    async def save_items(self, wishlist_id: str, items: List[Dict[str, Any]]) -> Optional[Record]:
        return await self.update(wishlist_id, {"items": items})
