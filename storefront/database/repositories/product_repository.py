# ==============================================================================
# PRODUCT REPOSITORY
# ==============================================================================
# Catalog access plus the guarded stock counter used by orders
# ==============================================================================

from __future__ import annotations

from typing import Dict, Iterable, Optional

from storefront.core.constants import DatabaseConstants, ProductConstants
from storefront.database.repositories.base_repository import BaseRepository, Record


class ProductRepository(BaseRepository):
    """Data access for products."""

    collection_name = DatabaseConstants.PRODUCTS_COLLECTION
    defaults = {
        "description": "",
        "brand": None,
        "discount_price": None,
        "discount_starts_at": None,
        "discount_ends_at": None,
        "stock": 0,
        "total_sales": 0,
        "category_id": None,
        "status": ProductConstants.STATUS_ACTIVE,
        "is_featured": False,
        "images": [],
        "specifications": {},
        "variants": [],
        "rating_average": 0.0,
        "rating_count": 0,
    }

    async def find_by_ids(self, product_ids: Iterable[str]) -> Dict[str, Record]:
        """
        Bulk fetch products.

        Returns:
            Mapping of product id -> record for the ids that exist
        """
        ids = list(dict.fromkeys(str(pid) for pid in product_ids))
        if not ids:
            return {}
        records = await self.get_all(limit=len(ids), filters={"id": {"$in": ids}})
        return {record["id"]: record for record in records}

    async def adjust_stock(
        self,
        product_id: str,
        delta: int,
        sales_delta: int = 0,
    ) -> Optional[Record]:
        """
        Change stock by ``delta`` (and total_sales by ``sales_delta``).

        A decrement only applies while enough stock remains, so stock
        never drops below zero. Returns None when the product is missing
        or the guard failed.
        """
        amounts = {"stock": delta}
        if sales_delta:
            amounts["total_sales"] = sales_delta

        conditions = {"stock": {"$gte": -delta}} if delta < 0 else None
        return await self.increment(product_id, amounts, conditions)

    async def set_rating(
        self,
        product_id: str,
        average: float,
        count: int,
    ) -> Optional[Record]:
        """Store the aggregate rating of approved reviews."""
        return await self.update(product_id, {
            "rating_average": average,
            "rating_count": count,
        })

