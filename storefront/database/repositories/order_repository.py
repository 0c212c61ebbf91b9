# ==============================================================================
# ORDER REPOSITORY
# ==============================================================================

from __future__ import annotations

from typing import Any, Dict, List

from storefront.core.constants import DatabaseConstants
from storefront.database.repositories.base_repository import BaseRepository, Record


class OrderRepository(BaseRepository):
    """Data access for orders."""

    collection_name = DatabaseConstants.ORDERS_COLLECTION
    defaults = {
        "shipping_method": "standard",
        "status": "pending",
        "payment_status": "pending",
        "is_paid": False,
        "paid_at": None,
        "payment_result": None,
        "tracking_number": None,
        "notes": None,
        "delivered_at": None,
        "cancelled_at": None,
    }

    async def list_paid_for_user(self, user_id: str) -> List[Record]:
        """All paid orders of a user (used for verified-purchase checks)."""
        return await self.get_all(
            limit=DatabaseConstants.MAX_SCAN_SIZE,
            filters={"user_id": user_id, "is_paid": True},
        )

    async def transition(
        self,
        order_id: str,
        expected_status: str,
        changes: Dict[str, Any],
    ) -> bool:
        """
        Write ``changes`` only if the order still has ``expected_status``.

        Returns:
            False when another request changed the status first
        """
        updated = await self.bulk_update(
            {"id": order_id, "status": expected_status},
            changes,
        )
        return updated > 0
