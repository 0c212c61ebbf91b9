# ==============================================================================
# LOG REPOSITORY
# ==============================================================================

from __future__ import annotations

from datetime import datetime
from typing import Optional

from storefront.core.constants import DatabaseConstants
from storefront.database.repositories.base_repository import BaseRepository


class LogRepository(BaseRepository):
    """Data access for persisted log entries."""

    collection_name = DatabaseConstants.LOGS_COLLECTION
    defaults = {"source": "server", "meta": {}}

    async def clear(self, before: Optional[datetime] = None) -> int:
        """Delete every entry, or only those created before ``before``."""
        filters = {"created_at": {"$lt": before}} if before else {}
        return await self.bulk_delete(filters)
