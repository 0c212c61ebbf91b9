# ==============================================================================
# USER REPOSITORY
# ==============================================================================

from __future__ import annotations

from typing import Optional

from storefront.core.constants import DatabaseConstants, UserRoles
from storefront.database.repositories.base_repository import BaseRepository, Record
from storefront.utils.helpers import utc_now


class UserRepository(BaseRepository):
    """Data access for user accounts."""

    collection_name = DatabaseConstants.USERS_COLLECTION
    defaults = {
        "role": UserRoles.USER,
        "is_active": True,
        "phone": None,
        "avatar_url": None,
        "last_login": None,
        "password_changed_at": None,
        "password_reset_token": None,
        "password_reset_expires": None,
    }

    async def get_by_email(self, email: str) -> Optional[Record]:
        """Look up a user by email (stored lowercase)."""
        return await self.find_one({"email": email.strip().lower()})

    async def get_by_reset_token(self, token_digest: str) -> Optional[Record]:
        """Find the user owning an unexpired reset token digest."""
        return await self.find_one({
            "password_reset_token": token_digest,
            "password_reset_expires": {"$gt": utc_now()},
        })
