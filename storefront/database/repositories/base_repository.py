# ==============================================================================
# BASE REPOSITORY - Generic Data Access Abstraction
# ==============================================================================
# Repository Pattern over the bound adapter
# Records leave the repository as plain dictionaries on every backend
# ==============================================================================

from __future__ import annotations

import copy
from datetime import datetime
from decimal import Decimal
from typing import Any, ClassVar, Dict, List, Optional, Tuple

from pydantic import BaseModel

from storefront.database.adapters.base_adapter import BaseDatabaseAdapter
from storefront.utils.helpers import as_utc, calculate_offset

Record = Dict[str, Any]


class BaseRepository:
    """
    Base repository providing standard CRUD operations.

    Decouples services from the storage engine: an ORM row and a
    document both come back as the same ``dict`` shape, with aware UTC
    datetimes and a string ``id``.

    Subclasses set ``collection_name`` and may set ``defaults``, the
    field values applied on create so both backends store the same
    complete record.

    Attributes:
        _adapter: Database adapter for database operations
        _collection_name: Table/collection identifier

    Example:
        >>> repo = UserRepository(adapter)
        >>> user = await repo.create({"email": "test@example.com", ...})
        >>> user["id"]
        '3f0c...'
    """

    collection_name: ClassVar[str] = ""
    defaults: ClassVar[Dict[str, Any]] = {}

    def __init__(
        self,
        adapter: BaseDatabaseAdapter,
        collection_name: Optional[str] = None,
    ) -> None:
        self._adapter = adapter
        self._collection_name = collection_name or self.collection_name

    # ==========================================================================
    # RECORD NORMALIZATION
    # ==========================================================================

    @staticmethod
    def _to_record(data: Any) -> Optional[Record]:
        """
        Convert an adapter result to a plain dictionary.

        Handles SQLAlchemy models (``to_dict``) and documents.
        """
        if data is None:
            return None
        record = data.to_dict() if hasattr(data, "to_dict") else dict(data)
        for key, value in record.items():
            if isinstance(value, datetime):
                record[key] = as_utc(value)
        return record

    @staticmethod
    def _to_data(payload: Any) -> Dict[str, Any]:
        if isinstance(payload, BaseModel):
            return payload.model_dump(exclude_unset=True)
        return dict(payload)

    # ==========================================================================
    # CRUD OPERATIONS
    # ==========================================================================

    async def create(self, payload: Any) -> Record:
        """
        Create a new record.

        Args:
            payload: Field values (dict or Pydantic schema)

        Returns:
            Created record with generated ID
        """
        data = copy.deepcopy(self.defaults)
        data.update(self._to_data(payload))
        result = await self._adapter.create(self._collection_name, data)
        return self._to_record(result)

    async def get_by_id(self, id: Any) -> Optional[Record]:
        """Retrieve record by ID, None if missing."""
        result = await self._adapter.get_by_id(self._collection_name, id)
        return self._to_record(result)

    async def get_all(
        self,
        skip: int = 0,
        limit: int = 100,
        filters: Optional[Dict[str, Any]] = None,
        sort_by: Optional[str] = None,
        sort_order: str = "asc",
    ) -> List[Record]:
        """Retrieve multiple records with pagination."""
        results = await self._adapter.get_all(
            self._collection_name,
            skip=skip,
            limit=limit,
            filters=filters,
            sort_by=sort_by,
            sort_order=sort_order,
        )
        return [self._to_record(r) for r in results]

    async def paginate(
        self,
        page: int = 1,
        page_size: int = 10,
        filters: Optional[Dict[str, Any]] = None,
        sort_by: Optional[str] = "created_at",
        sort_order: str = "desc",
    ) -> Tuple[List[Record], int]:
        """
        Fetch one page and the total count for the same filters.

        Returns:
            Tuple of (records, total)
        """
        items = await self.get_all(
            skip=calculate_offset(page, page_size),
            limit=page_size,
            filters=filters,
            sort_by=sort_by,
            sort_order=sort_order,
        )
        total = await self.count(filters)
        return items, total

    async def update(self, id: Any, payload: Any) -> Optional[Record]:
        """
        Partially update a record.

        Returns:
            Updated record if found, None otherwise
        """
        data = self._to_data(payload)
        result = await self._adapter.update(self._collection_name, id, data)
        return self._to_record(result)

    async def delete(self, id: Any) -> bool:
        """Delete a record by ID; False if not found."""
        return await self._adapter.delete(self._collection_name, id)

    async def increment(
        self,
        id: Any,
        amounts: Dict[str, int],
        conditions: Optional[Dict[str, Any]] = None,
    ) -> Optional[Record]:
        """Guarded atomic counter update (see adapter ``increment``)."""
        result = await self._adapter.increment(
            self._collection_name,
            id,
            amounts,
            conditions,
        )
        return self._to_record(result)

    # ==========================================================================
    # QUERY OPERATIONS
    # ==========================================================================

    async def count(
        self,
        filters: Optional[Dict[str, Any]] = None,
    ) -> int:
        """Count records matching filters."""
        return await self._adapter.count(self._collection_name, filters)

    async def sum(
        self,
        field: str,
        filters: Optional[Dict[str, Any]] = None,
    ) -> Decimal:
        """Total of ``field`` over records matching filters."""
        return await self._adapter.sum(self._collection_name, field, filters)

    async def exists(self, filters: Dict[str, Any]) -> bool:
        """Check whether any record matches filters."""
        return await self._adapter.exists(self._collection_name, filters)

    async def find_one(
        self,
        filters: Dict[str, Any],
    ) -> Optional[Record]:
        """Find a single record matching filters."""
        result = await self._adapter.find_one(self._collection_name, filters)
        return self._to_record(result)

    # ==========================================================================
    # BULK OPERATIONS
    # ==========================================================================

    async def bulk_update(
        self,
        filters: Dict[str, Any],
        data: Dict[str, Any],
    ) -> int:
        """Bulk update records matching filters; returns the count."""
        return await self._adapter.bulk_update(
            self._collection_name,
            filters,
            data,
        )

    async def bulk_delete(
        self,
        filters: Dict[str, Any],
    ) -> int:
        """Bulk delete records matching filters; returns the count."""
        return await self._adapter.bulk_delete(self._collection_name, filters)
