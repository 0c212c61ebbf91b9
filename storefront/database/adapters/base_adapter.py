# ==============================================================================
# BASE DATABASE ADAPTER - Abstract Interface
# ==============================================================================
# Storage contract shared by the SQLite and MongoDB backends
# Exactly one implementation is bound at process start
# ==============================================================================

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from decimal import Decimal
from typing import (
    Any,
    AsyncIterator,
    Dict,
    Generic,
    List,
    Optional,
    TypeVar,
)

# Type variable for records returned by an adapter
T = TypeVar("T")

# Filter operators understood by every backend
FILTER_OPERATORS = frozenset({
    "$ne",
    "$gt",
    "$gte",
    "$lt",
    "$lte",
    "$in",
    "$nin",
    "$contains",
})


class BaseDatabaseAdapter(ABC, Generic[T]):
    """
    Abstract Base Class for Database Adapters.

    Provides a uniform CRUD interface over heterogeneous storage engines.
    Services never talk to an adapter directly; repositories wrap it and
    normalize records to dictionaries.

    Filters:
        Filters are dictionaries. A plain value means equality; a nested
        dict applies operators (``$ne``, ``$gt``, ``$gte``, ``$lt``,
        ``$lte``, ``$in``, ``$nin``, ``$contains``). ``$or`` takes a list
        of sub-filters. The key ``id`` always addresses the primary key.

    Example:
        >>> adapter = SQLiteAdapter()
        >>> await adapter.connect()
        >>> user = await adapter.create("users", {"email": "test@example.com"})
        >>> await adapter.count("users", {"role": {"$in": ["admin", "seller"]}})
        0
    """

    # ==========================================================================
    # LIFECYCLE METHODS
    # ==========================================================================

    @abstractmethod
    async def connect(self) -> None:
        """
        Establish database connection.

        Raises:
            DatabaseError: If connection cannot be established
        """
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        """Close database connection and release pooled resources."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Check if database connection is healthy.

        Performs a lightweight round trip on every call.

        Returns:
            True if connection is healthy, False otherwise
        """
        pass

    # ==========================================================================
    # SESSION MANAGEMENT
    # ==========================================================================

    @abstractmethod
    @asynccontextmanager
    async def session(self) -> AsyncIterator[Any]:
        """
        Provide a session scope.

        Changes are committed on successful exit or rolled back on exception.

        Raises:
            DatabaseError: If database is not connected
        """
        pass

    # ==========================================================================
    # CRUD OPERATIONS
    # ==========================================================================

    @abstractmethod
    async def create(
        self,
        collection: str,
        data: Dict[str, Any],
    ) -> T:
        """
        Create a new record.

        Args:
            collection: Table/collection name
            data: Record data as dictionary

        Returns:
            Created record with generated ID

        Raises:
            ConflictError: If a unique constraint is violated
            DatabaseError: If creation fails
        """
        pass

    @abstractmethod
    async def get_by_id(
        self,
        collection: str,
        id: Any,
    ) -> Optional[T]:
        """Retrieve a record by its primary identifier, None if missing."""
        pass

    @abstractmethod
    async def get_all(
        self,
        collection: str,
        skip: int = 0,
        limit: int = 100,
        filters: Optional[Dict[str, Any]] = None,
        sort_by: Optional[str] = None,
        sort_order: str = "asc",
    ) -> List[T]:
        """
        Retrieve multiple records with pagination and filtering.

        Args:
            collection: Table/collection name
            skip: Number of records to skip (offset)
            limit: Maximum number of records to return
            filters: Filter document (see class docstring)
            sort_by: Field name to sort by
            sort_order: Sort direction ("asc" or "desc")

        Returns:
            List of matching records
        """
        pass

    @abstractmethod
    async def update(
        self,
        collection: str,
        id: Any,
        data: Dict[str, Any],
    ) -> Optional[T]:
        """
        Partially update an existing record.

        Returns:
            Updated record if found, None if not exists
        """
        pass

    @abstractmethod
    async def delete(
        self,
        collection: str,
        id: Any,
    ) -> bool:
        """Delete a record by ID. Returns False if not found."""
        pass

    @abstractmethod
    async def increment(
        self,
        collection: str,
        id: Any,
        amounts: Dict[str, int],
        conditions: Optional[Dict[str, Any]] = None,
    ) -> Optional[T]:
        """
        Atomically add ``amounts`` to numeric fields of one record.

        The update is a single conditional write: it only applies when
        the record matches ``conditions`` at write time. This is what
        makes stock reservation safe without locks.

        Args:
            collection: Table/collection name
            id: Primary key of the record
            amounts: Field -> signed delta
            conditions: Filter the record must satisfy (e.g. ``{"stock": {"$gte": 3}}``)

        Returns:
            Updated record, or None if missing or the conditions failed
        """
        pass

    # ==========================================================================
    # QUERY OPERATIONS
    # ==========================================================================

    @abstractmethod
    async def count(
        self,
        collection: str,
        filters: Optional[Dict[str, Any]] = None,
    ) -> int:
        """Count records matching filters."""
        pass

    @abstractmethod
    async def sum(
        self,
        collection: str,
        field: str,
        filters: Optional[Dict[str, Any]] = None,
    ) -> Decimal:
        """
        Total of a numeric field over the records matching filters.

        Computed by the backend, so it is not bounded by a scan limit.
        Returns ``Decimal("0")`` when nothing matches.
        """
        pass

    @abstractmethod
    async def exists(
        self,
        collection: str,
        filters: Dict[str, Any],
    ) -> bool:
        """Check if any record matches the filters."""
        pass

    @abstractmethod
    async def find_one(
        self,
        collection: str,
        filters: Dict[str, Any],
    ) -> Optional[T]:
        """Find a single record matching filters, None if no match."""
        pass

    # ==========================================================================
    # BULK OPERATIONS
    # ==========================================================================

    @abstractmethod
    async def bulk_update(
        self,
        collection: str,
        filters: Dict[str, Any],
        data: Dict[str, Any],
    ) -> int:
        """
        Bulk update records matching filters.

        Returns:
            Number of records updated
        """
        pass

    @abstractmethod
    async def bulk_delete(
        self,
        collection: str,
        filters: Dict[str, Any],
    ) -> int:
        """
        Bulk delete records matching filters.

        Returns:
            Number of records deleted
        """
        pass
