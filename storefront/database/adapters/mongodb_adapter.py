# ==============================================================================
# MONGODB ADAPTER - Motor Async Driver Implementation
# ==============================================================================
# Document backend: _id <-> id, Decimal <-> Decimal128, filter translation
# ==============================================================================

from __future__ import annotations

import logging
import re
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, AsyncIterator, Dict, List, Optional

from bson import ObjectId
from bson.decimal128 import Decimal128
from motor.motor_asyncio import (
    AsyncIOMotorClient,
    AsyncIOMotorClientSession,
    AsyncIOMotorDatabase,
)
from pymongo import ASCENDING, DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError

from storefront.core.constants import DatabaseConstants
from storefront.core.settings import settings
from storefront.core.exceptions import ConflictError, DatabaseError
from storefront.database.adapters.base_adapter import FILTER_OPERATORS, BaseDatabaseAdapter

logger = logging.getLogger(__name__)


class MongoDBAdapter(BaseDatabaseAdapter[Dict[str, Any]]):
    """
    MongoDB database adapter using Motor async driver.

    Features:
        - Async MongoDB operations using Motor
        - Automatic ObjectId <-> string ``id`` conversion
        - Money stored as Decimal128 and returned as Decimal
        - created_at / updated_at maintained on every write
        - Unique indexes ensured on connect

    Attributes:
        _connection_url: MongoDB connection string
        _database_name: Target database name
        _client: Motor async client
        _database: Target database instance

    Example:
        >>> adapter = MongoDBAdapter()
        >>> await adapter.connect()
        >>> doc = await adapter.create("users", {"email": "test@example.com"})
        >>> print(doc["id"])  # String ID
    """

    def __init__(
        self,
        connection_url: Optional[str] = None,
        database_name: Optional[str] = None,
    ) -> None:
        self._connection_url = connection_url or settings.MONGODB_URL
        self._database_name = database_name or settings.MONGODB_DB
        self._client: Optional[AsyncIOMotorClient] = None
        self._database: Optional[AsyncIOMotorDatabase] = None

    # ==========================================================================
    # SERIALIZATION HELPERS
    # ==========================================================================

    @classmethod
    def _to_storage(cls, value: Any) -> Any:
        """Convert values to BSON friendly types (Decimal -> Decimal128)."""
        if isinstance(value, Decimal):
            return Decimal128(value)
        if isinstance(value, dict):
            return {k: cls._to_storage(v) for k, v in value.items()}
        if isinstance(value, (list, tuple)):
            return [cls._to_storage(v) for v in value]
        return value

    @classmethod
    def _from_storage(cls, value: Any) -> Any:
        """Convert BSON values back to Python types (Decimal128 -> Decimal)."""
        if isinstance(value, Decimal128):
            return value.to_decimal()
        if isinstance(value, dict):
            return {k: cls._from_storage(v) for k, v in value.items()}
        if isinstance(value, list):
            return [cls._from_storage(v) for v in value]
        return value

    @classmethod
    def _serialize(cls, document: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        """Turn a stored document into a record with a string ``id``."""
        if document is None:
            return None
        if "_id" in document:
            document["id"] = str(document.pop("_id"))
        return cls._from_storage(document)

    @staticmethod
    def _deserialize_id(id_value: Any) -> Any:
        """
        Convert a string ID to ObjectId.

        Strings that are not valid ObjectIds are kept as they are, so a
        malformed id simply matches nothing.
        """
        if isinstance(id_value, str) and ObjectId.is_valid(id_value):
            return ObjectId(id_value)
        return id_value

    def _translate_operand(self, field: str, operand: Any) -> Any:
        if field == "_id":
            return self._deserialize_id(operand)
        return self._to_storage(operand)

    def _build_query(
        self,
        filters: Optional[Dict[str, Any]],
    ) -> Dict[str, Any]:
        """
        Build MongoDB query from a filter document.

        Handles ``id`` -> ``_id`` (also inside ``$in``/``$nin``),
        ``$contains`` -> case-insensitive ``$regex`` and nested ``$or``.

        Args:
            filters: Filter dictionary

        Returns:
            MongoDB query dictionary
        """
        if not filters:
            return {}

        query: Dict[str, Any] = {}
        for key, value in filters.items():
            if key == "$or":
                query["$or"] = [self._build_query(sub) for sub in value]
                continue

            field = "_id" if key == "id" else key
            if isinstance(value, dict):
                condition: Dict[str, Any] = {}
                for operator, operand in value.items():
                    if operator not in FILTER_OPERATORS:
                        raise ValueError(f"Unsupported filter operator '{operator}'")
                    if operator == "$contains":
                        condition["$regex"] = re.escape(str(operand))
                        condition["$options"] = "i"
                    elif operator in ("$in", "$nin"):
                        condition[operator] = [
                            self._translate_operand(field, item) for item in operand
                        ]
                    else:
                        condition[operator] = self._translate_operand(field, operand)
                query[field] = condition
            else:
                query[field] = self._translate_operand(field, value)

        return query

    def _collection(self, name: str):
        if self._database is None:
            raise DatabaseError("Database not connected. Call connect() first.")
        return self._database[name]

    # ==========================================================================
    # LIFECYCLE METHODS
    # ==========================================================================

    async def connect(self) -> None:
        """
        Initialize MongoDB connection.

        Creates Motor client, selects target database and ensures
        the unique indexes the services rely on.
        """
        try:
            self._client = AsyncIOMotorClient(
                self._connection_url,
                maxPoolSize=settings.DB_POOL_SIZE,
                minPoolSize=1,
                maxIdleTimeMS=settings.DB_POOL_TIMEOUT * 1000,
                tz_aware=True,
            )
            self._database = self._client[self._database_name]

            await self._client.admin.command("ping")
            await self._ensure_indexes()

            logger.info(
                f"MongoDB adapter connected to {self._database_name}"
            )

        except Exception as e:
            logger.error(f"Failed to connect to MongoDB: {e}")
            raise DatabaseError(f"MongoDB connection failed: {e}") from e

    async def _ensure_indexes(self) -> None:
        for collection, fields in DatabaseConstants.UNIQUE_INDEXES:
            await self._database[collection].create_index(
                [(field, ASCENDING) for field in fields],
                unique=True,
            )
        await self._database[DatabaseConstants.ORDERS_COLLECTION].create_index(
            [("user_id", ASCENDING), ("created_at", DESCENDING)]
        )
        await self._database[DatabaseConstants.PRODUCTS_COLLECTION].create_index(
            [("status", ASCENDING), ("category_id", ASCENDING)]
        )

    async def disconnect(self) -> None:
        """Close MongoDB connection."""
        if self._client is not None:
            self._client.close()
            self._client = None
            self._database = None
            logger.info("MongoDB adapter disconnected")

    async def health_check(self) -> bool:
        try:
            if self._client is not None:
                await self._client.admin.command("ping")
                return True
            return False
        except Exception as e:
            logger.warning(f"MongoDB health check failed: {e}")
            return False

    # ==========================================================================
    # SESSION MANAGEMENT
    # ==========================================================================

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncIOMotorClientSession]:
        """
        Provide transactional session scope.

        MongoDB transactions require a replica set.
        """
        if self._client is None:
            raise DatabaseError("Database not connected. Call connect() first.")

        async with await self._client.start_session() as session:
            async with session.start_transaction():
                yield session

    # ==========================================================================
    # CRUD OPERATIONS
    # ==========================================================================

    async def create(
        self,
        collection: str,
        data: Dict[str, Any],
    ) -> Dict[str, Any]:
        """Create a new document."""
        now = datetime.now(timezone.utc)
        document = self._to_storage({k: v for k, v in data.items() if k != "id"})
        document.setdefault("created_at", now)
        document.setdefault("updated_at", now)

        try:
            result = await self._collection(collection).insert_one(document)
        except DuplicateKeyError as e:
            raise ConflictError(
                f"Duplicate value violates a unique index on {collection}",
                resource_type=collection,
            ) from e
        except PyMongoError as e:
            logger.error(f"Insert into {collection} failed: {e}")
            raise DatabaseError(f"Failed to create {collection} record") from e

        document["_id"] = result.inserted_id
        return self._serialize(document)

    async def get_by_id(
        self,
        collection: str,
        id: Any,
    ) -> Optional[Dict[str, Any]]:
        """Retrieve document by ID."""
        document = await self._collection(collection).find_one(
            {"_id": self._deserialize_id(id)}
        )
        return self._serialize(document)

    async def get_all(
        self,
        collection: str,
        skip: int = 0,
        limit: int = 100,
        filters: Optional[Dict[str, Any]] = None,
        sort_by: Optional[str] = None,
        sort_order: str = "asc",
    ) -> List[Dict[str, Any]]:
        """Retrieve multiple documents with pagination."""
        query = self._build_query(filters)
        cursor = self._collection(collection).find(query)

        if sort_by:
            direction = ASCENDING if sort_order.lower() == "asc" else DESCENDING
            field = "_id" if sort_by == "id" else sort_by
            cursor = cursor.sort([(field, direction), ("_id", ASCENDING)])

        cursor = cursor.skip(skip).limit(limit)

        documents = await cursor.to_list(length=limit)
        return [self._serialize(doc) for doc in documents]

    async def update(
        self,
        collection: str,
        id: Any,
        data: Dict[str, Any],
    ) -> Optional[Dict[str, Any]]:
        """Update an existing document."""
        changes = self._to_storage({k: v for k, v in data.items() if k != "id"})
        changes["updated_at"] = datetime.now(timezone.utc)

        try:
            result = await self._collection(collection).find_one_and_update(
                {"_id": self._deserialize_id(id)},
                {"$set": changes},
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError as e:
            raise ConflictError(
                f"Duplicate value violates a unique index on {collection}",
                resource_type=collection,
            ) from e
        return self._serialize(result)

    async def delete(
        self,
        collection: str,
        id: Any,
    ) -> bool:
        """Delete a document by ID."""
        result = await self._collection(collection).delete_one(
            {"_id": self._deserialize_id(id)}
        )
        return result.deleted_count > 0

    async def increment(
        self,
        collection: str,
        id: Any,
        amounts: Dict[str, int],
        conditions: Optional[Dict[str, Any]] = None,
    ) -> Optional[Dict[str, Any]]:
        """Apply ``$inc`` only when the document still matches ``conditions``."""
        query = self._build_query(conditions)
        query["_id"] = self._deserialize_id(id)

        try:
            result = await self._collection(collection).find_one_and_update(
                query,
                {
                    "$inc": dict(amounts),
                    "$set": {"updated_at": datetime.now(timezone.utc)},
                },
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            logger.error(f"Increment on {collection}/{id} failed: {e}")
            raise DatabaseError(f"Failed to update {collection}") from e
        return self._serialize(result)

    # ==========================================================================
    # QUERY OPERATIONS
    # ==========================================================================

    async def count(
        self,
        collection: str,
        filters: Optional[Dict[str, Any]] = None,
    ) -> int:
        """Count documents matching filters."""
        query = self._build_query(filters)
        return await self._collection(collection).count_documents(query)

    async def sum(
        self,
        collection: str,
        field: str,
        filters: Optional[Dict[str, Any]] = None,
    ) -> Decimal:
        """Sum a field with a ``$group`` aggregation over matching documents."""
        pipeline = [
            {"$match": self._build_query(filters)},
            {"$group": {"_id": None, "total": {"$sum": f"${field}"}}},
        ]
        async for row in self._collection(collection).aggregate(pipeline):
            return Decimal(str(self._from_storage(row["total"])))
        return Decimal("0")

    async def exists(
        self,
        collection: str,
        filters: Dict[str, Any],
    ) -> bool:
        """Check if any document matches filters."""
        return await self.find_one(collection, filters) is not None

    async def find_one(
        self,
        collection: str,
        filters: Dict[str, Any],
    ) -> Optional[Dict[str, Any]]:
        """Find a single document matching filters."""
        query = self._build_query(filters)
        document = await self._collection(collection).find_one(query)
        return self._serialize(document)

    # ==========================================================================
    # BULK OPERATIONS
    # ==========================================================================

    async def bulk_update(
        self,
        collection: str,
        filters: Dict[str, Any],
        data: Dict[str, Any],
    ) -> int:
        """Bulk update documents matching filters."""
        changes = self._to_storage(dict(data))
        changes["updated_at"] = datetime.now(timezone.utc)

        query = self._build_query(filters)
        result = await self._collection(collection).update_many(
            query,
            {"$set": changes},
        )
        return result.modified_count

    async def bulk_delete(
        self,
        collection: str,
        filters: Dict[str, Any],
    ) -> int:
        """Bulk delete documents matching filters."""
        query = self._build_query(filters)
        result = await self._collection(collection).delete_many(query)
        return result.deleted_count
