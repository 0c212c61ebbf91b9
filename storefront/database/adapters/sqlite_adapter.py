# ==============================================================================
# SQLITE ADAPTER - SQLAlchemy Async with aiosqlite
# ==============================================================================
# Relational backend: one ORM model per collection name
# Nested documents live in JSON columns
# ==============================================================================

from __future__ import annotations

import json
import logging
from contextlib import asynccontextmanager
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, AsyncIterator, Dict, List, Optional, Type

from sqlalchemy import and_, delete, func, or_, select, text, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from storefront.core.settings import settings
from storefront.core.exceptions import ConflictError, DatabaseError
from storefront.database.adapters.base_adapter import BaseDatabaseAdapter

logger = logging.getLogger(__name__)


def _json_default(value: Any) -> Any:
    """Serialize values the stdlib encoder rejects inside JSON columns."""
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _json_serializer(value: Any) -> str:
    return json.dumps(value, default=_json_default)


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class SQLiteAdapter(BaseDatabaseAdapter[Any]):
    """
    SQLite database adapter using SQLAlchemy async with aiosqlite.

    Features:
        - Async SQLite operations using aiosqlite
        - Automatic table creation on connect
        - Filter documents compiled to SQL expressions
        - Conditional counter updates compiled to ``UPDATE ... WHERE``

    Attributes:
        _database_url: SQLite connection string
        _engine: SQLAlchemy async engine
        _session_factory: Session factory for creating sessions
        _model_registry: Mapping of collection names to model classes

    Example:
        >>> adapter = SQLiteAdapter()
        >>> adapter.register_model("users", User)
        >>> await adapter.connect()
        >>> user = await adapter.create("users", {"email": "test@example.com"})
    """

    def __init__(self, database_url: Optional[str] = None) -> None:
        url = database_url or settings.SQLITE_URL
        if "sqlite://" in url and "aiosqlite" not in url:
            url = url.replace("sqlite://", "sqlite+aiosqlite://")

        self._database_url = url
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker[AsyncSession]] = None
        self._model_registry: Dict[str, Type[DeclarativeBase]] = {}

    # ==========================================================================
    # MODEL REGISTRY
    # ==========================================================================

    def register_model(
        self,
        name: str,
        model: Type[DeclarativeBase],
    ) -> None:
        """
        Register a SQLAlchemy model for table mapping.

        Args:
            name: Collection/table identifier
            model: SQLAlchemy model class
        """
        self._model_registry[name] = model
        logger.debug(f"Registered model '{name}' -> {model.__name__}")

    def _get_model(self, collection: str) -> Type[DeclarativeBase]:
        if collection not in self._model_registry:
            raise ValueError(
                f"Model '{collection}' not registered. "
                f"Available models: {list(self._model_registry.keys())}"
            )
        return self._model_registry[collection]

    # ==========================================================================
    # FILTER COMPILATION
    # ==========================================================================

    @staticmethod
    def _get_column(model: Type[DeclarativeBase], field: str) -> Any:
        if field not in model.__table__.columns:
            raise ValueError(f"Unknown field '{field}' for {model.__name__}")
        return getattr(model, field)

    def _apply_operator(self, column: Any, operator: str, operand: Any) -> Any:
        if operator == "$ne":
            if operand is None:
                return column.is_not(None)
            return or_(column != operand, column.is_(None))
        if operator == "$gt":
            return column > operand
        if operator == "$gte":
            return column >= operand
        if operator == "$lt":
            return column < operand
        if operator == "$lte":
            return column <= operand
        if operator == "$in":
            return column.in_(list(operand))
        if operator == "$nin":
            return column.not_in(list(operand))
        if operator == "$contains":
            return column.ilike(f"%{_escape_like(str(operand))}%", escape="\\")
        raise ValueError(f"Unsupported filter operator '{operator}'")

    def _build_conditions(
        self,
        model: Type[DeclarativeBase],
        filters: Optional[Dict[str, Any]],
    ) -> List[Any]:
        """Compile a filter document into a list of SQL conditions."""
        conditions: List[Any] = []
        for key, value in (filters or {}).items():
            if key == "$or":
                branches = [and_(*self._build_conditions(model, sub)) for sub in value]
                conditions.append(or_(*branches))
                continue

            column = self._get_column(model, key)
            if isinstance(value, dict):
                for operator, operand in value.items():
                    conditions.append(self._apply_operator(column, operator, operand))
            else:
                conditions.append(column == value)
        return conditions

    # ==========================================================================
    # LIFECYCLE METHODS
    # ==========================================================================

    async def connect(self) -> None:
        """
        Initialize database engine and create tables.

        Creates an async engine and creates all mapped tables
        if they don't exist.
        """
        try:
            self._engine = create_async_engine(
                self._database_url,
                echo=False,
                json_serializer=_json_serializer,
                connect_args={"check_same_thread": False, "timeout": settings.DB_POOL_TIMEOUT},
            )

            self._session_factory = async_sessionmaker(
                bind=self._engine,
                class_=AsyncSession,
                expire_on_commit=False,
                autoflush=False,
            )

            async with self._engine.begin() as conn:
                from storefront.domain_models.base import SQLBase
                await conn.run_sync(SQLBase.metadata.create_all)

            logger.info("SQLite adapter connected successfully")

        except Exception as e:
            logger.error(f"Failed to connect to SQLite: {e}")
            raise DatabaseError(f"SQLite connection failed: {e}") from e

    async def disconnect(self) -> None:
        """Close database connections and dispose engine."""
        if self._engine:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None
            logger.info("SQLite adapter disconnected")

    async def health_check(self) -> bool:
        try:
            async with self.session() as session:
                await session.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.warning(f"SQLite health check failed: {e}")
            return False

    # ==========================================================================
    # SESSION MANAGEMENT
    # ==========================================================================

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """
        Provide transactional session scope.

        Commits on successful exit, rolls back on exception.
        """
        if not self._session_factory:
            raise DatabaseError("Database not connected. Call connect() first.")

        session: AsyncSession = self._session_factory()
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    # ==========================================================================
    # CRUD OPERATIONS
    # ==========================================================================

    async def create(
        self,
        collection: str,
        data: Dict[str, Any],
    ) -> Any:
        """Create a new record."""
        model = self._get_model(collection)

        try:
            async with self.session() as session:
                instance = model(**data)
                session.add(instance)
                await session.flush()
                await session.refresh(instance)
                return instance
        except IntegrityError as e:
            raise ConflictError(
                f"Duplicate value violates a unique constraint on {collection}",
                resource_type=collection,
            ) from e

    async def get_by_id(
        self,
        collection: str,
        id: Any,
    ) -> Optional[Any]:
        """Retrieve record by primary key."""
        model = self._get_model(collection)

        async with self.session() as session:
            return await session.get(model, str(id))

    async def get_all(
        self,
        collection: str,
        skip: int = 0,
        limit: int = 100,
        filters: Optional[Dict[str, Any]] = None,
        sort_by: Optional[str] = None,
        sort_order: str = "asc",
    ) -> List[Any]:
        """Retrieve multiple records with pagination and filtering."""
        model = self._get_model(collection)

        async with self.session() as session:
            query = select(model)

            conditions = self._build_conditions(model, filters)
            if conditions:
                query = query.where(and_(*conditions))

            if sort_by:
                order_column = self._get_column(model, sort_by)
                if sort_order.lower() == "desc":
                    order_column = order_column.desc()
                query = query.order_by(order_column, model.id)

            query = query.offset(skip).limit(limit)

            result = await session.execute(query)
            return list(result.scalars().all())

    async def update(
        self,
        collection: str,
        id: Any,
        data: Dict[str, Any],
    ) -> Optional[Any]:
        """Update an existing record."""
        model = self._get_model(collection)

        try:
            async with self.session() as session:
                instance = await session.get(model, str(id))
                if not instance:
                    return None

                for key, value in data.items():
                    if key != "id" and hasattr(instance, key):
                        setattr(instance, key, value)

                await session.flush()
                await session.refresh(instance)
                return instance
        except IntegrityError as e:
            raise ConflictError(
                f"Duplicate value violates a unique constraint on {collection}",
                resource_type=collection,
            ) from e

    async def delete(
        self,
        collection: str,
        id: Any,
    ) -> bool:
        """Delete a record by ID."""
        model = self._get_model(collection)

        async with self.session() as session:
            instance = await session.get(model, str(id))
            if not instance:
                return False

            await session.delete(instance)
            return True

    async def increment(
        self,
        collection: str,
        id: Any,
        amounts: Dict[str, int],
        conditions: Optional[Dict[str, Any]] = None,
    ) -> Optional[Any]:
        """Apply counter deltas with a single guarded UPDATE statement."""
        model = self._get_model(collection)
        values = {
            field: self._get_column(model, field) + delta
            for field, delta in amounts.items()
        }
        if "updated_at" in model.__table__.columns:
            values["updated_at"] = datetime.now(timezone.utc)
        stmt = (
            update(model)
            .where(model.id == str(id), *self._build_conditions(model, conditions))
            .values(**values)
            .execution_options(synchronize_session=False)
        )

        try:
            async with self.session() as session:
                result = await session.execute(stmt)
                if result.rowcount == 0:
                    return None
                refreshed = await session.execute(select(model).where(model.id == str(id)))
                return refreshed.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Increment on {collection}/{id} failed: {e}")
            raise DatabaseError(f"Failed to update {collection}") from e

    # ==========================================================================
    # QUERY OPERATIONS
    # ==========================================================================

    async def count(
        self,
        collection: str,
        filters: Optional[Dict[str, Any]] = None,
    ) -> int:
        """Count records matching filters."""
        model = self._get_model(collection)

        async with self.session() as session:
            query = select(func.count()).select_from(model)

            conditions = self._build_conditions(model, filters)
            if conditions:
                query = query.where(and_(*conditions))

            result = await session.execute(query)
            return result.scalar() or 0

    async def sum(
        self,
        collection: str,
        field: str,
        filters: Optional[Dict[str, Any]] = None,
    ) -> Decimal:
        """Sum a column with SQL ``SUM`` over matching rows."""
        model = self._get_model(collection)

        async with self.session() as session:
            query = select(func.sum(self._get_column(model, field))).select_from(model)

            conditions = self._build_conditions(model, filters)
            if conditions:
                query = query.where(and_(*conditions))

            result = (await session.execute(query)).scalar()
            return Decimal(str(result)) if result is not None else Decimal("0")

    async def exists(
        self,
        collection: str,
        filters: Dict[str, Any],
    ) -> bool:
        """Check if any record matches filters."""
        return await self.find_one(collection, filters) is not None

    async def find_one(
        self,
        collection: str,
        filters: Dict[str, Any],
    ) -> Optional[Any]:
        """Find a single record matching filters."""
        results = await self.get_all(
            collection,
            skip=0,
            limit=1,
            filters=filters,
        )
        return results[0] if results else None

    # ==========================================================================
    # BULK OPERATIONS
    # ==========================================================================

    async def bulk_update(
        self,
        collection: str,
        filters: Dict[str, Any],
        data: Dict[str, Any],
    ) -> int:
        """Bulk update records matching filters."""
        model = self._get_model(collection)

        async with self.session() as session:
            stmt = (
                update(model)
                .where(*self._build_conditions(model, filters))
                .values(**data)
                .execution_options(synchronize_session=False)
            )
            result = await session.execute(stmt)
            return result.rowcount

    async def bulk_delete(
        self,
        collection: str,
        filters: Dict[str, Any],
    ) -> int:
        """Bulk delete records matching filters."""
        model = self._get_model(collection)

        async with self.session() as session:
            stmt = (
                delete(model)
                .where(*self._build_conditions(model, filters))
                .execution_options(synchronize_session=False)
            )
            result = await session.execute(stmt)
            return result.rowcount
