# ==============================================================================
# DATABASE FACTORY - Adapter Binding & Lifecycle Management
# ==============================================================================
# Binds one storage adapter per process, selected by DATABASE_TYPE
# ==============================================================================

from __future__ import annotations

import logging
from typing import Optional

from storefront.core.settings import settings, DatabaseType
from storefront.core.exceptions import DatabaseError
from storefront.database.adapters.base_adapter import BaseDatabaseAdapter
from storefront.database.adapters.mongodb_adapter import MongoDBAdapter
from storefront.database.adapters.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)


class DatabaseFactory:
    """
    Factory class for creating and binding the database adapter.

    The backend is chosen once, at startup, from configuration.
    Nothing downstream probes which backend is active; repositories
    only see the ``BaseDatabaseAdapter`` interface.

    Class Attributes:
        _adapter: The bound adapter instance (None until initialized)

    Example:
        >>> await DatabaseFactory.initialize()
        >>> adapter = DatabaseFactory.get_adapter()
        >>> user = await adapter.get_by_id("users", user_id)
        >>> await DatabaseFactory.shutdown()
    """

    _adapter: Optional[BaseDatabaseAdapter] = None

    @classmethod
    def create_adapter(
        cls,
        db_type: Optional[DatabaseType] = None,
        **kwargs,
    ) -> BaseDatabaseAdapter:
        """
        Create the adapter for a database type.

        Args:
            db_type: Database type (defaults to settings.DATABASE_TYPE)
            **kwargs: Additional adapter configuration
                - database_url: Custom SQLite URL
                - connection_url: MongoDB connection URL
                - database_name: MongoDB database name

        Raises:
            ValueError: If database type is not supported
        """
        db_type = db_type or settings.DATABASE_TYPE

        if db_type == DatabaseType.SQLITE:
            adapter: BaseDatabaseAdapter = SQLiteAdapter(
                database_url=kwargs.get("database_url")
            )
            cls._register_models(adapter)
            logger.info("Created SQLite adapter")
            return adapter

        if db_type == DatabaseType.MONGODB:
            logger.info("Created MongoDB adapter")
            return MongoDBAdapter(
                connection_url=kwargs.get("connection_url"),
                database_name=kwargs.get("database_name"),
            )

        raise ValueError(f"Unsupported database type: {db_type}")

    @classmethod
    def _register_models(cls, adapter: SQLiteAdapter) -> None:
        """Register all domain models with a relational adapter."""
        from storefront.domain_models import MODEL_REGISTRY

        for name, model in MODEL_REGISTRY.items():
            adapter.register_model(name, model)

    @classmethod
    async def initialize(
        cls,
        db_type: Optional[DatabaseType] = None,
        **kwargs,
    ) -> BaseDatabaseAdapter:
        """
        Create, connect and bind the adapter.

        Calling it again while an adapter is bound returns that adapter.

        Raises:
            DatabaseError: If connection fails
        """
        if cls._adapter is not None:
            return cls._adapter

        db_type = db_type or settings.DATABASE_TYPE
        adapter = cls.create_adapter(db_type, **kwargs)

        try:
            await adapter.connect()
        except DatabaseError:
            raise
        except Exception as e:
            logger.error(f"Database initialization failed: {e}")
            raise DatabaseError(f"Failed to initialize database: {e}") from e

        cls._adapter = adapter
        logger.info(f"Database initialized: {db_type.value}")
        return adapter

    @classmethod
    async def shutdown(cls) -> None:
        """Disconnect and unbind the adapter."""
        if cls._adapter is not None:
            try:
                await cls._adapter.disconnect()
            except Exception as e:
                logger.error(f"Error disconnecting database: {e}")
            cls._adapter = None
            logger.info("Database connection closed")

    @classmethod
    def get_adapter(cls) -> BaseDatabaseAdapter:
        """
        Get the bound adapter.

        Raises:
            DatabaseError: If no adapter has been initialized
        """
        if cls._adapter is None:
            raise DatabaseError(
                "Database adapter not initialized. "
                "Call DatabaseFactory.initialize() first."
            )
        return cls._adapter

    @classmethod
    async def health_check(cls) -> bool:
        """Ask the bound adapter for a live round trip."""
        if cls._adapter is None:
            return False
        return await cls._adapter.health_check()

    @classmethod
    def reset(cls) -> None:
        """
        Reset factory state.

        Unbinds the adapter without disconnecting. Used by tests.
        """
        cls._adapter = None
