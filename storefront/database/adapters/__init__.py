# ==============================================================================
# DATABASE ADAPTERS PACKAGE
# ==============================================================================

"""
Database Adapters
=================

Interchangeable storage backends behind one interface:
- BaseDatabaseAdapter: Abstract interface definition
- SQLiteAdapter: SQLite using SQLAlchemy async + aiosqlite
- MongoDBAdapter: MongoDB using Motor async driver
"""

from storefront.database.adapters.base_adapter import BaseDatabaseAdapter
from storefront.database.adapters.mongodb_adapter import MongoDBAdapter
from storefront.database.adapters.sqlite_adapter import SQLiteAdapter

__all__ = [
    "BaseDatabaseAdapter",
    "MongoDBAdapter",
    "SQLiteAdapter",
]
