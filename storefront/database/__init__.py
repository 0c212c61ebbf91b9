# ==============================================================================
# DATABASE PACKAGE INITIALIZATION
# ==============================================================================
# Storage abstraction: adapters, startup binding, repositories
# ==============================================================================

"""
Database Module
===============

Key Components:
- Adapters: Backend-specific implementations (SQLite, MongoDB)
- Factory: Binds exactly one adapter at process start
- Repositories: Per-aggregate data access returning plain dictionaries
"""

from storefront.database.factory import DatabaseFactory
from storefront.database.adapters.base_adapter import BaseDatabaseAdapter

__all__ = [
    "DatabaseFactory",
    "BaseDatabaseAdapter",
]
