"""
Database access
"""

from marketplace.database.async_db import Database, create_async_database_engine

__all__ = ["Database", "create_async_database_engine"]
