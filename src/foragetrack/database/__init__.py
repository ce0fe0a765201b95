"""Database layer for foragetrack application."""

from foragetrack.database.base import Database
from foragetrack.database.factories import create_sqlite_database, create_memory_database

__all__ = ["Database", "create_sqlite_database", "create_memory_database"]
