"""Database factory functions for creating database instances."""

import os
from pathlib import Path
from typing import Optional

from foragetrack.database.models import MEMORY_URL
from foragetrack.database.sqlalchemy_db import SQLAlchemyDatabase

DB_PATH_ENV = "FORAGETRACK_DB_PATH"
MEMORY_PATH = ":memory:"


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    Args:
        database_path: Path to SQLite database file. If None, checks FORAGETRACK_DB_PATH
            environment variable, then defaults to ~/.foragetrack/foragetrack.db.
            The special value ":memory:" gives a process-local in-memory store.

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    if database_path is None:
        # Check environment variable
        database_path = os.environ.get(DB_PATH_ENV)

    if database_path == MEMORY_PATH:
        return create_memory_database()

    if database_path is None:
        # Default to ~/.foragetrack/foragetrack.db
        home = Path.home()
        db_dir = home / ".foragetrack"
        db_dir.mkdir(exist_ok=True)
        database_path = str(db_dir / "foragetrack.db")

    database_url = f"sqlite:///{database_path}"
    return SQLAlchemyDatabase(database_url)


def create_memory_database() -> SQLAlchemyDatabase:
    """Create an in-memory SQLite database that lives as long as the instance."""
    return SQLAlchemyDatabase(MEMORY_URL)
