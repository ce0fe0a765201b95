"""Shared pytest fixtures for foragetrack tests."""

import tempfile
import os
from datetime import datetime
import pytest
from click.testing import CliRunner

from foragetrack.database.factories import create_sqlite_database
from foragetrack.domain.aggregation import AggregationService
from foragetrack.domain.audit import IntegrityAuditor
from foragetrack.domain.inventory import InventoryService
from foragetrack.domain.ledger import LedgerService
from foragetrack.domain.legacy import LegacyImportService
from foragetrack.domain.prices import PriceService
from foragetrack.domain.users import UserService


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def user_service(temp_db):
    """Create a UserService with a temporary database."""
    return UserService(temp_db)


@pytest.fixture
def price_service(temp_db):
    """Create a PriceService with a temporary database."""
    return PriceService(temp_db)


@pytest.fixture
def ledger_service(temp_db):
    """Create a LedgerService with a temporary database."""
    return LedgerService(temp_db)


@pytest.fixture
def inventory_service(temp_db):
    """Create an InventoryService with a temporary database."""
    return InventoryService(temp_db)


@pytest.fixture
def aggregation_service(temp_db):
    """Create an AggregationService with a temporary database."""
    return AggregationService(temp_db)


@pytest.fixture
def auditor(temp_db):
    """Create an IntegrityAuditor with a temporary database."""
    return IntegrityAuditor(temp_db)


@pytest.fixture
def import_service(temp_db):
    """Create a LegacyImportService with a temporary database."""
    return LegacyImportService(temp_db)


@pytest.fixture
def sample_user(user_service):
    """Create a sample user for testing."""
    return user_service.create_user("Alice")


@pytest.fixture
def at():
    """Build a naive UTC timestamp inside a given year."""

    def _at(year: int, month: int = 6, day: int = 15) -> datetime:
        return datetime(year, month, day, 12, 0)

    return _at


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    return CliRunner()
