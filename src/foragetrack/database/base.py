"""Abstract database interface."""

from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal
from typing import Optional

# Import entities directly to avoid circular import through domain/__init__.py
from foragetrack.domain.entities import (
    Category,
    LedgerRecord,
    PriceEntry,
    User,
)


class Database(ABC):
    """Abstract database interface for foragetrack.

    Getters return None for unknown ids and delete operations return False;
    absence is never signalled with an exception.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # User operations
    @abstractmethod
    def create_user(self, alias: str) -> User:
        """Create a new user."""
        pass

    @abstractmethod
    def get_user(self, user_id: int) -> Optional[User]:
        """Get user by ID (stored fields only)."""
        pass

    @abstractmethod
    def find_user_by_alias(self, alias: str) -> Optional[User]:
        """Get the first user registered under an alias."""
        pass

    @abstractmethod
    def list_users(self) -> list[User]:
        """List all users in registration order."""
        pass

    # Price operations
    @abstractmethod
    def upsert_price(
        self,
        category: Category,
        species: str,
        year: int,
        buy_price: Decimal,
        sell_price: Decimal,
    ) -> PriceEntry:
        """Create or overwrite the entry for (category, species, year)."""
        pass

    @abstractmethod
    def get_price(self, price_id: int) -> Optional[PriceEntry]:
        """Get price entry by ID."""
        pass

    @abstractmethod
    def list_prices(
        self,
        year: Optional[int] = None,
        category: Optional[Category] = None,
        species: Optional[str] = None,
    ) -> list[PriceEntry]:
        """List price entries with optional filters."""
        pass

    @abstractmethod
    def update_price(
        self,
        price_id: int,
        buy_price: Optional[Decimal] = None,
        sell_price: Optional[Decimal] = None,
    ) -> Optional[PriceEntry]:
        """Update prices of an entry and refresh its timestamp."""
        pass

    @abstractmethod
    def delete_price(self, price_id: int) -> bool:
        """Delete a price entry. Returns True if it existed."""
        pass

    @abstractmethod
    def list_price_years(self) -> list[int]:
        """Distinct years present in the price table, most recent first."""
        pass

    # Ledger operations
    @abstractmethod
    def create_record(
        self,
        user_id: int,
        category: Category,
        species: str,
        quantity: Decimal,
        buy_price: Decimal,
        sell_price: Decimal,
        location: Optional[str] = None,
        notes: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> LedgerRecord:
        """Create a ledger record, computing its totals."""
        pass

    @abstractmethod
    def import_record(
        self,
        user_id: int,
        category: Category,
        species: str,
        quantity: Decimal,
        buy_price: Decimal,
        sell_price: Decimal,
        created_at: datetime,
        total_revenue: Optional[Decimal],
        total_cost: Optional[Decimal],
        total_profit: Optional[Decimal],
        location: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> LedgerRecord:
        """Store a record with totals taken verbatim from an import source."""
        pass

    @abstractmethod
    def get_record(self, record_id: int) -> Optional[LedgerRecord]:
        """Get ledger record by ID."""
        pass

    @abstractmethod
    def list_records(
        self,
        user_id: Optional[int] = None,
        year: Optional[int] = None,
        category: Optional[Category] = None,
        species: Optional[str] = None,
    ) -> list[LedgerRecord]:
        """List ledger records, newest first.

        Args:
            user_id: Optional owning user filter
            year: Optional calendar year of created_at
            category: Optional category filter
            species: Optional exact species filter
        """
        pass

    @abstractmethod
    def update_record(
        self,
        record_id: int,
        quantity: Optional[Decimal] = None,
        buy_price: Optional[Decimal] = None,
        sell_price: Optional[Decimal] = None,
        location: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Optional[LedgerRecord]:
        """Update record fields, recomputing totals when amounts change."""
        pass

    @abstractmethod
    def delete_record(self, record_id: int) -> bool:
        """Delete a ledger record. Returns True if it existed."""
        pass

    @abstractmethod
    def list_record_years(self) -> list[int]:
        """Distinct record years in the ledger, most recent first."""
        pass
