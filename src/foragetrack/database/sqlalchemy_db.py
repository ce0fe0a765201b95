"""Generic SQLAlchemy database implementation."""

import logging
import threading
from contextlib import contextmanager
from datetime import datetime
from decimal import Decimal
from typing import Iterator, Optional

from sqlalchemy import extract
from sqlalchemy.orm import Session

from foragetrack.database.base import Database
from foragetrack.database.models import (
    User,
    PriceEntry,
    LedgerRecord,
    as_stored_time,
    create_session_factory,
    utcnow,
)
from foragetrack.database.mappers import (
    user_to_domain,
    price_to_domain,
    record_to_domain,
)
from foragetrack.domain.calculations import compute_totals, to_decimal
from foragetrack.domain.entities import (
    Category,
    User as DomainUser,
    PriceEntry as DomainPriceEntry,
    LedgerRecord as DomainLedgerRecord,
)

logger = logging.getLogger(__name__)


def _warn_if_no_cost_basis(user_id: int, buy_price: Decimal, sell_price: Decimal) -> None:
    if sell_price > 0 and buy_price == 0:
        logger.warning(
            "Recording item with sell price %s but no buy price for user %s; "
            "it will count as sold stock but not as a proper sale",
            sell_price,
            user_id,
        )


class SQLAlchemyDatabase(Database):
    """SQLAlchemy-based implementation of Database interface.

    The instance owns a single session. Every mutation runs under one
    re-entrant lock and commits (or rolls back) as a unit, so readers never
    see a record whose totals have not been computed yet.
    """

    def __init__(self, database_url: str):
        """Initialize SQLAlchemy database.

        Args:
            database_url: SQLAlchemy database URL (e.g., 'sqlite:///path/to.db',
                'sqlite://' for an in-memory store)
        """
        self.database_url = database_url
        self.session_factory = create_session_factory(database_url)
        self._session: Optional[Session] = None
        self._lock = threading.RLock()

    def _get_session(self) -> Session:
        """Get current session, creating one if needed."""
        if self._session is None:
            self._session = self.session_factory()
        return self._session

    @contextmanager
    def _write(self) -> Iterator[Session]:
        """Run a mutation under the write lock and commit it atomically."""
        with self._lock:
            session = self._get_session()
            try:
                yield session
                session.commit()
            except Exception:
                session.rollback()
                raise

    def connect(self) -> None:
        """Connect to the database."""
        # Connection is lazy, so this is a no-op
        pass

    def disconnect(self) -> None:
        """Disconnect from the database."""
        with self._lock:
            if self._session is not None:
                self._session.close()
                self._session = None

    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        # Schema is created automatically by create_session_factory
        pass

    # User operations
    def create_user(self, alias: str) -> DomainUser:
        """Create a new user."""
        with self._write() as session:
            user = User(alias=alias)
            session.add(user)
            session.flush()
            logger.debug("Created user %s (%s)", user.id, alias)
            return user_to_domain(user)

    def get_user(self, user_id: int) -> Optional[DomainUser]:
        """Get user by ID."""
        with self._lock:
            session = self._get_session()
            user = session.query(User).filter(User.id == user_id).first()
            if user is None:
                return None
            return user_to_domain(user)

    def find_user_by_alias(self, alias: str) -> Optional[DomainUser]:
        """Get the first user registered under an alias."""
        with self._lock:
            session = self._get_session()
            user = session.query(User).filter(User.alias == alias).order_by(User.id).first()
            if user is None:
                return None
            return user_to_domain(user)

    def list_users(self) -> list[DomainUser]:
        """List all users."""
        with self._lock:
            session = self._get_session()
            users = session.query(User).order_by(User.id).all()
            return [user_to_domain(u) for u in users]

    # Price operations
    def upsert_price(
        self,
        category: Category,
        species: str,
        year: int,
        buy_price: Decimal,
        sell_price: Decimal,
    ) -> DomainPriceEntry:
        """Create or overwrite the entry for (category, species, year)."""
        with self._write() as session:
            price = (
                session.query(PriceEntry)
                .filter(
                    PriceEntry.category == category.value,
                    PriceEntry.species == species,
                    PriceEntry.year == year,
                )
                .first()
            )
            if price is None:
                price = PriceEntry(category=category.value, species=species, year=year)
                session.add(price)
                logger.debug("Creating price for %s/%s/%s", category.value, species, year)
            else:
                logger.debug("Overwriting price %s for %s/%s/%s", price.id, category.value, species, year)
            price.buy_price = to_decimal(buy_price)
            price.sell_price = to_decimal(sell_price)
            price.updated_at = utcnow()
            session.flush()
            return price_to_domain(price)

    def get_price(self, price_id: int) -> Optional[DomainPriceEntry]:
        """Get price entry by ID."""
        with self._lock:
            session = self._get_session()
            price = session.query(PriceEntry).filter(PriceEntry.id == price_id).first()
            if price is None:
                return None
            return price_to_domain(price)

    def list_prices(
        self,
        year: Optional[int] = None,
        category: Optional[Category] = None,
        species: Optional[str] = None,
    ) -> list[DomainPriceEntry]:
        """List price entries with optional filters."""
        with self._lock:
            session = self._get_session()
            query = session.query(PriceEntry)
            if year is not None:
                query = query.filter(PriceEntry.year == year)
            if category is not None:
                query = query.filter(PriceEntry.category == category.value)
            if species is not None:
                query = query.filter(PriceEntry.species == species)
            prices = query.order_by(
                PriceEntry.year.desc(), PriceEntry.category, PriceEntry.species, PriceEntry.id
            ).all()
            return [price_to_domain(p) for p in prices]

    def update_price(
        self,
        price_id: int,
        buy_price: Optional[Decimal] = None,
        sell_price: Optional[Decimal] = None,
    ) -> Optional[DomainPriceEntry]:
        """Update prices of an entry and refresh its timestamp."""
        with self._write() as session:
            price = session.query(PriceEntry).filter(PriceEntry.id == price_id).first()
            if price is None:
                return None
            if buy_price is not None:
                price.buy_price = to_decimal(buy_price)
            if sell_price is not None:
                price.sell_price = to_decimal(sell_price)
            price.updated_at = utcnow()
            session.flush()
            return price_to_domain(price)

    def delete_price(self, price_id: int) -> bool:
        """Delete a price entry."""
        with self._write() as session:
            price = session.query(PriceEntry).filter(PriceEntry.id == price_id).first()
            if price is None:
                return False
            session.delete(price)
            return True

    def list_price_years(self) -> list[int]:
        """Distinct years present in the price table, most recent first."""
        with self._lock:
            session = self._get_session()
            rows = session.query(PriceEntry.year).distinct().all()
            return sorted({row[0] for row in rows}, reverse=True)

    # Ledger operations
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
    ) -> DomainLedgerRecord:
        """Create a ledger record, computing its totals."""
        quantity = to_decimal(quantity)
        buy_price = to_decimal(buy_price)
        sell_price = to_decimal(sell_price)
        _warn_if_no_cost_basis(user_id, buy_price, sell_price)

        revenue, cost, profit = compute_totals(quantity, buy_price, sell_price)
        with self._write() as session:
            record = LedgerRecord(
                user_id=user_id,
                category=category.value,
                species=species,
                quantity=quantity,
                buy_price=buy_price,
                sell_price=sell_price,
                location=location,
                notes=notes,
                created_at=as_stored_time(created_at) if created_at else utcnow(),
                total_revenue=revenue,
                total_cost=cost,
                total_profit=profit,
            )
            session.add(record)
            session.flush()
            logger.debug("Created record %s for user %s", record.id, user_id)
            return record_to_domain(record)

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
    ) -> DomainLedgerRecord:
        """Store a record with totals taken verbatim from an import source."""
        buy_price = to_decimal(buy_price)
        sell_price = to_decimal(sell_price)
        _warn_if_no_cost_basis(user_id, buy_price, sell_price)

        with self._write() as session:
            record = LedgerRecord(
                user_id=user_id,
                category=category.value,
                species=species,
                quantity=to_decimal(quantity),
                buy_price=buy_price,
                sell_price=sell_price,
                location=location,
                notes=notes,
                created_at=as_stored_time(created_at),
                total_revenue=total_revenue,
                total_cost=total_cost,
                total_profit=total_profit,
            )
            session.add(record)
            session.flush()
            logger.debug("Imported record %s for user %s", record.id, user_id)
            return record_to_domain(record)

    def get_record(self, record_id: int) -> Optional[DomainLedgerRecord]:
        """Get ledger record by ID."""
        with self._lock:
            session = self._get_session()
            record = session.query(LedgerRecord).filter(LedgerRecord.id == record_id).first()
            if record is None:
                return None
            return record_to_domain(record)

    def list_records(
        self,
        user_id: Optional[int] = None,
        year: Optional[int] = None,
        category: Optional[Category] = None,
        species: Optional[str] = None,
    ) -> list[DomainLedgerRecord]:
        """List ledger records with optional filters."""
        with self._lock:
            session = self._get_session()
            query = session.query(LedgerRecord)
            if user_id is not None:
                query = query.filter(LedgerRecord.user_id == user_id)
            if year is not None:
                query = query.filter(extract("year", LedgerRecord.created_at) == year)
            if category is not None:
                query = query.filter(LedgerRecord.category == category.value)
            if species is not None:
                query = query.filter(LedgerRecord.species == species)

            records = query.order_by(LedgerRecord.created_at.desc(), LedgerRecord.id.desc()).all()
            return [record_to_domain(r) for r in records]

    def update_record(
        self,
        record_id: int,
        quantity: Optional[Decimal] = None,
        buy_price: Optional[Decimal] = None,
        sell_price: Optional[Decimal] = None,
        location: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Optional[DomainLedgerRecord]:
        """Update record fields.

        Any change to quantity or a price recomputes all three totals from the
        merged record. Empty strings clear location and notes.
        """
        with self._write() as session:
            record = session.query(LedgerRecord).filter(LedgerRecord.id == record_id).first()
            if record is None:
                return None

            amounts_changed = False
            if quantity is not None:
                record.quantity = to_decimal(quantity)
                amounts_changed = True
            if buy_price is not None:
                record.buy_price = to_decimal(buy_price)
                amounts_changed = True
            if sell_price is not None:
                record.sell_price = to_decimal(sell_price)
                amounts_changed = True
            if location is not None:
                record.location = location or None
            if notes is not None:
                record.notes = notes or None

            if amounts_changed:
                revenue, cost, profit = compute_totals(
                    record.quantity, record.buy_price, record.sell_price
                )
                record.total_revenue = revenue
                record.total_cost = cost
                record.total_profit = profit
                _warn_if_no_cost_basis(
                    record.user_id, to_decimal(record.buy_price), to_decimal(record.sell_price)
                )

            session.flush()
            logger.debug("Updated record %s", record_id)
            return record_to_domain(record)

    def delete_record(self, record_id: int) -> bool:
        """Delete a ledger record."""
        with self._write() as session:
            record = session.query(LedgerRecord).filter(LedgerRecord.id == record_id).first()
            if record is None:
                return False
            session.delete(record)
            logger.debug("Deleted record %s", record_id)
            return True

    def list_record_years(self) -> list[int]:
        """Distinct record years in the ledger, most recent first."""
        with self._lock:
            session = self._get_session()
            rows = session.query(LedgerRecord.created_at).all()
            return sorted({row[0].year for row in rows}, reverse=True)
