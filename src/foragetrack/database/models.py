"""SQLAlchemy models for foragetrack database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Numeric,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session
from sqlalchemy.pool import StaticPool

Base = declarative_base()

MEMORY_URL = "sqlite://"


def utcnow() -> datetime:
    """Current UTC time as stored in DateTime columns (naive UTC)."""
    return datetime.now(UTC).replace(tzinfo=None)


def as_stored_time(value: datetime) -> datetime:
    """Normalize an aware datetime to the naive UTC form the columns hold."""
    if value.tzinfo is None:
        return value
    return value.astimezone(UTC).replace(tzinfo=None)


class User(Base):
    """User (display-name account) model."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    alias = Column(String, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    # Relationships
    records = relationship("LedgerRecord", back_populates="user")


class PriceEntry(Base):
    """Market price per kilogram for a category, species and year."""

    __tablename__ = "price_entries"

    id = Column(Integer, primary_key=True)
    category = Column(String(16), nullable=False)
    species = Column(String, nullable=False)
    year = Column(Integer, nullable=False)
    buy_price = Column(Numeric(12, 4), nullable=False, default=0)
    sell_price = Column(Numeric(12, 4), nullable=False, default=0)
    updated_at = Column(DateTime, default=utcnow, nullable=False)

    # At most one entry per natural key
    __table_args__ = (
        UniqueConstraint("category", "species", "year", name="uq_price_natural_key"),
    )


class LedgerRecord(Base):
    """Purchase or sale record.

    quantity is in grams, prices are per kilogram. The totals are nullable
    only so that legacy imports without totals can be represented.
    """

    __tablename__ = "ledger_records"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    category = Column(String(16), nullable=False)
    species = Column(String, nullable=False)
    quantity = Column(Numeric(14, 3), nullable=False)
    buy_price = Column(Numeric(12, 4), nullable=False, default=0)
    sell_price = Column(Numeric(12, 4), nullable=False, default=0)
    location = Column(String, nullable=True)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    total_revenue = Column(Numeric(14, 4), nullable=True)
    total_cost = Column(Numeric(14, 4), nullable=True)
    total_profit = Column(Numeric(14, 4), nullable=True)

    # Relationships
    user = relationship("User", back_populates="records")


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    if database_url == MEMORY_URL:
        # One shared connection, otherwise every checkout sees an empty database
        engine = create_engine(
            database_url,
            echo=False,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, expire_on_commit=False)
