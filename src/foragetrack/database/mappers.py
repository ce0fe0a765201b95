"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, so column types (plain strings for
categories, Numeric for amounts) never leak into the domain entities.
"""

from decimal import Decimal
from typing import Optional

from foragetrack.domain import entities as domain
from foragetrack.database.models import (
    User as ORMUser,
    PriceEntry as ORMPriceEntry,
    LedgerRecord as ORMLedgerRecord,
)


def _amount(value) -> Decimal:
    if value is None:
        return domain.ZERO
    return value if isinstance(value, Decimal) else Decimal(str(value))


def _optional_amount(value) -> Optional[Decimal]:
    return None if value is None else _amount(value)


def user_to_domain(orm_user: ORMUser) -> domain.User:
    """Convert SQLAlchemy User model to domain User entity."""
    return domain.User(
        id=orm_user.id,
        alias=orm_user.alias,
        created_at=orm_user.created_at,
    )


def price_to_domain(orm_price: ORMPriceEntry) -> domain.PriceEntry:
    """Convert SQLAlchemy PriceEntry model to domain PriceEntry entity."""
    return domain.PriceEntry(
        id=orm_price.id,
        category=domain.Category(orm_price.category),
        species=orm_price.species,
        year=orm_price.year,
        buy_price=_amount(orm_price.buy_price),
        sell_price=_amount(orm_price.sell_price),
        updated_at=orm_price.updated_at,
    )


def record_to_domain(orm_record: ORMLedgerRecord) -> domain.LedgerRecord:
    """Convert SQLAlchemy LedgerRecord model to domain LedgerRecord entity."""
    return domain.LedgerRecord(
        id=orm_record.id,
        user_id=orm_record.user_id,
        category=domain.Category(orm_record.category),
        species=orm_record.species,
        quantity=_amount(orm_record.quantity),
        buy_price=_amount(orm_record.buy_price),
        sell_price=_amount(orm_record.sell_price),
        location=orm_record.location,
        notes=orm_record.notes,
        created_at=orm_record.created_at,
        total_revenue=_optional_amount(orm_record.total_revenue),
        total_cost=_optional_amount(orm_record.total_cost),
        total_profit=_optional_amount(orm_record.total_profit),
    )
