"""Ledger (purchase and sale records) domain service."""

from datetime import datetime
from typing import Optional, Union

from foragetrack.database.base import Database
from foragetrack.domain.calculations import (
    Number,
    clean_optional_text,
    parse_category,
    require_non_negative,
    require_positive_quantity,
    require_text,
)
from foragetrack.domain.entities import ZERO, Category, LedgerRecord
from foragetrack.domain.errors import (
    NotFoundError,
    ValidationError,
    not_a_purchase,
    record_not_found,
    user_not_found,
)
from foragetrack.domain.prices import PriceService


class LedgerService:
    """Service for recording purchases and sales."""

    def __init__(self, db: Database):
        """Initialize ledger service.

        Args:
            db: Database instance
        """
        self.db = db
        self.price_service = PriceService(db)

    def record_sale(
        self,
        user_id: int,
        category: Union[str, Category],
        species: str,
        quantity: Number,
        sell_price: Optional[Number] = None,
        buy_price: Optional[Number] = None,
        location: Optional[str] = None,
        notes: Optional[str] = None,
        use_current_price: bool = False,
        created_at: Optional[datetime] = None,
    ) -> LedgerRecord:
        """Record a sale (or any priced record) for a user.

        A well-formed sale carries both prices so that its profit can be
        computed. A sale without a buy price is accepted, logged as a
        warning, and later reported by the integrity audit.

        Args:
            user_id: Owning user ID
            category: "berry" or "mushroom"
            species: Species name
            quantity: Quantity in grams
            sell_price: Sell price per kilogram
            buy_price: Buy price per kilogram (cost basis)
            location: Optional place of collection or sale
            notes: Optional notes
            use_current_price: Fill missing prices from the price table
            created_at: Optional timestamp (defaults to now)

        Returns:
            The created record with its totals

        Raises:
            NotFoundError: If the user doesn't exist
            ValidationError: If any input is invalid or no sell price is known
        """
        category = parse_category(category)
        species = require_text("Species", species)

        if use_current_price:
            sell_price, buy_price = self.resolve_sale_prices(
                category, species, sell_price=sell_price, buy_price=buy_price
            )

        if sell_price is None:
            raise ValidationError(f"No sell price given or known for {category.value} '{species}'")

        return self._create(
            user_id=user_id,
            category=category,
            species=species,
            quantity=quantity,
            buy_price=buy_price,
            sell_price=sell_price,
            location=location,
            notes=notes,
            created_at=created_at,
        )

    def resolve_sale_prices(
        self,
        category: Union[str, Category],
        species: str,
        sell_price: Optional[Number] = None,
        buy_price: Optional[Number] = None,
    ) -> tuple[Optional[Number], Optional[Number]]:
        """Fill missing sell and buy prices from the current market price.

        Returns:
            (sell_price, buy_price); a price stays None when neither the
            caller nor the price table provides it
        """
        if sell_price is None or buy_price is None:
            current = self.price_service.get_current(category, species)
            if current is not None:
                if sell_price is None:
                    sell_price = current.sell_price
                if buy_price is None:
                    buy_price = current.buy_price
        return sell_price, buy_price

    def record_purchase(
        self,
        user_id: int,
        category: Union[str, Category],
        species: str,
        quantity: Number,
        buy_price: Optional[Number] = None,
        location: Optional[str] = None,
        notes: Optional[str] = None,
        use_current_price: bool = False,
        created_at: Optional[datetime] = None,
    ) -> LedgerRecord:
        """Record a purchase; the sell price is always zero.

        Raises:
            NotFoundError: If the user doesn't exist
            ValidationError: If any input is invalid or no buy price is known
        """
        category = parse_category(category)
        species = require_text("Species", species)

        if buy_price is None and use_current_price:
            current = self.price_service.get_current(category, species)
            if current is not None:
                buy_price = current.buy_price

        if buy_price is None:
            raise ValidationError(f"No buy price given or known for {category.value} '{species}'")

        return self._create(
            user_id=user_id,
            category=category,
            species=species,
            quantity=quantity,
            buy_price=buy_price,
            sell_price=ZERO,
            location=location,
            notes=notes,
            created_at=created_at,
        )

    def _create(
        self,
        user_id: int,
        category: Category,
        species: str,
        quantity: Number,
        buy_price: Optional[Number],
        sell_price: Optional[Number],
        location: Optional[str],
        notes: Optional[str],
        created_at: Optional[datetime],
    ) -> LedgerRecord:
        if self.db.get_user(user_id) is None:
            raise NotFoundError(user_not_found(user_id))

        return self.db.create_record(
            user_id=user_id,
            category=category,
            species=species,
            quantity=require_positive_quantity(quantity),
            buy_price=require_non_negative("Buy price", buy_price),
            sell_price=require_non_negative("Sell price", sell_price),
            location=clean_optional_text(location),
            notes=clean_optional_text(notes),
            created_at=created_at,
        )

    def get_record(self, record_id: int) -> Optional[LedgerRecord]:
        """Get record by ID.

        Returns:
            Record or None if not found
        """
        return self.db.get_record(record_id)

    def list_records(self, user_id: int, year: Optional[int] = None) -> list[LedgerRecord]:
        """List a user's records, newest first.

        Args:
            user_id: Owning user ID
            year: Optional calendar year filter
        """
        return self.db.list_records(user_id=user_id, year=year)

    def list_purchases(self, user_id: int, year: Optional[int] = None) -> list[LedgerRecord]:
        """List a user's purchase records, newest first."""
        return [r for r in self.list_records(user_id, year=year) if r.is_purchase]

    def update_record(
        self,
        record_id: int,
        quantity: Optional[Number] = None,
        buy_price: Optional[Number] = None,
        sell_price: Optional[Number] = None,
        location: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Optional[LedgerRecord]:
        """Update a record.

        Fields left as None keep their values. Changing the quantity or a
        price recomputes revenue, cost and profit together.

        Returns:
            Updated record, or None if the ID is unknown

        Raises:
            ValidationError: If a new amount is invalid
        """
        return self.db.update_record(
            record_id,
            quantity=require_positive_quantity(quantity) if quantity is not None else None,
            buy_price=require_non_negative("Buy price", buy_price) if buy_price is not None else None,
            sell_price=require_non_negative("Sell price", sell_price) if sell_price is not None else None,
            location=location.strip() if location is not None else None,
            notes=notes.strip() if notes is not None else None,
        )

    def delete_record(self, record_id: int) -> bool:
        """Delete a record. Returns True if it existed."""
        return self.db.delete_record(record_id)

    def delete_purchase(self, record_id: int) -> bool:
        """Delete a record only if it is a purchase.

        Returns:
            True if deleted, False if the ID is unknown

        Raises:
            ValidationError: If the record exists but is not a purchase
        """
        record = self.db.get_record(record_id)
        if record is None:
            return False
        if not record.is_purchase:
            raise ValidationError(not_a_purchase(record_id))
        return self.db.delete_record(record_id)

    def require_record(self, record_id: int) -> LedgerRecord:
        """Get record by ID or raise NotFoundError."""
        record = self.db.get_record(record_id)
        if record is None:
            raise NotFoundError(record_not_found(record_id))
        return record

    def list_years(self) -> list[int]:
        """Years with ledger records, most recent first."""
        return self.db.list_record_years()
