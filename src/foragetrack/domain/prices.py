"""Price reference table domain service."""

from datetime import date
from typing import Optional, Union

from foragetrack.database.base import Database
from foragetrack.domain.calculations import (
    Number,
    parse_category,
    require_non_negative,
    require_text,
)
from foragetrack.domain.entities import Category, PriceEntry
from foragetrack.domain.errors import ValidationError

MIN_YEAR = 1900
MAX_YEAR = 9999


def _require_year(year: int) -> int:
    if not MIN_YEAR <= int(year) <= MAX_YEAR:
        raise ValidationError(f"Year must be between {MIN_YEAR} and {MAX_YEAR}, got {year}")
    return int(year)


def pick_current(entries: list[PriceEntry], current_year: int) -> Optional[PriceEntry]:
    """Choose the current price among entries for one (category, species).

    The entry for current_year wins. Otherwise the highest year wins; ties on
    year go to the most recently updated entry, then to the lowest id.
    """
    if not entries:
        return None
    for entry in entries:
        if entry.year == current_year:
            return entry
    return max(entries, key=lambda e: (e.year, e.updated_at, -e.id))


class PriceService:
    """Service for managing market prices."""

    def __init__(self, db: Database):
        """Initialize price service.

        Args:
            db: Database instance
        """
        self.db = db

    def upsert_price(
        self,
        category: Union[str, Category],
        species: str,
        year: int,
        buy_price: Number,
        sell_price: Number,
    ) -> PriceEntry:
        """Set the buy and sell price for a (category, species, year).

        An existing entry for the same key is overwritten in place, keeping its
        ID; otherwise a new entry is created.

        Args:
            category: "berry" or "mushroom"
            species: Species name (e.g. "blueberry")
            year: Price year
            buy_price: Buy price per kilogram
            sell_price: Sell price per kilogram

        Returns:
            The stored price entry

        Raises:
            ValidationError: If any input is invalid
        """
        return self.db.upsert_price(
            category=parse_category(category),
            species=require_text("Species", species),
            year=_require_year(year),
            buy_price=require_non_negative("Buy price", buy_price),
            sell_price=require_non_negative("Sell price", sell_price),
        )

    def get_price(self, price_id: int) -> Optional[PriceEntry]:
        """Get price entry by ID."""
        return self.db.get_price(price_id)

    def get_current(
        self,
        category: Union[str, Category],
        species: str,
        today: Optional[date] = None,
    ) -> Optional[PriceEntry]:
        """Get the price that applies now for a category and species.

        Args:
            category: "berry" or "mushroom"
            species: Species name
            today: Reference date (defaults to today)

        Returns:
            Price entry for the current year, else the most recent year, or None
        """
        today = today or date.today()
        entries = self.db.list_prices(category=parse_category(category), species=species.strip())
        return pick_current(entries, today.year)

    def list_prices(
        self,
        year: Optional[int] = None,
        category: Optional[Union[str, Category]] = None,
        species: Optional[str] = None,
    ) -> list[PriceEntry]:
        """List price entries, optionally filtered by year, category and species."""
        return self.db.list_prices(
            year=year,
            category=parse_category(category) if category is not None else None,
            species=species.strip() if species is not None else None,
        )

    def update_price(
        self,
        price_id: int,
        buy_price: Optional[Number] = None,
        sell_price: Optional[Number] = None,
    ) -> Optional[PriceEntry]:
        """Update the prices of an entry.

        Returns:
            Updated entry, or None if the ID is unknown

        Raises:
            ValidationError: If a price is negative
        """
        return self.db.update_price(
            price_id,
            buy_price=require_non_negative("Buy price", buy_price) if buy_price is not None else None,
            sell_price=require_non_negative("Sell price", sell_price) if sell_price is not None else None,
        )

    def delete_price(self, price_id: int) -> bool:
        """Delete a price entry. Returns True if it existed."""
        return self.db.delete_price(price_id)

    def list_years(self) -> list[int]:
        """Years present in the price table, most recent first."""
        return self.db.list_price_years()
