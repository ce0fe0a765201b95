"""Inventory domain service."""

from typing import Optional, Union

from foragetrack.database.base import Database
from foragetrack.domain.calculations import (
    Number,
    parse_category,
    require_positive_quantity,
)
from foragetrack.domain.entities import ZERO, Category, InventoryLine, LedgerRecord
from foragetrack.domain.errors import InsufficientInventoryError, insufficient_inventory


def net_inventory(records: list[LedgerRecord]) -> list[InventoryLine]:
    """Net purchased against sold quantity per (category, species).

    Purchases add to the purchased total and every sale, including one
    without a cost basis, adds to the sold total. Unpriced records only make
    their group appear. Available quantity may be negative.
    """
    groups: dict[tuple[Category, str], list] = {}
    for record in records:
        totals = groups.setdefault((record.category, record.species), [ZERO, ZERO])
        if record.is_purchase:
            totals[0] += record.quantity
        elif record.is_sale:
            totals[1] += record.quantity

    return [
        InventoryLine(
            category=category,
            species=species,
            available_quantity=purchased - sold,
            total_purchased=purchased,
            total_sold=sold,
        )
        for (category, species), (purchased, sold) in sorted(
            groups.items(), key=lambda item: (item[0][0].value, item[0][1])
        )
    ]


class InventoryService:
    """Service for deriving stock on hand from the ledger."""

    def __init__(self, db: Database):
        """Initialize inventory service.

        Args:
            db: Database instance
        """
        self.db = db

    def available_inventory(
        self,
        user_id: int,
        category: Optional[Union[str, Category]] = None,
        species: Optional[str] = None,
    ) -> list[InventoryLine]:
        """Get a user's available quantity per (category, species).

        Args:
            user_id: User ID
            category: Optional category filter
            species: Optional exact species filter

        Returns:
            Inventory lines sorted by category and species
        """
        records = self.db.list_records(
            user_id=user_id,
            category=parse_category(category) if category is not None else None,
            species=species.strip() if species else None,
        )
        return net_inventory(records)

    def ensure_available(
        self,
        user_id: int,
        category: Union[str, Category],
        species: str,
        quantity: Number,
    ) -> None:
        """Check that a sale of quantity grams is covered by stock on hand.

        Raises:
            InsufficientInventoryError: If the sale would oversell
        """
        requested = require_positive_quantity(quantity)
        lines = self.available_inventory(user_id, category=category, species=species)
        available = lines[0].available_quantity if lines else ZERO
        if requested > available:
            raise InsufficientInventoryError(
                insufficient_inventory(species.strip(), requested, available)
            )
