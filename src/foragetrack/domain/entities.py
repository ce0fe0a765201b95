"""Domain model entities for foragetrack.

These are pure data classes representing business concepts, independent of
database schema. Derived figures (record totals, user revenue and profit,
yearly aggregates) live here as values; how they are computed is the
business of the domain services.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

ZERO = Decimal("0")


class Category(str, Enum):
    """Tracked goods class."""

    BERRY = "berry"
    MUSHROOM = "mushroom"

    @classmethod
    def values(cls) -> list[str]:
        return [member.value for member in cls]


class RecordKind(str, Enum):
    """Classification of a ledger record by its price pair."""

    PURCHASE = "purchase"
    SALE = "sale"
    UNPRICED = "unpriced"


@dataclass(frozen=True)
class User:
    """User domain entity.

    revenue and profit are not stored; they are filled in on read from the
    user's ledger records.
    """

    id: int
    alias: str
    created_at: datetime
    revenue: Decimal = ZERO
    profit: Decimal = ZERO


@dataclass(frozen=True)
class UserSession:
    """Capability returned by login-by-alias, scoped to one user id."""

    user_id: int
    alias: str
    token: str


@dataclass(frozen=True)
class PriceEntry:
    """Market buy/sell price per kilogram for a (category, species, year)."""

    id: int
    category: Category
    species: str
    year: int
    buy_price: Decimal
    sell_price: Decimal
    updated_at: datetime

    @property
    def margin(self) -> Decimal:
        """Sell minus buy price per kilogram."""
        return self.sell_price - self.buy_price


@dataclass(frozen=True)
class LedgerRecord:
    """A purchase or sale of foraged goods.

    quantity is in grams, prices are per kilogram. The totals are computed
    when the record is written; they are only None for imported legacy rows
    that carried no totals.
    """

    id: int
    user_id: int
    category: Category
    species: str
    quantity: Decimal
    buy_price: Decimal
    sell_price: Decimal
    location: Optional[str]
    notes: Optional[str]
    created_at: datetime
    total_revenue: Optional[Decimal]
    total_cost: Optional[Decimal]
    total_profit: Optional[Decimal]

    @property
    def kind(self) -> RecordKind:
        if self.buy_price > 0 and self.sell_price == 0:
            return RecordKind.PURCHASE
        if self.sell_price > 0:
            return RecordKind.SALE
        return RecordKind.UNPRICED

    @property
    def is_purchase(self) -> bool:
        return self.kind is RecordKind.PURCHASE

    @property
    def is_sale(self) -> bool:
        return self.kind is RecordKind.SALE

    @property
    def is_proper_sale(self) -> bool:
        """Sale that also carries a cost basis."""
        return self.buy_price > 0 and self.sell_price > 0

    @property
    def lacks_cost_basis(self) -> bool:
        """Looks like a sale but has no buy price."""
        return self.sell_price > 0 and self.buy_price == 0

    @property
    def year(self) -> int:
        return self.created_at.year


@dataclass
class YearlyTotals:
    """Revenue, cost, profit and item count accumulated for one year."""

    revenue: Decimal = ZERO
    cost: Decimal = ZERO
    profit: Decimal = ZERO
    item_count: int = 0

    def add(self, revenue: Decimal, cost: Decimal, profit: Decimal, count: int = 1) -> None:
        self.revenue += revenue
        self.cost += cost
        self.profit += profit
        self.item_count += count

    def merge(self, other: "YearlyTotals") -> None:
        self.add(other.revenue, other.cost, other.profit, other.item_count)


@dataclass(frozen=True)
class InventoryLine:
    """Net stock of one (category, species) for a user, in grams."""

    category: Category
    species: str
    available_quantity: Decimal
    total_purchased: Decimal
    total_sold: Decimal

    @property
    def is_oversold(self) -> bool:
        return self.available_quantity < 0


@dataclass(frozen=True)
class UserSales:
    """Yearly proper-sale totals of one user."""

    user: User
    sales_by_year: dict[int, YearlyTotals]


@dataclass(frozen=True)
class SalesReport:
    """Yearly sales of every user plus system-wide yearly totals."""

    per_user: tuple[UserSales, ...]
    totals_by_year: dict[int, YearlyTotals]


@dataclass(frozen=True)
class AuditReport:
    """Result of an integrity audit over the ledger."""

    inconsistent_records: tuple[LedgerRecord, ...] = ()
    warnings: tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_clean(self) -> bool:
        return not self.inconsistent_records and not self.warnings
