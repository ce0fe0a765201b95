"""Yearly profit aggregation domain service."""

from collections import defaultdict
from typing import Optional, Union

from foragetrack.database.base import Database
from foragetrack.domain.calculations import (
    parse_category,
    record_cost,
    record_profit,
    record_revenue,
)
from foragetrack.domain.entities import (
    Category,
    LedgerRecord,
    PriceEntry,
    SalesReport,
    UserSales,
    YearlyTotals,
)
from foragetrack.domain.users import UserService


def sales_by_year(records: list[LedgerRecord]) -> dict[int, YearlyTotals]:
    """Group proper sales by calendar year of creation.

    Records without a buy price or without a sell price are skipped. Each
    record contributes its stored totals; profit falls back to revenue minus
    cost when the stored profit is absent.
    """
    yearly: dict[int, YearlyTotals] = defaultdict(YearlyTotals)
    for record in records:
        if not record.is_proper_sale:
            continue
        yearly[record.year].add(
            record_revenue(record), record_cost(record), record_profit(record)
        )
    return dict(yearly)


def market_margins_by_year(prices: list[PriceEntry]) -> dict[int, YearlyTotals]:
    """Treat each price entry as one per-kilogram market observation."""
    yearly: dict[int, YearlyTotals] = defaultdict(YearlyTotals)
    for price in prices:
        yearly[price.year].add(price.sell_price, price.buy_price, price.margin)
    return dict(yearly)


class AggregationService:
    """Service for building yearly profit reports."""

    def __init__(self, db: Database):
        """Initialize aggregation service.

        Args:
            db: Database instance
        """
        self.db = db
        self.user_service = UserService(db)

    def profit_by_user_year(
        self, user_id: int, category: Optional[Union[str, Category]] = None
    ) -> dict[int, YearlyTotals]:
        """Get a user's proper-sale totals per year.

        Args:
            user_id: User ID
            category: Optional category filter

        Returns:
            Mapping of year to totals; years without proper sales are absent
        """
        records = self.db.list_records(
            user_id=user_id,
            category=parse_category(category) if category is not None else None,
        )
        return sales_by_year(records)

    def all_users_sales_by_year(
        self, category: Optional[Union[str, Category]] = None
    ) -> SalesReport:
        """Get every user's yearly sales plus system-wide yearly totals."""
        per_user = []
        totals: dict[int, YearlyTotals] = defaultdict(YearlyTotals)
        for user in self.user_service.list_users():
            user_sales = self.profit_by_user_year(user.id, category=category)
            per_user.append(UserSales(user=user, sales_by_year=user_sales))
            for year, data in user_sales.items():
                totals[year].merge(data)
        return SalesReport(per_user=tuple(per_user), totals_by_year=dict(totals))

    def price_profit_analysis(
        self, category: Optional[Union[str, Category]] = None
    ) -> dict[int, YearlyTotals]:
        """Get per-kilogram market margins per year from the price table.

        This view never reads the ledger.
        """
        prices = self.db.list_prices(
            category=parse_category(category) if category is not None else None
        )
        return market_margins_by_year(prices)
