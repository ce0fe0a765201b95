"""User (identity registry) domain service."""

import uuid
from dataclasses import replace
from decimal import Decimal
from typing import Optional

from foragetrack.database.base import Database
from foragetrack.domain.calculations import record_revenue, require_text
from foragetrack.domain.entities import ZERO, LedgerRecord, User, UserSession
from foragetrack.domain.errors import NotFoundError, alias_not_found


def user_totals(records: list[LedgerRecord]) -> tuple[Decimal, Decimal]:
    """Fold every record of a user into (revenue, profit).

    No purchase/sale classification is applied here: purchases contribute
    their negative profit and sales without a cost basis count in full.
    Profit falls back to revenue when a record has no stored profit.
    """
    revenue = ZERO
    profit = ZERO
    for record in records:
        item_revenue = record_revenue(record)
        revenue += item_revenue
        profit += record.total_profit if record.total_profit is not None else item_revenue
    return revenue, profit


class UserService:
    """Service for managing users."""

    def __init__(self, db: Database):
        """Initialize user service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_user(self, alias: str) -> User:
        """Register a new user.

        Aliases are unique by convention only; registering an existing alias
        creates a second user.

        Args:
            alias: Display name

        Returns:
            The new user with zero revenue and profit

        Raises:
            ValidationError: If alias is blank
        """
        return self.db.create_user(require_text("Alias name", alias))

    def get_user(self, user_id: int) -> Optional[User]:
        """Get user by ID with revenue and profit computed from the ledger.

        Args:
            user_id: User ID

        Returns:
            User entity or None if not found
        """
        user = self.db.get_user(user_id)
        if user is None:
            return None
        return self._with_totals(user)

    def list_users(self) -> list[User]:
        """List all users with revenue and profit computed from the ledger."""
        return [self._with_totals(user) for user in self.db.list_users()]

    def find_by_alias(self, alias: str) -> Optional[User]:
        """Get the first user registered under an alias."""
        user = self.db.find_user_by_alias(alias.strip())
        if user is None:
            return None
        return self._with_totals(user)

    def login(self, alias: str) -> UserSession:
        """Resolve an alias to a session scoped to that user.

        This is a lookup, not authentication: no secret is checked.

        Raises:
            NotFoundError: If no user has the alias
        """
        alias = alias.strip()
        user = self.db.find_user_by_alias(alias)
        if user is None:
            raise NotFoundError(alias_not_found(alias))
        return UserSession(user_id=user.id, alias=user.alias, token=uuid.uuid4().hex)

    def _with_totals(self, user: User) -> User:
        revenue, profit = user_totals(self.db.list_records(user_id=user.id))
        return replace(user, revenue=revenue, profit=profit)
