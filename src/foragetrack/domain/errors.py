"""Shared domain error messages and error types."""

from decimal import Decimal


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class InsufficientInventoryError(ValidationError):
    """A sale would exceed the stock a user has on hand."""


def user_not_found(user_id: int) -> str:
    """Return message for missing user by ID."""
    return f"User {user_id} not found"


def alias_not_found(alias: str) -> str:
    """Return message for missing user by alias."""
    return f"User '{alias}' not found"


def record_not_found(record_id: int) -> str:
    """Return message for missing ledger record."""
    return f"Record {record_id} not found"


def price_not_found(price_id: int) -> str:
    """Return message for missing price entry."""
    return f"Price {price_id} not found"


def invalid_category(category: str) -> str:
    """Return message for a category outside the tracked classes."""
    return f"Category must be either \"berry\" or \"mushroom\", got '{category}'"


def negative_value(name: str, value: Decimal) -> str:
    """Return message for a price or amount below zero."""
    return f"{name} must be greater than or equal to 0, got {value}"


def not_a_purchase(record_id: int) -> str:
    """Return message when a purchase-only operation hits another record."""
    return f"Record {record_id} is not a purchase"


def insufficient_inventory(
    species: str, requested: Decimal, available: Decimal
) -> str:
    """Return message when a sale exceeds available stock."""
    return (
        f"Cannot sell {requested.normalize():f} g of '{species}': "
        f"only {available.normalize():f} g available. "
        "Record the purchase first or pass --allow-oversell."
    )
