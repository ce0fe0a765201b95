"""CLI helpers for parsing amounts, quantities and dates."""

from datetime import datetime
from decimal import Decimal

import click

from foragetrack.domain.entities import Category
from foragetrack.utils.amount_parser import parse_amount, parse_quantity
from foragetrack.utils.date_parser import parse_date, parse_year, to_timestamp

CATEGORY_CHOICE = click.Choice(Category.values(), case_sensitive=False)


def amount_or_exit(ctx: click.Context, value: str | None, label: str) -> Decimal | None:
    """Parse a non-negative price option, exiting on invalid input."""
    if value is None:
        return None
    try:
        amount = parse_amount(value)
    except ValueError as e:
        click.echo(f"Error: Invalid {label}: {e}", err=True)
        ctx.exit(1)
    if amount < 0:
        click.echo(f"Error: {label.capitalize()} must be greater than or equal to 0", err=True)
        ctx.exit(1)
    return amount


def quantity_or_exit(ctx: click.Context, value: str | None) -> Decimal | None:
    """Parse a strictly positive quantity option, exiting on invalid input."""
    if value is None:
        return None
    try:
        quantity = parse_quantity(value)
    except ValueError as e:
        click.echo(f"Error: Invalid quantity: {e}", err=True)
        ctx.exit(1)
    if quantity <= 0:
        click.echo("Error: Quantity must be greater than 0", err=True)
        ctx.exit(1)
    return quantity


def timestamp_or_exit(ctx: click.Context, value: str | None) -> datetime | None:
    """Parse a --date option into a record timestamp."""
    if value is None:
        return None
    try:
        return to_timestamp(parse_date(value))
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)


def year_or_exit(ctx: click.Context, value: str | None) -> int | None:
    """Parse a --year option."""
    if value is None:
        return None
    try:
        return parse_year(value)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)


def format_money(amount: Decimal | None) -> str:
    """Format a currency amount with two decimals."""
    if amount is None:
        return "-"
    return f"€{amount:,.2f}"


def format_grams(quantity: Decimal) -> str:
    """Format a quantity in grams without trailing zeros."""
    normalized = quantity.normalize()
    if normalized == normalized.to_integral_value():
        normalized = normalized.quantize(Decimal(1))
    return f"{normalized} g"
