"""Utility functions for foragetrack."""

from foragetrack.utils.date_parser import parse_date, parse_year
from foragetrack.utils.amount_parser import parse_amount, parse_quantity
from foragetrack.utils.user_resolver import resolve_user

__all__ = ["parse_date", "parse_year", "parse_amount", "parse_quantity", "resolve_user"]
