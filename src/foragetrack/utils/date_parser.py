"""Date parsing utilities."""

from datetime import date, datetime, time, timedelta, UTC
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports various formats including relative dates:
    - Absolute dates: "2024-08-15", "August 15, 2024", etc.
    - Relative dates: "today", "yesterday", "last week", "last month", etc.

    Args:
        date_str: Date string in various formats

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = date.today()

    # Handle relative dates
    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "last week": today - timedelta(days=7),
        "last month": today - relativedelta(months=1),
        "last year": today - relativedelta(years=1),
    }

    if date_str in relative_dates:
        return relative_dates[date_str]

    # Try parsing as absolute date
    try:
        dt = date_parser.parse(date_str)
        return dt.date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def parse_year(year_str: str) -> int:
    """Parse a year string ("2024", "this year", "last year") into an int.

    Raises:
        ValueError: If year string cannot be parsed
    """
    year_str = year_str.strip().lower()
    today = date.today()

    if year_str in ("this year", "this-year", "current"):
        return today.year
    if year_str in ("last year", "last-year"):
        return today.year - 1

    if year_str.isdigit() and len(year_str) == 4:
        return int(year_str)
    raise ValueError(f"Could not parse year '{year_str}'")


def to_timestamp(day: date) -> datetime:
    """Turn a date into a record timestamp.

    Today maps to the current time; other days map to noon UTC so the
    calendar year never shifts.
    """
    if day == date.today():
        return datetime.now(UTC)
    return datetime.combine(day, time(12, 0), tzinfo=UTC)
