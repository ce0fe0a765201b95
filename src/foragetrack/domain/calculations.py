"""Pure financial calculations shared by the store and the services."""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional, Union

from foragetrack.domain.entities import ZERO, Category, LedgerRecord
from foragetrack.domain.errors import ValidationError, invalid_category, negative_value

GRAMS_PER_KILOGRAM = Decimal("1000")

# Scales of the Numeric columns; values are rounded to these before they are stored
QUANTITY_PLACES = Decimal("0.001")
AMOUNT_PLACES = Decimal("0.0001")

# Stored totals may drift from recomputation by this much before an audit flags them
AUDIT_TOLERANCE = Decimal("0.01")

Number = Union[Decimal, int, float, str]


def to_decimal(value: Optional[Number]) -> Decimal:
    """Convert a numeric value to Decimal, treating None as zero.

    Floats go through str() so 0.1 becomes Decimal("0.1") rather than its
    binary expansion.
    """
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def round_to(amount: Decimal, places: Decimal, name: str = "Amount") -> Decimal:
    """Round a finite amount half-up to the given scale.

    Raises:
        ValidationError: If the amount is NaN, infinite or too large to round
    """
    if not amount.is_finite():
        raise ValidationError(f"{name} must be a finite number, got {amount}")
    try:
        return amount.quantize(places, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise ValidationError(f"{name} is out of range: {amount}") from None


def compute_totals(
    quantity: Optional[Number],
    buy_price: Optional[Number],
    sell_price: Optional[Number],
) -> tuple[Decimal, Decimal, Decimal]:
    """Compute (total_revenue, total_cost, total_profit) for a record.

    Quantity is in grams and prices are per kilogram. Revenue and cost are
    rounded to the stored scale, so profit is exact.
    """
    grams = to_decimal(quantity)
    revenue = round_to(grams * to_decimal(sell_price) / GRAMS_PER_KILOGRAM, AMOUNT_PLACES, "Revenue")
    cost = round_to(grams * to_decimal(buy_price) / GRAMS_PER_KILOGRAM, AMOUNT_PLACES, "Cost")
    return revenue, cost, revenue - cost


def record_revenue(record: LedgerRecord) -> Decimal:
    """Stored revenue of a record, zero when absent."""
    return record.total_revenue if record.total_revenue is not None else ZERO


def record_cost(record: LedgerRecord) -> Decimal:
    """Stored cost of a record, zero when absent."""
    return record.total_cost if record.total_cost is not None else ZERO


def record_profit(record: LedgerRecord) -> Decimal:
    """Stored profit of a record, falling back to revenue minus cost."""
    if record.total_profit is not None:
        return record.total_profit
    return record_revenue(record) - record_cost(record)


def parse_category(category: Union[str, Category]) -> Category:
    """Return the Category for a raw value.

    Raises:
        ValidationError: If the value is not one of the tracked classes
    """
    if isinstance(category, Category):
        return category
    try:
        return Category(str(category).strip().lower())
    except ValueError:
        raise ValidationError(invalid_category(category)) from None


def require_non_negative(name: str, value: Optional[Number]) -> Decimal:
    """Return a price as Decimal at the stored scale, rejecting negatives."""
    amount = to_decimal(value)
    if amount.is_finite() and amount < 0:
        raise ValidationError(negative_value(name, amount))
    return round_to(amount, AMOUNT_PLACES, name)


def require_positive_quantity(quantity: Optional[Number]) -> Decimal:
    """Return quantity as Decimal at the stored scale, rejecting zero and negatives.

    The check runs after rounding, so a quantity that would be stored as
    zero is rejected.
    """
    amount = to_decimal(quantity)
    rounded = round_to(amount, QUANTITY_PLACES, "Quantity")
    if rounded <= 0:
        raise ValidationError(f"Quantity must be greater than 0, got {amount}")
    return rounded


def require_text(name: str, value: Optional[str]) -> str:
    """Return stripped text, rejecting blank values."""
    text = (value or "").strip()
    if not text:
        raise ValidationError(f"{name} is required and cannot be empty")
    return text


def clean_optional_text(value: Optional[str]) -> Optional[str]:
    """Strip optional free text, turning blanks into None."""
    if value is None:
        return None
    text = value.strip()
    return text or None
