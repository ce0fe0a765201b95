"""Amount and quantity parsing utilities."""

from decimal import Decimal, InvalidOperation
import re


def parse_amount(amount_str: str) -> Decimal:
    """Parse a price string into a Decimal.

    Handles various formats:
    - "4.50"
    - "4,50" (decimal comma)
    - "€4.50" / "4.50 €"
    - "4.50/kg" / "4.50 €/kg"
    - "1,234.56"

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    # Remove whitespace
    amount_str = amount_str.strip()

    # Remove per-kilogram suffix and currency symbols
    amount_str = re.sub(r"/\s*kg$", "", amount_str, flags=re.IGNORECASE)
    amount_str = re.sub(r"[$€£¥]", "", amount_str).strip()

    # A lone comma is a decimal separator, otherwise commas group thousands
    if amount_str.count(",") == 1 and "." not in amount_str:
        amount_str = amount_str.replace(",", ".")
    else:
        amount_str = amount_str.replace(",", "")

    try:
        amount = Decimal(amount_str)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{amount_str}': {e}")
    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{amount_str}': not a finite number")
    return amount


def parse_quantity(quantity_str: str) -> Decimal:
    """Parse a quantity string into grams.

    Handles "500", "500g", "1.5kg" and "1,5 kg".

    Raises:
        ValueError: If quantity string cannot be parsed
    """
    if not quantity_str or not quantity_str.strip():
        raise ValueError("Empty quantity string")

    quantity_str = quantity_str.strip().lower().replace(" ", "")
    multiplier = Decimal("1")
    if quantity_str.endswith("kg"):
        multiplier = Decimal("1000")
        quantity_str = quantity_str[:-2]
    elif quantity_str.endswith("g"):
        quantity_str = quantity_str[:-1]

    if quantity_str.count(",") == 1 and "." not in quantity_str:
        quantity_str = quantity_str.replace(",", ".")

    try:
        quantity = Decimal(quantity_str)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse quantity '{quantity_str}': {e}")
    if not quantity.is_finite():
        raise ValueError(f"Could not parse quantity '{quantity_str}': not a finite number")
    return quantity * multiplier
