"""Import of records exported from the old JSON-based store.

The old store kept two names for some figures: ``unitPrice`` next to
``sellPrice`` and ``totalPrice`` next to ``totalRevenue``. Translation to the
canonical fields happens here and nowhere else.
"""

import json
import logging
from datetime import datetime, UTC
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Optional

from dateutil import parser as date_parser

from foragetrack.database.base import Database
from foragetrack.domain.calculations import (
    AMOUNT_PLACES,
    clean_optional_text,
    compute_totals,
    parse_category,
    require_non_negative,
    require_positive_quantity,
    require_text,
    round_to,
    to_decimal,
)
from foragetrack.domain.errors import NotFoundError, ValidationError, user_not_found

logger = logging.getLogger(__name__)


def _first_truthy(item: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = item.get(key)
        if value:
            return value
    return None


def _optional_decimal(value: Any) -> Optional[Decimal]:
    if value is None:
        return None
    try:
        amount = to_decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"Invalid amount: {value!r}") from None
    # json.loads accepts NaN and Infinity
    if not amount.is_finite():
        raise ValidationError(f"Invalid amount: {value!r}")
    return amount


def _optional_total(value: Any) -> Optional[Decimal]:
    amount = _optional_decimal(value)
    if amount is None:
        return None
    return round_to(amount, AMOUNT_PLACES, "Total")


def parse_timestamp(value: Any) -> datetime:
    """Parse an exported timestamp into a naive UTC datetime."""
    if not value:
        raise ValidationError("Missing timestamp (collectedAt)")
    try:
        parsed = date_parser.isoparse(str(value))
    except (ValueError, OverflowError) as e:
        raise ValidationError(f"Invalid timestamp '{value}': {e}") from None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(UTC).replace(tzinfo=None)
    return parsed


def translate_legacy_item(item: dict[str, Any]) -> dict[str, Any]:
    """Map one exported item onto canonical record fields.

    Sell price falls back to unitPrice and revenue falls back to totalPrice.
    Totals missing from the export stay None.

    Raises:
        ValidationError: If a required field is missing or invalid
    """
    try:
        quantity = _optional_decimal(item.get("quantity"))
    except ValidationError:
        raise ValidationError(f"Invalid quantity: {item.get('quantity')!r}") from None

    return {
        "category": parse_category(item.get("type") or item.get("category") or ""),
        "species": require_text("Species", item.get("species")),
        "quantity": require_positive_quantity(quantity),
        "buy_price": require_non_negative("Buy price", _optional_decimal(item.get("buyPrice"))),
        "sell_price": require_non_negative(
            "Sell price", _optional_decimal(_first_truthy(item, "sellPrice", "unitPrice"))
        ),
        "created_at": parse_timestamp(item.get("collectedAt") or item.get("createdAt")),
        "total_revenue": _optional_total(_first_truthy(item, "totalRevenue", "totalPrice")),
        "total_cost": _optional_total(item.get("totalCost")),
        "total_profit": _optional_total(item.get("totalProfit")),
        "location": clean_optional_text(item.get("location")),
        "notes": clean_optional_text(item.get("notes")),
    }


class LegacyImportService:
    """Service for importing exported records into the ledger."""

    def __init__(self, db: Database):
        """Initialize legacy import service.

        Args:
            db: Database instance
        """
        self.db = db

    def import_items(
        self, items: list[dict[str, Any]], user_id: int, recompute: bool = False
    ) -> dict[str, Any]:
        """Import exported items for one user.

        Args:
            items: Exported item dictionaries
            user_id: User that will own the records
            recompute: If True, compute totals from quantity and prices instead
                of keeping the exported ones

        Returns:
            Dict with import statistics:
            - imported: number of records imported
            - errors: list of error messages for rejected items

        Raises:
            NotFoundError: If the user doesn't exist
        """
        if self.db.get_user(user_id) is None:
            raise NotFoundError(user_not_found(user_id))

        imported = 0
        errors: list[str] = []
        for index, item in enumerate(items, start=1):
            if not isinstance(item, dict):
                errors.append(f"Item {index}: not an object")
                continue
            try:
                fields = translate_legacy_item(item)
            except ValidationError as e:
                errors.append(f"Item {index}: {e}")
                continue

            if recompute:
                revenue, cost, profit = compute_totals(
                    fields["quantity"], fields["buy_price"], fields["sell_price"]
                )
                fields.update(total_revenue=revenue, total_cost=cost, total_profit=profit)

            self.db.import_record(user_id=user_id, **fields)
            imported += 1

        logger.info("Imported %d records for user %s (%d rejected)", imported, user_id, len(errors))
        return {"imported": imported, "errors": errors}

    def import_file(self, path: str, user_id: int, recompute: bool = False) -> dict[str, Any]:
        """Import a JSON export file.

        The file holds either a list of items or an object with a
        ``stockItems`` list.

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValidationError: If the file isn't a usable export
        """
        export_path = Path(path)
        if not export_path.exists():
            raise FileNotFoundError(f"Export file not found: {path}")

        try:
            payload = json.loads(export_path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ValidationError(f"Could not parse export file '{path}': {e}") from None

        if isinstance(payload, dict):
            payload = payload.get("stockItems")
        if not isinstance(payload, list):
            raise ValidationError("Export file must contain a list of items")

        return self.import_items(payload, user_id=user_id, recompute=recompute)

