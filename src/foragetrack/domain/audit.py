"""Ledger integrity audit."""

from decimal import Decimal
from typing import Optional

from foragetrack.database.base import Database
from foragetrack.domain.calculations import AUDIT_TOLERANCE, compute_totals
from foragetrack.domain.entities import ZERO, AuditReport, LedgerRecord


def _stored(value: Optional[Decimal]) -> Decimal:
    return value if value is not None else ZERO


def totals_mismatch(record: LedgerRecord, tolerance: Decimal = AUDIT_TOLERANCE) -> bool:
    """True when any stored total is further than tolerance from recomputation."""
    expected = compute_totals(record.quantity, record.buy_price, record.sell_price)
    stored = (
        _stored(record.total_revenue),
        _stored(record.total_cost),
        _stored(record.total_profit),
    )
    return any(abs(s - e) > tolerance for s, e in zip(stored, expected))


class IntegrityAuditor:
    """Read-only checks over stored ledger records."""

    def __init__(self, db: Database):
        """Initialize auditor.

        Args:
            db: Database instance
        """
        self.db = db

    def audit(self, tolerance: Decimal = AUDIT_TOLERANCE) -> AuditReport:
        """Scan every record for miscategorization and stale totals.

        A record with a sell price but no buy price is reported as possibly
        miscategorized. A record with both prices is reported when its stored
        totals disagree with quantity and prices.
        """
        inconsistent: list[LedgerRecord] = []
        warnings: list[str] = []

        for record in self.db.list_records():
            if record.lacks_cost_basis:
                inconsistent.append(record)
                warnings.append(
                    f"Record {record.id}: has sell price ({record.sell_price}) but no buy price. "
                    "It counts as sold stock but is excluded from sales totals."
                )
            elif record.is_proper_sale and totals_mismatch(record, tolerance):
                inconsistent.append(record)
                warnings.append(
                    f"Record {record.id}: stored totals don't match quantity and prices."
                )

        return AuditReport(inconsistent_records=tuple(inconsistent), warnings=tuple(warnings))
