"""Tests for the ledger service."""

import logging
import pytest
from decimal import Decimal

from foragetrack.database.factories import create_sqlite_database
from foragetrack.domain.entities import Category, RecordKind
from foragetrack.domain.errors import NotFoundError, ValidationError


class TestRecordSale:
    """Tests for recording sales."""

    def test_sale_computes_totals(self, ledger_service, sample_user, at):
        """Totals are computed from grams and per-kilogram prices."""
        record = ledger_service.record_sale(
            sample_user.id,
            "berry",
            "blueberry",
            quantity=200,
            sell_price=Decimal("6"),
            buy_price=Decimal("3"),
            location="Nuuksio",
            created_at=at(2024),
        )

        assert record.id is not None
        assert record.category is Category.BERRY
        assert record.kind is RecordKind.SALE
        assert record.total_revenue == Decimal("1.2")
        assert record.total_cost == Decimal("0.6")
        assert record.total_profit == Decimal("0.6")
        assert record.location == "Nuuksio"
        assert record.year == 2024

    def test_sale_requires_sell_price(self, ledger_service, sample_user):
        with pytest.raises(ValidationError, match="sell price"):
            ledger_service.record_sale(sample_user.id, "berry", "blueberry", quantity=100)

    def test_sale_unknown_user(self, ledger_service):
        with pytest.raises(NotFoundError):
            ledger_service.record_sale(999, "berry", "blueberry", quantity=100, sell_price=5)

    def test_sale_invalid_category(self, ledger_service, sample_user):
        with pytest.raises(ValidationError):
            ledger_service.record_sale(sample_user.id, "fish", "salmon", quantity=100, sell_price=5)

    def test_sale_rejects_non_positive_quantity(self, ledger_service, sample_user):
        with pytest.raises(ValidationError):
            ledger_service.record_sale(sample_user.id, "berry", "blueberry", quantity=0, sell_price=5)

    def test_sale_rejects_negative_price(self, ledger_service, sample_user):
        with pytest.raises(ValidationError):
            ledger_service.record_sale(
                sample_user.id, "berry", "blueberry", quantity=100, sell_price=-1
            )

    def test_sale_without_buy_price_logs_warning(self, ledger_service, sample_user, caplog):
        """A sale with no cost basis is accepted but logged."""
        with caplog.at_level(logging.WARNING, logger="foragetrack.database.sqlalchemy_db"):
            record = ledger_service.record_sale(
                sample_user.id, "berry", "lingonberry", quantity=100, sell_price=5
            )

        assert record.lacks_cost_basis
        assert record.total_revenue == Decimal("0.5")
        assert "no buy price" in caplog.text

    def test_sale_uses_current_price(self, ledger_service, price_service, sample_user):
        """Missing prices are filled from the price table."""
        price_service.upsert_price("mushroom", "chanterelle", 2024, Decimal("8"), Decimal("15"))

        record = ledger_service.record_sale(
            sample_user.id, "mushroom", "chanterelle", quantity=1000, use_current_price=True
        )

        assert record.sell_price == Decimal("15")
        assert record.buy_price == Decimal("8")
        assert record.total_profit == Decimal("7")

    def test_current_price_is_copied_by_value(self, ledger_service, price_service, sample_user):
        """Changing the price table later doesn't touch recorded sales."""
        entry = price_service.upsert_price("berry", "blueberry", 2024, Decimal("3"), Decimal("6"))
        record = ledger_service.record_sale(
            sample_user.id, "berry", "blueberry", quantity=1000, use_current_price=True
        )

        price_service.update_price(entry.id, sell_price=Decimal("10"))

        stored = ledger_service.get_record(record.id)
        assert stored.sell_price == Decimal("6")
        assert stored.total_revenue == Decimal("6")

    def test_explicit_price_beats_current_price(self, ledger_service, price_service, sample_user):
        price_service.upsert_price("berry", "blueberry", 2024, Decimal("3"), Decimal("6"))

        record = ledger_service.record_sale(
            sample_user.id,
            "berry",
            "blueberry",
            quantity=1000,
            sell_price=Decimal("7"),
            use_current_price=True,
        )

        assert record.sell_price == Decimal("7")
        assert record.buy_price == Decimal("3")


class TestRecordPurchase:
    """Tests for recording purchases."""

    def test_purchase_forces_zero_sell_price(self, ledger_service, sample_user):
        record = ledger_service.record_purchase(
            sample_user.id, "berry", "blueberry", quantity=500, buy_price=Decimal("2")
        )

        assert record.is_purchase
        assert record.sell_price == 0
        assert record.total_revenue == 0
        assert record.total_cost == Decimal("1")
        assert record.total_profit == Decimal("-1")

    def test_purchase_requires_buy_price(self, ledger_service, sample_user):
        with pytest.raises(ValidationError, match="buy price"):
            ledger_service.record_purchase(sample_user.id, "berry", "blueberry", quantity=500)

    def test_purchase_with_current_price(self, ledger_service, price_service, sample_user):
        price_service.upsert_price("berry", "cloudberry", 2024, Decimal("12"), Decimal("20"))

        record = ledger_service.record_purchase(
            sample_user.id, "berry", "cloudberry", quantity=250, use_current_price=True
        )

        assert record.buy_price == Decimal("12")
        assert record.sell_price == 0


class TestQueries:
    """Tests for listing and reading records."""

    def test_list_records_newest_first(self, ledger_service, sample_user, at):
        old = ledger_service.record_purchase(
            sample_user.id, "berry", "blueberry", 500, buy_price=2, created_at=at(2023)
        )
        new = ledger_service.record_sale(
            sample_user.id, "berry", "blueberry", 200, sell_price=6, buy_price=3, created_at=at(2024)
        )

        records = ledger_service.list_records(sample_user.id)
        assert [r.id for r in records] == [new.id, old.id]

    def test_list_records_by_year(self, ledger_service, sample_user, at):
        ledger_service.record_purchase(
            sample_user.id, "berry", "blueberry", 500, buy_price=2, created_at=at(2023)
        )
        ledger_service.record_sale(
            sample_user.id, "berry", "blueberry", 200, sell_price=6, buy_price=3, created_at=at(2024)
        )

        records = ledger_service.list_records(sample_user.id, year=2023)
        assert len(records) == 1
        assert records[0].year == 2023
        assert ledger_service.list_years() == [2024, 2023]

    def test_list_records_scoped_to_user(self, ledger_service, user_service, sample_user):
        bob = user_service.create_user("Bob")
        ledger_service.record_purchase(sample_user.id, "berry", "blueberry", 500, buy_price=2)
        ledger_service.record_purchase(bob.id, "berry", "blueberry", 300, buy_price=2)

        assert len(ledger_service.list_records(sample_user.id)) == 1
        assert len(ledger_service.list_records(bob.id)) == 1

    def test_list_purchases(self, ledger_service, sample_user):
        purchase = ledger_service.record_purchase(
            sample_user.id, "berry", "blueberry", 500, buy_price=2
        )
        ledger_service.record_sale(
            sample_user.id, "berry", "blueberry", 200, sell_price=6, buy_price=3
        )

        purchases = ledger_service.list_purchases(sample_user.id)
        assert [p.id for p in purchases] == [purchase.id]

    def test_require_record_missing(self, ledger_service):
        with pytest.raises(NotFoundError):
            ledger_service.require_record(42)
        assert ledger_service.get_record(42) is None


class TestUpdateAndDelete:
    """Tests for updating and deleting records."""

    def test_update_quantity_recomputes_all_totals(self, ledger_service, sample_user):
        record = ledger_service.record_sale(
            sample_user.id, "berry", "blueberry", 200, sell_price=6, buy_price=3
        )

        updated = ledger_service.update_record(record.id, quantity=400)

        assert updated.quantity == Decimal("400")
        assert updated.total_revenue == Decimal("2.4")
        assert updated.total_cost == Decimal("1.2")
        assert updated.total_profit == Decimal("1.2")

    def test_update_price_recomputes_profit(self, ledger_service, sample_user):
        record = ledger_service.record_sale(
            sample_user.id, "berry", "blueberry", 1000, sell_price=6, buy_price=3
        )

        updated = ledger_service.update_record(record.id, buy_price=4)

        assert updated.total_cost == Decimal("4")
        assert updated.total_profit == Decimal("2")

    def test_update_notes_only(self, ledger_service, sample_user):
        record = ledger_service.record_sale(
            sample_user.id, "berry", "blueberry", 200, sell_price=6, buy_price=3, notes="first"
        )

        updated = ledger_service.update_record(record.id, notes="second")
        assert updated.notes == "second"
        assert updated.total_profit == Decimal("0.6")

        cleared = ledger_service.update_record(record.id, notes="")
        assert cleared.notes is None

    def test_update_missing_record(self, ledger_service):
        assert ledger_service.update_record(999, quantity=10) is None

    def test_update_rejects_negative(self, ledger_service, sample_user):
        record = ledger_service.record_purchase(sample_user.id, "berry", "blueberry", 500, buy_price=2)
        with pytest.raises(ValidationError):
            ledger_service.update_record(record.id, buy_price=-2)

    def test_delete_record(self, ledger_service, sample_user):
        record = ledger_service.record_purchase(sample_user.id, "berry", "blueberry", 500, buy_price=2)

        assert ledger_service.delete_record(record.id) is True
        assert ledger_service.get_record(record.id) is None
        assert ledger_service.delete_record(record.id) is False

    def test_delete_purchase_refuses_sale(self, ledger_service, sample_user):
        sale = ledger_service.record_sale(
            sample_user.id, "berry", "blueberry", 200, sell_price=6, buy_price=3
        )

        with pytest.raises(ValidationError, match="not a purchase"):
            ledger_service.delete_purchase(sale.id)
        assert ledger_service.get_record(sale.id) is not None

    def test_delete_purchase(self, ledger_service, sample_user):
        purchase = ledger_service.record_purchase(
            sample_user.id, "berry", "blueberry", 500, buy_price=2
        )

        assert ledger_service.delete_purchase(purchase.id) is True
        assert ledger_service.delete_purchase(purchase.id) is False


class TestStoredScale:
    """Records read back after a restart match what was returned on write."""

    def test_reload_round_trip(self, ledger_service, temp_db, sample_user, at):
        record = ledger_service.record_sale(
            sample_user.id,
            "berry",
            "blueberry",
            quantity="123.4567",
            sell_price="6.12345",
            buy_price="3.00004",
            created_at=at(2024),
        )

        assert record.quantity == Decimal("123.457")
        assert record.sell_price == Decimal("6.1235")
        assert record.buy_price == Decimal("3")

        reloaded = create_sqlite_database(temp_db.database_path)
        stored = reloaded.get_record(record.id)
        assert stored.quantity == record.quantity
        assert stored.buy_price == record.buy_price
        assert stored.sell_price == record.sell_price
        assert stored.total_revenue == record.total_revenue
        assert stored.total_cost == record.total_cost
        assert stored.total_profit == record.total_profit
        reloaded.disconnect()

    def test_classification_survives_reload(self, ledger_service, temp_db, sample_user):
        """Prices below the stored scale round to zero before classification."""
        record = ledger_service.record_sale(
            sample_user.id, "berry", "blueberry", 100, sell_price="0.00004", buy_price="0.00001"
        )

        reloaded = create_sqlite_database(temp_db.database_path)
        stored = reloaded.get_record(record.id)
        assert record.kind is RecordKind.UNPRICED
        assert stored.kind is record.kind
        assert stored.is_proper_sale == record.is_proper_sale
        reloaded.disconnect()

    def test_quantity_rounding_to_zero_rejected(self, ledger_service, sample_user):
        with pytest.raises(ValidationError):
            ledger_service.record_purchase(
                sample_user.id, "berry", "blueberry", quantity="0.0004", buy_price=2
            )

    def test_update_rounds_amounts(self, ledger_service, sample_user):
        record = ledger_service.record_sale(
            sample_user.id, "berry", "blueberry", 200, sell_price=6, buy_price=3
        )

        updated = ledger_service.update_record(record.id, sell_price="6.00006")
        assert updated.sell_price == Decimal("6.0001")
