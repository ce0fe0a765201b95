"""Tests for importing records from the old JSON export."""

import json
import pytest
from datetime import datetime
from decimal import Decimal

from foragetrack.database.factories import create_sqlite_database
from foragetrack.domain.entities import Category
from foragetrack.domain.errors import NotFoundError, ValidationError
from foragetrack.domain.legacy import parse_timestamp, translate_legacy_item


def legacy_sale(**overrides):
    item = {
        "type": "berry",
        "species": "blueberry",
        "quantity": 200,
        "buyPrice": 3,
        "unitPrice": 6,
        "totalPrice": 1.2,
        "totalCost": 0.6,
        "totalProfit": 0.6,
        "location": "Nuuksio",
        "collectedAt": "2023-08-10T09:30:00+03:00",
    }
    item.update(overrides)
    return item


class TestTranslate:
    """Tests for mapping export fields onto record fields."""

    def test_legacy_names_map_to_canonical(self):
        fields = translate_legacy_item(legacy_sale())

        assert fields["category"] is Category.BERRY
        assert fields["sell_price"] == Decimal("6")
        assert fields["total_revenue"] == Decimal("1.2")
        assert fields["created_at"] == datetime(2023, 8, 10, 6, 30)

    def test_canonical_names_win(self):
        fields = translate_legacy_item(legacy_sale(sellPrice=7, totalRevenue=1.4))

        assert fields["sell_price"] == Decimal("7")
        assert fields["total_revenue"] == Decimal("1.4")

    def test_missing_totals_stay_none(self):
        item = legacy_sale()
        for key in ("totalPrice", "totalCost", "totalProfit"):
            del item[key]

        fields = translate_legacy_item(item)
        assert fields["total_revenue"] is None
        assert fields["total_profit"] is None

    def test_invalid_items(self):
        with pytest.raises(ValidationError):
            translate_legacy_item(legacy_sale(type="fish"))
        with pytest.raises(ValidationError):
            translate_legacy_item(legacy_sale(quantity="lots"))
        with pytest.raises(ValidationError):
            translate_legacy_item(legacy_sale(collectedAt=None))

    def test_parse_timestamp_naive_is_kept(self):
        assert parse_timestamp("2022-05-01T12:00:00") == datetime(2022, 5, 1, 12, 0)


class TestImportItems:
    """Tests for LegacyImportService.import_items."""

    def test_import_keeps_exported_totals(self, import_service, ledger_service, sample_user):
        result = import_service.import_items([legacy_sale(totalProfit=9)], user_id=sample_user.id)

        assert result == {"imported": 1, "errors": []}
        record = ledger_service.list_records(sample_user.id)[0]
        assert record.total_profit == Decimal("9")
        assert record.year == 2023

    def test_import_recompute(self, import_service, ledger_service, sample_user):
        import_service.import_items(
            [legacy_sale(totalProfit=9)], user_id=sample_user.id, recompute=True
        )

        record = ledger_service.list_records(sample_user.id)[0]
        assert record.total_profit == Decimal("0.6")

    def test_bad_items_reported_not_imported(self, import_service, sample_user):
        result = import_service.import_items(
            [legacy_sale(), "garbage", legacy_sale(species="")], user_id=sample_user.id
        )

        assert result["imported"] == 1
        assert len(result["errors"]) == 2
        assert result["errors"][0].startswith("Item 2")

    def test_unknown_user(self, import_service):
        with pytest.raises(NotFoundError):
            import_service.import_items([legacy_sale()], user_id=404)


class TestImportFile:
    """Tests for LegacyImportService.import_file."""

    def test_import_stock_items_object(self, import_service, sample_user, tmp_path):
        path = tmp_path / "export.json"
        path.write_text(json.dumps({"stockItems": [legacy_sale(), legacy_sale()]}))

        result = import_service.import_file(str(path), user_id=sample_user.id)
        assert result["imported"] == 2

    def test_import_plain_list(self, import_service, sample_user, tmp_path):
        path = tmp_path / "export.json"
        path.write_text(json.dumps([legacy_sale()]))

        assert import_service.import_file(str(path), user_id=sample_user.id)["imported"] == 1

    def test_missing_file(self, import_service, sample_user, tmp_path):
        with pytest.raises(FileNotFoundError):
            import_service.import_file(str(tmp_path / "nope.json"), user_id=sample_user.id)

    def test_invalid_json(self, import_service, sample_user, tmp_path):
        path = tmp_path / "export.json"
        path.write_text("{not json")

        with pytest.raises(ValidationError):
            import_service.import_file(str(path), user_id=sample_user.id)

    def test_wrong_shape(self, import_service, sample_user, tmp_path):
        path = tmp_path / "export.json"
        path.write_text(json.dumps({"items": []}))

        with pytest.raises(ValidationError):
            import_service.import_file(str(path), user_id=sample_user.id)


class TestMalformedExports:
    """Tests for exports carrying values JSON allows but amounts can't hold."""

    def test_nan_and_infinity_rejected_per_item(self, import_service, ledger_service, sample_user, tmp_path):
        path = tmp_path / "export.json"
        # json.dumps writes these as bare NaN and Infinity tokens
        path.write_text(
            json.dumps(
                [
                    legacy_sale(),
                    legacy_sale(quantity=float("nan")),
                    legacy_sale(quantity=float("inf")),
                    legacy_sale(unitPrice=float("nan")),
                    legacy_sale(totalProfit=float("-inf")),
                    legacy_sale(species="lingonberry"),
                ]
            )
        )

        result = import_service.import_file(str(path), user_id=sample_user.id)

        assert result["imported"] == 2
        assert [e.split(":")[0] for e in result["errors"]] == ["Item 2", "Item 3", "Item 4", "Item 5"]
        species = sorted(r.species for r in ledger_service.list_records(sample_user.id))
        assert species == ["blueberry", "lingonberry"]

    def test_non_utf8_file(self, import_service, sample_user, tmp_path):
        path = tmp_path / "export.json"
        path.write_bytes(b'[{"species": "\xff"}]')

        with pytest.raises(ValidationError, match="Could not parse"):
            import_service.import_file(str(path), user_id=sample_user.id)

    def test_exported_amounts_rounded_to_stored_scale(self, import_service, temp_db, sample_user):
        import_service.import_items(
            [legacy_sale(quantity="200.0004", buyPrice="3.00004", totalPrice="1.20004")],
            user_id=sample_user.id,
        )

        reloaded = create_sqlite_database(temp_db.database_path)
        record = reloaded.list_records(user_id=sample_user.id)[0]
        assert record.quantity == Decimal("200")
        assert record.buy_price == Decimal("3")
        assert record.total_revenue == Decimal("1.2")
        reloaded.disconnect()
