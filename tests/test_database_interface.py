"""Tests for the database factories and store-level behavior."""

import os
import threading
from decimal import Decimal

import pytest
from sqlalchemy.exc import IntegrityError

from foragetrack.database import Database, create_memory_database, create_sqlite_database
from foragetrack.database.factories import DB_PATH_ENV
from foragetrack.domain.entities import Category


def test_temp_db_is_database(temp_db):
    assert isinstance(temp_db, Database)


def test_memory_database_roundtrip():
    """The in-memory store keeps data across calls on one instance."""
    db = create_memory_database()
    user = db.create_user("Alice")
    db.create_record(
        user_id=user.id,
        category=Category.BERRY,
        species="blueberry",
        quantity=Decimal("200"),
        buy_price=Decimal("3"),
        sell_price=Decimal("6"),
    )

    assert db.list_users()[0].alias == "Alice"
    assert len(db.list_records(user_id=user.id)) == 1
    db.disconnect()


def test_memory_path_selects_memory_store():
    db = create_sqlite_database(":memory:")
    assert db.database_url == "sqlite://"


def test_env_var_selects_path(monkeypatch, tmp_path):
    path = str(tmp_path / "env.db")
    monkeypatch.setenv(DB_PATH_ENV, path)

    db = create_sqlite_database()
    db.create_user("Alice")
    db.disconnect()

    assert os.path.exists(path)


def test_data_persists_across_instances(temp_db):
    temp_db.create_user("Alice")

    other = create_sqlite_database(temp_db.database_path)
    assert [u.alias for u in other.list_users()] == ["Alice"]
    other.disconnect()


def test_create_record_stores_totals(temp_db):
    user = temp_db.create_user("Alice")
    record = temp_db.create_record(
        user_id=user.id,
        category=Category.MUSHROOM,
        species="chanterelle",
        quantity=Decimal("500"),
        buy_price=Decimal("8"),
        sell_price=Decimal("15"),
    )

    stored = create_sqlite_database(temp_db.database_path).get_record(record.id)
    assert stored.total_revenue == Decimal("7.5")
    assert stored.total_cost == Decimal("4")
    assert stored.total_profit == Decimal("3.5")
    assert stored.category is Category.MUSHROOM


def test_failed_write_rolls_back(temp_db):
    """A write that fails leaves the store usable and unchanged."""
    user = temp_db.create_user("Alice")
    with pytest.raises(IntegrityError):
        temp_db.create_record(
            user_id=user.id,
            category=Category.BERRY,
            species=None,
            quantity=Decimal("1"),
            buy_price=Decimal("1"),
            sell_price=Decimal("0"),
        )

    assert temp_db.list_records() == []
    assert temp_db.create_user("Bob").alias == "Bob"


def test_concurrent_writes_are_serialized():
    db = create_memory_database()
    user = db.create_user("Alice")

    def buy():
        for _ in range(10):
            db.create_record(
                user_id=user.id,
                category=Category.BERRY,
                species="blueberry",
                quantity=Decimal("100"),
                buy_price=Decimal("2"),
                sell_price=Decimal("0"),
            )

    threads = [threading.Thread(target=buy) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    records = db.list_records(user_id=user.id)
    assert len(records) == 40
    assert len({r.id for r in records}) == 40
    db.disconnect()
