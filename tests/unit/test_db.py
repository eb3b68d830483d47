"""Tests for the database layer: init, key-value store, search events."""

import sqlite3
from datetime import datetime

import pytest

from opportunity_search.core.db import (
    delete_item,
    get_item,
    get_search_events,
    init_db,
    insert_search_event,
    set_item,
)
from opportunity_search.core.schemas import SearchEvent


@pytest.fixture()
def db(tmp_path):  # type: ignore[no-untyped-def]
    return init_db(tmp_path / "test.db")


class TestInitDb:
    def test_creates_tables(self, db: sqlite3.Connection) -> None:
        tables = {
            row[0]
            for row in db.execute(
                "SELECT name FROM sqlite_master WHERE type='table'"
            ).fetchall()
        }
        assert "kv_store" in tables
        assert "search_events" in tables

    def test_idempotent(self, tmp_path) -> None:  # type: ignore[no-untyped-def]
        """Calling init_db twice on the same path doesn't error."""
        p = tmp_path / "double.db"
        conn1 = init_db(p)
        conn1.close()
        conn2 = init_db(p)
        conn2.close()

    def test_creates_parent_dirs(self, tmp_path) -> None:  # type: ignore[no-untyped-def]
        conn = init_db(tmp_path / "nested" / "dir" / "search.db")
        conn.close()
        assert (tmp_path / "nested" / "dir" / "search.db").exists()


class TestKeyValue:
    def test_missing_key(self, db: sqlite3.Connection) -> None:
        assert get_item(db, "search_history") is None

    def test_set_and_get(self, db: sqlite3.Connection) -> None:
        set_item(db, "search_history", '["beach"]')
        assert get_item(db, "search_history") == '["beach"]'

    def test_overwrite(self, db: sqlite3.Connection) -> None:
        set_item(db, "k", "1")
        set_item(db, "k", "2")
        assert get_item(db, "k") == "2"
        count = db.execute("SELECT COUNT(*) FROM kv_store").fetchone()[0]
        assert count == 1

    def test_delete(self, db: sqlite3.Connection) -> None:
        set_item(db, "k", "1")
        assert delete_item(db, "k") is True
        assert get_item(db, "k") is None

    def test_delete_missing(self, db: sqlite3.Connection) -> None:
        assert delete_item(db, "k") is False

    def test_survives_reconnect(self, tmp_path) -> None:  # type: ignore[no-untyped-def]
        p = tmp_path / "persist.db"
        conn = init_db(p)
        set_item(conn, "k", "v")
        conn.close()
        conn = init_db(p)
        assert get_item(conn, "k") == "v"
        conn.close()


class TestSearchEvents:
    def test_insert_and_return_id(self, db: sqlite3.Connection) -> None:
        row_id = insert_search_event(db, SearchEvent(query="beach", result_count=3))
        assert row_id >= 1
        row = db.execute("SELECT * FROM search_events WHERE id = ?", (row_id,)).fetchone()
        assert row["query"] == "beach"
        assert row["result_count"] == 3
        assert row["clicked_id"] is None

    def test_get_round_trip(self, db: sqlite3.Connection) -> None:
        when = datetime(2026, 10, 17, 12, 0)
        insert_search_event(
            db, SearchEvent(query="beach", result_count=3, clicked_id="opp-1", recorded_at=when),
        )
        events = get_search_events(db)
        assert events == [
            SearchEvent(query="beach", result_count=3, clicked_id="opp-1", recorded_at=when),
        ]

    def test_newest_first_and_limit(self, db: sqlite3.Connection) -> None:
        for i in range(3):
            insert_search_event(db, SearchEvent(query=f"q{i}", result_count=i))
        events = get_search_events(db, limit=2)
        assert [e.query for e in events] == ["q2", "q1"]
