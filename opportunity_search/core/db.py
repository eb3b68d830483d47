"""SQLite persistence: a durable key-value store plus search analytics events."""

import sqlite3
from datetime import datetime
from pathlib import Path

from opportunity_search.core.schemas import SearchEvent

_KV_TABLE = """
CREATE TABLE IF NOT EXISTS kv_store (
    key         TEXT PRIMARY KEY,
    value       TEXT NOT NULL,
    updated_at  TEXT NOT NULL
);
"""

_SEARCH_EVENTS_TABLE = """
CREATE TABLE IF NOT EXISTS search_events (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    query           TEXT    NOT NULL,
    result_count    INTEGER NOT NULL,
    clicked_id      TEXT,
    recorded_at     TEXT    NOT NULL
);
"""


def init_db(path: str | Path) -> sqlite3.Connection:
    """Create the database and tables, returning a connection.

    The connection may be used from worker threads (single writer per device).
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path), check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute(_KV_TABLE)
    conn.execute(_SEARCH_EVENTS_TABLE)
    conn.commit()
    return conn


def get_item(conn: sqlite3.Connection, key: str) -> str | None:
    """Return the raw stored value for key, or None if absent."""
    row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
    if row is None:
        return None
    return row["value"]


def set_item(conn: sqlite3.Connection, key: str, value: str) -> None:
    """Insert or overwrite the value stored under key."""
    conn.execute(
        """
        INSERT INTO kv_store (key, value, updated_at)
        VALUES (?, ?, ?)
        ON CONFLICT(key)
        DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
        """,
        (key, value, datetime.now().isoformat()),
    )
    conn.commit()


def delete_item(conn: sqlite3.Connection, key: str) -> bool:
    """Remove key. Returns True if a row was deleted."""
    cursor = conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
    conn.commit()
    return cursor.rowcount > 0


def insert_search_event(conn: sqlite3.Connection, event: SearchEvent) -> int:
    """Record an analytics event. Returns the row ID."""
    cursor = conn.execute(
        """
        INSERT INTO search_events (query, result_count, clicked_id, recorded_at)
        VALUES (?, ?, ?, ?)
        """,
        (
            event.query,
            event.result_count,
            event.clicked_id,
            event.recorded_at.isoformat(),
        ),
    )
    conn.commit()
    return cursor.lastrowid or 0


def get_search_events(conn: sqlite3.Connection, limit: int = 50) -> list[SearchEvent]:
    """Return the most recent analytics events, newest first."""
    rows = conn.execute(
        """
        SELECT query, result_count, clicked_id, recorded_at
        FROM search_events
        ORDER BY id DESC
        LIMIT ?
        """,
        (limit,),
    ).fetchall()
    return [
        SearchEvent(
            query=row["query"],
            result_count=row["result_count"],
            clicked_id=row["clicked_id"],
            recorded_at=datetime.fromisoformat(row["recorded_at"]),
        )
        for row in rows
    ]
