from __future__ import annotations

"""Key/value helpers over the ``kv_store`` table."""

from .database_manager import DatabaseManager


def get_value(db: DatabaseManager, key: str) -> str | None:
    row = db.query_one("SELECT value FROM kv_store WHERE key=?", (key,))
    return row["value"] if row else None


def set_value(db: DatabaseManager, key: str, value: str) -> None:
    with db.transaction() as conn:
        conn.execute(
            """
            INSERT INTO kv_store(key, value) VALUES(?, ?)
            ON CONFLICT(key) DO UPDATE SET
                value=excluded.value,
                updated_at=strftime('%Y-%m-%dT%H:%M:%fZ','now')
            """,
            (key, value),
        )


__all__ = ["get_value", "set_value"]
