from __future__ import annotations

"""SQLite file backing the local record store.

The schema is small (one key/value table) but still versioned: every entry
in ``MIGRATIONS`` runs once, in order, and its 1-based position is recorded
in ``schema_migrations``. Re-running ``init_db`` against an up-to-date file
does nothing.

The connection is opened lazily and reused. It belongs to the thread that
created it (the GUI thread); background remote writes never touch it.
"""

from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
import logging
import sqlite3
from typing import Callable, Iterable, Iterator

_log = logging.getLogger(__name__)


@dataclass(slots=True)
class DBConfig:
    path: Path
    pragmas: tuple[tuple[str, str | int], ...] = (
        ("journal_mode", "WAL"),
        ("synchronous", "NORMAL"),
        ("busy_timeout", 2000),
    )


class DatabaseManager:
    def __init__(self, config: DBConfig):
        self.config = config
        self._conn: sqlite3.Connection | None = None

    def connect(self) -> sqlite3.Connection:
        if self._conn is not None:
            return self._conn
        self.config.path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self.config.path)
        conn.row_factory = sqlite3.Row
        for name, value in self.config.pragmas:
            conn.execute(f"PRAGMA {name}={value}")
        self._conn = conn
        return conn

    def close(self) -> None:
        if self._conn is None:
            return
        self._conn.close()
        self._conn = None

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Commit on success, roll back if the block raises."""
        conn = self.connect()
        with conn:
            yield conn

    def init_db(self) -> None:
        with self.transaction() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS schema_migrations (
                    version INTEGER PRIMARY KEY,
                    applied_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ','now'))
                )
                """
            )
        done = {row["version"] for row in self.query_all("SELECT version FROM schema_migrations")}
        for version, migrate in enumerate(MIGRATIONS, start=1):
            if version in done:
                continue
            with self.transaction() as conn:
                migrate(conn)
                conn.execute("INSERT INTO schema_migrations (version) VALUES (?)", (version,))
            _log.info("applied migration %s", migrate.__name__, extra={"_json_version": version})

    def query_all(self, sql: str, params: Iterable = ()) -> list[sqlite3.Row]:
        return self.connect().execute(sql, tuple(params)).fetchall()

    def query_one(self, sql: str, params: Iterable = ()) -> sqlite3.Row | None:
        return self.connect().execute(sql, tuple(params)).fetchone()


def migration_001_create_kv_store(conn: sqlite3.Connection) -> None:
    # One row per record kind and user, e.g. ``settings_<uid>``; values are JSON text
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS kv_store (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL,
            updated_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ','now'))
        )
        """
    )


MIGRATIONS: list[Callable[[sqlite3.Connection], None]] = [
    migration_001_create_kv_store,
]

__all__ = ["DBConfig", "DatabaseManager", "MIGRATIONS"]
