from __future__ import annotations

import sqlite3
from pathlib import Path

from domain.errors import StorageReadFailure, StorageWriteFailure

from .base import KeyValueStore


class SQLiteStore(KeyValueStore):
    """SQLite-backed key-value store without domain logic."""

    def __init__(self, db_path: str = "finance.db", schema_path: str | None = None) -> None:
        self._db_path = db_path
        self._conn = sqlite3.connect(db_path)
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA journal_mode = WAL;")
        self.initialize_schema(schema_path)

    def close(self) -> None:
        self._conn.close()

    def initialize_schema(self, schema_path: str | None = None) -> None:
        if schema_path is None:
            schema_path = str(Path(__file__).resolve().parents[1] / "db" / "schema.sql")
        schema = Path(schema_path).read_text(encoding="utf-8")
        self._conn.executescript(schema)
        self._conn.commit()

    def get(self, key: str) -> str | None:
        try:
            row = self._conn.execute(
                "SELECT value FROM kv_store WHERE key = ?", (key,)
            ).fetchone()
        except sqlite3.Error as exc:
            raise StorageReadFailure(f"Failed to read key {key!r}: {exc}") from exc
        if row is None:
            return None
        return str(row["value"])

    def set(self, key: str, value: str) -> None:
        try:
            self._conn.execute(
                """
                INSERT INTO kv_store (key, value, updated_at)
                VALUES (?, ?, datetime('now'))
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at
                """,
                (key, str(value)),
            )
            self._conn.commit()
        except sqlite3.Error as exc:
            self._conn.rollback()
            raise StorageWriteFailure(f"Failed to write key {key!r}: {exc}") from exc

    def set_many(self, items: dict[str, str]) -> None:
        """Write several keys in one transaction."""
        try:
            with self._conn:
                self._conn.executemany(
                    """
                    INSERT INTO kv_store (key, value, updated_at)
                    VALUES (?, ?, datetime('now'))
                    ON CONFLICT(key) DO UPDATE SET
                        value = excluded.value,
                        updated_at = excluded.updated_at
                    """,
                    [(key, str(value)) for key, value in items.items()],
                )
        except sqlite3.Error as exc:
            raise StorageWriteFailure(f"Failed to write {len(items)} keys: {exc}") from exc

    def delete(self, key: str) -> None:
        try:
            self._conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
            self._conn.commit()
        except sqlite3.Error as exc:
            self._conn.rollback()
            raise StorageWriteFailure(f"Failed to delete key {key!r}: {exc}") from exc

    def keys(self) -> list[str]:
        try:
            rows = self._conn.execute("SELECT key FROM kv_store ORDER BY key").fetchall()
        except sqlite3.Error as exc:
            raise StorageReadFailure(f"Failed to list keys: {exc}") from exc
        return [str(row["key"]) for row in rows]
