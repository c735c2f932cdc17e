"""DuckDB-backed persistence gateway."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import duckdb
from duckdb import DuckDBPyConnection
from loguru import logger

from finscope.core.data.storage.base import PersistenceGateway
from finscope.core.exceptions import StorageError


class DuckDBStore(PersistenceGateway):
    """Stores JSON blobs in a single ``kv_store`` table."""

    backend = "duckdb"

    def __init__(self, db_path: str = ":memory:"):
        self.db_path = db_path
        self._conn: DuckDBPyConnection | None = None
        self._init_database()

    def _init_database(self) -> None:
        database = self.db_path
        if database != ":memory:":
            path = Path(database).expanduser()
            path.parent.mkdir(parents=True, exist_ok=True)
            database = str(path)
        try:
            self._conn = duckdb.connect(database)
            self._conn.execute("""
                CREATE TABLE IF NOT EXISTS kv_store (
                    key VARCHAR PRIMARY KEY,
                    value JSON,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)
        except duckdb.Error as e:
            raise StorageError(f"Cannot open DuckDB store at {self.db_path}: {e}", backend=self.backend) from e
        logger.debug(f"DuckDB store ready at {self.db_path}")

    def _connection(self) -> DuckDBPyConnection:
        if self._conn is None:
            raise StorageError("DuckDB store is closed", backend=self.backend)
        return self._conn

    def get(self, key: str) -> Any | None:
        try:
            row = self._connection().execute("SELECT value FROM kv_store WHERE key = ?", [key]).fetchone()
        except duckdb.Error as e:
            raise StorageError(f"Failed to read {key}: {e}", key=key, backend=self.backend) from e
        if row is None or row[0] is None:
            return None
        return json.loads(row[0])

    def set(self, key: str, value: Any) -> None:
        text = self._dumps(key, value)
        try:
            self._connection().execute(
                """
                INSERT OR REPLACE INTO kv_store (key, value, updated_at)
                VALUES (?, ?, CURRENT_TIMESTAMP)
                """,
                [key, text],
            )
        except duckdb.Error as e:
            raise StorageError(f"Failed to write {key}: {e}", key=key, backend=self.backend) from e

    def remove(self, key: str) -> bool:
        try:
            conn = self._connection()
            existed = conn.execute("SELECT COUNT(*) FROM kv_store WHERE key = ?", [key]).fetchone()[0] > 0
            conn.execute("DELETE FROM kv_store WHERE key = ?", [key])
        except duckdb.Error as e:
            raise StorageError(f"Failed to remove {key}: {e}", key=key, backend=self.backend) from e
        return existed

    def is_connected(self) -> bool:
        return self._conn is not None

    def close(self) -> None:
        if self._conn:
            self._conn.close()
            self._conn = None


__all__ = ["DuckDBStore"]
