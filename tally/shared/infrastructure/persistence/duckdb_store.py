"""DuckDB-backed Shared State Store.

Values live in an in-memory view that answers every read. Writes mark keys
dirty; ``flush`` copies dirty keys into the ``shared_state`` table. A failed
flush drops its batch without retrying.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Set

import duckdb

from tally.shared.core.errors import StoreWriteError
from tally.shared.core.service_registry import register_cleanup_handler, unregister_cleanup_handler

from .state_store import SharedStateStore

logger = logging.getLogger(__name__)


class DuckDBStateStore(SharedStateStore):
    """Durable key/value store kept in a single DuckDB table."""

    def __init__(self, db_path: str = ":memory:", flush_interval: float = 0.5):
        super().__init__(flush_interval)
        self.db_path = db_path
        self.conn: Optional[duckdb.DuckDBPyConnection] = None
        self._values: Dict[str, Any] = {}
        self._dirty: Set[str] = set()
        self._open()

    def _open(self) -> None:
        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self.conn = duckdb.connect(self.db_path)
        self._create_schema()
        self._load()
        register_cleanup_handler(self.close)
        logger.info(f"Shared state store opened: {self.db_path} ({len(self._values)} keys)")

    def _create_schema(self) -> None:
        self.conn.execute("""
            CREATE TABLE IF NOT EXISTS shared_state (
                key VARCHAR PRIMARY KEY,
                value_json TEXT NOT NULL,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

    def _load(self) -> None:
        rows = self.conn.execute("SELECT key, value_json FROM shared_state").fetchall()
        for key, value_json in rows:
            try:
                self._values[key] = json.loads(value_json)
            except json.JSONDecodeError:
                logger.warning(f"Skipping undecodable value for '{key}'")

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def set(self, key: str, value: Any) -> None:
        if self.conn is None:
            raise StoreWriteError(key, "store closed")
        try:
            json.dumps(value)
        except (TypeError, ValueError) as e:
            raise StoreWriteError(key, f"value not serializable ({e})") from e
        self._values[key] = value
        self._dirty.add(key)

    def remove(self, key: str) -> None:
        if self.conn is None:
            raise StoreWriteError(key, "store closed")
        if key in self._values:
            del self._values[key]
            self._dirty.add(key)

    @property
    def pending_writes(self) -> int:
        return len(self._dirty)

    def flush(self) -> int:
        if self.conn is None or not self._dirty:
            return 0

        batch, self._dirty = self._dirty, set()
        try:
            self.conn.begin()
            for key in batch:
                if key in self._values:
                    self.conn.execute(
                        """
                        INSERT OR REPLACE INTO shared_state (key, value_json, updated_at)
                        VALUES (?, ?, CURRENT_TIMESTAMP)
                        """,
                        (key, json.dumps(self._values[key])),
                    )
                else:
                    self.conn.execute("DELETE FROM shared_state WHERE key = ?", (key,))
            self.conn.commit()
        except duckdb.Error as e:
            logger.error(f"Dropping {len(batch)} unflushed key(s): {e}")
            try:
                self.conn.rollback()
            except duckdb.Error:
                logger.debug("Rollback after failed flush also failed")
            return 0
        return len(batch)

    def close(self) -> None:
        super().close()
        if self.conn is None:
            return
        self.flush()
        self.conn.close()
        self.conn = None
        unregister_cleanup_handler(self.close)
        logger.info(f"Shared state store closed: {self.db_path}")
