"""Application-owned counter records, persisted in DuckDB."""

import logging
from pathlib import Path
from typing import List, Optional

import duckdb

from tally.shared.domain.models import CounterRecord

logger = logging.getLogger(__name__)


class CounterRepository:
    """Authoritative store of CounterRecords, one row per product.

    The widget never reads this; it only sees what the application mirrors
    into the Shared State Store.
    """

    def __init__(self, db_path: str = ":memory:"):
        self.db_path = db_path
        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self.conn: Optional[duckdb.DuckDBPyConnection] = duckdb.connect(db_path)
        self._create_schema()

    def _create_schema(self) -> None:
        self.conn.execute("""
            CREATE TABLE IF NOT EXISTS counters (
                product_id VARCHAR PRIMARY KEY,
                product_name VARCHAR NOT NULL,
                current_count INTEGER NOT NULL DEFAULT 0,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

    def get(self, product_id: str) -> Optional[CounterRecord]:
        row = self.conn.execute(
            "SELECT product_id, product_name, current_count FROM counters WHERE product_id = ?",
            (product_id,),
        ).fetchone()
        if row is None:
            return None
        return CounterRecord(product_id=row[0], product_name=row[1], current_count=row[2])

    def save(self, record: CounterRecord) -> CounterRecord:
        self.conn.execute(
            """
            INSERT OR REPLACE INTO counters (product_id, product_name, current_count, updated_at)
            VALUES (?, ?, ?, CURRENT_TIMESTAMP)
            """,
            (record.product_id, record.product_name, record.current_count),
        )
        logger.debug(f"Saved counter {record.product_id}={record.current_count}")
        return record

    def create(self, product_id: str, product_name: str, current_count: int = 0) -> CounterRecord:
        return self.save(
            CounterRecord(product_id=product_id, product_name=product_name, current_count=current_count)
        )

    def delete(self, product_id: str) -> bool:
        existed = self.get(product_id) is not None
        self.conn.execute("DELETE FROM counters WHERE product_id = ?", (product_id,))
        return existed

    def list_all(self) -> List[CounterRecord]:
        rows = self.conn.execute(
            "SELECT product_id, product_name, current_count FROM counters ORDER BY product_id"
        ).fetchall()
        return [
            CounterRecord(product_id=pid, product_name=name, current_count=count)
            for pid, name, count in rows
        ]

    def close(self) -> None:
        if self.conn is not None:
            self.conn.close()
            self.conn = None
