"""Persistence adapters (Shared State Store backends, pending slot, counter repository)."""

from tally.shared.core.configuration import StoreConfig
from tally.shared.infrastructure.persistence.counter_repository import CounterRepository
from tally.shared.infrastructure.persistence.duckdb_store import DuckDBStateStore
from tally.shared.infrastructure.persistence.pending_slot import clear_pending, read_pending, write_pending
from tally.shared.infrastructure.persistence.state_store import MemoryStateStore, SharedStateStore


def create_state_store(config: StoreConfig) -> SharedStateStore:
    """Build the store backend named in configuration."""
    if config.backend == "memory":
        return MemoryStateStore()
    return DuckDBStateStore(config.db_path, flush_interval=config.flush_interval)


__all__ = [
    "CounterRepository",
    "DuckDBStateStore",
    "MemoryStateStore",
    "SharedStateStore",
    "clear_pending",
    "create_state_store",
    "read_pending",
    "write_pending",
]
