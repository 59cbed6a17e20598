"""
Shared Infrastructure Module
=============================

Technical adapters for storage.
"""

from tally.shared.infrastructure.persistence import (
    CounterRepository,
    DuckDBStateStore,
    MemoryStateStore,
    SharedStateStore,
    create_state_store,
)

__all__ = [
    "CounterRepository",
    "DuckDBStateStore",
    "MemoryStateStore",
    "SharedStateStore",
    "create_state_store",
]
