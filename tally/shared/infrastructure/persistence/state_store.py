"""
Shared State Store - Base Classes

Key/value store shared by the widget surface and the application. Writes are
fire-and-forget: a value is readable as soon as ``set`` returns and becomes
durable later, when the backend flushes.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

from tally.shared.core.errors import StoreWriteError

logger = logging.getLogger(__name__)

_MISSING = object()


class SharedStateStore(ABC):
    """
    Abstract base class for Shared State Store backends.

    There are no transactions and no locks: every key is last-write-wins.
    Reads of a missing key return the caller's default and never raise.
    """

    def __init__(self, flush_interval: float = 0.5):
        self._flush_task: Optional[asyncio.Task] = None
        self._flush_interval = flush_interval

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        """Return the value stored under ``key`` or ``default``."""

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """
        Store ``value`` under ``key``.

        Raises:
            StoreWriteError: the backend cannot accept the write
        """

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete ``key``; deleting a missing key is a no-op."""

    def contains(self, key: str) -> bool:
        return self.get(key, _MISSING) is not _MISSING

    def get_str(self, key: str, default: str = "") -> str:
        value = self.get(key, default)
        return default if value is None else str(value)

    def get_int(self, key: str, default: int = 0) -> int:
        value = self.get(key, default)
        try:
            return int(value)
        except (TypeError, ValueError):
            logger.warning(f"Stored value for '{key}' is not an integer: {value!r}")
            return default

    def flush(self) -> int:
        """Make pending writes durable. Returns the number of keys written."""
        return 0

    def close(self) -> None:
        self.stop_flush()

    # --- Background flushing ---

    def start_flush(self) -> None:
        """Start the background flush task on the running loop."""
        if self._flush_task:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug(f"{self.__class__.__name__}: no running loop, background flush not started")
            return
        self._flush_task = loop.create_task(self._flush_loop())

    def stop_flush(self) -> None:
        """Stop the background flush task."""
        if self._flush_task:
            self._flush_task.cancel()
            self._flush_task = None

    async def _flush_loop(self) -> None:
        while True:
            try:
                await asyncio.sleep(self._flush_interval)
                written = self.flush()
                if written:
                    logger.debug(f"{self.__class__.__name__}: flushed {written} key(s)")
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"{self.__class__.__name__}: error during flush: {e}")


class MemoryStateStore(SharedStateStore):
    """
    In-memory store for tests and single-process runs.

    Data is lost when the process exits. Every accepted write is appended to
    ``writes`` so tests can assert on what a component wrote.
    """

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        super().__init__()
        self._data: Dict[str, Any] = dict(initial or {})
        self.writes: List[Tuple[str, Any]] = []
        self.fail_writes = False

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        if self.fail_writes:
            raise StoreWriteError(key)
        self._data[key] = value
        self.writes.append((key, value))

    def remove(self, key: str) -> None:
        if self.fail_writes:
            raise StoreWriteError(key, "remove rejected")
        self._data.pop(key, None)
        self.writes.append((key, None))

    def snapshot(self) -> Dict[str, Any]:
        return dict(self._data)
