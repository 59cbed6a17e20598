from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from typing import Any, Awaitable, Callable, Dict, List, Optional, TypeAlias

EventPayload: TypeAlias = Dict[str, Any]
EventHandler: TypeAlias = Callable[[EventPayload], Awaitable[None]]


class EventBus:
    """In-process PubSub hub shared by the application host and its services."""

    def __init__(self) -> None:
        self._subscribers: Dict[str, List[EventHandler]] = defaultdict(list)
        self._lock: Optional[asyncio.Lock] = None
        self._logger = logging.getLogger(__name__)
        self._pending_tasks: set[asyncio.Task] = set()

    def _ensure_lock(self) -> asyncio.Lock:
        # Created on first use, inside the loop that runs the host
        if self._lock is None:
            self._lock = asyncio.Lock()
        return self._lock

    async def subscribe(self, topic: str, handler: EventHandler) -> None:
        """Register an async handler for a topic."""
        async with self._ensure_lock():
            if handler not in self._subscribers[topic]:
                self._subscribers[topic].append(handler)

    async def unsubscribe(self, topic: str, handler: EventHandler) -> None:
        """Remove a handler from a topic."""
        async with self._ensure_lock():
            if handler in self._subscribers.get(topic, []):
                self._subscribers[topic].remove(handler)

    def has_subscribers(self, topic: str) -> bool:
        return bool(self._subscribers.get(topic))

    async def publish(self, topic: str, payload: EventPayload) -> int:
        """Publish an event to all subscribers.

        Returns:
            Number of handlers the event was scheduled on
        """
        async with self._ensure_lock():
            handlers = list(self._subscribers.get(topic, []))

        if not handlers:
            self._logger.debug(f"No subscribers for topic '{topic}'")
            return 0

        self._logger.debug(f"Publishing to topic '{topic}' with {len(handlers)} handler(s)")
        for handler in handlers:
            task = asyncio.create_task(self._safe_dispatch(topic, handler, payload))
            self._pending_tasks.add(task)
            task.add_done_callback(self._pending_tasks.discard)
        return len(handlers)

    async def wait_until_idle(self, timeout: float = 5.0) -> bool:
        """Wait for all pending event handlers to complete.

        Args:
            timeout: Maximum time to wait in seconds

        Returns:
            True if all tasks completed, False if timeout reached
        """
        if not self._pending_tasks:
            return True

        loop = asyncio.get_running_loop()
        start_time = loop.time()
        while self._pending_tasks:
            if loop.time() - start_time > timeout:
                self._logger.warning(
                    f"EventBus: Timeout reached while waiting for {len(self._pending_tasks)} tasks"
                )
                return False
            # Handlers may publish again, so loop until the set drains
            await asyncio.gather(*list(self._pending_tasks), return_exceptions=True)
            await asyncio.sleep(0)
        return True

    async def _safe_dispatch(
        self,
        topic: str,
        handler: EventHandler,
        payload: EventPayload,
    ) -> None:
        """Dispatch wrapper to keep one handler failure from stopping the bus."""
        handler_name = getattr(handler, "__name__", str(handler))
        try:
            await handler(payload)
        except Exception as exc:
            self._logger.exception(
                f"EventBus handler error in '{handler_name}' for topic '{topic}'",
                exc_info=exc,
            )
