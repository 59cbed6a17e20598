"""Command Consumer: applies widget presses to the application's counters.

Runs on the application's schedule, never the widget's. Each check reads the
pending-command slot, applies it to the authoritative record, mirrors the
result back into the Shared State Store and asks the widget to redraw. The
slot is emptied before the command is applied, so a command is applied at
most once even when the store refuses writes.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

from tally.shared.core import events
from tally.shared.core.configuration import ConsumerConfig
from tally.shared.core.errors import StoreWriteError
from tally.shared.core.event_bus import EventBus
from tally.shared.domain.models import (
    KEY_CURRENT_COUNT,
    KEY_PRODUCT_ID,
    KEY_PRODUCT_NAME,
    CounterRecord,
    PendingCommand,
)
from tally.shared.domain.rules import apply_to_record
from tally.shared.infrastructure.persistence.counter_repository import CounterRepository
from tally.shared.infrastructure.persistence.pending_slot import clear_pending, read_pending
from tally.shared.infrastructure.persistence.state_store import SharedStateStore

logger = logging.getLogger(__name__)


class CommandConsumer:
    def __init__(
        self,
        store: SharedStateStore,
        repository: CounterRepository,
        refresh: Callable[[], object],
        event_bus: Optional[EventBus] = None,
        config: Optional[ConsumerConfig] = None,
    ):
        self.store = store
        self.repository = repository
        self.refresh = refresh
        self.bus = event_bus
        self.config = config or ConsumerConfig()
        self._task: Optional[asyncio.Task] = None
        self._wake = asyncio.Event()
        self._publish_tasks: set[asyncio.Task] = set()

    # --- Public Actions ---

    def consume_pending(self) -> Optional[CounterRecord]:
        """Apply the pending command, if any. Returns the updated record."""
        pending = read_pending(self.store)
        if pending is None:
            return None

        if not self._clear(pending):
            return None

        record = self.repository.get(pending.product_id)
        if record is None:
            logger.warning(f"Dropped {pending.kind.value} for unknown product {pending.product_id}")
            return None

        updated = apply_to_record(record, pending.kind, self.config.count_floor)
        self.repository.save(updated)
        logger.info(
            f"Applied {pending.kind.value} to {updated.product_id}: "
            f"{record.current_count} -> {updated.current_count}"
        )

        if self.store.get_str(KEY_PRODUCT_ID, "") == updated.product_id:
            self._mirror(updated)
        self._refresh_widget()
        self._schedule_publish(
            events.TOPIC_COUNTER_UPDATED,
            events.create_counter_updated_event(
                updated.product_id, record.current_count, updated.current_count, pending.kind.value
            ),
        )
        return updated

    def show_on_widget(self, product_id: str) -> Optional[CounterRecord]:
        """Pin a product to the widget and redraw it."""
        record = self.repository.get(product_id)
        if record is None:
            logger.warning(f"Cannot show unknown product {product_id} on widget")
            return None
        self._mirror(record)
        self._refresh_widget()
        self._schedule_publish(
            events.TOPIC_WIDGET_PINNED,
            events.create_widget_pinned_event(record.product_id, record.product_name, record.current_count),
        )
        return record

    def poke(self) -> None:
        """Wake the poll loop now, e.g. when the application resumes."""
        self._wake.set()

    # --- Scheduling ---

    def start(self) -> None:
        if self._task is not None:
            return
        self._task = asyncio.get_running_loop().create_task(self._poll_loop())
        logger.info(f"Command consumer polling every {self.config.poll_interval}s")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def _poll_loop(self) -> None:
        while True:
            try:
                await asyncio.wait_for(self._wake.wait(), timeout=self.config.poll_interval)
            except asyncio.TimeoutError:
                pass
            self._wake.clear()
            try:
                self.consume_pending()
            except Exception as e:
                logger.error(f"Error consuming pending command: {e}")

    # --- Internals ---

    def _mirror(self, record: CounterRecord) -> None:
        try:
            self.store.set(KEY_PRODUCT_NAME, record.product_name)
            self.store.set(KEY_CURRENT_COUNT, record.current_count)
            self.store.set(KEY_PRODUCT_ID, record.product_id)
        except StoreWriteError as e:
            logger.warning(f"Widget mirror for {record.product_id} dropped: {e}")

    def _clear(self, pending: PendingCommand) -> bool:
        """Take the command out of the slot. False means it must not be applied."""
        try:
            clear_pending(self.store, pending)
        except StoreWriteError as e:
            logger.warning(f"Could not clear pending {pending.kind.value} for {pending.product_id}, skipping: {e}")
            return False
        return True

    def _refresh_widget(self) -> None:
        try:
            self.refresh()
        except Exception as e:
            logger.warning(f"Widget refresh request failed: {e}")

    def _schedule_publish(self, topic: str, payload: events.EventPayload) -> None:
        if self.bus is None:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug(f"No running loop, skipping '{topic}' event")
            return
        task = loop.create_task(self.bus.publish(topic, payload))
        self._publish_tasks.add(task)
        task.add_done_callback(self._publish_tasks.discard)
