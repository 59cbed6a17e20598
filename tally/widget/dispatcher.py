"""Command Dispatcher: records a button press in the pending-command slot."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from tally.shared.core.errors import StoreWriteError
from tally.shared.domain.models import CommandKind
from tally.shared.infrastructure.persistence.pending_slot import write_pending
from tally.shared.infrastructure.persistence.state_store import SharedStateStore

logger = logging.getLogger(__name__)


class CommandDispatcher:
    """Writes PendingCommands for the application to pick up later.

    The slot holds one command. A second press before the application
    consumes the first overwrites it.
    """

    def __init__(
        self,
        store: SharedStateStore,
        refresh: Optional[Callable[[], None]] = None,
    ):
        self.store = store
        self.refresh = refresh

    def dispatch(self, kind: CommandKind, product_id: str) -> bool:
        """Record ``kind`` for ``product_id``.

        Returns:
            True if the slot was written, False if the store dropped the press
        """
        try:
            write_pending(self.store, kind, product_id)
        except StoreWriteError as e:
            logger.warning(f"Dropped {kind.value} press for {product_id}: {e}")
            return False

        logger.debug(f"Pending command stored: {kind.value}, {product_id}")
        self._request_refresh()
        return True

    def _request_refresh(self) -> None:
        if self.refresh is None:
            return
        try:
            self.refresh()
        except Exception as e:
            logger.warning(f"Widget refresh after dispatch failed: {e}")
