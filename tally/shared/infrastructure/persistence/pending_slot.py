"""The single pending-command slot kept in the Shared State Store.

The slot is two keys, the action kind and its target product. Writers
overwrite both; there is no queue behind them.
"""

import logging
from typing import Optional

from tally.shared.domain.models import KEY_ACTION, KEY_ACTION_PRODUCT_ID, CommandKind, PendingCommand

from .state_store import SharedStateStore

logger = logging.getLogger(__name__)


def write_pending(store: SharedStateStore, kind: CommandKind, product_id: str) -> None:
    """Overwrite the slot. Raises StoreWriteError if the store rejects it."""
    store.set(KEY_ACTION, kind.value)
    store.set(KEY_ACTION_PRODUCT_ID, product_id)


def read_pending(store: SharedStateStore) -> Optional[PendingCommand]:
    """Return the command in the slot, or None if the slot is empty or garbled."""
    raw_kind = store.get(KEY_ACTION)
    product_id = store.get(KEY_ACTION_PRODUCT_ID)
    if raw_kind is None or product_id is None:
        return None
    kind = CommandKind.parse(raw_kind)
    if kind is None:
        logger.warning(f"Unknown pending action {raw_kind!r} for {product_id!r}")
        return None
    return PendingCommand(kind=kind, product_id=str(product_id))


def clear_pending(store: SharedStateStore, consumed: Optional[PendingCommand] = None) -> bool:
    """Empty the slot.

    With ``consumed`` given, the slot is only emptied while it still holds that
    command, so a press that landed after the read survives for the next check.
    """
    if consumed is not None and read_pending(store) != consumed:
        logger.debug("Pending slot changed since it was read, leaving it in place")
        return False
    store.remove(KEY_ACTION)
    store.remove(KEY_ACTION_PRODUCT_ID)
    return True
