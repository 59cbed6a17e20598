"""Counter domain: data model, store keys, action identifiers and command rules."""

from .models import (
    ACTION_DECREASE,
    ACTION_INCREASE,
    ACTION_OPEN_PRODUCT,
    ACTION_RESET,
    EXTRA_PRODUCT_ID,
    KEY_ACTION,
    KEY_ACTION_PRODUCT_ID,
    KEY_CURRENT_COUNT,
    KEY_PRODUCT_ID,
    KEY_PRODUCT_NAME,
    RECOGNIZED_ACTIONS,
    CommandKind,
    CounterRecord,
    NavigationRequest,
    PendingCommand,
    WidgetInstanceId,
)
from .rules import apply_command, apply_to_record

__all__ = [
    "ACTION_DECREASE",
    "ACTION_INCREASE",
    "ACTION_OPEN_PRODUCT",
    "ACTION_RESET",
    "EXTRA_PRODUCT_ID",
    "KEY_ACTION",
    "KEY_ACTION_PRODUCT_ID",
    "KEY_CURRENT_COUNT",
    "KEY_PRODUCT_ID",
    "KEY_PRODUCT_NAME",
    "RECOGNIZED_ACTIONS",
    "CommandKind",
    "CounterRecord",
    "NavigationRequest",
    "PendingCommand",
    "WidgetInstanceId",
    "apply_command",
    "apply_to_record",
]
