"""Widget-process side: renderer, dispatcher and the provider the host calls."""

from tally.shared.infrastructure.persistence.pending_slot import read_pending
from tally.shared.infrastructure.platform import (
    ACTION_APPWIDGET_UPDATE,
    Binding,
    BindingKind,
    InMemoryWidgetHost,
    Intent,
    IntentFlag,
    WidgetHost,
    WidgetSnapshot,
)

from .dispatcher import CommandDispatcher
from .provider import CounterWidgetProvider
from .renderer import WidgetSurfaceRenderer

__all__ = [
    "ACTION_APPWIDGET_UPDATE",
    "Binding",
    "BindingKind",
    "CommandDispatcher",
    "CounterWidgetProvider",
    "InMemoryWidgetHost",
    "Intent",
    "IntentFlag",
    "WidgetHost",
    "WidgetSnapshot",
    "WidgetSurfaceRenderer",
    "read_pending",
]
