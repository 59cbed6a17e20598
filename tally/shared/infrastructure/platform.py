"""Value objects standing in for the host platform's widget primitives.

The widget side never keeps state of its own: the host hands it an intent or a
batch of instance ids, it answers with snapshots, and everything else lives in
the Shared State Store.
"""

from __future__ import annotations

import logging
import zlib
from abc import ABC, abstractmethod
from enum import Enum, IntFlag
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from tally.shared.domain.models import EXTRA_PRODUCT_ID, NavigationRequest, WidgetInstanceId

logger = logging.getLogger(__name__)

ACTION_APPWIDGET_UPDATE = "android.appwidget.action.APPWIDGET_UPDATE"
EXTRA_APPWIDGET_IDS = "appWidgetIds"

# View ids inside the widget layout
VIEW_BUTTON_INCREASE = "button_increase"
VIEW_BUTTON_DECREASE = "button_decrease"
VIEW_BUTTON_RESET = "button_reset"
VIEW_CLICKABLE_AREA = "widget_clickable_area"


class IntentFlag(IntFlag):
    NONE = 0
    ACTIVITY_CLEAR_TOP = 0x04000000
    ACTIVITY_NEW_TASK = 0x10000000


class Intent(BaseModel):
    """Action plus extras, the unit the platform routes between processes."""
    model_config = ConfigDict(frozen=True)

    action: Optional[str] = None
    extras: Dict[str, Any] = Field(default_factory=dict)
    flags: int = 0

    def has_flag(self, flag: IntentFlag) -> bool:
        return bool(self.flags & flag)

    def get_string_extra(self, name: str) -> Optional[str]:
        value = self.extras.get(name)
        return value if isinstance(value, str) else None

    @property
    def product_id(self) -> Optional[str]:
        return self.get_string_extra(EXTRA_PRODUCT_ID)


OPEN_FLAGS = IntentFlag.ACTIVITY_NEW_TASK | IntentFlag.ACTIVITY_CLEAR_TOP


def open_product_intent(product_id: str) -> Intent:
    """Intent that brings the application forward on one product."""
    request = NavigationRequest(product_id=product_id)
    return Intent(
        action=request.action,
        extras={EXTRA_PRODUCT_ID: request.product_id},
        flags=int(OPEN_FLAGS),
    )


def open_request_code(product_id: str) -> int:
    """Stable per-product request code, so each product gets its own binding."""
    return zlib.crc32(product_id.encode("utf-8")) & 0x7FFFFFFF


class BindingKind(str, Enum):
    BROADCAST = "broadcast"
    ACTIVITY = "activity"


class Binding(BaseModel):
    """An intent attached to a view, fired when the view is tapped."""
    model_config = ConfigDict(frozen=True)

    kind: BindingKind
    request_code: int
    intent: Intent


class WidgetSnapshot(BaseModel):
    """Everything the host needs to draw one widget instance."""
    model_config = ConfigDict(frozen=True)

    instance_id: WidgetInstanceId
    title: str
    count_text: str
    bindings: Dict[str, Binding]

    @property
    def product_id(self) -> Optional[str]:
        area = self.bindings.get(VIEW_CLICKABLE_AREA)
        return area.intent.product_id if area else None


class WidgetHost(ABC):
    """Host side of the widget: owns instance ids and draws snapshots."""

    @abstractmethod
    def get_instance_ids(self) -> List[WidgetInstanceId]:
        ...

    @abstractmethod
    def update_app_widget(self, instance_id: WidgetInstanceId, snapshot: WidgetSnapshot) -> None:
        ...


class InMemoryWidgetHost(WidgetHost):
    """Widget host that keeps the last snapshot per placed instance.

    Broadcasts fired from a snapshot are routed to the bound receiver, which is
    how the real host delivers button presses to the widget provider.
    """

    def __init__(self) -> None:
        self._next_id = 1
        self._instances: List[WidgetInstanceId] = []
        self.snapshots: Dict[WidgetInstanceId, WidgetSnapshot] = {}
        self.update_calls = 0
        self._receiver: Optional[Callable[[Intent], Any]] = None

    def bind(self, receiver: Callable[[Intent], Any]) -> None:
        self._receiver = receiver

    def place(self) -> WidgetInstanceId:
        instance_id = self._next_id
        self._next_id += 1
        self._instances.append(instance_id)
        logger.debug(f"Placed widget instance {instance_id}")
        return instance_id

    def remove(self, instance_id: WidgetInstanceId) -> None:
        if instance_id in self._instances:
            self._instances.remove(instance_id)
        self.snapshots.pop(instance_id, None)

    def get_instance_ids(self) -> List[WidgetInstanceId]:
        return list(self._instances)

    def update_app_widget(self, instance_id: WidgetInstanceId, snapshot: WidgetSnapshot) -> None:
        if instance_id not in self._instances:
            logger.warning(f"Ignoring update for unknown widget instance {instance_id}")
            return
        self.snapshots[instance_id] = snapshot
        self.update_calls += 1

    def send_broadcast(self, intent: Intent) -> Any:
        if self._receiver is None:
            logger.warning(f"No receiver bound, dropping broadcast {intent.action}")
            return None
        return self._receiver(intent)

    def request_update(self) -> Any:
        """Ask the bound receiver to redraw every placed instance."""
        return self.send_broadcast(
            Intent(action=ACTION_APPWIDGET_UPDATE, extras={EXTRA_APPWIDGET_IDS: self.get_instance_ids()})
        )

    def tap(self, instance_id: WidgetInstanceId, view_id: str) -> Optional[Intent]:
        """Simulate a tap on a view of a drawn instance.

        Broadcast bindings are delivered to the receiver; activity bindings
        are returned so the caller can hand them to a launcher.
        """
        snapshot = self.snapshots.get(instance_id)
        if snapshot is None or view_id not in snapshot.bindings:
            logger.warning(f"Nothing bound to {view_id} on instance {instance_id}")
            return None
        binding = snapshot.bindings[view_id]
        if binding.kind is BindingKind.BROADCAST:
            self.send_broadcast(binding.intent)
            return None
        return binding.intent
