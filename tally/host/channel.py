"""Named method channel between the application host and application code.

Inbound calls (application asking the host) go through a single handler the
host registers. Outbound calls (host notifying the application) are published
on the event bus under ``"{channel}/{method}"``.
"""

from __future__ import annotations

import inspect
import logging
from typing import Any, Callable, Dict, Optional

from tally.shared.core import events
from tally.shared.core.errors import MethodNotImplemented
from tally.shared.core.event_bus import EventBus, EventHandler

logger = logging.getLogger(__name__)

METHOD_GET_INITIAL_INTENT = "getInitialIntent"
METHOD_GET_PRODUCT_ID = "getProductId"
METHOD_ON_NEW_INTENT = "onNewIntent"

MethodCallHandler = Callable[[str, Dict[str, Any]], Any]


class MethodChannel:
    def __init__(self, name: str, event_bus: EventBus):
        self.name = name
        self.bus = event_bus
        self._handler: Optional[MethodCallHandler] = None

    def set_method_call_handler(self, handler: Optional[MethodCallHandler]) -> None:
        """Install the host-side handler for inbound calls (None removes it)."""
        self._handler = handler

    async def call(self, method: str, arguments: Optional[Dict[str, Any]] = None) -> Any:
        """Inbound call from application code.

        Raises:
            MethodNotImplemented: no handler, or the handler does not know ``method``
        """
        if self._handler is None:
            raise MethodNotImplemented(self.name, method)
        result = self._handler(method, arguments or {})
        if inspect.isawaitable(result):
            result = await result
        return result

    async def invoke_method(self, method: str, arguments: Dict[str, Any]) -> int:
        """Outbound call to application code. Returns the number of listeners reached."""
        topic = events.channel_topic(self.name, method)
        delivered = await self.bus.publish(topic, dict(arguments))
        if not delivered:
            logger.warning(f"{self.name}: nobody listening for {method}")
        return delivered

    async def listen(self, method: str, handler: EventHandler) -> None:
        await self.bus.subscribe(events.channel_topic(self.name, method), handler)

    async def unlisten(self, method: str, handler: EventHandler) -> None:
        await self.bus.unsubscribe(events.channel_topic(self.name, method), handler)


class WidgetChannelClient:
    """Application-code view of the widget channel."""

    def __init__(self, channel: MethodChannel):
        self.channel = channel

    async def get_initial_intent(self) -> Optional[str]:
        return await self.channel.call(METHOD_GET_INITIAL_INTENT)

    async def get_product_id(self) -> Optional[str]:
        return await self.channel.call(METHOD_GET_PRODUCT_ID)
