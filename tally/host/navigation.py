"""Navigation Bridge: "open product X" from the widget into the application.

Requests travel as launch intents, never through the Shared State Store. The
application host accepts them either at process creation (cold) or while it is
already running (warm). Until application code attaches its listener, the
host holds at most one request; a newer one replaces it.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict

from tally.shared.core import events
from tally.shared.core.errors import MethodNotImplemented
from tally.shared.core.event_bus import EventBus, EventHandler
from tally.shared.domain.models import ACTION_OPEN_PRODUCT, NavigationRequest
from tally.shared.infrastructure.platform import Intent, open_product_intent, open_request_code

from .channel import (
    METHOD_GET_INITIAL_INTENT,
    METHOD_GET_PRODUCT_ID,
    METHOD_ON_NEW_INTENT,
    MethodChannel,
)

logger = logging.getLogger(__name__)

DEFAULT_CHANNEL_NAME = "com.example.knitknit/widget"


class DeliveryState(str, Enum):
    DELIVERED = "delivered"
    DISCARDED = "discarded"


class DeliveryRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    state: DeliveryState
    request: NavigationRequest


class ActivityLauncher(ABC):
    """Platform mechanism that starts or foregrounds the application."""

    @abstractmethod
    async def launch(self, intent: Intent) -> None:
        ...


class NavigationBridge:
    def __init__(self, launcher: ActivityLauncher):
        self.launcher = launcher

    @staticmethod
    def build_request(product_id: str) -> NavigationRequest:
        return NavigationRequest(product_id=product_id)

    @staticmethod
    def build_intent(product_id: str) -> Intent:
        return open_product_intent(product_id)

    @staticmethod
    def request_code(product_id: str) -> int:
        return open_request_code(product_id)

    async def open(self, product_id: str) -> NavigationRequest:
        intent = self.build_intent(product_id)
        logger.debug(f"Opening application for product {product_id}")
        await self.launcher.launch(intent)
        return self.build_request(product_id)


def request_from_intent(intent: Optional[Intent]) -> Optional[NavigationRequest]:
    """Extract a NavigationRequest, or None for intents that are not open requests."""
    if intent is None:
        return None
    product_id = intent.product_id
    if intent.action != ACTION_OPEN_PRODUCT or product_id is None:
        logger.info(f"Ignoring intent action={intent.action}, productId={product_id}")
        return None
    return NavigationRequest(product_id=product_id)


class NavigationInbox:
    """One-slot buffer for a request that arrived before anyone was listening."""

    def __init__(self) -> None:
        self._slot: Optional[NavigationRequest] = None

    @property
    def pending(self) -> Optional[NavigationRequest]:
        return self._slot

    def offer(self, request: NavigationRequest) -> Optional[NavigationRequest]:
        """Buffer ``request``. Returns the request it replaced, if any."""
        superseded, self._slot = self._slot, request
        return superseded

    def drain(self) -> Optional[NavigationRequest]:
        request, self._slot = self._slot, None
        return request


class ApplicationHost(ActivityLauncher):
    """The application's single activity as seen by the platform.

    ``launch`` routes to ``on_create`` on a cold start and to ``on_new_intent``
    once the activity exists. Application code attaches its listener with
    ``attach_listener``; that is also when a buffered request is delivered.
    """

    def __init__(self, event_bus: EventBus, channel_name: str = DEFAULT_CHANNEL_NAME):
        self.bus = event_bus
        self.channel_name = channel_name
        self.channel: Optional[MethodChannel] = None
        self.launch_intent: Optional[Intent] = None
        self.created = False
        self.inbox = NavigationInbox()
        self.history: List[DeliveryRecord] = []
        self._listener: Optional[EventHandler] = None

    @property
    def listening(self) -> bool:
        return self.channel is not None and self._listener is not None

    async def launch(self, intent: Intent) -> None:
        if not self.created:
            await self.on_create(intent)
        else:
            await self.on_new_intent(intent)

    async def on_create(self, intent: Intent) -> None:
        self.created = True
        self.launch_intent = intent
        logger.debug(f"onCreate: {intent.action}, productId={intent.product_id}")
        await self._accept(intent)

    async def on_new_intent(self, intent: Intent) -> None:
        logger.debug(f"onNewIntent: {intent.action}, productId={intent.product_id}")
        await self._accept(intent)

    async def attach_listener(self, listener: EventHandler) -> MethodChannel:
        """Configure the widget channel and start delivering open requests."""
        if self.channel is not None:
            await self.detach_listener()

        channel = MethodChannel(self.channel_name, self.bus)
        channel.set_method_call_handler(self._handle_method_call)
        await channel.listen(METHOD_ON_NEW_INTENT, listener)
        self.channel = channel
        self._listener = listener

        pending = self.inbox.drain()
        if pending is not None:
            logger.debug(f"Delivering buffered request for {pending.product_id}")
            await self._deliver(pending)
        return channel

    async def detach_listener(self) -> None:
        if self.channel is not None and self._listener is not None:
            await self.channel.unlisten(METHOD_ON_NEW_INTENT, self._listener)
            self.channel.set_method_call_handler(None)
        self.channel = None
        self._listener = None

    async def finish(self) -> None:
        """Activity destroyed: next launch is a cold start again."""
        await self.detach_listener()
        self.created = False
        self.launch_intent = None

    def deliveries(self, state: DeliveryState) -> List[NavigationRequest]:
        return [record.request for record in self.history if record.state is state]

    async def _accept(self, intent: Intent) -> None:
        request = request_from_intent(intent)
        if request is None:
            return
        if self.listening:
            await self._deliver(request)
            return
        superseded = self.inbox.offer(request)
        if superseded is not None:
            await self._discard(superseded)

    async def _deliver(self, request: NavigationRequest) -> None:
        logger.debug(f"handleNewIntent: action={request.action}, productId={request.product_id}")
        await self.channel.invoke_method(METHOD_ON_NEW_INTENT, request.to_payload())
        self.history.append(DeliveryRecord(state=DeliveryState.DELIVERED, request=request))
        await self.bus.publish(
            events.TOPIC_NAVIGATION_DELIVERED,
            events.create_navigation_event(request.action, request.product_id),
        )

    async def _discard(self, request: NavigationRequest) -> None:
        logger.info(f"Buffered open request for {request.product_id} superseded before delivery")
        self.history.append(DeliveryRecord(state=DeliveryState.DISCARDED, request=request))
        await self.bus.publish(
            events.TOPIC_NAVIGATION_DISCARDED,
            events.create_navigation_event(request.action, request.product_id, reason="superseded"),
        )

    def _handle_method_call(self, method: str, arguments: Dict[str, Any]) -> Any:
        if method == METHOD_GET_INITIAL_INTENT:
            action = self.launch_intent.action if self.launch_intent else None
            logger.debug(f"getInitialIntent: {action}")
            return action
        if method == METHOD_GET_PRODUCT_ID:
            product_id = self.launch_intent.product_id if self.launch_intent else None
            logger.debug(f"getProductId: {product_id}")
            return product_id
        raise MethodNotImplemented(self.channel_name, method)
