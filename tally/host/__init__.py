"""Application-process side: method channel, navigation bridge and command consumer."""

from .channel import MethodChannel, WidgetChannelClient
from .consumer import CommandConsumer
from .navigation import (
    ActivityLauncher,
    ApplicationHost,
    DeliveryState,
    NavigationBridge,
    NavigationInbox,
)

__all__ = [
    "ActivityLauncher",
    "ApplicationHost",
    "CommandConsumer",
    "DeliveryState",
    "MethodChannel",
    "NavigationBridge",
    "NavigationInbox",
    "WidgetChannelClient",
]
