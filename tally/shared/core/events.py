"""Canonical event definitions for Tally."""

from __future__ import annotations

from typing import Optional

from .event_bus import EventPayload

# Counter lifecycle
TOPIC_COUNTER_UPDATED = "counter.updated"
TOPIC_WIDGET_PINNED = "widget.pinned"

# Navigation lifecycle
TOPIC_NAVIGATION_DELIVERED = "navigation.delivered"
TOPIC_NAVIGATION_DISCARDED = "navigation.discarded"


def channel_topic(channel_name: str, method: str) -> str:
    """Bus topic carrying outbound calls for a method channel."""
    return f"{channel_name}/{method}"


def create_counter_updated_event(
    product_id: str,
    previous_count: int,
    current_count: int,
    kind: str,
) -> EventPayload:
    """Create a counter updated event (a pending command was applied)."""
    return {
        "product_id": product_id,
        "previous_count": previous_count,
        "current_count": current_count,
        "kind": kind,
    }


def create_widget_pinned_event(product_id: str, product_name: str, current_count: int) -> EventPayload:
    """Create a widget pinned event (the widget now shows this product)."""
    return {
        "product_id": product_id,
        "product_name": product_name,
        "current_count": current_count,
    }


def create_navigation_event(
    action: str,
    product_id: str,
    reason: Optional[str] = None,
) -> EventPayload:
    """Create a navigation delivered/discarded event."""
    event: EventPayload = {
        "action": action,
        "product_id": product_id,
    }
    if reason is not None:
        event["reason"] = reason
    return event
