"""Tally: home-screen counter widget kept in sync with its application."""

from .shared.core.event_bus import EventBus

__version__ = "0.3.0"

__all__ = ["EventBus", "__version__"]
