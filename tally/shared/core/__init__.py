"""
Shared Core Module
==================

Event system, configuration, errors and exit cleanup hooks.
"""

# Event System
from .event_bus import EventBus, EventPayload
from . import events

# Errors
from .errors import TallyError, StoreWriteError, MethodNotImplemented, ConfigurationError

# Cleanup Registry
from .service_registry import (
    register_cleanup_handler,
    unregister_cleanup_handler,
    run_cleanup_handlers,
)

# Configuration
from .configuration import (
    ConfigManager,
    SystemConfig,
    StoreConfig,
    WidgetConfig,
    ConsumerConfig,
    ChannelConfig,
    get_config_manager,
    get_config,
    ValidationLevel,
)

__all__ = [
    # Event System
    "EventBus",
    "EventPayload",
    "events",
    # Errors
    "TallyError",
    "StoreWriteError",
    "MethodNotImplemented",
    "ConfigurationError",
    # Cleanup Registry
    "register_cleanup_handler",
    "unregister_cleanup_handler",
    "run_cleanup_handlers",
    # Configuration
    "ConfigManager",
    "SystemConfig",
    "StoreConfig",
    "WidgetConfig",
    "ConsumerConfig",
    "ChannelConfig",
    "get_config_manager",
    "get_config",
    "ValidationLevel",
]
