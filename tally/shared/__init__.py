"""
Tally Shared Kernel
===================

Code used by both the widget process and the application process.

Architecture:
- core: EventBus, configuration, errors, service registry
- domain: counter data model and command rules
- infrastructure: Shared State Store backends and the counter repository
"""

__version__ = "0.3.0"
