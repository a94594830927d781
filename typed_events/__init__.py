"""
typed-events - minimal typed event dispatch.

Main Features:
- Callable channels: register handlers by calling the channel
- Sequential, awaited dispatch in registration order
- Shared per-emission record with a writable result
- One-shot handlers and awaitable waiters with optional timeout

Quick Start:
    >>> from typed_events import event
    >>> ready = event("ready")
    >>> ready.once(lambda e: print("ready with", e.args))
    >>> await ready.emit({"port": 8080})
"""

__version__ = "0.1.0"

from typed_events.core.config import EventsConfig, get_config, set_config
from typed_events.core.events import (
    EventChannel,
    EventHandler,
    EventInstance,
    EventPredicate,
    Unregister,
    event,
)
from typed_events.core.exceptions import (
    ConfigurationError,
    ExpectTimeoutError,
    TypedEventsError,
)

__all__ = [
    "ConfigurationError",
    "EventChannel",
    "EventHandler",
    "EventInstance",
    "EventPredicate",
    "EventsConfig",
    "ExpectTimeoutError",
    "TypedEventsError",
    "Unregister",
    "event",
    "get_config",
    "set_config",
]
