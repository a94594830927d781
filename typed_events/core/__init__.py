"""Core - event channels, configuration and errors."""

from typed_events.core.config import EventsConfig, FloatConfig, get_config, set_config
from typed_events.core.events import EventChannel, EventInstance, event
from typed_events.core.exceptions import ConfigurationError, ExpectTimeoutError, TypedEventsError

__all__ = [
    "ConfigurationError",
    "EventChannel",
    "EventInstance",
    "EventsConfig",
    "ExpectTimeoutError",
    "FloatConfig",
    "TypedEventsError",
    "event",
    "get_config",
    "set_config",
]
