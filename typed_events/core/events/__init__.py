"""
Event System - typed, callable event channels.

Core Components:
- EventChannel: handler registry + sequential dispatcher
- EventInstance: per-emission record shared by all handlers
- event: channel factory

Design Philosophy:
- Handlers run in registration order, one at a time
- Handlers share one EventInstance and may write `result`
- Failures reach the emitter untouched

Quick Start:
    from typed_events.core.events import EventChannel, event

    saved: EventChannel[str, int] = event("saved")

    async def count_bytes(e):
        e.result = (e.result or 0) + len(e.args)

    saved(count_bytes)
    instance = await saved.emit("hello")
    assert instance.result == 5
"""

from .base import ArgsT, EventHandler, EventInstance, EventPredicate, ResultT, Unregister
from .channel import EventChannel, event

__all__ = [
    "ArgsT",
    "EventChannel",
    "EventHandler",
    "EventInstance",
    "EventPredicate",
    "ResultT",
    "Unregister",
    "event",
]
