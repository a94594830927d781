"""Miscellaneous toolbox - utilities and helpers."""

from typed_events.toolkit.misc_toolbox.float_controller import (
    FloatContext,
    FloatController,
    FloatEvent,
    float_event,
)

__all__ = [
    "FloatContext",
    "FloatController",
    "FloatEvent",
    "float_event",
]
