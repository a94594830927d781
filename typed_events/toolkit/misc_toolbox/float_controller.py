"""
Float Controller - execution markers for event dispatch.

Floats are lightweight markers dropped by event channels at each dispatch
stage (emission started, handler completed/failed, expect timed out). They
make it possible to assert in tests which parts of a dispatch actually ran.

- In tests: enabled=True, inspect collected floats
- In production: enabled=False, float() returns immediately

Usage:
    >>> from typed_events.toolkit.misc_toolbox.float_controller import FloatContext
    >>>
    >>> with FloatContext() as fc:
    ...     await channel.emit("payload")
    ...     assert fc.has_float("channel.emit.completed")
"""

from __future__ import annotations

from collections import defaultdict, deque
from datetime import datetime
import logging
from typing import Any

from typed_events.core.config import FloatConfig

logger = logging.getLogger(__name__)


class FloatEvent:
    """
    Single float event.

    Attributes:
        name: Float name (e.g., "channel.emit.started")
        timestamp: When float occurred
        data: Additional data attached to float
    """

    def __init__(self, name: str, data: dict[str, Any] | None = None):
        self.name = name
        self.timestamp = datetime.now()
        self.data = data or {}

    def __repr__(self) -> str:
        return (
            f"FloatEvent(name={self.name!r}, "
            f"timestamp={self.timestamp.isoformat()}, "
            f"data={self.data})"
        )


class FloatController:
    """
    Collector for float markers.

    Singleton pattern: one controller per application, created from
    FloatConfig (environment) on first use.

    Usage:
        >>> fc = FloatController.get_instance(enabled=True)
        >>> fc.float("channel.emit.started", channel="ready")
        >>> assert fc.count_floats("channel.*") == 1
        >>> fc.clear()
    """

    _instance: FloatController | None = None

    def __init__(self, enabled: bool = False, max_events: int = 0):
        """
        Initialize float controller.

        Args:
            enabled: Whether to collect floats (True in tests, False in prod)
            max_events: Max floats retained, oldest dropped first (0=unlimited)
        """
        self.enabled = enabled
        self.max_events = max_events
        self._floats: deque[FloatEvent] = deque(maxlen=max_events or None)

        logger.debug(f"FloatController initialized: enabled={enabled}, max_events={max_events}")

    @classmethod
    def get_instance(cls, enabled: bool | None = None) -> FloatController:
        """
        Get singleton instance.

        Args:
            enabled: Override enabled state

        Returns:
            Global FloatController instance
        """
        if cls._instance is None:
            config = FloatConfig()
            cls._instance = cls(
                enabled=enabled if enabled is not None else config.enabled,
                max_events=config.max_events,
            )
        elif enabled is not None:
            cls._instance.enabled = enabled

        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Reset singleton (for tests)."""
        cls._instance = None

    def float(self, event_name: str, **data: Any) -> FloatEvent | None:
        """
        Record a float event.

        Args:
            event_name: Float event name (e.g., "channel.handler.failed")
            **data: Additional data to attach

        Returns:
            FloatEvent if enabled, None otherwise
        """
        if not self.enabled:
            return None

        event = FloatEvent(name=event_name, data=data)
        self._floats.append(event)

        logger.debug(f"FLOAT[{event_name}] {data if data else ''}")

        return event

    def has_float(self, name: str) -> bool:
        """Check if a float with this exact name was recorded."""
        return any(event.name == name for event in self._floats)

    def get_floats(self, pattern: str | None = None) -> list[FloatEvent]:
        """
        Get all floats, optionally filtered by pattern.

        Args:
            pattern: Exact name, or a prefix ending in "*" (e.g., "channel.handler.*")

        Returns:
            List of matching FloatEvents, oldest first
        """
        if pattern is None:
            return list(self._floats)

        if "*" in pattern:
            prefix = pattern.replace("*", "")
            return [event for event in self._floats if event.name.startswith(prefix)]
        return [event for event in self._floats if event.name == pattern]

    def get_float(self, name: str, index: int = 0) -> FloatEvent | None:
        """Get the index-th float recorded under name, or None."""
        events = self.get_floats(name)
        if index < len(events):
            return events[index]
        return None

    def count_floats(self, pattern: str | None = None) -> int:
        return len(self.get_floats(pattern))

    def clear(self) -> None:
        """Clear all collected floats."""
        self._floats.clear()
        logger.debug("FloatController: cleared")

    def get_report(self) -> dict[str, Any]:
        """
        Get float report.

        Returns:
            Dict with statistics about collected floats
        """
        float_counts: dict[str, int] = defaultdict(int)
        for event in self._floats:
            float_counts[event.name] += 1

        return {
            "enabled": self.enabled,
            "total_floats": len(self._floats),
            "unique_names": len(float_counts),
            "float_counts": dict(float_counts),
        }

    def __repr__(self) -> str:
        return f"FloatController(enabled={self.enabled}, floats={len(self._floats)})"


def float_event(event_name: str, **data: Any) -> FloatEvent | None:
    """
    Quick emit a float event using global controller.

    Example:
        >>> float_event("channel.emit.started", channel="ready")
    """
    return FloatController.get_instance().float(event_name, **data)


class FloatContext:
    """
    Context manager for float collection in tests.

    Usage:
        >>> with FloatContext() as fc:
        ...     await channel.emit()
        ...     assert fc.has_float("channel.emit.started")
    """

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self.fc = FloatController.get_instance()
        self._old_enabled = self.fc.enabled

    def __enter__(self) -> FloatController:
        self.fc.enabled = self.enabled
        self.fc.clear()
        return self.fc

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.fc.enabled = self._old_enabled
        return False
