"""Custom exceptions for typed-events."""


class TypedEventsError(Exception):
    """Base exception for all typed-events errors."""


class ConfigurationError(TypedEventsError):
    """Raised when configuration is invalid or cannot be loaded."""


class ExpectTimeoutError(TypedEventsError, TimeoutError):
    """Raised when no matching emission arrives before an expect() deadline."""

    def __init__(self, timeout: float, channel_name: str | None = None) -> None:
        where = f" on '{channel_name}'" if channel_name else ""
        super().__init__(f"No matching event{where} within {timeout}s")
        self.timeout = timeout
        self.channel_name = channel_name
