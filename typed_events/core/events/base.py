"""
Base Event Types - records and callables shared by event channels.

Core Concepts:
- EventInstance: one record per emission, shared by every handler
- EventHandler: sync or async callable that receives an EventInstance
- EventPredicate: sync callable deciding whether an instance matches

Design Principles:
- One instance per emit(), passed by reference
- `event` and `args` are fixed at emission, `result` and `canceled` are writable
- `canceled` is advisory; channels never read it
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, TypeVar

if TYPE_CHECKING:
    from .channel import EventChannel

ArgsT = TypeVar("ArgsT")
ResultT = TypeVar("ResultT")

_READ_ONLY_FIELDS = frozenset({"event", "args"})


@dataclass(eq=False)
class EventInstance(Generic[ArgsT, ResultT]):
    """
    Record of a single emission.

    Handlers observe each other's writes to `result` and `canceled`
    in registration order within the same emission.

    Attributes:
        event: Channel that produced this instance
        args: Arguments passed to emit()
        result: Value handlers may populate (initially the emit() result or None)
        canceled: Advisory flag for handlers to coordinate on
    """

    event: EventChannel[ArgsT, ResultT]
    args: ArgsT
    result: ResultT | None = None
    canceled: bool = False

    def __setattr__(self, name: str, value: Any) -> None:
        if name in _READ_ONLY_FIELDS and name in self.__dict__:
            raise AttributeError(f"EventInstance.{name} is read-only")
        super().__setattr__(name, value)

    def __repr__(self) -> str:
        return (
            f"EventInstance(event={self.event.name!r}, args={self.args!r}, "
            f"result={self.result!r}, canceled={self.canceled})"
        )


EventHandler = Callable[[EventInstance[ArgsT, ResultT]], Awaitable[None] | None]
EventPredicate = Callable[[EventInstance[ArgsT, ResultT]], bool]
Unregister = Callable[[], None]


__all__ = [
    "ArgsT",
    "EventHandler",
    "EventInstance",
    "EventPredicate",
    "ResultT",
    "Unregister",
]
