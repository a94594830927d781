"""
EventChannel - typed, callable event dispatcher.

Responsibilities:
- Register/unregister handlers (set semantics, registration order kept)
- Emit events sequentially, one shared EventInstance per emission
- One-shot registrations (once, once_pred)
- Awaitable waiters (expect, wait, wait_pred)

Architecture:
- In-memory, single event loop
- Handlers run one after another; an awaitable handler is awaited
  before the next one starts
- Handler errors propagate to the emitter and stop the walk
- Observable via Float integration
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import math
from typing import Any, Generic

from typed_events.core.config import EventsConfig, get_config
from typed_events.core.exceptions import ExpectTimeoutError
from typed_events.toolkit.misc_toolbox.float_controller import float_event

from .base import ArgsT, EventHandler, EventInstance, EventPredicate, ResultT, Unregister

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT: Any = object()


class _Registration:
    """Token identifying one live registration of a handler."""

    __slots__ = ("handler",)

    def __init__(self, handler: EventHandler) -> None:
        self.handler = handler


def _handler_name(handler: Any) -> str:
    return getattr(handler, "__qualname__", None) or repr(handler)


async def _invoke(handler: EventHandler, instance: EventInstance) -> None:
    outcome = handler(instance)
    if inspect.isawaitable(outcome):
        await outcome


class EventChannel(Generic[ArgsT, ResultT]):
    """
    A typed event: callable to register handlers, with emit() to fire them.

    Every channel owns its own handler registry. Handlers are kept by
    identity: registering the same object twice keeps a single entry,
    while distinct objects stay separate even if they compare equal. Each emit() walks a snapshot of
    the registry taken when dispatch starts; handlers added during the
    walk wait for the next emission, and handlers removed before their
    turn are skipped.

    Usage:
        ready: EventChannel[str, int] = event("ready")

        unregister = ready(lambda e: print(e.args))
        instance = await ready.emit("hello", 0)
        unregister()
    """

    def __init__(self, name: str = "event", config: EventsConfig | None = None):
        """
        Initialize EventChannel.

        Args:
            name: Label used in logs and float markers
            config: Channel settings; when None, the global EventsConfig is
                looked up on each use, so set_config() applies later too
        """
        self._name = name
        self._own_config = config
        self._handlers: dict[int, _Registration] = {}

    @property
    def name(self) -> str:
        return self._name

    @property
    def _config(self) -> EventsConfig:
        return self._own_config or get_config()

    @property
    def handler_count(self) -> int:
        """Number of currently registered handlers."""
        return len(self._handlers)

    def __len__(self) -> int:
        return len(self._handlers)

    def __contains__(self, handler: object) -> bool:
        return id(handler) in self._handlers

    def __call__(self, handler: EventHandler[ArgsT, ResultT]) -> Unregister:
        return self.register(handler)

    def register(self, handler: EventHandler[ArgsT, ResultT]) -> Unregister:
        """
        Register a handler to be called on every emission.

        Args:
            handler: Callable receiving the EventInstance, sync or async

        Returns:
            Function removing this registration; safe to call repeatedly
        """
        key = id(handler)
        registration = self._handlers.get(key)
        if registration is None:
            registration = _Registration(handler)
            self._handlers[key] = registration
            logger.debug(f"Registered handler {_handler_name(handler)} on '{self._name}'")

        def unregister() -> None:
            if self._handlers.get(key) is registration:
                del self._handlers[key]
                logger.debug(f"Unregistered handler {_handler_name(handler)} from '{self._name}'")

        return unregister

    def once(self, handler: EventHandler[ArgsT, ResultT]) -> Unregister:
        """
        Run handler on the next emission only.

        The registration is removed before handler starts, so overlapping
        emissions never reach it twice.

        Returns:
            Function cancelling the pending registration
        """

        async def once_handler(instance: EventInstance[ArgsT, ResultT]) -> None:
            unregister()
            await _invoke(handler, instance)

        once_handler.__qualname__ = f"once({_handler_name(handler)})"
        unregister = self.register(once_handler)
        return unregister

    def once_pred(
        self,
        handler: EventHandler[ArgsT, ResultT],
        predicate: EventPredicate[ArgsT, ResultT],
    ) -> Unregister:
        """
        Run handler on the first emission for which predicate returns True.

        Non-matching emissions leave the registration in place.

        Returns:
            Function cancelling the pending registration
        """

        async def once_pred_handler(instance: EventInstance[ArgsT, ResultT]) -> None:
            if predicate(instance):
                unregister()
                await _invoke(handler, instance)

        once_pred_handler.__qualname__ = f"once_pred({_handler_name(handler)})"
        unregister = self.register(once_pred_handler)
        return unregister

    def expect(
        self,
        predicate: EventPredicate[ArgsT, ResultT],
        timeout: float | None = _DEFAULT_TIMEOUT,
    ) -> asyncio.Future[EventInstance[ArgsT, ResultT]]:
        """
        Wait for the first emission matching predicate.

        Registration happens immediately, so emissions made after this call
        returns are seen even before the future is awaited. Must be called
        with an event loop running.

        Args:
            predicate: Decides whether an instance matches
            timeout: Seconds to wait; None or inf waits forever. Defaults to
                EventsConfig.default_expect_timeout.

        Returns:
            Future resolving with the matching EventInstance, or failing with
            ExpectTimeoutError. Cancelling it drops the registration.
        """
        if timeout is _DEFAULT_TIMEOUT:
            timeout = self._config.default_expect_timeout
        if timeout is not None and math.isinf(timeout):
            timeout = None
        if timeout is not None and timeout < 0:
            raise ValueError(f"timeout must be non-negative, got {timeout}")

        loop = asyncio.get_running_loop()
        future: asyncio.Future[EventInstance[ArgsT, ResultT]] = loop.create_future()
        timer: asyncio.TimerHandle | None = None
        settled = False

        def settle() -> bool:
            nonlocal settled
            if settled:
                return False
            settled = True
            unregister()
            if timer is not None:
                timer.cancel()
            return True

        def expect_handler(instance: EventInstance[ArgsT, ResultT]) -> None:
            if future.done():
                settle()
                return
            if predicate(instance) and settle():
                future.set_result(instance)

        def on_timeout() -> None:
            if settle() and not future.done():
                logger.info(f"expect() on '{self._name}' timed out after {timeout}s")
                self._track_float("expect.timeout", timeout=timeout)
                future.set_exception(ExpectTimeoutError(timeout, self._name))

        def on_done(fut: asyncio.Future) -> None:
            if fut.cancelled():
                settle()

        unregister = self.register(expect_handler)
        if timeout is not None:
            timer = loop.call_later(timeout, on_timeout)
        future.add_done_callback(on_done)
        return future

    def wait(self) -> asyncio.Future[ArgsT]:
        """Future resolving with the args of the next emission."""
        return self._args_future(lambda resolve: self.once(resolve))

    def wait_pred(self, predicate: EventPredicate[ArgsT, ResultT]) -> asyncio.Future[ArgsT]:
        """Future resolving with the args of the first emission matching predicate."""
        return self._args_future(lambda resolve: self.once_pred(resolve, predicate))

    def _args_future(self, register_once) -> asyncio.Future[ArgsT]:
        future: asyncio.Future[ArgsT] = asyncio.get_running_loop().create_future()

        def resolve(instance: EventInstance[ArgsT, ResultT]) -> None:
            if not future.done():
                future.set_result(instance.args)

        unregister = register_once(resolve)
        future.add_done_callback(lambda fut: unregister() if fut.cancelled() else None)
        return future

    async def emit(
        self, args: ArgsT | None = None, result: ResultT | None = None
    ) -> EventInstance[ArgsT, ResultT]:
        """
        Emit an event to all registered handlers, one at a time.

        Args:
            args: Event arguments (None for payload-less events)
            result: Initial value of instance.result

        Returns:
            The EventInstance, after every handler has completed

        Raises:
            Exception: Whatever a handler raised; later handlers are not run
        """
        instance: EventInstance[ArgsT, ResultT] = EventInstance(
            event=self, args=args, result=result
        )
        snapshot = list(self._handlers.items())

        if self._config.log_dispatch:
            logger.debug(f"Emitting '{self._name}' to {len(snapshot)} handlers")
        self._track_float("emit.started", handler_count=len(snapshot))

        for key, registration in snapshot:
            if self._handlers.get(key) is not registration:
                continue
            handler = registration.handler
            try:
                await _invoke(handler, instance)
            except Exception as e:
                logger.debug(
                    f"Handler {_handler_name(handler)} failed on '{self._name}': {e}",
                    exc_info=True,
                )
                self._track_float("handler.failed", handler=_handler_name(handler), error=str(e))
                raise
            self._track_float("handler.completed", handler=_handler_name(handler))

        self._track_float("emit.completed", result=instance.result, canceled=instance.canceled)
        return instance

    def _track_float(self, stage: str, **extra: Any) -> None:
        """
        Emit Float tracking event.

        Args:
            stage: Dispatch stage (e.g., 'emit.started', 'handler.completed')
            **extra: Additional context for Float
        """
        if not self._config.enable_floats:
            return
        float_event(f"channel.{stage}", channel=self._name, **extra)

    def __repr__(self) -> str:
        return f"EventChannel(name={self._name!r}, handlers={len(self._handlers)})"


def event(name: str = "event", config: EventsConfig | None = None) -> EventChannel[Any, Any]:
    """
    Create a new, independent event channel.

    Annotate the result to fix its argument and result types:

        closed: EventChannel[None, None] = event("closed")
        saving: EventChannel[Document, bool] = event("saving")
    """
    return EventChannel(name=name, config=config)


__all__ = [
    "EventChannel",
    "event",
]
