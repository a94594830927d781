"""Registration and sequential dispatch on EventChannel."""

import asyncio
from dataclasses import dataclass, field

import pytest

from typed_events import EventChannel, EventInstance, EventsConfig, event, set_config


async def test_handler_receives_args_and_initial_result():
    channel: EventChannel[dict, int] = event()
    seen = []

    def handler(e: EventInstance[dict, int]) -> None:
        seen.append((e.args, e.result, e.event))

    channel(handler)
    await channel.emit({"foo": "bar"}, 42)

    assert seen == [({"foo": "bar"}, 42, channel)]


async def test_emit_without_result_leaves_it_none():
    channel = event()
    channel(lambda e: None)

    instance = await channel.emit("A")

    assert instance.args == "A"
    assert instance.result is None
    assert instance.canceled is False


async def test_handler_result_is_returned_from_emit():
    channel: EventChannel[None, int] = event()

    def handler(e):
        e.result = 42

    channel(handler)
    instance = await channel.emit()

    assert instance.result == 42


async def test_async_handler_runs_on_every_emission():
    channel = event()
    counter = 0

    async def handler(e):
        nonlocal counter
        await asyncio.sleep(0.01)
        counter += 1

    channel(handler)
    await channel.emit()
    await channel.emit()
    await channel.emit()

    assert counter == 3


async def test_result_carries_across_emissions():
    channel: EventChannel[None, int] = event()

    def handler(e):
        if e.result is None:
            e.result = 42
        e.result += 1

    channel(handler)
    first = await channel.emit()
    second = await channel.emit(None, first.result)

    assert first.result == 43
    assert second.result == 44


async def test_two_handlers_both_fire_each_emission():
    channel = event()
    counter = 0

    def h1(e):
        nonlocal counter
        counter += 1

    def h2(e):
        nonlocal counter
        counter += 1

    channel(h1)
    channel(h2)
    for _ in range(3):
        await channel.emit()

    assert counter == 6


async def test_same_handler_registered_twice_is_kept_once():
    channel = event()
    calls = []

    def handler(e):
        calls.append(e.args)

    channel(handler)
    channel(handler)
    await channel.emit("x")

    assert calls == ["x"]
    assert len(channel) == 1


async def test_distinct_but_identical_handlers_are_both_kept():
    channel = event()
    calls = []

    channel(lambda e: calls.append(1))
    channel(lambda e: calls.append(1))
    await channel.emit()

    assert calls == [1, 1]
    assert channel.handler_count == 2


async def test_handlers_run_sequentially_in_registration_order():
    channel = event()
    log = []

    async def slow(e):
        log.append("slow.start")
        await asyncio.sleep(0.01)
        log.append("slow.end")

    def fast(e):
        log.append("fast")

    channel(slow)
    channel(fast)
    await channel.emit()

    assert log == ["slow.start", "slow.end", "fast"]


async def test_later_handlers_see_result_written_by_earlier_ones():
    channel: EventChannel[None, list] = event()
    observed = []

    async def first(e):
        await asyncio.sleep(0)
        e.result = ["first"]

    def second(e):
        observed.append(list(e.result))
        e.result.append("second")

    channel(first)
    channel(second)
    instance = await channel.emit()

    assert observed == [["first"]]
    assert instance.result == ["first", "second"]


async def test_canceled_flag_is_advisory():
    channel = event()
    calls = []

    def cancel(e):
        e.canceled = True

    def after(e):
        calls.append(e.canceled)

    channel(cancel)
    channel(after)
    instance = await channel.emit()

    assert calls == [True]
    assert instance.canceled is True


async def test_unregister_is_idempotent():
    channel = event()
    calls = []

    unregister = channel(lambda e: calls.append(e.args))
    await channel.emit(1)
    unregister()
    unregister()
    await channel.emit(2)
    unregister()

    assert calls == [1]
    assert len(channel) == 0


async def test_stale_unregister_does_not_remove_new_registration():
    channel = event()
    calls = []

    def handler(e):
        calls.append(e.args)

    old_unregister = channel(handler)
    old_unregister()
    channel(handler)
    old_unregister()
    await channel.emit("again")

    assert calls == ["again"]


async def test_handler_failure_propagates_and_stops_dispatch():
    channel = event()
    calls = []

    def before(e):
        calls.append("before")

    async def broken(e):
        raise RuntimeError("boom")

    def after(e):
        calls.append("after")

    channel(before)
    channel(broken)
    channel(after)

    with pytest.raises(RuntimeError, match="boom"):
        await channel.emit()

    assert calls == ["before"]


async def test_handler_removed_mid_dispatch_is_skipped():
    channel = event()
    calls = []

    def remover(e):
        calls.append("remover")
        unregister_victim()

    def victim(e):
        calls.append("victim")

    channel(remover)
    unregister_victim = channel(victim)
    await channel.emit()
    await channel.emit()

    assert calls == ["remover", "remover"]


async def test_handler_added_mid_dispatch_waits_for_next_emission():
    channel = event()
    calls = []

    def late(e):
        calls.append(("late", e.args))

    def adder(e):
        calls.append(("adder", e.args))
        channel(late)

    channel(adder)
    await channel.emit(1)
    await channel.emit(2)

    assert calls == [("adder", 1), ("adder", 2), ("late", 2)]


async def test_self_unregistering_handler_does_not_break_dispatch():
    channel = event()
    calls = []

    def self_removing(e):
        calls.append("self")
        unregister()

    def other(e):
        calls.append("other")

    unregister = channel(self_removing)
    channel(other)
    await channel.emit()
    await channel.emit()

    assert calls == ["self", "other", "other"]


async def test_interleaved_emissions_get_separate_instances():
    channel = event()

    async def handler(e):
        await asyncio.sleep(0.01)
        e.result = e.args * 2

    channel(handler)
    first, second = await asyncio.gather(channel.emit(1), channel.emit(2))

    assert first is not second
    assert (first.result, second.result) == (2, 4)


async def test_instance_event_and_args_are_read_only():
    channel = event()
    instance = await channel.emit("fixed")

    with pytest.raises(AttributeError):
        instance.args = "changed"
    with pytest.raises(AttributeError):
        instance.event = event()

    instance.result = "writable"
    assert instance.result == "writable"


async def test_channels_are_independent():
    a = event("a")
    b = event("b")
    calls = []

    a(lambda e: calls.append("a"))
    await b.emit()

    assert calls == []
    assert a.name == "a"
    assert repr(b) == "EventChannel(name='b', handlers=0)"


def test_register_alias_and_membership():
    channel = event()

    def handler(e):
        pass

    unregister = channel.register(handler)
    assert handler in channel

    unregister()
    assert handler not in channel


@dataclass
class Collector:
    seen: list = field(default_factory=list)

    def __call__(self, e):
        self.seen.append(e.args)


class AlwaysEqual:
    calls = 0

    def __eq__(self, other):
        return isinstance(other, AlwaysEqual)

    def __hash__(self):
        return 1

    def __call__(self, e):
        AlwaysEqual.calls += 1


async def test_unhashable_callable_can_be_registered():
    channel = event()
    collector = Collector()

    unregister = channel(collector)
    await channel.emit("x")
    assert collector in channel

    unregister()
    await channel.emit("y")

    assert collector.seen == ["x"]
    assert len(channel) == 0


async def test_equal_but_distinct_handlers_are_both_kept():
    channel = event()
    AlwaysEqual.calls = 0
    first, second = AlwaysEqual(), AlwaysEqual()

    channel(first)
    channel(second)
    channel(first)
    await channel.emit()

    assert AlwaysEqual.calls == 2
    assert len(channel) == 2


async def test_channel_follows_later_global_config(caplog):
    channel = event("late")
    channel(lambda e: None)
    set_config(EventsConfig(log_dispatch=True))

    with caplog.at_level("DEBUG", logger="typed_events.core.events.channel"):
        await channel.emit()

    assert "Emitting 'late' to 1 handlers" in caplog.text
