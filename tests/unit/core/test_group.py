from unittest.mock import MagicMock

import pytest

from typedbus.core.bus import Bus
from typedbus.core.group import BusGroup
from typedbus.core.registry import EventTypeRegistry
from typedbus.types.events import BusEvent, EventType

X = EventType("X")
Y = EventType("Y", payload_type=str)


@pytest.fixture
def bus() -> Bus:
    return Bus(registry=EventTypeRegistry())


def test_group_scenario(bus: Bus):
    group = BusGroup(bus)
    calls: list[BusEvent] = []
    group.subscribe(X, calls.append)

    bus.emit(BusEvent(type="X"))
    assert len(calls) == 1

    group.unsubscribe_all()
    bus.emit(BusEvent(type="X"))
    assert len(calls) == 1


def test_unsubscribe_all_leaves_other_subscriptions(bus: Bus):
    group, other_group = BusGroup(bus), BusGroup(bus)
    in_group: list[BusEvent] = []
    direct: list[BusEvent] = []
    in_other: list[BusEvent] = []

    group.subscribe(X, in_group.append)
    group.subscribe(Y, in_group.append)
    bus.subscribe(X, direct.append)
    other_group.subscribe(X, in_other.append)

    group.unsubscribe_all()
    bus.emit(X())
    bus.emit(Y("y"))

    assert in_group == []
    assert len(direct) == 1
    assert len(in_other) == 1


def test_unsubscribe_all_on_empty_group_and_twice(bus: Bus):
    group = BusGroup(bus)
    group.unsubscribe_all()
    group.unsubscribe()

    group.subscribe(X, lambda e: None)
    group.unsubscribe_all()
    group.unsubscribe_all()

    assert len(group) == 0
    assert bus.get_stats().active_subscriptions == 0


def test_subscribe_returns_handle_for_early_release(bus: Bus):
    group = BusGroup(bus)
    calls: list[BusEvent] = []
    handle = group.subscribe(X, calls.append)
    group.subscribe(Y, calls.append)
    assert len(group) == 2

    handle.unsubscribe()
    bus.emit(X())

    assert calls == []
    assert len(group) == 1
    group.unsubscribe_all()


def test_group_emit_delegates_unchanged():
    bus = MagicMock()
    group = BusGroup(bus)
    event = Y("payload")

    group.emit(event)

    bus.emit.assert_called_once_with(event)


def test_group_reusable_after_teardown(bus: Bus):
    group = BusGroup(bus)
    calls: list[BusEvent] = []
    group.subscribe(X, calls.append)
    group.unsubscribe_all()

    group.subscribe(X, calls.append)
    bus.emit(X())

    assert len(calls) == 1


def test_groups_nest(bus: Bus):
    parent, child = BusGroup(bus), BusGroup(bus)
    calls: list[BusEvent] = []
    child.subscribe(X, calls.append)
    parent._add_to_group_sub(child)

    parent.unsubscribe_all()
    bus.emit(X())

    assert calls == []
