import pytest

from typedbus.core.stream import CompositeSubscription, EventStream, StreamSubscription
from typedbus.errors.errors import BusError

# --- StreamSubscription ---


def test_teardown_runs_once():
    calls: list[str] = []
    sub = StreamSubscription(lambda: calls.append("a"))
    sub.add_teardown(lambda: calls.append("b"))

    sub.unsubscribe()
    sub.unsubscribe()

    assert calls == ["a", "b"]
    assert sub.closed is True


def test_teardown_added_after_close_runs_immediately():
    calls: list[str] = []
    sub = StreamSubscription()
    sub.unsubscribe()
    sub.add_teardown(lambda: calls.append("late"))

    assert calls == ["late"]


# --- EventStream ---


def test_stream_multicasts_in_subscription_order():
    stream: EventStream[int] = EventStream()
    seen: list[tuple[str, int]] = []
    stream.subscribe(lambda v: seen.append(("a", v)))
    stream.subscribe(lambda v: seen.append(("b", v)))

    stream.next(1)

    assert seen == [("a", 1), ("b", 1)]
    assert stream.observer_count == 2


def test_stream_is_hot():
    stream: EventStream[int] = EventStream()
    stream.next(1)
    seen: list[int] = []
    stream.subscribe(seen.append)
    stream.next(2)

    assert seen == [2]


def test_unsubscribe_detaches_observer():
    stream: EventStream[int] = EventStream()
    seen: list[int] = []
    sub = stream.subscribe(seen.append)
    sub.unsubscribe()
    stream.next(1)

    assert seen == []
    assert stream.observer_count == 0


def test_observer_added_during_next_misses_current_value():
    stream: EventStream[int] = EventStream()
    late: list[int] = []

    def attach(value: int) -> None:
        if value == 1:
            stream.subscribe(late.append)

    stream.subscribe(attach)
    stream.next(1)
    stream.next(2)

    assert late == [2]


def test_observer_error_propagates():
    stream: EventStream[int] = EventStream()
    after: list[int] = []

    def boom(value: int) -> None:
        raise ValueError("boom")

    stream.subscribe(boom)
    stream.subscribe(after.append)

    with pytest.raises(ValueError):
        stream.next(1)
    assert after == []


# --- FilteredStream ---


def test_filter_forwards_matching_values_only():
    stream: EventStream[int] = EventStream()
    evens: list[int] = []
    stream.filter(lambda v: v % 2 == 0).subscribe(evens.append)

    for v in range(5):
        stream.next(v)

    assert evens == [0, 2, 4]


def test_filters_compose():
    stream: EventStream[int] = EventStream()
    seen: list[int] = []
    stream.filter(lambda v: v % 2 == 0).filter(lambda v: v > 2).subscribe(seen.append)

    for v in range(7):
        stream.next(v)

    assert seen == [4, 6]


def test_filtered_subscription_detaches_from_source():
    stream: EventStream[int] = EventStream()
    sub = stream.filter(lambda v: True).subscribe(lambda v: None)
    assert stream.observer_count == 1

    sub.unsubscribe()
    assert stream.observer_count == 0


# --- CompositeSubscription ---


def test_composite_releases_all_children():
    stream: EventStream[int] = EventStream()
    seen: list[int] = []
    composite = CompositeSubscription()
    composite.add(stream.subscribe(seen.append))
    composite.add(stream.subscribe(seen.append))
    assert len(composite) == 2

    composite.unsubscribe()
    composite.unsubscribe()
    stream.next(1)

    assert seen == []
    assert composite.closed is True
    assert len(composite) == 0


def test_composite_add_returns_child():
    composite = CompositeSubscription()
    child = StreamSubscription()

    assert composite.add(child) is child


def test_composite_drops_children_closed_early():
    composite = CompositeSubscription()
    child = composite.add(StreamSubscription())
    other = composite.add(StreamSubscription())

    child.unsubscribe()

    assert len(composite) == 1
    composite.unsubscribe()
    assert other.closed is True


def test_add_to_closed_composite_releases_child():
    composite = CompositeSubscription()
    composite.unsubscribe()
    child = composite.add(StreamSubscription())

    assert child.closed is True
    assert len(composite) == 0


def test_composite_nests():
    outer, inner = CompositeSubscription(), CompositeSubscription()
    leaf = inner.add(StreamSubscription())
    outer.add(inner)

    outer.unsubscribe()

    assert inner.closed is True
    assert leaf.closed is True


def test_composite_releases_remaining_children_when_one_fails():
    class Broken:
        def unsubscribe(self) -> None:
            raise RuntimeError("broken")

    composite = CompositeSubscription()
    composite.add(Broken())
    survivor = composite.add(StreamSubscription())

    with pytest.raises(BusError):
        composite.unsubscribe()
    assert survivor.closed is True
