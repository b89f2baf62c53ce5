from __future__ import annotations

from typing import Any, Callable, Generic, Optional, TypeVar

from typedbus.errors.errors import BusError
from typedbus.ports.event_bus import Unsubscribable

T = TypeVar("T")

# --- Subscription handles ---


class StreamSubscription:
    """
    Handle for one observer on a stream.
    - unsubscribe() is idempotent; teardowns run exactly once
    - teardowns added after close run immediately
    """

    def __init__(self, teardown: Optional[Callable[[], None]] = None) -> None:
        self._closed: bool = False
        self._teardowns: list[Callable[[], None]] = [teardown] if teardown is not None else []

    @property
    def closed(self) -> bool:
        return self._closed

    def add_teardown(self, teardown: Callable[[], None]) -> None:
        if self._closed:
            teardown()
            return
        self._teardowns.append(teardown)

    def unsubscribe(self) -> None:
        if self._closed:
            return
        self._closed = True
        teardowns, self._teardowns = self._teardowns, []
        for teardown in teardowns:
            teardown()


class CompositeSubscription:
    """
    Container of child subscriptions released together.

    - add() on a closed composite releases the child right away
    - children closed on their own are dropped from the container
    """

    def __init__(self) -> None:
        self._children: list[Unsubscribable] = []
        self._closed: bool = False

    @property
    def closed(self) -> bool:
        return self._closed

    def __len__(self) -> int:
        return len(self._children)

    def add(self, child: Unsubscribable) -> Unsubscribable:
        if child is self:
            return child
        if self._closed:
            child.unsubscribe()
            return child
        self._children.append(child)
        if isinstance(child, StreamSubscription):
            child.add_teardown(lambda: self.remove(child))
        return child

    def remove(self, child: Unsubscribable) -> None:
        self._children = [c for c in self._children if c is not child]

    def unsubscribe(self) -> None:
        if self._closed:
            return
        self._closed = True
        children, self._children = self._children, []
        errors: list[Exception] = []
        for child in children:
            try:
                child.unsubscribe()
            except Exception as exc:
                errors.append(exc)
        if errors:
            raise BusError(f"{len(errors)} error(s) while releasing subscriptions") from errors[0]


# --- Streams ---


class _Observer:
    __slots__ = ("callback", "subscription")

    def __init__(self, callback: Callable[[Any], None], subscription: StreamSubscription) -> None:
        self.callback = callback
        self.subscription = subscription


class EventStream(Generic[T]):
    """
    Multicast, hot, synchronous stream.

    next() snapshots the observer list before notifying:
    - observers attached during dispatch do not see the in-flight value
    - observers detached during dispatch (before their turn) are skipped
    - an observer exception propagates; later observers miss that value
    """

    def __init__(self) -> None:
        self._observers: list[_Observer] = []

    @property
    def observer_count(self) -> int:
        return len(self._observers)

    def next(self, value: T) -> None:
        for observer in list(self._observers):
            if observer.subscription.closed:
                continue
            observer.callback(value)

    def subscribe(self, callback: Callable[[T], None]) -> StreamSubscription:
        subscription = StreamSubscription()
        observer = _Observer(callback, subscription)
        self._observers.append(observer)
        subscription.add_teardown(lambda: self._detach(observer))
        return subscription

    def filter(self, predicate: Callable[[T], bool]) -> FilteredStream[T]:
        return FilteredStream(self, predicate)

    def _detach(self, observer: _Observer) -> None:
        self._observers = [o for o in self._observers if o is not observer]


class FilteredStream(Generic[T]):
    """Derived view of a source stream; only values passing the predicate are forwarded."""

    def __init__(
        self, source: EventStream[T] | FilteredStream[T], predicate: Callable[[T], bool]
    ) -> None:
        self._source = source
        self._predicate = predicate

    def subscribe(self, callback: Callable[[T], None]) -> StreamSubscription:
        predicate = self._predicate

        def forward(value: T) -> None:
            if predicate(value):
                callback(value)

        return self._source.subscribe(forward)

    def filter(self, predicate: Callable[[T], bool]) -> FilteredStream[T]:
        return FilteredStream(self, predicate)
