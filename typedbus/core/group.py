from __future__ import annotations

from typing import Any, Callable, Optional

from typedbus.core.stream import CompositeSubscription
from typedbus.ports.event_bus import EventBus, Unsubscribable
from typedbus.types.events import BusEvent, EventType


class BusGroup:
    """
    Handles unsubscribing to all events subscribed through this group.

    Owners of several subscriptions (a panel, a module instance) subscribe through
    the group and tear everything down with one unsubscribe_all() call.
    """

    def __init__(self, bus: EventBus) -> None:
        self._bus = bus
        # created lazily on the first subscribe
        self._group_sub: Optional[CompositeSubscription] = None

    @property
    def bus(self) -> EventBus:
        return self._bus

    def __len__(self) -> int:
        return len(self._group_sub) if self._group_sub is not None else 0

    def emit(self, event: BusEvent[Any]) -> None:
        self._bus.emit(event)

    def subscribe(
        self, event_type: EventType[Any], handler: Callable[[BusEvent[Any]], None]
    ) -> Unsubscribable:
        """Subscribe on the wrapped bus; the returned handle can still be released early."""
        return self._add_to_group_sub(self._bus.subscribe(event_type, handler))

    def _add_to_group_sub(self, child: Unsubscribable) -> Unsubscribable:
        if self._group_sub is None:
            self._group_sub = CompositeSubscription()
        return self._group_sub.add(child)

    def unsubscribe_all(self) -> None:
        """Release every subscription added through this group. No-op when empty."""
        group_sub, self._group_sub = self._group_sub, None
        if group_sub is not None:
            group_sub.unsubscribe()

    def unsubscribe(self) -> None:
        self.unsubscribe_all()
