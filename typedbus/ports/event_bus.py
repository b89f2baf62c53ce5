"""EventBus Port Interface.

Contract: Typed publish/subscribe within one process. Delivery is synchronous and
ordered by subscription; subscribers never see events emitted before they subscribed.
"""
from __future__ import annotations
from typing import TYPE_CHECKING, Any, Callable, Protocol, runtime_checkable

if TYPE_CHECKING:
    from typedbus.types.events import BusEvent, EventType


@runtime_checkable
class Unsubscribable(Protocol):
    def unsubscribe(self) -> None:
        """Release the subscription. Calling it again is a no-op."""
        ...


class EventBus(Protocol):
    def emit(self, event: BusEvent[Any]) -> None:
        """Publish an event instance to all subscribers of its type."""
        ...

    def subscribe(
        self, event_type: EventType[Any], handler: Callable[[BusEvent[Any]], None]
    ) -> Unsubscribable:
        """Register handler for all future events of given type."""
        ...
