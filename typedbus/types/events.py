from __future__ import annotations

from dataclasses import dataclass, field
from types import UnionType
from typing import Any, Generic, Optional, Type, TypeVar, get_origin

from typedbus.errors.errors import EventTypeMismatchError, InvalidEventError

P = TypeVar("P")

_NO_PAYLOAD = object()


def _runtime_check_type(payload_type: Any) -> Any:
    """Class usable with isinstance: list[int] -> list, dict[str, int] -> dict."""
    origin = get_origin(payload_type)
    if isinstance(origin, type) and origin is not UnionType:
        return origin
    return payload_type


# --- Event ---


@dataclass(frozen=True)
class BusEvent(Generic[P]):
    """
    Immutable event delivered through the bus.

    - type: stable tag identifying the kind of event; subscriptions filter on it
    - payload: opaque data, never inspected by the bus
    """

    type: str
    payload: Optional[P] = None

    def __post_init__(self) -> None:
        if not isinstance(self.type, str) or not self.type.strip():
            raise InvalidEventError(f"Event type must be a non-empty string, got {self.type!r}")


# --- Descriptor ---


@dataclass(frozen=True)
class EventType(Generic[P]):
    """
    Descriptor for a category of events.

    The descriptor owns the tag: events built through it always carry it, and the bus
    filters subscriptions on ``descriptor.type``.

    Usage:
        PanelRefreshed = EventType("panel-refreshed", payload_type=dict)
        bus.subscribe(PanelRefreshed, handler)
        bus.emit(PanelRefreshed({"panel_id": 4}))
    """

    type: str
    payload_type: Optional[Type[Any]] = None
    # None: derived from payload_type (a typed payload implies a payload-bearing event)
    has_payload: Optional[bool] = field(default=None)

    def __post_init__(self) -> None:
        if not isinstance(self.type, str) or not self.type.strip():
            raise InvalidEventError(f"Event type must be a non-empty string, got {self.type!r}")
        if self.has_payload is None:
            object.__setattr__(self, "has_payload", self.payload_type is not None)
        elif not self.has_payload and self.payload_type is not None:
            raise InvalidEventError(
                f"Event type '{self.type}' declares payload_type but has_payload=False"
            )
        if self.payload_type is not None:
            try:
                isinstance(None, _runtime_check_type(self.payload_type))
            except TypeError as exc:
                raise InvalidEventError(
                    f"Event type '{self.type}' payload_type {self.payload_type!r} "
                    f"cannot be checked at runtime"
                ) from exc

    def __call__(self, payload: Any = _NO_PAYLOAD) -> BusEvent[P]:
        """Construct an event of this type. Fails fast on a payload that does not fit."""
        if payload is _NO_PAYLOAD:
            payload = None
        elif not self.has_payload and payload is not None:
            raise InvalidEventError(f"Event type '{self.type}' carries no payload")

        if self.payload_type is not None and payload is not None:
            if not isinstance(payload, _runtime_check_type(self.payload_type)):
                raise InvalidEventError(
                    f"Event type '{self.type}' expects payload of type "
                    f"{self.payload_type!r}, got {type(payload).__name__}"
                )
        return BusEvent(type=self.type, payload=payload)

    def matches(self, event: Any) -> bool:
        return getattr(event, "type", None) == self.type

    def validate(self, event: BusEvent[Any]) -> BusEvent[P]:
        """Return the event unchanged if its tag belongs to this descriptor."""
        if not self.matches(event):
            raise EventTypeMismatchError(expected=self.type, actual=getattr(event, "type", None))
        return event
