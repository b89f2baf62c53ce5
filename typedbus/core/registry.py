"""
Static registry of known event types.

Maps tag -> EventType. A bus configured with ``strict_event_types`` refuses to emit or
subscribe to tags that were never defined here.
"""

from __future__ import annotations

import logging
from typing import Any, Iterator, Optional, Type

from typedbus.errors.errors import DuplicateEventTypeError, UnknownEventTypeError
from typedbus.types.events import EventType

logger = logging.getLogger(__name__)


class EventTypeRegistry:
    def __init__(self) -> None:
        self._types: dict[str, EventType[Any]] = {}

    def define(
        self,
        tag: str,
        payload_type: Optional[Type[Any]] = None,
        *,
        has_payload: Optional[bool] = None,
    ) -> EventType[Any]:
        """Create and register a descriptor. Identical re-definitions return the existing one."""
        return self.register(EventType(tag, payload_type=payload_type, has_payload=has_payload))

    def register(self, descriptor: EventType[Any]) -> EventType[Any]:
        existing = self._types.get(descriptor.type)
        if existing is not None:
            if existing != descriptor:
                raise DuplicateEventTypeError(descriptor.type)
            return existing
        self._types[descriptor.type] = descriptor
        logger.debug(f"Event type registered: {descriptor.type}")
        return descriptor

    def get(self, tag: str) -> Optional[EventType[Any]]:
        return self._types.get(tag)

    def require(self, tag: str) -> EventType[Any]:
        try:
            return self._types[tag]
        except KeyError as exc:
            raise UnknownEventTypeError(tag) from exc

    def tags(self) -> frozenset[str]:
        return frozenset(self._types)

    def __contains__(self, tag: object) -> bool:
        return tag in self._types

    def __len__(self) -> int:
        return len(self._types)

    def __iter__(self) -> Iterator[EventType[Any]]:
        return iter(list(self._types.values()))


# Process-wide default registry
EVENT_TYPES = EventTypeRegistry()


def define_event(
    tag: str,
    payload_type: Optional[Type[Any]] = None,
    *,
    has_payload: Optional[bool] = None,
) -> EventType[Any]:
    return EVENT_TYPES.define(tag, payload_type, has_payload=has_payload)
