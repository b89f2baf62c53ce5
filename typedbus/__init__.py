from typedbus.config.config_loader import ConfigLoader, bus_config_from_mapping
from typedbus.config.configs import BusConfig
from typedbus.core.bus import Bus, BusStats
from typedbus.core.group import BusGroup
from typedbus.core.registry import EVENT_TYPES, EventTypeRegistry, define_event
from typedbus.core.stream import CompositeSubscription, EventStream, StreamSubscription
from typedbus.errors.errors import (
    BusError,
    ConfigError,
    DuplicateEventTypeError,
    EventTypeMismatchError,
    InvalidEventError,
    UnknownEventTypeError,
)
from typedbus.legacy.emitter import AppEvent, LegacyEmitter
from typedbus.ports.event_bus import EventBus, Unsubscribable
from typedbus.types.events import BusEvent, EventType

__all__ = [
    "AppEvent",
    "Bus",
    "BusConfig",
    "BusError",
    "BusEvent",
    "BusGroup",
    "BusStats",
    "CompositeSubscription",
    "ConfigError",
    "ConfigLoader",
    "DuplicateEventTypeError",
    "EVENT_TYPES",
    "EventBus",
    "EventStream",
    "EventType",
    "EventTypeMismatchError",
    "EventTypeRegistry",
    "InvalidEventError",
    "LegacyEmitter",
    "StreamSubscription",
    "UnknownEventTypeError",
    "Unsubscribable",
    "bus_config_from_mapping",
    "define_event",
]
