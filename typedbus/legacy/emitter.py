"""
Legacy, string-keyed emitter on top of the typed Bus.

Deprecated surface kept for old call sites:
    emit(name | descriptor, payload=None)
    on(name | descriptor, handler, scope=None)
    off(name | descriptor, handler)

Every call raises a DeprecationWarning and is logged. New code uses Bus.emit / Bus.subscribe.

Quirks kept on purpose:
- on() with a plain string registers nothing (old string listeners were disabled)
- scope is accepted but no auto-unsubscribe on destroy happens
"""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Generic, Optional, TypeVar, Union

from typedbus.core.bus import Bus, handler_name
from typedbus.core.stream import StreamSubscription
from typedbus.ports.telemetry import Telemetry
from typedbus.types.events import BusEvent, EventType

logger = logging.getLogger(__name__)

P = TypeVar("P")


@dataclass(frozen=True)
class AppEvent(Generic[P]):
    """Legacy event descriptor. Identified by name only."""

    name: str


class LegacyForm(str, Enum):
    STRING = "string"
    DESCRIPTOR = "descriptor"


LegacyKey = Union[str, AppEvent[Any], EventType[Any]]


@dataclass(frozen=True)
class LegacyTarget:
    """Resolved first argument of a legacy call."""

    form: LegacyForm
    name: str

    @classmethod
    def resolve(cls, target: LegacyKey) -> LegacyTarget:
        # AppEvent tags live in `name`, typed descriptors in `type`; both feed the same stream tag
        if isinstance(target, str):
            return cls(LegacyForm.STRING, target)
        if isinstance(target, AppEvent):
            return cls(LegacyForm.DESCRIPTOR, target.name)
        if isinstance(target, EventType):
            return cls(LegacyForm.DESCRIPTOR, target.type)
        raise TypeError(
            f"Legacy event must be a str, AppEvent or EventType, got {type(target).__name__}"
        )


class LegacyEmitter:
    def __init__(self, bus: Bus, telemetry: Optional[Telemetry] = None) -> None:
        self._bus = bus
        self._telemetry = telemetry if telemetry is not None else bus.telemetry
        # (name, handler) -> live subscriptions made through on()
        self._registrations: dict[tuple[str, Callable[..., Any]], list[StreamSubscription]] = {}

    @property
    def bus(self) -> Bus:
        return self._bus

    def listener_count(self, target: Optional[LegacyKey] = None) -> int:
        if target is None:
            return sum(len(subs) for subs in self._registrations.values())
        name = LegacyTarget.resolve(target).name
        return sum(len(subs) for (n, _), subs in self._registrations.items() if n == name)

    # --- Legacy API ---

    def emit(self, event: LegacyKey, payload: Any = None) -> None:
        """
        Deprecated: use Bus.emit.
        Builds the record inline and pushes it onto the bus stream.
        """
        target = LegacyTarget.resolve(event)
        self._deprecated("emit", "Bus.emit", target)
        self._bus.push(BusEvent(type=target.name, payload=payload))

    def on(
        self,
        event: LegacyKey,
        handler: Callable[[Any], None],
        scope: Any = None,
    ) -> None:
        """
        Deprecated: use Bus.subscribe.
        The handler receives the payload, not the event.
        """
        target = LegacyTarget.resolve(event)
        self._deprecated("on", "Bus.subscribe", target)

        if target.form is LegacyForm.STRING:
            return

        # off() finds registrations by (name, handler); check the key before attaching
        key = (target.name, handler)
        try:
            hash(key)
        except TypeError as exc:
            raise TypeError(
                f"Legacy handler must be hashable, got {type(handler).__name__}"
            ) from exc

        def unwrap(stream_event: BusEvent[Any]) -> None:
            handler(stream_event.payload)

        subscription = self._bus.listen(target.name, unwrap, name=handler_name(handler))
        self._registrations.setdefault(key, []).append(subscription)

        if scope is not None:
            logger.debug(f"[{self._bus.name}] Ignoring scope for legacy listener on '{target.name}'")

    def off(self, event: LegacyKey, handler: Callable[[Any], None]) -> None:
        """Deprecated: use the handle returned by Bus.subscribe."""
        target = LegacyTarget.resolve(event)
        self._deprecated("off", "Bus.subscribe(...).unsubscribe", target)

        for subscription in self._registrations.pop((target.name, handler), []):
            subscription.unsubscribe()

    # --- helpers ---

    def _deprecated(self, method: str, replacement: str, target: LegacyTarget) -> None:
        message = f"Deprecated emitter function used ({method}), use {replacement}"
        warnings.warn(message, DeprecationWarning, stacklevel=3)
        logger.warning(f"[{self._bus.name}] {message} (event: '{target.name}')")
        if self._telemetry is not None:
            try:
                self._telemetry.log(
                    "legacy_call",
                    bus=self._bus.name,
                    method=method,
                    event_type=target.name,
                    form=target.form.value,
                )
            except Exception as sink_exc:
                logger.warning(f"[{self._bus.name}] Telemetry sink failed: {sink_exc}")
