from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from typedbus.config.configs import BusConfig
from typedbus.core.registry import EVENT_TYPES, EventTypeRegistry
from typedbus.core.stream import EventStream, StreamSubscription
from typedbus.errors.errors import BusError
from typedbus.ports.telemetry import Telemetry
from typedbus.types.events import BusEvent, EventType

logger = logging.getLogger(__name__)

Handler = Callable[[BusEvent[Any]], None]


# --- Stats ---


@dataclass
class BusStats:
    name: str
    emitted: int  # total events pushed onto the stream since the bus was created
    emitted_by_type: dict[str, int]
    active_subscriptions: int
    subscriptions_by_type: dict[str, int]
    handler_failures: int  # only counted when handler errors are isolated
    registered_types: int


def handler_name(handler: Callable[..., Any]) -> str:
    return getattr(handler, "__qualname__", None) or repr(handler)


# --- Bus object ---


class Bus:
    """
    - 1. General: Create a bus (optionally with BusConfig, registry, telemetry)
    - 2. Producer: Build events through an EventType descriptor and emit() them
    - 3. Consumer: subscribe(EventType, handler) -> handle; handle.unsubscribe() to stop

    One shared stream carries every event; each subscription filters it on the tag.
    Dispatch is synchronous: emit() returns after every matching handler ran, in the
    order the handlers subscribed. Late subscribers never see earlier events.
    """

    def __init__(
        self,
        cfg: Optional[BusConfig] = None,
        *,
        registry: Optional[EventTypeRegistry] = None,
        telemetry: Optional[Telemetry] = None,
    ) -> None:
        self._cfg = cfg if cfg is not None else BusConfig()
        self._registry = registry if registry is not None else EVENT_TYPES
        self._telemetry = telemetry
        self._stream: EventStream[BusEvent[Any]] = EventStream()

        # Hooks
        self._on_error: list[Callable[[str, BaseException], None]] = []

        # Telemetry
        self._emitted: int = 0
        self._emitted_by_type: dict[str, int] = {}
        self._live_by_type: dict[str, int] = {}
        self._handler_failures: int = 0
        self._no_sub_once: set[str] = set()

    @property
    def name(self) -> str:
        return self._cfg.name

    @property
    def config(self) -> BusConfig:
        return self._cfg

    @property
    def registry(self) -> EventTypeRegistry:
        return self._registry

    @property
    def telemetry(self) -> Optional[Telemetry]:
        return self._telemetry

    # --- Public hook registration ---

    def on_error(self, callback: Callable[[str, BaseException], None]) -> None:
        """
        Register an error hook: callback(where, exception).
        Only called for isolated handler failures.
        """
        self._on_error.append(callback)

    # --- publish ---

    def emit(self, event: BusEvent[Any]) -> None:
        """
        Fan-out to all subscribers of event.type.
        Handler exceptions propagate unless isolate_handler_errors is set.
        """
        if not isinstance(event, BusEvent):
            raise BusError(f"emit() expects a BusEvent, got {type(event).__name__}")
        if self._cfg.strict_event_types:
            self._registry.require(event.type)
        self.push(event)

    def push(self, record: BusEvent[Any]) -> None:
        """Raw push onto the shared stream, without type checks."""
        tag = record.type
        self._emitted += 1
        self._emitted_by_type[tag] = self._emitted_by_type.get(tag, 0) + 1

        if (
            self._cfg.warn_no_subscribers
            and not self._live_by_type.get(tag)
            and tag not in self._no_sub_once
        ):
            self._no_sub_once.add(tag)
            logger.debug(f"[{self.name}] No subscribers for event type '{tag}'")

        self._stream.next(record)

    # --- subscriptions ---

    def subscribe(self, event_type: EventType[Any], handler: Handler) -> StreamSubscription:
        """
        Invoke handler(event) for every future event whose type equals event_type.type.
        Returns a handle; unsubscribe() removes exactly this registration.
        """
        if not isinstance(event_type, EventType):
            raise BusError(f"subscribe() expects an EventType, got {type(event_type).__name__}")
        if not callable(handler):
            raise BusError(f"Handler must be callable, got {type(handler).__name__}")
        if self._cfg.strict_event_types:
            self._registry.require(event_type.type)
        return self.listen(event_type.type, handler)

    def listen(
        self,
        tag: str,
        callback: Callable[[BusEvent[Any]], None],
        *,
        name: Optional[str] = None,
    ) -> StreamSubscription:
        """
        Attach a callback for one tag on the shared stream.
        name overrides the handler name used in logs and error reports.
        """
        if name is None:
            name = handler_name(callback)
        if self._cfg.isolate_handler_errors:
            callback = self._isolated(tag, callback, name)

        subscription = self._stream.filter(lambda event: event.type == tag).subscribe(callback)
        self._live_by_type[tag] = self._live_by_type.get(tag, 0) + 1
        subscription.add_teardown(lambda: self._detached(tag, name))

        logger.debug(f"[{self.name}] Subscriber attached: {name} -> {tag}")
        return subscription

    def _detached(self, tag: str, name: str) -> None:
        remaining = self._live_by_type.get(tag, 0) - 1
        if remaining > 0:
            self._live_by_type[tag] = remaining
        else:
            self._live_by_type.pop(tag, None)
        logger.debug(f"[{self.name}] Subscriber detached: {name} -> {tag}")

    # --- helpers ---

    def _isolated(
        self, tag: str, handler: Callable[[BusEvent[Any]], None], name: str
    ) -> Callable[[BusEvent[Any]], None]:
        def guarded(event: BusEvent[Any]) -> None:
            try:
                handler(event)
            except Exception as exc:
                self._handler_failures += 1
                logger.error(
                    f"[{self.name}] Subscriber failed: {name} for '{tag}': {exc}",
                    exc_info=True,
                )
                self._emit_error(f"handler:{name}", exc, event_type=tag)
                # Continue with the next subscriber

        return guarded

    def _emit_error(self, where: str, exc: BaseException, **fields: Any) -> None:
        for cb in list(self._on_error):
            try:
                cb(where, exc)
            except Exception as hook_exc:
                logger.warning(f"[{self.name}] Error hook failed: {hook_exc}")
        if self._telemetry is not None:
            try:
                self._telemetry.log(
                    "handler_failed",
                    bus=self.name,
                    where=where,
                    error=repr(exc),
                    error_type=type(exc).__name__,
                    **fields,
                )
            except Exception as sink_exc:
                logger.warning(f"[{self.name}] Telemetry sink failed: {sink_exc}")

    # --- diagnostics & telemetry ---

    def get_stats(self) -> BusStats:
        """Snapshot of bus activity. Call periodically to assess health."""
        return BusStats(
            name=self.name,
            emitted=self._emitted,
            emitted_by_type=dict(self._emitted_by_type),
            active_subscriptions=self._stream.observer_count,
            subscriptions_by_type=dict(self._live_by_type),
            handler_failures=self._handler_failures,
            registered_types=len(self._registry),
        )
