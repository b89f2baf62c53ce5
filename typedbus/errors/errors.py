# --- Bus ---


class BusError(Exception):
    "Error in connection with the bus"


# --- Events ---


class InvalidEventError(BusError):
    """Raised when an event cannot be constructed (bad tag or payload)."""


class EventTypeMismatchError(BusError):
    """Event tag does not match the tag of the descriptor it is checked against."""

    def __init__(self, expected: str, actual: str) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"Event type mismatch: expected '{expected}', got '{actual}'")


class UnknownEventTypeError(BusError):
    """Tag is not present in the event type registry (strict mode)."""

    def __init__(self, event_type: str) -> None:
        self.event_type = event_type
        super().__init__(f"Event type '{event_type}' is not registered")


class DuplicateEventTypeError(BusError):
    """A tag was defined twice with different descriptors."""

    def __init__(self, event_type: str) -> None:
        self.event_type = event_type
        super().__init__(f"Event type '{event_type}' already defined with a different descriptor")


# --- Config ---


class ConfigError(BusError):
    """Raised for invalid bus configuration input."""
