from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict

"""
Here, we collect the bus configs
"""


@dataclass(frozen=True)
class BusConfig:
    # used as logger prefix and in stats/telemetry records
    name: str = "bus"
    # catch, log and report handler exceptions instead of letting them escape emit()
    isolate_handler_errors: bool = False
    # refuse emit/subscribe for tags unknown to the bus registry
    strict_event_types: bool = False
    # debug-log the first emit of a tag nobody listens to
    warn_no_subscribers: bool = True


class BusSettings(BaseModel):
    """Validated shape of the [bus] table in a config file."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str = "bus"
    isolate_handler_errors: bool = False
    strict_event_types: bool = False
    warn_no_subscribers: bool = True

    def to_config(self) -> BusConfig:
        return BusConfig(
            name=self.name,
            isolate_handler_errors=self.isolate_handler_errors,
            strict_event_types=self.strict_event_types,
            warn_no_subscribers=self.warn_no_subscribers,
        )
