"""JSON Lines Telemetry adapter.

Implements the Telemetry port by appending structured JSON objects (one per line)
to a file. Used as the diagnostic channel for handler failures and deprecated calls.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping

import orjson


class JsonlTelemetry:
    def __init__(self, sink_path: Path, component: str = "bus") -> None:
        self._sink_path = sink_path if isinstance(sink_path, Path) else Path(sink_path)
        self._component = component

    @property
    def sink_path(self) -> Path:
        return self._sink_path

    def log(self, event: str, **fields: Any) -> None:
        if not event:
            raise ValueError("Telemetry event name must be non-empty")

        # component may be overridden per record
        component = fields.pop("component", self._component)

        record: dict[str, Any] = {
            "event": event,
            "component": component,
            "wall_time": datetime.now(timezone.utc).isoformat(),
            **fields,
        }
        self._write_record(record)

    def _write_record(self, record: Mapping[str, Any]) -> None:
        # default=str handles exceptions, paths and other non-JSON values
        line = orjson.dumps(record, default=str, option=orjson.OPT_SORT_KEYS)
        with self._sink_path.open("ab") as handle:
            handle.write(line + b"\n")
