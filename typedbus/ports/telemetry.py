"""Telemetry Port Interface.

Contract: Log structured diagnostic events (handler failures, deprecated API usage).
"""
from __future__ import annotations
from typing import Protocol, Any

class Telemetry(Protocol):
    def log(self, event: str, **fields: Any) -> None: ...
