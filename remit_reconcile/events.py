from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Tuple


class EventSink(Protocol):
    """Receiver for progress/diagnostic events raised by a reconciliation run."""

    def emit(self, event: str, **fields: Any) -> None:
        ...


@dataclass
class ListSink:
    """Append-only in-memory sink, e.g. events == [("header-row", {"index": 2, ...})]."""

    events: List[Tuple[str, Dict[str, Any]]] = field(default_factory=list)

    def emit(self, event: str, **fields: Any) -> None:
        self.events.append((event, fields))

    def named(self, event: str) -> List[Dict[str, Any]]:
        return [fields for name, fields in self.events if name == event]


class LoggingSink:
    """Forward events to a logger; fields travel under ``extra["event_fields"]`` for JSON formatters."""

    def __init__(self, logger: Optional[logging.Logger] = None, level: int = logging.INFO) -> None:
        self.logger = logger or logging.getLogger("remit_reconcile")
        self.level = level

    def emit(self, event: str, **fields: Any) -> None:
        summary = ", ".join(f"{key}={value}" for key, value in fields.items())
        self.logger.log(self.level, "%s: %s", event, summary, extra={"event": event, "event_fields": fields})


def emit(sink: Optional[EventSink], event: str, **fields: Any) -> None:
    if sink is not None:
        sink.emit(event, **fields)
