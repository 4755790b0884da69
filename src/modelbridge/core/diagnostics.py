from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


@dataclass
class DiagnosticEvent:
    """Structured note about a coercion decision.

    Decoupled from debug logging; sinks are injected by the caller, never global.
    """

    stage: str = "-"  # e.g., read_field, expand, coerce_leaf
    status: str = "-"  # fallback|placeholder|omitted
    model_name: Optional[str] = None
    field_name: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)
    ts: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


class DiagnosticSink:
    """Observer interface for diagnostic events."""

    def emit(self, event: DiagnosticEvent) -> None:  # pragma: no cover
        raise NotImplementedError


class NullDiagnosticSink(DiagnosticSink):
    def emit(self, event: DiagnosticEvent) -> None:
        return None


class MemoryDiagnosticSink(DiagnosticSink):
    """Collects events in order; handy for tests and for batch summaries."""

    def __init__(self) -> None:
        self.events: List[DiagnosticEvent] = []

    def emit(self, event: DiagnosticEvent) -> None:
        self.events.append(event)

    def by_status(self, status: str) -> List[DiagnosticEvent]:
        return [e for e in self.events if e.status == status]

    def clear(self) -> None:
        self.events.clear()


class LoggingDiagnosticSink(DiagnosticSink):
    """Render one concise line per event through a logger."""

    def __init__(self, logger: logging.Logger, level: int = logging.DEBUG) -> None:
        self.logger = logger
        self.level = level

    def emit(self, event: DiagnosticEvent) -> None:
        msg = f"{event.stage} {event.status}"
        if event.model_name:
            msg += f" | model={event.model_name}"
        if event.field_name:
            msg += f" | field={event.field_name}"
        if event.details:
            # keep details brief
            brief = {k: event.details[k] for k in list(event.details.keys())[:4]}
            msg += f" | details={brief}"
        self.logger.log(self.level, msg)


NULL_SINK = NullDiagnosticSink()
