"""Minimal tracing primitives.

Events are emitted as one JSON object per line on the ``bridal_rentals``
logger, so any log shipper can pick them up without extra dependencies.
Every approval review or direct change gets one trace id, and each step
it takes logs under that id.
"""

from __future__ import annotations

import json
import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger("bridal_rentals")


@dataclass
class Span:
    """Timing of one step inside a trace, e.g. replaying an approved action."""

    name: str
    trace_id: str
    span_id: str = field(default_factory=lambda: uuid.uuid4().hex[:16])
    started_at: float = field(default_factory=time.perf_counter)
    duration_ms: float | None = None
    outcome: str | None = None
    attributes: dict[str, Any] = field(default_factory=dict)

    def finish(self, outcome: str) -> Span:
        if self.duration_ms is None:
            self.duration_ms = round((time.perf_counter() - self.started_at) * 1000, 3)
            self.outcome = outcome
        return self

    def as_log_fields(self) -> dict[str, Any]:
        return {
            'name': self.name,
            'span_id': self.span_id,
            'outcome': self.outcome,
            'duration_ms': self.duration_ms,
            **self.attributes,
        }


def new_trace_id() -> str:
    """Random 32-hex id shared by every event of one review or change."""
    return uuid.uuid4().hex


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level.upper(), format="%(message)s")


def log_event(
    event: str,
    *,
    trace_id: str,
    span: Span | None = None,
    level: int = logging.INFO,
    **fields: Any,
) -> None:
    payload: dict[str, Any] = {'event': event, 'trace_id': trace_id, **fields}
    if span is not None:
        payload['span'] = span.as_log_fields()
    logger.log(level, json.dumps(payload, ensure_ascii=False, default=str))
