"""Trace assembly and serialization.

:class:`TraceAssembler` holds the ordered events of one session and hands
them out exactly once.  :func:`to_document` renders them as a Chrome
trace-event JSON object, and :func:`load_trace_document` reads such a
document back for inspection.
"""

from __future__ import annotations

import dataclasses
import json
import logging
from pathlib import Path
from typing import Any, Iterable

from phasetrace.errors import SessionStateError
from phasetrace.tracing.types import TraceEvent, separate_end

logger = logging.getLogger(__name__)


class TraceAssembler:
    """Ordered, drain-once collection of finalized events.

    No two appended events share both start and end: an event that would
    repeat an earlier span has its end moved by :func:`separate_end`.
    """

    def __init__(self) -> None:
        self._events: list[TraceEvent] = []
        self._taken: set[tuple[int, int]] = set()
        self._drained = False

    @property
    def event_count(self) -> int:
        return len(self._events)

    @property
    def drained(self) -> bool:
        return self._drained

    def append(self, event: TraceEvent) -> None:
        if self._drained:
            raise SessionStateError("Cannot append events after the trace was drained")
        if (event.start, event.end) in self._taken:
            end = separate_end(event.start, event.end, self._taken)
            logger.debug("Moved end of %s from %d to %d", event.name, event.end, end)
            event = dataclasses.replace(event, end=end)
        self._taken.add((event.start, event.end))
        self._events.append(event)

    def append_all(self, events: Iterable[TraceEvent]) -> None:
        for event in events:
            self.append(event)

    def drain(self) -> list[TraceEvent]:
        """Hand out every event in append order.

        The first call returns all events; every later call returns an
        empty list.
        """
        events, self._events = self._events, []
        if not self._drained:
            logger.debug("Drained %d trace events", len(events))
        self._drained = True
        return events


def to_document(
    events: Iterable[TraceEvent],
    *,
    pid: int = 1,
    tid: int = 1,
    metadata: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Render *events* as a Chrome trace-event document."""
    document: dict[str, Any] = {
        "traceEvents": [event.to_dict(pid=pid, tid=tid) for event in events],
        "displayTimeUnit": "ns",
    }
    if metadata:
        document["otherData"] = dict(metadata)
    return document


def load_trace_document(path: str | Path) -> list[TraceEvent]:
    """Load the complete (``ph: X``) events of a written trace file.

    Accepts both the object form (``{"traceEvents": [...]}``) and the bare
    array form of the trace-event format.
    """
    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    records = raw.get("traceEvents", []) if isinstance(raw, dict) else raw
    if not isinstance(records, list):
        return []
    return [
        TraceEvent.from_dict(record)
        for record in records
        if isinstance(record, dict) and record.get("ph") == "X" and "ts" in record
    ]
