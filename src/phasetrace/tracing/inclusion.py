"""Inclusion-stack tracking with circular re-entry protection.

Every resource the host enters is pushed on a stack and popped when the
host leaves it.  The first open and first close of each resource become one
``preprocess`` event.

A resource that is entered again while it is still open (a circular
include) is pushed as :data:`POISONED` instead of its real id: the entry
keeps the stack balanced for the matching leave, but it never becomes an
event and is never registered with the path normalizer.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from phasetrace.tracing.clock import TimeSource
from phasetrace.tracing.paths import PathNormalizer
from phasetrace.tracing.types import (
    EventCategory,
    Interval,
    TraceEvent,
    create_trace_event,
    separate_end,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RealId:
    """A stack entry naming an actual resource."""

    resource_id: str


class Poisoned:
    """A stack entry standing in for a circular re-entry."""

    _instance: Poisoned | None = None

    def __new__(cls) -> Poisoned:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "POISONED"


POISONED = Poisoned()

ScopeId = RealId | Poisoned


class InclusionStack:
    """Tracks nested resource scopes and their first open/close times."""

    def __init__(self, clock: TimeSource) -> None:
        self._clock = clock
        self._stack: list[ScopeId] = []
        self._opened: dict[str, int] = {}
        self._closed: dict[str, int] = {}

    @property
    def depth(self) -> int:
        return len(self._stack)

    def is_open(self, resource_id: str) -> bool:
        return resource_id in self._opened and resource_id not in self._closed

    def open(self, resource_id: str) -> ScopeId:
        """Push *resource_id*, poisoning it if it is already open.

        Returns the entry that was pushed.
        """
        now = self._clock.now()
        if self.is_open(resource_id):
            logger.debug("Circular inclusion of %s ignored", resource_id)
            self._stack.append(POISONED)
            return POISONED

        self._opened.setdefault(resource_id, now)
        entry = RealId(resource_id)
        self._stack.append(entry)
        return entry

    def close(self) -> ScopeId | None:
        """Pop the innermost scope and record its first close time."""
        if not self._stack:
            logger.debug("Close requested with no open scope")
            return None
        now = self._clock.now()
        entry = self._stack.pop()
        if isinstance(entry, RealId):
            self._closed.setdefault(entry.resource_id, now)
        return entry

    def drain_all(self) -> int:
        """Close every scope still open.  Returns how many were closed."""
        closed = 0
        while self._stack:
            self.close()
            closed += 1
        if closed:
            logger.debug("Force-closed %d open scope(s)", closed)
        return closed

    def emit(self, normalizer: PathNormalizer) -> list[TraceEvent]:
        """Build one ``preprocess`` event per resource that opened and closed.

        A nested resource that opened and closed together with an enclosing
        one is ended :data:`MIN_SEPARATION` earlier so the spans stay distinct.
        """
        events: list[TraceEvent] = []
        taken: set[tuple[int, int]] = set()
        for resource_id, start in self._opened.items():
            end = self._closed.get(resource_id)
            if end is None:
                continue
            end = separate_end(start, end, taken)
            taken.add((start, end))
            events.append(create_trace_event(
                normalizer.display_name_of(resource_id),
                EventCategory.PREPROCESS,
                Interval(start, end),
            ))
        return events
