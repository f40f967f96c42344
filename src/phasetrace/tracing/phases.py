"""Phase coalescing.

The host only ever reports "phase X is starting now"; it never reports that
a phase ended.  :class:`PhaseCoalescer` keeps a single *current phase* slot
and closes it when the next phase begins, tiling the timeline into
consecutive, non-overlapping intervals.

The phase still open when the session ends is never closed and is not
emitted.
"""

from __future__ import annotations

from dataclasses import dataclass

from phasetrace.tracing.clock import TimeSource
from phasetrace.tracing.types import (
    MIN_SEPARATION,
    Interval,
    PassKind,
    TraceEvent,
    create_trace_event,
    pass_category,
)


@dataclass(slots=True)
class Phase:
    """A phase reported by the host and the interval it occupied."""

    name: str
    kind: PassKind | str
    start: int
    end: int | None = None
    ordinal: int | None = None


class PhaseCoalescer:
    """Turns a sequence of phase starts into closed phase intervals."""

    def __init__(self, clock: TimeSource) -> None:
        self._clock = clock
        self._current: Phase | None = None
        self._closed: list[Phase] = []

    @property
    def current(self) -> Phase | None:
        """The phase currently running, if any."""
        return self._current

    @property
    def closed(self) -> list[Phase]:
        return list(self._closed)

    def begin_phase(
        self,
        name: str,
        kind: PassKind | str,
        ordinal: int | None = None,
    ) -> Phase:
        """Close the running phase at ``now`` and start *name* just after it."""
        now = self._clock.now()
        if self._current is not None:
            self._current.end = now
            self._closed.append(self._current)
        self._current = Phase(
            name=name,
            kind=kind,
            start=now + MIN_SEPARATION,
            ordinal=ordinal,
        )
        return self._current

    def emit(self) -> list[TraceEvent]:
        """Events for every closed phase, in the order they ran.

        Each phase starts at least :data:`MIN_SEPARATION` after the previous
        one ended, even when several began in the same instant.
        """
        events: list[TraceEvent] = []
        previous_end: int | None = None
        for phase in self._closed:
            attributes: dict[str, str] = {}
            if phase.ordinal is not None:
                attributes["static_pass_number"] = str(phase.ordinal)
            start = phase.start
            if previous_end is not None:
                start = max(start, previous_end + MIN_SEPARATION)
            # A phase closed in the same instant it began ends at its start.
            end = max(start, phase.end if phase.end is not None else start)
            previous_end = end
            events.append(create_trace_event(
                phase.name,
                pass_category(phase.kind),
                Interval(start, end),
                attributes,
            ))
        return events
