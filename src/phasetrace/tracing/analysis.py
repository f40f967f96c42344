"""Post-hoc analysis of an assembled trace."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable

from phasetrace.tracing.types import EventCategory, TraceEvent


@dataclass(slots=True)
class CategoryTotals:
    """Event count and summed duration (ns) for one category."""

    category: EventCategory
    count: int = 0
    total_ns: int = 0


@dataclass(slots=True)
class TraceSummary:
    """Aggregate statistics for a trace.

    ``span_ns`` is the distance from the earliest start to the latest end
    across all events.
    """

    total_events: int = 0
    span_ns: int = 0
    categories: list[CategoryTotals] = field(default_factory=list)
    longest: list[TraceEvent] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Plain-dict representation for JSON serialisation."""
        return {
            "total_events": self.total_events,
            "span_ns": self.span_ns,
            "categories": {
                str(c.category): {"count": c.count, "total_ns": c.total_ns}
                for c in self.categories
            },
            "longest": [
                {"name": e.name, "category": str(e.category), "duration_ns": e.duration}
                for e in self.longest
            ],
        }


def summarize(events: Iterable[TraceEvent], *, top: int = 10) -> TraceSummary:
    """Compute per-category totals and the *top* longest events.

    Categories are ordered by total time, largest first.
    """
    events = list(events)
    if not events:
        return TraceSummary()

    totals: dict[EventCategory, CategoryTotals] = {}
    for event in events:
        bucket = totals.setdefault(event.category, CategoryTotals(event.category))
        bucket.count += 1
        bucket.total_ns += event.duration

    span = max(e.end for e in events) - min(e.start for e in events)
    longest = sorted(events, key=lambda e: e.duration, reverse=True)[:max(0, top)]
    return TraceSummary(
        total_events=len(events),
        span_ns=span,
        categories=sorted(totals.values(), key=lambda c: c.total_ns, reverse=True),
        longest=longest,
    )
