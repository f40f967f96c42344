"""Leaf events and the lexical scope spans that bracket them.

Every finished leaf (a parsed function) becomes a ``function`` event.  When
the leaf lives inside a named scope (a namespace or a struct), a scope span
is drawn around it.  Consecutive leaves in the same scope share a single
span that grows to cover each new leaf; as soon as a leaf from a different
scope (or from no scope) intervenes, the next leaf opens a new span, even
if the scope name repeats.
"""

from __future__ import annotations

from dataclasses import dataclass

from phasetrace.tracing.paths import PathNormalizer
from phasetrace.tracing.types import (
    MIN_SEPARATION,
    EventCategory,
    Interval,
    ScopeKind,
    TraceEvent,
    create_trace_event,
    scope_category,
)


@dataclass(slots=True)
class ScopeSpan:
    name: str
    category: EventCategory
    start: int
    end: int


@dataclass(slots=True)
class Leaf:
    name: str
    interval: Interval
    resource_id: str | None = None


class ScopeMerger:
    """Collects leaf events and folds adjacent same-scope leaves together."""

    def __init__(self) -> None:
        self._leaves: list[Leaf] = []
        self._spans: list[ScopeSpan] = []
        self._last_leaf_had_scope = False

    @property
    def spans(self) -> list[ScopeSpan]:
        return list(self._spans)

    @property
    def leaf_count(self) -> int:
        return len(self._leaves)

    def record_leaf(
        self,
        name: str,
        scope_name: str | None,
        scope_kind: ScopeKind | str | None,
        interval: Interval,
        resource_id: str | None = None,
    ) -> None:
        """Record a finished leaf and extend or open its scope span."""
        self._leaves.append(Leaf(name, interval, resource_id))

        if not scope_name:
            self._last_leaf_had_scope = False
            return

        if self._spans and self._last_leaf_had_scope and self._spans[-1].name == scope_name:
            self._spans[-1].end = interval.end + MIN_SEPARATION
        else:
            self._spans.append(ScopeSpan(
                name=scope_name,
                category=scope_category(scope_kind),
                start=interval.start - MIN_SEPARATION,
                end=interval.end + MIN_SEPARATION,
            ))
        self._last_leaf_had_scope = True

    def emit_scopes(self) -> list[TraceEvent]:
        return [
            create_trace_event(span.name, span.category, Interval(span.start, span.end))
            for span in self._spans
        ]

    def emit_functions(self, normalizer: PathNormalizer) -> list[TraceEvent]:
        """``function`` events, tagged with their file's display name."""
        events: list[TraceEvent] = []
        for leaf in self._leaves:
            attributes: dict[str, str] = {}
            if leaf.resource_id:
                attributes["file"] = normalizer.display_name_of(leaf.resource_id)
            events.append(create_trace_event(
                leaf.name, EventCategory.FUNCTION, leaf.interval, attributes,
            ))
        return events
