"""Trace event types and data structures.

Defines the closed category taxonomy rendered by trace viewers, the pass and
scope sub-kinds reported by the host, the :class:`Interval` and
:class:`TraceEvent` records, and the minimum-separation constants used to
keep neighbouring intervals from sharing an exact boundary.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType
from typing import Any

logger = logging.getLogger(__name__)

#: Smallest gap (ns) kept between two intervals that would otherwise touch.
#: Trace viewers mis-render events that start and end at the same instant.
MIN_SEPARATION: int = 1

#: Gap (ns) between the previous leaf (or inclusion) boundary and the start
#: of the next leaf event.
LEAF_SEPARATION: int = 3 * MIN_SEPARATION


class EventCategory(StrEnum):
    """Broad categories for trace events, rendered as the ``cat`` tag."""

    PREPROCESS = "preprocess"

    # --- Optimization passes ---
    GIMPLE_PASS = "gimple_pass"
    RTL_PASS = "rtl_pass"
    SIMPLE_IPA_PASS = "simple_ipa_pass"
    IPA_PASS = "ipa_pass"

    FUNCTION = "function"

    # --- Lexical scopes ---
    NAMESPACE = "namespace"
    STRUCT = "struct"

    UNKNOWN = "unknown"


class PassKind(StrEnum):
    """Kinds of optimization pass reported by the host."""

    GIMPLE = "gimple"
    RTL = "rtl"
    SIMPLE_IPA = "simple_ipa"
    IPA = "ipa"


class ScopeKind(StrEnum):
    """Kinds of enclosing lexical scope a leaf can belong to."""

    NAMESPACE = "namespace"
    STRUCT = "struct"


PASS_CATEGORIES: dict[PassKind, EventCategory] = {
    PassKind.GIMPLE: EventCategory.GIMPLE_PASS,
    PassKind.RTL: EventCategory.RTL_PASS,
    PassKind.SIMPLE_IPA: EventCategory.SIMPLE_IPA_PASS,
    PassKind.IPA: EventCategory.IPA_PASS,
}

SCOPE_CATEGORIES: dict[ScopeKind, EventCategory] = {
    ScopeKind.NAMESPACE: EventCategory.NAMESPACE,
    ScopeKind.STRUCT: EventCategory.STRUCT,
}


def pass_category(kind: PassKind | str | None) -> EventCategory:
    """Return the category for a pass *kind*, falling back to UNKNOWN."""
    try:
        return PASS_CATEGORIES[PassKind(kind)]
    except ValueError:
        logger.warning("Unknown pass kind %r", kind)
        return EventCategory.UNKNOWN


def scope_category(kind: ScopeKind | str | None) -> EventCategory:
    """Return the category for a scope *kind*, falling back to UNKNOWN."""
    try:
        return SCOPE_CATEGORIES[ScopeKind(kind)]
    except ValueError:
        logger.warning("Unknown scope kind %r", kind)
        return EventCategory.UNKNOWN


# ---------------------------------------------------------------------------
# Core data structures
# ---------------------------------------------------------------------------

@dataclass(slots=True)
class Interval:
    """A closed span of session time, in nanoseconds since the epoch."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValueError(f"Interval ends before it starts: {self.start}..{self.end}")

    @property
    def duration(self) -> int:
        return self.end - self.start


@dataclass(frozen=True, slots=True)
class TraceEvent:
    """A single finalized trace event.

    Events are immutable once built.  *attributes* is an ordered, read-only
    string mapping carried into the viewer's ``args`` panel; it does not take
    part in hashing.
    """

    name: str
    category: EventCategory
    start: int
    end: int
    attributes: Mapping[str, str] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "attributes", MappingProxyType(dict(self.attributes)))

    @property
    def interval(self) -> Interval:
        return Interval(self.start, self.end)

    @property
    def duration(self) -> int:
        return self.end - self.start

    def to_dict(self, *, pid: int = 1, tid: int = 1) -> dict[str, Any]:
        """Serialise as a Chrome trace-event "complete" (``ph: X``) record.

        ``ts``/``dur`` are microseconds, kept fractional so nanosecond
        nudges between neighbouring events survive.
        """
        d: dict[str, Any] = {
            "name": self.name,
            "cat": str(self.category),
            "ph": "X",
            "ts": self.start / 1000,
            "dur": (self.end - self.start) / 1000,
            "pid": pid,
            "tid": tid,
        }
        if self.attributes:
            d["args"] = dict(self.attributes)
        return d

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> TraceEvent:
        """Reconstruct a :class:`TraceEvent` from a trace-event record.

        Unknown ``cat`` values load as :attr:`EventCategory.UNKNOWN`.
        """
        try:
            category = EventCategory(raw.get("cat", "unknown"))
        except ValueError:
            category = EventCategory.UNKNOWN
        start = round(float(raw["ts"]) * 1000)
        end = start + round(float(raw.get("dur", 0)) * 1000)
        args = raw.get("args") or {}
        return cls(
            name=str(raw.get("name", "")),
            category=category,
            start=start,
            end=end,
            attributes={str(k): str(v) for k, v in args.items()},
        )


def create_trace_event(
    name: str,
    category: EventCategory,
    interval: Interval,
    attributes: dict[str, str] | None = None,
) -> TraceEvent:
    """Convenience factory building a :class:`TraceEvent` from an interval."""
    return TraceEvent(
        name=name,
        category=category,
        start=interval.start,
        end=interval.end,
        attributes=dict(attributes) if attributes else {},
    )


def separate_end(start: int, end: int, taken: set[tuple[int, int]]) -> int:
    """Pick an end for ``[start, end]`` that no span in *taken* already has.

    The end moves inward by :data:`MIN_SEPARATION` steps first, so a span
    that collides with an enclosing one ends just before it.  When there is
    no room left, it moves outward instead.
    """
    candidate = end
    while (start, candidate) in taken and candidate - MIN_SEPARATION >= start:
        candidate -= MIN_SEPARATION
    if (start, candidate) in taken:
        candidate = end
        while (start, candidate) in taken:
            candidate += MIN_SEPARATION
    return candidate
