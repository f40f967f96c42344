"""Tracing package -- interval tracking and trace assembly.

Submodules
~~~~~~~~~~
- :mod:`phasetrace.tracing.types` -- Event categories, pass/scope kinds,
  intervals, the trace event dataclass and separation constants.
- :mod:`phasetrace.tracing.clock` -- Monotonic session clock.
- :mod:`phasetrace.tracing.paths` -- :class:`PathNormalizer` (display names
  and conflict detection).
- :mod:`phasetrace.tracing.inclusion` -- :class:`InclusionStack` with
  circular re-entry protection.
- :mod:`phasetrace.tracing.phases` -- :class:`PhaseCoalescer`.
- :mod:`phasetrace.tracing.scopes` -- :class:`ScopeMerger`.
- :mod:`phasetrace.tracing.assembler` -- :class:`TraceAssembler` and
  document serialization.
- :mod:`phasetrace.tracing.sink` -- Output sink selection.
- :mod:`phasetrace.tracing.session` -- :class:`TraceSession`, the host
  signal interface.
- :mod:`phasetrace.tracing.signals` -- Recorded signal logs and replay.
"""

from __future__ import annotations

# --- types ----------------------------------------------------------------
from phasetrace.tracing.types import (
    LEAF_SEPARATION,
    MIN_SEPARATION,
    EventCategory,
    Interval,
    PassKind,
    ScopeKind,
    TraceEvent,
    create_trace_event,
    pass_category,
    scope_category,
    separate_end,
)

# --- trackers -------------------------------------------------------------
from phasetrace.tracing.clock import Clock, TimeSource
from phasetrace.tracing.paths import PathNormalizer
from phasetrace.tracing.inclusion import POISONED, InclusionStack, Poisoned, RealId
from phasetrace.tracing.phases import Phase, PhaseCoalescer
from phasetrace.tracing.scopes import ScopeMerger, ScopeSpan

# --- assembly and output --------------------------------------------------
from phasetrace.tracing.assembler import TraceAssembler, load_trace_document, to_document
from phasetrace.tracing.sink import TraceSink, select_sink
from phasetrace.tracing.session import TraceSession
from phasetrace.tracing.signals import HostSignal, ReplayClock, SignalKind, load_signals, replay

__all__ = [
    # types
    "LEAF_SEPARATION",
    "MIN_SEPARATION",
    "EventCategory",
    "Interval",
    "PassKind",
    "ScopeKind",
    "TraceEvent",
    "create_trace_event",
    "pass_category",
    "scope_category",
    "separate_end",
    # trackers
    "Clock",
    "TimeSource",
    "PathNormalizer",
    "POISONED",
    "InclusionStack",
    "Poisoned",
    "RealId",
    "Phase",
    "PhaseCoalescer",
    "ScopeMerger",
    "ScopeSpan",
    # assembly and output
    "TraceAssembler",
    "load_trace_document",
    "to_document",
    "TraceSink",
    "select_sink",
    "TraceSession",
    "HostSignal",
    "ReplayClock",
    "SignalKind",
    "load_signals",
    "replay",
]
