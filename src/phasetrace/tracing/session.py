"""Trace session -- one traced run of the host, from epoch to final write.

The session owns one instance of every tracker and exposes the host signal
interface.  Nothing is global: each session is independent.

Usage::

    session = TraceSession(sink=select_sink(trace_dir="/tmp/traces"))
    session.on_resource_enter("/src/main.cc")
    session.on_resource_enter("/usr/include/stdio.h", "/usr/include")
    session.on_resource_leave()
    session.on_declaration_finished()
    session.on_leaf_finish("main", "/src/main.cc")
    session.on_phase_begin("ssa", PassKind.GIMPLE, ordinal=12)
    session.on_session_end()

Session end runs in a fixed order: the inclusion stack is drained first,
then inclusion events, coalesced phases, scope spans and function events
are appended to the assembler, which is drained and serialized once.
"""

from __future__ import annotations

import logging
from typing import Any

from phasetrace.tracing.assembler import TraceAssembler, to_document
from phasetrace.tracing.clock import Clock, TimeSource
from phasetrace.tracing.inclusion import InclusionStack, RealId
from phasetrace.tracing.paths import PathNormalizer
from phasetrace.tracing.phases import PhaseCoalescer
from phasetrace.tracing.scopes import ScopeMerger
from phasetrace.tracing.sink import TraceSink
from phasetrace.tracing.types import LEAF_SEPARATION, Interval, PassKind, ScopeKind, TraceEvent

logger = logging.getLogger(__name__)

#: Pseudo resources the host reports that are not files.
IGNORED_RESOURCES: frozenset[str] = frozenset({"<command-line>", "<built-in>"})


class TraceSession:
    """Converts host lifecycle signals into one trace document.

    Parameters:
        sink: Where the document is written at session end.  ``None``
            keeps the document in memory only (returned by
            :meth:`on_session_end`).
        clock: Time source; a fresh :class:`Clock` anchored now by default.
        resolve_paths: Resolve include directories against the file system
            before normalizing.  Disable for synthetic resource ids.
        pid: Process id written into every trace record.
        tid: Thread id written into every trace record.
    """

    def __init__(
        self,
        sink: TraceSink | None = None,
        *,
        clock: TimeSource | None = None,
        resolve_paths: bool = True,
        pid: int = 1,
        tid: int = 1,
    ) -> None:
        self._sink = sink
        self._clock = clock or Clock()
        self._resolve_paths = resolve_paths
        self._pid = pid
        self._tid = tid

        self.normalizer = PathNormalizer()
        self.inclusions = InclusionStack(self._clock)
        self.phases = PhaseCoalescer(self._clock)
        self.scopes = ScopeMerger()
        self.assembler = TraceAssembler()

        # End of the last leaf (or inclusion); the next leaf starts after it.
        self._leaf_mark: int = 0
        self._preprocessing_done = False
        self._ended = False

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def clock(self) -> TimeSource:
        return self._clock

    @property
    def sink(self) -> TraceSink | None:
        return self._sink

    @property
    def is_active(self) -> bool:
        return not self._ended

    # ------------------------------------------------------------------
    # Host signals
    # ------------------------------------------------------------------

    def on_resource_enter(self, resource_id: str, origin_dir: str | None = None) -> None:
        """The host started reading *resource_id*, reached via *origin_dir*."""
        if not resource_id or resource_id in IGNORED_RESOURCES:
            return
        entry = self.inclusions.open(resource_id)
        if not isinstance(entry, RealId) or origin_dir is None:
            return
        if self._resolve_paths:
            self.normalizer.resolve_and_register(resource_id, origin_dir)
        else:
            self.normalizer.register(resource_id, origin_dir)

    def on_resource_leave(self) -> None:
        """The host finished the innermost resource."""
        self.inclusions.close()
        self._leaf_mark = self._clock.now() + LEAF_SEPARATION

    def on_declaration_finished(self) -> None:
        """A declaration was completed; preprocessing is over from here on."""
        if self._preprocessing_done:
            return
        self._finish_preprocessing()

    def on_phase_begin(
        self,
        name: str,
        kind: PassKind | str,
        ordinal: int | None = None,
    ) -> None:
        """The host started phase *name*; the previous phase ends now."""
        self.phases.begin_phase(name, kind, ordinal)

    def on_leaf_finish(
        self,
        name: str,
        resource_id: str | None = None,
        scope_name: str | None = None,
        scope_kind: ScopeKind | str | None = None,
    ) -> None:
        """The host finished leaf *name*; it ran since the previous boundary."""
        now = self._clock.now()
        start = min(self._leaf_mark + LEAF_SEPARATION, now)
        self._leaf_mark = now
        self.scopes.record_leaf(name, scope_name, scope_kind, Interval(start, now), resource_id)

    def on_session_end(self, metadata: dict[str, Any] | None = None) -> dict[str, Any]:
        """Assemble, serialize and write the trace.

        Returns the document.  Ending twice yields a document without
        events and writes nothing.
        """
        if self._ended:
            return self._document(self.assembler.drain(), metadata)
        self._ended = True

        self.inclusions.drain_all()
        self.assembler.append_all(self.inclusions.emit(self.normalizer))
        if self.phases.current is not None:
            logger.debug("Phase %s still running at session end", self.phases.current.name)
        self.assembler.append_all(self.phases.emit())
        self.assembler.append_all(self.scopes.emit_scopes())
        self.assembler.append_all(self.scopes.emit_functions(self.normalizer))

        events = self.assembler.drain()
        document = self._document(events, metadata)
        if self._sink is not None:
            self._sink.write(document)
        return document

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _finish_preprocessing(self) -> None:
        while self.inclusions.depth:
            self.inclusions.close()
            self._leaf_mark = self._clock.now()
        self._preprocessing_done = True

    def _document(
        self,
        events: list[TraceEvent],
        metadata: dict[str, Any] | None,
    ) -> dict[str, Any]:
        return to_document(events, pid=self._pid, tid=self._tid, metadata=metadata)

    # ------------------------------------------------------------------
    # Context manager
    # ------------------------------------------------------------------

    def __enter__(self) -> TraceSession:
        return self

    def __exit__(self, *_exc: Any) -> None:
        if not self._ended:
            self.on_session_end()
        elif self._sink is not None:
            self._sink.close()
