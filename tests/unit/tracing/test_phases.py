"""Tests for PhaseCoalescer."""

from __future__ import annotations

from phasetrace.tracing.assembler import to_document
from phasetrace.tracing.phases import PhaseCoalescer
from phasetrace.tracing.types import MIN_SEPARATION, EventCategory, PassKind
from tests.helpers.fixtures import ManualClock
from tests.helpers.trace_verifier import TraceVerifier


class TestBeginPhase:
    def test_consecutive_phases_tile_the_timeline(self, clock: ManualClock) -> None:
        phases = PhaseCoalescer(clock)
        phases.begin_phase("P1", PassKind.GIMPLE)
        clock.set(10)
        phases.begin_phase("P2", PassKind.GIMPLE)
        clock.set(25)
        phases.begin_phase("P3", PassKind.RTL)

        events = phases.emit()
        assert [(e.name, e.start, e.end) for e in events] == [
            ("P1", MIN_SEPARATION, 10),
            ("P2", 10 + MIN_SEPARATION, 25),
        ]

    def test_last_phase_is_not_emitted(self, clock: ManualClock) -> None:
        phases = PhaseCoalescer(clock)
        phases.begin_phase("P1", PassKind.IPA)
        clock.set(10)
        phases.begin_phase("P2", PassKind.IPA)

        assert [e.name for e in phases.emit()] == ["P1"]
        assert phases.current is not None
        assert phases.current.name == "P2"
        assert phases.current.end is None

    def test_single_phase_emits_nothing(self, clock: ManualClock) -> None:
        phases = PhaseCoalescer(clock)
        phases.begin_phase("only", PassKind.GIMPLE)
        assert phases.emit() == []

    def test_no_phases(self, clock: ManualClock) -> None:
        phases = PhaseCoalescer(clock)
        assert phases.current is None
        assert phases.emit() == []

    def test_no_shared_boundaries(self, clock: ManualClock) -> None:
        phases = PhaseCoalescer(clock)
        for t in (0, 10, 20, 30):
            clock.set(t)
            phases.begin_phase(f"p{t}", PassKind.RTL)
        events = phases.emit()
        for before, after in zip(events, events[1:]):
            assert before.end < after.start

    def test_phases_in_the_same_instant(self, clock: ManualClock) -> None:
        phases = PhaseCoalescer(clock)
        clock.set(5)
        for name in ("a", "b", "c"):
            phases.begin_phase(name, PassKind.RTL)
        a, b = phases.emit()
        assert (a.start, a.end) == (6, 6)
        assert b.start == a.end + MIN_SEPARATION
        assert b.start <= b.end

    def test_same_instant_spans_are_distinct(self, clock: ManualClock) -> None:
        phases = PhaseCoalescer(clock)
        clock.set(5)
        for name in ("a", "b", "c", "d"):
            phases.begin_phase(name, PassKind.GIMPLE)
        clock.set(9)
        phases.begin_phase("e", PassKind.GIMPLE)

        document = to_document(phases.emit())
        assert TraceVerifier(document).check_distinct_boundaries().passed


class TestPhaseEvents:
    def test_categories_follow_pass_kind(self, clock: ManualClock) -> None:
        phases = PhaseCoalescer(clock)
        for i, kind in enumerate([PassKind.GIMPLE, PassKind.RTL, PassKind.SIMPLE_IPA, PassKind.IPA, PassKind.RTL]):
            clock.set(i * 10)
            phases.begin_phase(f"p{i}", kind)
        assert [e.category for e in phases.emit()] == [
            EventCategory.GIMPLE_PASS,
            EventCategory.RTL_PASS,
            EventCategory.SIMPLE_IPA_PASS,
            EventCategory.IPA_PASS,
        ]

    def test_unknown_kind(self, clock: ManualClock) -> None:
        phases = PhaseCoalescer(clock)
        phases.begin_phase("mystery", "lto")
        clock.set(4)
        phases.begin_phase("next", PassKind.RTL)
        assert phases.emit()[0].category == EventCategory.UNKNOWN

    def test_ordinal_attribute(self, clock: ManualClock) -> None:
        phases = PhaseCoalescer(clock)
        phases.begin_phase("ssa", PassKind.GIMPLE, ordinal=12)
        clock.set(4)
        phases.begin_phase("cfg", PassKind.GIMPLE)
        clock.set(8)
        phases.begin_phase("end", PassKind.GIMPLE)

        ssa, cfg = phases.emit()
        assert ssa.attributes == {"static_pass_number": "12"}
        assert cfg.attributes == {}

    def test_closed_view(self, clock: ManualClock) -> None:
        phases = PhaseCoalescer(clock)
        phases.begin_phase("a", PassKind.GIMPLE)
        clock.set(3)
        phases.begin_phase("b", PassKind.GIMPLE)
        assert [p.name for p in phases.closed] == ["a"]
        assert phases.closed[0].end == 3
