"""Shared test helpers for the phasetrace test suite."""

from __future__ import annotations

from tests.helpers.fixtures import ManualClock, SignalLog, compilation_log
from tests.helpers.trace_verifier import TraceVerifier

__all__ = ["ManualClock", "SignalLog", "TraceVerifier", "compilation_log"]
