"""Recorded host signals and their replay into a :class:`TraceSession`.

A signal log is a JSONL file with one host callback per line::

    {"signal": "enter", "resource": "/src/main.cc", "t": 0}
    {"signal": "enter", "resource": "/inc/a/x.h", "dir": "/inc/a", "t": 120}
    {"signal": "leave", "t": 900}
    {"signal": "decl", "t": 950}
    {"signal": "leaf", "name": "f", "resource": "/src/main.cc",
     "scope": "ns", "scope_kind": "namespace", "t": 1400}
    {"signal": "phase", "name": "ssa", "kind": "gimple", "ordinal": 12, "t": 1500}
    {"signal": "end", "t": 2000}

``t`` (nanoseconds since the session epoch) is optional; when present the
replay drives the session clock from it instead of wall time.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import Any

from phasetrace.errors import SignalFormatError
from phasetrace.tracing.session import TraceSession

logger = logging.getLogger(__name__)


class SignalKind(StrEnum):
    ENTER = "enter"
    LEAVE = "leave"
    DECL = "decl"
    PHASE = "phase"
    LEAF = "leaf"
    END = "end"


_REQUIRED_FIELDS: dict[SignalKind, tuple[str, ...]] = {
    SignalKind.ENTER: ("resource",),
    SignalKind.PHASE: ("name", "kind"),
    SignalKind.LEAF: ("name",),
}


@dataclass(slots=True)
class HostSignal:
    """One host callback as recorded in a signal log."""

    kind: SignalKind
    t: int | None = None
    resource_id: str | None = None
    origin_dir: str | None = None
    name: str | None = None
    pass_kind: str | None = None
    ordinal: int | None = None
    scope_name: str | None = None
    scope_kind: str | None = None

    @classmethod
    def from_dict(cls, raw: dict[str, Any], *, line: int | None = None) -> HostSignal:
        """Validate and build a signal from one decoded JSONL record."""
        try:
            kind = SignalKind(raw.get("signal"))
        except ValueError:
            raise SignalFormatError(f"Unknown signal {raw.get('signal')!r}", line=line) from None

        missing = [name for name in _REQUIRED_FIELDS.get(kind, ()) if not raw.get(name)]
        if missing:
            raise SignalFormatError(
                f"Signal {kind} is missing {', '.join(missing)}", line=line,
            )

        try:
            t = int(raw["t"]) if raw.get("t") is not None else None
            ordinal = int(raw["ordinal"]) if raw.get("ordinal") is not None else None
        except (TypeError, ValueError):
            raise SignalFormatError("Fields 't' and 'ordinal' must be integers", line=line) from None

        return cls(
            kind=kind,
            t=t,
            resource_id=raw.get("resource"),
            origin_dir=raw.get("dir"),
            name=raw.get("name"),
            pass_kind=raw.get("kind"),
            ordinal=ordinal,
            scope_name=raw.get("scope"),
            scope_kind=raw.get("scope_kind"),
        )


class ReplayClock:
    """Session clock driven by recorded timestamps instead of wall time."""

    def __init__(self, start: int = 0) -> None:
        self._now = start

    def advance_to(self, t: int) -> None:
        """Move to *t*; recorded times that go backwards are ignored."""
        if t < self._now:
            logger.debug("Signal timestamp %d is earlier than %d; holding", t, self._now)
            return
        self._now = t

    def now(self) -> int:
        return self._now


def load_signals(path: str | Path) -> list[HostSignal]:
    """Parse a JSONL signal log.  Blank lines are skipped.

    Raises:
        SignalFormatError: A line is not a JSON object or not a valid signal.
    """
    signals: list[HostSignal] = []
    with open(path, encoding="utf-8") as fh:
        for lineno, line in enumerate(fh, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                raw = json.loads(line)
            except json.JSONDecodeError as exc:
                raise SignalFormatError(f"Invalid JSON: {exc.msg}", line=lineno) from exc
            if not isinstance(raw, dict):
                raise SignalFormatError("Signal record must be a JSON object", line=lineno)
            signals.append(HostSignal.from_dict(raw, line=lineno))
    return signals


def has_timestamps(signals: Iterable[HostSignal]) -> bool:
    return any(signal.t is not None for signal in signals)


def replay(
    session: TraceSession,
    signals: Iterable[HostSignal],
    clock: ReplayClock | None = None,
) -> int:
    """Feed *signals* to *session* in order.  Returns how many were applied.

    Signals after an ``end`` signal are ignored.
    """
    applied = 0
    for signal in signals:
        if not session.is_active:
            logger.warning("Ignoring %s signal after session end", signal.kind)
            continue
        if clock is not None and signal.t is not None:
            clock.advance_to(signal.t)
        dispatch(session, signal)
        applied += 1
    return applied


def dispatch(session: TraceSession, signal: HostSignal) -> None:
    """Invoke the session callback matching *signal*."""
    match signal.kind:
        case SignalKind.ENTER:
            session.on_resource_enter(signal.resource_id or "", signal.origin_dir)
        case SignalKind.LEAVE:
            session.on_resource_leave()
        case SignalKind.DECL:
            session.on_declaration_finished()
        case SignalKind.PHASE:
            session.on_phase_begin(signal.name or "", signal.pass_kind or "", signal.ordinal)
        case SignalKind.LEAF:
            session.on_leaf_finish(
                signal.name or "",
                signal.resource_id,
                signal.scope_name,
                signal.scope_kind,
            )
        case SignalKind.END:
            session.on_session_end()
