"""Synthetic clocks and signal logs for trace testing."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


class ManualClock:
    """Clock whose reading is set by the test."""

    def __init__(self, start: int = 0) -> None:
        self.t = start

    def now(self) -> int:
        return self.t

    def set(self, t: int) -> None:
        self.t = t

    def advance(self, delta: int) -> int:
        self.t += delta
        return self.t


@dataclass
class SignalLog:
    """Builder for a JSONL host signal log."""

    records: list[dict[str, Any]] = field(default_factory=list)

    def enter(self, resource: str, t: int, directory: str | None = None) -> SignalLog:
        record: dict[str, Any] = {"signal": "enter", "resource": resource, "t": t}
        if directory is not None:
            record["dir"] = directory
        self.records.append(record)
        return self

    def leave(self, t: int) -> SignalLog:
        self.records.append({"signal": "leave", "t": t})
        return self

    def decl(self, t: int) -> SignalLog:
        self.records.append({"signal": "decl", "t": t})
        return self

    def phase(self, name: str, kind: str, t: int, ordinal: int | None = None) -> SignalLog:
        record: dict[str, Any] = {"signal": "phase", "name": name, "kind": kind, "t": t}
        if ordinal is not None:
            record["ordinal"] = ordinal
        self.records.append(record)
        return self

    def leaf(
        self,
        name: str,
        t: int,
        resource: str | None = None,
        scope: str | None = None,
        scope_kind: str | None = None,
    ) -> SignalLog:
        record: dict[str, Any] = {"signal": "leaf", "name": name, "t": t}
        if resource is not None:
            record["resource"] = resource
        if scope is not None:
            record["scope"] = scope
            record["scope_kind"] = scope_kind
        self.records.append(record)
        return self

    def end(self, t: int) -> SignalLog:
        self.records.append({"signal": "end", "t": t})
        return self

    def write(self, path: Path) -> Path:
        path.write_text(
            "".join(json.dumps(record) + "\n" for record in self.records),
            encoding="utf-8",
        )
        return path


def compilation_log() -> SignalLog:
    """A small but complete compilation: includes, functions and passes."""
    return (
        SignalLog()
        .enter("/src/main.cc", t=0)
        .enter("/inc/a/x.h", t=100, directory="/inc/a")
        .enter("/inc/a/y.h", t=200, directory="/inc/a")
        .leave(t=300)
        .leave(t=400)
        .decl(t=500)
        .leaf("ns::f", t=700, resource="/src/main.cc", scope="ns", scope_kind="namespace")
        .leaf("ns::g", t=900, resource="/src/main.cc", scope="ns", scope_kind="namespace")
        .leaf("main", t=1000, resource="/src/main.cc")
        .phase("ssa", "gimple", t=1100, ordinal=12)
        .phase("expand", "rtl", t=1300, ordinal=200)
        .phase("final", "rtl", t=1600, ordinal=310)
        .end(t=2000)
    )
