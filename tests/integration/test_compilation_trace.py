"""End-to-end: replay a recorded compilation through the CLI and verify the trace."""

from __future__ import annotations

import json
from pathlib import Path

from click.testing import CliRunner

from phasetrace.cli import main
from phasetrace.tracing.assembler import load_trace_document
from tests.helpers import SignalLog, TraceVerifier, compilation_log


def _record(signals: Path, *args: str) -> Path:
    result = CliRunner().invoke(main, ["record", str(signals), *args])
    assert result.exit_code == 0, result.output
    return Path(result.stdout.strip().splitlines()[-1])


class TestCompilationTrace:
    def test_integrity(self, isolated_config: Path) -> None:
        trace = _record(compilation_log().write(isolated_config / "signals.jsonl"), "--trace", "t.json")
        results = TraceVerifier.from_file(trace).run_all()
        assert all(r.passed for r in results), "\n".join(str(r) for r in results)

    def test_event_order(self, isolated_config: Path) -> None:
        trace = _record(compilation_log().write(isolated_config / "signals.jsonl"), "--trace", "t.json")
        document = json.loads(trace.read_text())
        assert document["displayTimeUnit"] == "ns"
        assert [r["cat"] for r in document["traceEvents"]] == [
            "preprocess", "preprocess", "preprocess",
            "gimple_pass", "rtl_pass",
            "namespace",
            "function", "function", "function",
        ]

    def test_resolved_include_directories(self, isolated_config: Path, tmp_path: Path) -> None:
        include = tmp_path / "include"
        (include / "sys").mkdir(parents=True)
        header = include / "sys" / "types.h"
        header.write_text("")
        log = (
            SignalLog()
            .enter(str(isolated_config / "main.cc"), t=0)
            .enter(str(header), t=10, directory=str(include))
            .leave(t=20)
            .decl(t=30)
            .end(t=40)
        )
        trace = _record(log.write(isolated_config / "signals.jsonl"), "--trace", "t.json", "--resolve-paths")
        names = TraceVerifier.from_file(trace).names("preprocess")
        assert names == [str(isolated_config / "main.cc"), "sys/types.h"]

    def test_missing_include_directory_keeps_raw_path(self, isolated_config: Path) -> None:
        log = SignalLog().enter("/nowhere/x.h", t=0, directory="/nowhere").leave(t=5).end(t=6)
        trace = _record(log.write(isolated_config / "signals.jsonl"), "--trace", "t.json", "--resolve-paths")
        (event,) = load_trace_document(trace)
        assert event.name == "/nowhere/x.h"

    def test_recursive_inclusion(self, isolated_config: Path) -> None:
        log = (
            SignalLog()
            .enter("/a.h", t=0)
            .enter("/b.h", t=10)
            .enter("/a.h", t=20)
            .leave(t=30)
            .leave(t=40)
            .leave(t=50)
            .end(t=60)
        )
        trace = _record(log.write(isolated_config / "signals.jsonl"), "--trace", "t.json")
        spans = {e.name: (e.start, e.end) for e in load_trace_document(trace)}
        assert spans == {"/a.h": (0, 50), "/b.h": (10, 40)}
