"""CLI entry point using Click."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import click

from phasetrace import __version__
from phasetrace.config import load_config
from phasetrace.errors import SignalFormatError, SinkConfigurationError, SinkOpenError
from phasetrace.logger import get_logger, setup_logging


@click.group()
@click.version_option(__version__, prog_name="phasetrace")
def main() -> None:
    """Phasetrace - turn compiler lifecycle signals into viewer-ready traces."""


@main.command()
@click.argument("signals", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--trace", "trace_file", default=None, help="Output trace file (XXXXXX is replaced)")
@click.option("--trace-dir", default=None, help="Absolute directory for trace_XXXXXX.json")
@click.option("--resolve-paths/--no-resolve-paths", default=None,
              help="Resolve include directories against the local file system")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--json-logs", is_flag=True, help="Emit logs as JSON lines")
def record(
    signals: Path,
    trace_file: str | None,
    trace_dir: str | None,
    resolve_paths: bool | None,
    debug: bool,
    json_logs: bool,
) -> None:
    """Replay a SIGNALS log (JSONL) and write the resulting trace."""
    from phasetrace.tracing.session import TraceSession
    from phasetrace.tracing.signals import ReplayClock, has_timestamps, load_signals, replay
    from phasetrace.tracing.sink import select_sink

    cli_args: dict[str, Any] = {}
    if trace_file:
        cli_args["trace_file"] = trace_file
    if trace_dir:
        cli_args["trace_dir"] = trace_dir
    if resolve_paths is not None:
        cli_args["resolve_paths"] = resolve_paths
    if debug:
        cli_args["debug"] = True
    if json_logs:
        cli_args["json_logs"] = True

    config = load_config(cli_args=cli_args)
    setup_logging(debug=config.debug, json_output=config.json_logs)
    log = get_logger("phasetrace.cli")

    try:
        recorded = load_signals(signals)
    except SignalFormatError as exc:
        click.echo(f"Phasetrace error: {signals}:{exc.line}: {exc}", err=True)
        sys.exit(1)

    try:
        sink = select_sink(config.trace_file, config.trace_dir)
    except (SinkConfigurationError, SinkOpenError) as exc:
        click.echo(f"Phasetrace error: {exc}", err=True)
        sys.exit(1)

    clock = ReplayClock() if has_timestamps(recorded) else None
    with TraceSession(
        sink,
        clock=clock,
        resolve_paths=config.resolve_paths,
        pid=config.process_id,
        tid=config.thread_id,
    ) as session:
        applied = replay(session, recorded, clock)
        log.debug("replayed signals", applied=applied, total=len(recorded))

    click.echo(str(sink.path))


@main.command()
@click.argument("trace", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--top", type=int, default=10, show_default=True, help="Longest events to list")
def summary(trace: Path, top: int) -> None:
    """Print per-category totals and the longest events of a TRACE file."""
    import json

    from rich.console import Console
    from rich.table import Table

    from phasetrace.tracing.analysis import summarize
    from phasetrace.tracing.assembler import load_trace_document

    try:
        events = load_trace_document(trace)
    except (OSError, json.JSONDecodeError) as exc:
        click.echo(f"Phasetrace error: cannot read {trace}: {exc}", err=True)
        sys.exit(1)

    result = summarize(events, top=top)
    console = Console()
    console.print(
        f"[bold]{trace.name}[/bold]: {result.total_events} events "
        f"over {_format_ns(result.span_ns)}"
    )

    categories = Table(title="Time by category")
    categories.add_column("Category")
    categories.add_column("Events", justify="right")
    categories.add_column("Total", justify="right")
    for bucket in result.categories:
        categories.add_row(str(bucket.category), str(bucket.count), _format_ns(bucket.total_ns))
    console.print(categories)

    if result.longest:
        longest = Table(title=f"Longest {len(result.longest)} events")
        longest.add_column("Name", overflow="fold")
        longest.add_column("Category")
        longest.add_column("Duration", justify="right")
        for event in result.longest:
            longest.add_row(event.name, str(event.category), _format_ns(event.duration))
        console.print(longest)


def _format_ns(ns: int) -> str:
    if ns >= 1_000_000_000:
        return f"{ns / 1_000_000_000:.2f}s"
    if ns >= 1_000_000:
        return f"{ns / 1_000_000:.2f}ms"
    if ns >= 1_000:
        return f"{ns / 1_000:.1f}us"
    return f"{ns}ns"


if __name__ == "__main__":
    main()
