"""Output sink selection and the final trace write.

Exactly one target must be chosen before the session starts: either an
explicit trace file or an absolute trace directory.  The file is created
up front so that an unwritable target fails before any work is traced.

A file name containing ``XXXXXX`` is a template: the placeholder is
replaced with a unique token, the same way ``mkstemps`` does.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import IO, Any

from phasetrace.errors import SinkConfigurationError, SinkOpenError

logger = logging.getLogger(__name__)

TEMPLATE_MARKER = "XXXXXX"
DEFAULT_FILENAME = f"trace_{TEMPLATE_MARKER}.json"


class TraceSink:
    """An open output file that receives the trace document once."""

    def __init__(self, path: Path, handle: IO[str]) -> None:
        self._path = path
        self._file: IO[str] | None = handle

    @property
    def path(self) -> Path:
        return self._path

    @property
    def is_open(self) -> bool:
        return self._file is not None

    def write(self, document: dict[str, Any]) -> Path:
        """Serialise *document* to the sink and close it."""
        if self._file is None:
            raise SinkOpenError(f"Trace sink {self._path} is already closed", path=str(self._path))
        try:
            json.dump(document, self._file)
            self._file.write("\n")
            self._file.flush()
        finally:
            self.close()
        logger.info("Wrote trace to %s", self._path)
        return self._path

    def close(self) -> None:
        if self._file is not None:
            try:
                self._file.close()
            finally:
                self._file = None

    def __enter__(self) -> TraceSink:
        return self

    def __exit__(self, *_exc: Any) -> None:
        self.close()


def resolve_target(
    trace_file: str | Path | None = None,
    trace_dir: str | Path | None = None,
) -> Path:
    """Validate the sink options and return the target path (maybe a template)."""
    if trace_file and trace_dir:
        raise SinkConfigurationError(
            "trace-dir may not be specified together with trace; choose one output",
        )
    if trace_dir:
        directory = Path(trace_dir)
        if not directory.is_absolute():
            raise SinkConfigurationError(
                f"trace-dir must be absolute, got {str(directory)!r}; "
                "to write relative to the working directory use trace",
            )
        return directory / DEFAULT_FILENAME
    if trace_file:
        return Path(trace_file)
    raise SinkConfigurationError("No trace output selected; set trace or trace-dir")


def open_sink(target: Path) -> TraceSink:
    """Create the output file for *target*, expanding a ``XXXXXX`` template."""
    filename = str(target)
    marker = filename.rfind(TEMPLATE_MARKER)
    try:
        if marker != -1:
            head, suffix = filename[:marker], filename[marker + len(TEMPLATE_MARKER):]
            directory, prefix = os.path.split(head)
            fd, path = tempfile.mkstemp(suffix=suffix, prefix=prefix, dir=directory or None)
            handle = os.fdopen(fd, "w", encoding="utf-8")
            return TraceSink(Path(path), handle)
        handle = open(target, "w", encoding="utf-8")  # noqa: SIM115
    except OSError as exc:
        raise SinkOpenError(f"Failed to create trace file {filename}: {exc}", path=filename) from exc
    return TraceSink(target, handle)


def select_sink(
    trace_file: str | Path | None = None,
    trace_dir: str | Path | None = None,
) -> TraceSink:
    """Pick and open the single output sink.

    Raises:
        SinkConfigurationError: Neither or both targets given, or a
            relative trace directory.
        SinkOpenError: The output file could not be created.
    """
    return open_sink(resolve_target(trace_file, trace_dir))
