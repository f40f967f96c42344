"""Global test fixtures for phasetrace."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest

from tests.helpers.fixtures import ManualClock


@pytest.fixture
def clock() -> ManualClock:
    """A manual session clock starting at t=0."""
    return ManualClock()


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point HOME and the working directory at empty temp dirs, clear env."""
    home = tmp_path / "home"
    home.mkdir()
    work = tmp_path / "work"
    work.mkdir()
    (work / ".git").mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(work)
    for var in ("PHASETRACE_TRACE", "PHASETRACE_TRACE_DIR", "PHASETRACE_DEBUG", "PHASETRACE_LOG_JSON"):
        monkeypatch.delenv(var, raising=False)
    return work


@pytest.fixture(autouse=True)
def _restore_root_logging() -> Iterator[None]:
    """setup_logging() replaces root handlers; put them back after each test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
