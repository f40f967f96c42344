"""Phasetrace error hierarchy."""

from __future__ import annotations

from enum import StrEnum
from typing import Any


class ErrorCategory(StrEnum):
    """Category of error for classification and handling."""

    CONFIGURATION = "configuration"
    SINK = "sink"
    SESSION = "session"
    SIGNAL = "signal"
    INTERNAL = "internal"


class TraceError(Exception):
    """Base error for all phasetrace exceptions."""

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory = ErrorCategory.INTERNAL,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.category = category
        self.details: dict[str, Any] = details or {}

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self)!r}, category={self.category!r})"


class ConfigurationError(TraceError):
    """Invalid or missing configuration."""

    def __init__(self, message: str, **kwargs: Any) -> None:
        super().__init__(message, category=ErrorCategory.CONFIGURATION, **kwargs)


class SinkConfigurationError(ConfigurationError):
    """No output sink, more than one, or an unusable sink target."""


class SinkOpenError(TraceError):
    """The trace output file could not be created."""

    def __init__(self, message: str, *, path: str | None = None) -> None:
        super().__init__(message, category=ErrorCategory.SINK, details={"path": path})
        self.path = path


class SessionStateError(TraceError):
    """Operation not allowed in the session's current state."""

    def __init__(self, message: str) -> None:
        super().__init__(message, category=ErrorCategory.SESSION)


class SignalFormatError(TraceError):
    """A recorded host signal could not be parsed."""

    def __init__(self, message: str, *, line: int | None = None) -> None:
        super().__init__(message, category=ErrorCategory.SIGNAL, details={"line": line})
        self.line = line
