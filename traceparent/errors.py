"""Exceptions raised by traceparent."""

from __future__ import annotations


class TraceparentError(Exception):
    """Base exception; ``details`` holds the offending values."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if not self.details:
            return self.message
        rendered = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
        return f"{self.message} ({rendered})"


class ConfigError(TraceparentError):
    """Raised by configure() for settings of the wrong type."""
    pass


class TraceFlagsError(TraceparentError):
    """
    Raised when the trace-flags field of a header is not a signed 8-bit hex value.

    parse_traceparent() always absorbs it; only direct callers of
    parse_trace_flags() see it.
    """
    pass
