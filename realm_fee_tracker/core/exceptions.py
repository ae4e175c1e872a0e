"""
Application-level exceptions.

Every error raised by the tracker derives from TrackerError so the CLI can
map it to a non-zero exit code. Transport failures are retried locally and
escalate as RetryExhausted; DataShapeError is never fatal.
"""

from __future__ import annotations


class TrackerError(Exception):
    """Base class for all tracker errors."""


class ConfigurationError(TrackerError):
    """Missing or invalid configuration (window, address, rate). Fatal, raised before any RPC."""


class TransportError(TrackerError):
    """A single RPC round trip failed (HTTP error, JSON-RPC error object, bad envelope)."""

    def __init__(self, message: str, *, code: int | None = None) -> None:
        super().__init__(message)
        self.code = code


class RetryExhausted(TrackerError):
    """An RPC operation kept failing after every retry attempt."""

    def __init__(self, operation: str, attempts: int, last_error: BaseException | None) -> None:
        self.operation = operation
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"{operation} failed after {attempts} attempts: {last_error}"
        )


class DataShapeError(TrackerError):
    """Malformed or unexpected transaction/account encoding."""
