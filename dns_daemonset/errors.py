"""Exceptions raised by the DNS DaemonSet synthesizer and drift detector."""

from typing import Any, Optional


class DaemonSetError(Exception):
    """Base class for all reconciler errors."""


class InvalidInputError(DaemonSetError, ValueError):
    """
    A synthesizer input is empty or malformed.

    Not retryable: the caller must fix its configuration first.
    """

    def __init__(self, field: str, value: Any, reason: str):
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"invalid {field} {value!r}: {reason}")


class InconsistentSpecError(DaemonSetError):
    """A DaemonSet violates a structural precondition (e.g. duplicate container names)."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        super().__init__(message)
