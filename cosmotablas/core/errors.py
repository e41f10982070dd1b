"""Error taxonomy for the records core."""

from __future__ import annotations


class ValidationError(ValueError):
    """Input rejected at a trust boundary.

    ``reason`` is the machine-readable message returned to clients.
    """

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class ImplausibleDuration(ValidationError):
    """Attempt finished faster than an 8-question session physically allows."""

    def __init__(self, reason: str = "Invalid time") -> None:
        super().__init__(reason)


class RemoteSyncError(RuntimeError):
    """The shared backend was unreachable or answered with an error."""


__all__ = ["ImplausibleDuration", "RemoteSyncError", "ValidationError"]
