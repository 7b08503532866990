"""Failure taxonomy for draft generation."""

from __future__ import annotations


class DraftingError(Exception):
    """Base class for expected drafting failures."""


class ClientRejection(DraftingError):
    """The request itself is unacceptable (e.g. secrets in the user context)."""


class UpstreamTimeout(DraftingError):
    """A single model attempt exceeded its timeout."""

    def __init__(self, timeout: float):
        self.timeout = timeout
        super().__init__(f"Model call timed out after {timeout:g}s")


class UpstreamError(DraftingError):
    """The model answered with a non-2xx status, a malformed body, or not at all."""

    def __init__(self, message: str, *, status: int | None = None):
        self.status = status
        super().__init__(message)


class ExhaustedRetries(DraftingError):
    """Every attempt failed; carries the last failure."""

    def __init__(self, last_error: DraftingError, attempts: int):
        self.last_error = last_error
        self.attempts = attempts
        super().__init__(str(last_error))

    @property
    def status(self) -> int | None:
        return getattr(self.last_error, "status", None)
