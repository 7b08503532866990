"""API errors for routes outside the coordinator.

Coordinator outcomes carry their own status codes. These exceptions cover the
intake routes and render through the server's handler as
``{"error": <code>, "detail": {"error": <code>, "detail": <message>}}``.
"""

from __future__ import annotations

from fastapi import HTTPException, status

from chatdraft.drafting.coordinator import describe_failure
from chatdraft.drafting.errors import DraftingError, ExhaustedRetries


class DomainError(Exception):
    """Base class for errors that map to a JSON error envelope."""

    error: str = "domain_error"
    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, *, error: str | None = None, status_code: int | None = None):
        super().__init__(message)
        if error:
            self.error = error
        if status_code:
            self.status_code = status_code


class ValidationError(DomainError):
    error = "validation_error"
    status_code = status.HTTP_400_BAD_REQUEST


class ConfigurationError(DomainError):
    """The reply provider is switched off or missing credentials."""

    error = "configuration_error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class GenerationError(DomainError):
    """The model could not produce a usable answer."""

    error = "generation_error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, *, upstream_status: int | None = None):
        super().__init__(message)
        self.upstream_status = upstream_status

    @classmethod
    def from_drafting_error(cls, exc: DraftingError, *, action: str) -> "GenerationError":
        reason = describe_failure(exc) if isinstance(exc, ExhaustedRetries) else str(exc)
        return cls(f"Could not {action}: {reason}", upstream_status=getattr(exc, "status", None))


def to_http_exception(err: DomainError) -> HTTPException:
    """Convert DomainError to HTTPException with consistent payload."""
    detail: dict[str, object] = {"error": err.error, "detail": str(err)}
    upstream_status = getattr(err, "upstream_status", None)
    if upstream_status is not None:
        detail["upstream_status"] = upstream_status
    return HTTPException(status_code=err.status_code, detail=detail)
