"""Common FastAPI dependencies for the chatdraft API."""

from __future__ import annotations

from fastapi import Request

from chatdraft.backends import ReplyBackend, build_reply_backend
from chatdraft.config import settings
from chatdraft.drafting import DraftCoordinator

__all__ = ["build_coordinator", "get_coordinator", "get_reply_backend"]


def build_coordinator() -> DraftCoordinator:
    """Build a coordinator (and its reply backend) from current settings."""

    backend, reason = build_reply_backend(settings)  # type: ignore[arg-type]
    return DraftCoordinator.from_settings(
        settings, backend, disabled_reason=reason  # type: ignore[arg-type]
    )


def get_coordinator(request: Request) -> DraftCoordinator:
    """Return the process-wide coordinator stored on app state."""

    coordinator = getattr(request.app.state, "coordinator", None)
    if coordinator is None:
        coordinator = build_coordinator()
        request.app.state.coordinator = coordinator
    return coordinator


def get_reply_backend(request: Request) -> ReplyBackend | None:
    """Return the reply backend the coordinator was built with."""

    return get_coordinator(request).backend
