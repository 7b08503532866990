"""Health check endpoint."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from chatdraft.api.dependencies import get_coordinator
from chatdraft.api.schemas import HealthResponse
from chatdraft.app_version import get_app_version
from chatdraft.config import effective_reply_provider, settings
from chatdraft.drafting import DraftCoordinator

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(coordinator: DraftCoordinator = Depends(get_coordinator)) -> dict[str, Any]:
    """Liveness probe; degraded state is reported, not failed."""

    mode = effective_reply_provider(settings)  # type: ignore[arg-type]
    return {
        "ok": True,
        "status": "healthy",
        "version": get_app_version(),
        "reply_backend": settings.reply_backend,
        "provider_mode": mode,
        "degraded_mode": mode != "real" or coordinator.backend is None,
        "conversations": len(coordinator.store),
        "cached_drafts": len(coordinator.cache),
    }


__all__ = ["router"]
