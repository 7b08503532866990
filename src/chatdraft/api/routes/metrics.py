"""Prometheus metrics endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response
from prometheus_client import CONTENT_TYPE_LATEST, Gauge, generate_latest

from chatdraft.api.dependencies import get_coordinator
from chatdraft.drafting import DraftCoordinator

router = APIRouter(tags=["Metrics"])

CONVERSATIONS = Gauge("chatdraft_conversations", "Conversations with in-memory state")
CACHED_DRAFTS = Gauge("chatdraft_cached_drafts", "Unexpired drafts in the draft cache")


@router.get("/metrics")
def metrics(coordinator: DraftCoordinator = Depends(get_coordinator)) -> Response:
    """Expose Prometheus metrics; state sizes are sampled at scrape time."""
    CONVERSATIONS.set(len(coordinator.store))
    CACHED_DRAFTS.set(len(coordinator.cache))
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
