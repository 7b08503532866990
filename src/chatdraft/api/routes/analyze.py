"""Transcript analysis endpoint used by the browser extension."""

import asyncio
from typing import Awaitable

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response

from chatdraft.api.dependencies import get_coordinator
from chatdraft.api.rate_limit import limiter
from chatdraft.api.schemas import AnalyzeRequest, AnalyzeResponse, ActionErrorResponse
from chatdraft.config import settings
from chatdraft.drafting import DraftCoordinator, Error, Outcome
from chatdraft.observability.logging import get_logger

router = APIRouter(tags=["Drafts"])
logger = get_logger(__name__)

DISCONNECT_POLL_SECONDS = 0.25


async def run_until_disconnected(request: Request, work: Awaitable[Outcome]) -> Outcome | None:
    """Await ``work`` but cancel it if the client goes away first.

    Returns None when the request was abandoned; in-flight model calls are
    cancelled rather than left to update state nobody is waiting on.
    """
    task = asyncio.ensure_future(work)
    while True:
        done, _ = await asyncio.wait({task}, timeout=DISCONNECT_POLL_SECONDS)
        if done:
            return task.result()
        if await request.is_disconnected():
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
            logger.info("analyze_abandoned", path=str(request.url.path))
            return None


@router.post(
    "/analyze",
    response_model=AnalyzeResponse,
    responses={400: {"model": ActionErrorResponse}, 500: {"model": ActionErrorResponse}},
)
@limiter.limit(lambda: settings.analyze_rate_limit)
async def analyze(
    request: Request,
    body: AnalyzeRequest,
    coordinator: DraftCoordinator = Depends(get_coordinator),
) -> Response:
    """Decide whether to draft a reply for the posted transcript."""

    outcome = await run_until_disconnected(request, coordinator.handle(body.to_event()))
    if outcome is None:
        return Response(status_code=204)

    status_code = outcome.status_code if isinstance(outcome, Error) else 200
    return JSONResponse(content=outcome.to_payload(), status_code=status_code)


__all__ = ["router", "run_until_disconnected"]
