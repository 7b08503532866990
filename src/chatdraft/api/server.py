"""FastAPI application for the chatdraft API."""

from __future__ import annotations

import os
import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Awaitable, Callable
from uuid import uuid4

import sentry_sdk
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.requests import Request
from fastapi.responses import JSONResponse, Response
from prometheus_client import Counter, Histogram
from slowapi.errors import RateLimitExceeded

from chatdraft.api.dependencies import build_coordinator
from chatdraft.api.errors import DomainError, to_http_exception
from chatdraft.api.rate_limit import limiter
from chatdraft.api.routes import analyze, health, intake
from chatdraft.api.routes import metrics as metrics_route
from chatdraft.app_version import get_app_version
from chatdraft.config import effective_reply_provider, settings
from chatdraft.observability.logging import logger, request_id_var

RATE_LIMIT_MESSAGE = "Too many requests. Please wait a minute."


def _should_init_sentry() -> bool:
    """Guard Sentry initialization in tests/dev to avoid noisy pending-event logs."""
    if not settings.sentry_dsn:
        return False
    if os.getenv("PYTEST_CURRENT_TEST"):
        return False
    if os.getenv("DISABLE_SENTRY", "").lower() in ("1", "true", "yes"):
        return False
    return True


REQUEST_COUNT = Counter(
    "chatdraft_http_requests_total", "Total HTTP requests", ["method", "path", "status"]
)
REQUEST_LATENCY = Histogram(
    "chatdraft_http_request_duration_seconds",
    "HTTP request duration in seconds",
    buckets=(0.05, 0.1, 0.25, 0.5, 1, 2, 5, 10),
    labelnames=["path"],
)


def _metrics_path(request: Request) -> str:
    """Return a low-cardinality path label for metrics."""
    route = request.scope.get("route")
    if route is not None:
        path = getattr(route, "path", None)
        if path:
            return str(path)
    return "unmatched"


async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    retry_after_header = exc.headers.get("Retry-After") if exc.headers else None
    retry_after = retry_after_header or "60"
    logger.warning(
        "rate_limit_exceeded",
        path=str(request.url.path),
        method=request.method,
        limit=exc.detail,
        request_id=request.headers.get("X-Request-ID"),
    )
    return JSONResponse(
        status_code=429,
        content={
            "action": "ERROR",
            "error": RATE_LIMIT_MESSAGE,
            "retry_after_seconds": int(retry_after) if str(retry_after).isdigit() else retry_after,
            "limit": exc.detail,
        },
        headers=exc.headers or {"Retry-After": str(retry_after)},
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Build the coordinator and its reply backend for the process lifetime."""
    from chatdraft.observability import init_observability

    init_observability()
    logger.info("Starting chatdraft API...")

    if _should_init_sentry():
        try:
            sentry_sdk.init(dsn=settings.sentry_dsn, traces_sample_rate=0.1, shutdown_timeout=0)
        except Exception as exc:  # tolerates invalid/empty DSN in dev/test
            logger.warning("Sentry initialization skipped: %s", exc)

    coordinator = build_coordinator()
    app.state.coordinator = coordinator
    logger.info(
        "coordinator_ready",
        reply_backend=settings.reply_backend,
        provider_mode=effective_reply_provider(settings),  # type: ignore[arg-type]
        backend_available=coordinator.backend is not None,
        rate_limit=settings.analyze_rate_limit,
    )

    yield

    logger.info("Shutting down chatdraft API...")
    aclose = getattr(coordinator.backend, "aclose", None)
    if aclose is not None:
        await aclose()
    app.state.coordinator = None


app = FastAPI(
    title="chatdraft API",
    description="Draft coordination between live support chats and a reply model",
    version=get_app_version(),
    lifespan=lifespan,
)

if settings.cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )


@app.middleware("http")
async def request_id_middleware(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    """Middleware to manage X-Request-ID header and contextvar propagation."""

    incoming_request_id = request.headers.get("X-Request-ID")
    request_id = incoming_request_id or str(uuid4())

    token = request_id_var.set(request_id)
    try:
        response = await call_next(request)
    finally:
        request_id_var.reset(token)

    response.headers["X-Request-ID"] = request_id
    return response


@app.middleware("http")
async def timing_middleware(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    start = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - start) * 1000
    path_label = _metrics_path(request)
    REQUEST_COUNT.labels(
        method=request.method,
        path=path_label,
        status=response.status_code,
    ).inc()
    REQUEST_LATENCY.labels(path=path_label).observe(duration_ms / 1000.0)
    logger.info(
        "request_complete",
        path=str(request.url.path),
        method=request.method,
        status=response.status_code,
        duration_ms=round(duration_ms, 2),
    )
    response.headers["X-Response-Time-ms"] = f"{duration_ms:.2f}"
    return response


# Add rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_handler)  # type: ignore[arg-type]


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Return consistent error envelope."""
    detail = exc.detail
    if isinstance(detail, dict):
        error_code = detail.get("error", "http_error")
    else:
        error_code = "http_error"
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": error_code,
            "detail": detail,
        },
        headers=exc.headers,
    )


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    http_exc = to_http_exception(exc)
    return await http_exception_handler(request, http_exc)


# Include routers (no auth: the service is called by a local browser extension)
app.include_router(health.router)
app.include_router(analyze.router)
app.include_router(intake.router)
app.include_router(metrics_route.router)


__all__ = ["app", "limiter"]
