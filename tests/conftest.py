"""Pytest configuration and shared fixtures."""

import os
import sys
from pathlib import Path

import httpx
import pytest

# Ensure source tree is importable without editable install
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))


def pytest_configure(config):
    """Configure pytest markers and environment for tests."""
    config.addinivalue_line("markers", "integration: marks tests as integration tests")

    # These MUST override any developer shell/.env values to keep the test run deterministic.
    os.environ["ENVIRONMENT"] = "test"
    os.environ["REPLY_PROVIDER"] = "fake"
    os.environ["USE_FAKE_PROVIDERS"] = "false"
    os.environ["REPLY_BACKEND"] = "gemini"
    os.environ["GEMINI_API_KEY"] = ""
    os.environ["SENTRY_DSN"] = ""
    os.environ["ANALYZE_RATE_LIMIT"] = "60/minute"


@pytest.fixture(autouse=True)
def block_external_http(monkeypatch):
    """Fail the fast lane if code tries to hit the public internet.

    Allowlist only:
    - ASGI test host ("test") used with httpx.ASGITransport
    - localhost/loopback for local services
    """

    allowed_hosts = {"test", "testserver", "localhost", "127.0.0.1", "0.0.0.0"}

    async def _async_guard(self, method, url, *args, **kwargs):  # type: ignore[no-untyped-def]
        u = httpx.URL(url) if not isinstance(url, httpx.URL) else url
        if u.scheme in {"http", "https"} and (u.host or "") not in allowed_hosts:
            raise RuntimeError(f"External HTTP blocked in tests: {u!s}")
        return await _orig_async_request(self, method, url, *args, **kwargs)

    def _sync_guard(self, method, url, *args, **kwargs):  # type: ignore[no-untyped-def]
        u = httpx.URL(url) if not isinstance(url, httpx.URL) else url
        if u.scheme in {"http", "https"} and (u.host or "") not in allowed_hosts:
            raise RuntimeError(f"External HTTP blocked in tests: {u!s}")
        return _orig_sync_request(self, method, url, *args, **kwargs)

    _orig_async_request = httpx.AsyncClient.request
    _orig_sync_request = httpx.Client.request
    monkeypatch.setattr(httpx.AsyncClient, "request", _async_guard, raising=True)
    monkeypatch.setattr(httpx.Client, "request", _sync_guard, raising=True)

    yield


@pytest.fixture
def anyio_backend() -> str:
    """Run anyio tests on asyncio."""
    return "asyncio"


def _reset_limiter_storage() -> None:
    try:
        from chatdraft.api.server import limiter
    except ImportError:
        return
    if hasattr(limiter, "_limiter") and limiter._limiter:
        storage = limiter._limiter.storage
        if hasattr(storage, "reset"):
            storage.reset()
        elif hasattr(storage, "storage"):
            storage.storage.clear()


@pytest.fixture(autouse=True)
def reset_rate_limiter():
    """Reset rate limiter state between tests to avoid collision."""
    _reset_limiter_storage()
    yield
    _reset_limiter_storage()


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSleep:
    """Async sleep replacement that records requested delays without waiting."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def agent_transcript() -> str:
    """A transcript whose last line is the support agent's."""
    return "\n".join(
        [
            "Rep: Hi, thanks for contacting support.",
            "Me: I want to return my jacket.",
            "Rep: Sure, can I have the order number?",
        ]
    )


@pytest.fixture
async def async_client():
    """httpx AsyncClient wired to the FastAPI app with lifespan enabled."""
    from httpx import ASGITransport, AsyncClient

    from chatdraft.api.server import app

    async with app.router.lifespan_context(app):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client
