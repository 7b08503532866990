import asyncio
import uuid

import pytest

from chatdraft.config import settings

TRANSCRIPT = "Me: Hi\nRep: Hello! What can I do for you?"


@pytest.mark.anyio
@pytest.mark.integration
async def test_analyze_rate_limit_hits_after_threshold(async_client, monkeypatch: pytest.MonkeyPatch):
    """Ensure rate limiter returns 429 after a burst from one client."""

    # Tighten rate limit for the test so we hit the ceiling quickly.
    monkeypatch.setattr(settings, "analyze_rate_limit", "5/minute")
    headers = {"X-Rate-Limit-Namespace": f"ext-{uuid.uuid4()}"}

    responses = []
    for i in range(7):
        resp = await async_client.post(
            "/analyze",
            json={"conversationId": f"rl-{i}", "transcript": TRANSCRIPT},
            headers=headers,
        )
        responses.append(resp)
        await asyncio.sleep(0)  # yield

    status_codes = [r.status_code for r in responses]
    assert 429 in status_codes
    assert responses[0].status_code == 200
    limited = next(r for r in responses if r.status_code == 429)
    assert limited.json()["action"] == "ERROR"
    assert limited.json()["error"] == "Too many requests. Please wait a minute."


@pytest.mark.anyio
@pytest.mark.integration
async def test_rate_limit_namespaces_are_independent(async_client, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(settings, "analyze_rate_limit", "2/minute")

    for _ in range(2):
        await async_client.post(
            "/analyze",
            json={"conversationId": f"ns-a-{uuid.uuid4()}", "transcript": TRANSCRIPT},
            headers={"X-Rate-Limit-Namespace": "a"},
        )
    other = await async_client.post(
        "/analyze",
        json={"conversationId": f"ns-b-{uuid.uuid4()}", "transcript": TRANSCRIPT},
        headers={"X-Rate-Limit-Namespace": "b"},
    )
    assert other.status_code == 200
