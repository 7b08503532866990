"""Gemini backend over the Generative Language REST API."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx

from chatdraft.drafting.errors import UpstreamError
from chatdraft.observability.logging import get_logger

logger = get_logger(__name__)


@dataclass
class GeminiBackend:
    api_key: str
    model: str = "gemini-2.5-flash"
    base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    client: httpx.AsyncClient | None = None
    name: str = "gemini"

    def _client(self) -> httpx.AsyncClient:
        if self.client is None:
            # Per-attempt timeouts are enforced by the invoker; this is a backstop.
            self.client = httpx.AsyncClient(timeout=httpx.Timeout(30.0))
        return self.client

    async def aclose(self) -> None:
        if self.client is not None:
            await self.client.aclose()
            self.client = None

    async def generate_reply(self, prompt: str) -> str:
        url = f"{self.base_url.rstrip('/')}/models/{self.model}:generateContent"
        payload = {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}
        try:
            response = await self._client().post(
                url, json=payload, headers={"x-goog-api-key": self.api_key}
            )
        except httpx.HTTPError as exc:
            raise UpstreamError(f"Gemini request failed: {exc}") from exc

        if response.status_code >= 400:
            raise UpstreamError(
                f"Gemini returned {response.status_code}: {_error_message(response)}",
                status=response.status_code,
            )
        try:
            data = response.json()
        except ValueError as exc:
            raise UpstreamError("Gemini returned a non-JSON body", status=response.status_code) from exc
        return extract_text(data, status=response.status_code)


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
    return response.text[:200]


def extract_text(data: Any, *, status: int | None = None) -> str:
    """Join the text parts of the first candidate."""
    if not isinstance(data, dict):
        raise UpstreamError("Gemini response is not an object", status=status)
    candidates = data.get("candidates")
    if not isinstance(candidates, list):
        raise UpstreamError("Gemini response has no candidates", status=status)
    if not candidates:
        # Blocked prompts come back with no candidates; treat as nothing to say.
        logger.info("gemini_no_candidates", feedback=data.get("promptFeedback"))
        return ""
    content = candidates[0].get("content") or {}
    parts = content.get("parts") or []
    return "".join(str(part.get("text", "")) for part in parts if isinstance(part, dict))
