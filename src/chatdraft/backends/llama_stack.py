"""Llama Stack backend adapter.

Keeps direct SDK usage in one place so drafting logic depends only on the
``ReplyBackend`` protocol.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from llama_stack_client import APIConnectionError, APIStatusError, AsyncLlamaStackClient

from chatdraft.drafting.errors import UpstreamError


@dataclass
class LlamaStackBackend:
    base_url: str = "http://localhost:5001"
    model: str = "openai/gpt-5-nano"
    client: AsyncLlamaStackClient | None = None
    name: str = "llama_stack"

    def _client(self) -> AsyncLlamaStackClient:
        if self.client is None:
            self.client = AsyncLlamaStackClient(base_url=self.base_url)
        return self.client

    async def generate_reply(self, prompt: str) -> str:
        try:
            response = await self._client().chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                stream=False,
            )
        except APIStatusError as exc:
            raise UpstreamError(f"Llama Stack returned {exc.status_code}", status=exc.status_code) from exc
        except APIConnectionError as exc:
            raise UpstreamError(f"Llama Stack unreachable: {exc}") from exc
        return _extract_content(response)


def _extract_content(response: Any) -> str:
    choices = getattr(response, "choices", None)
    if choices is not None and not choices:
        raise UpstreamError("LLM returned no choices")
    if choices:
        message = getattr(choices[0], "message", None)
        content = getattr(message, "content", None) if message else None
        if content:
            return str(content)
    content = getattr(response, "content", None)
    return str(content) if content else ""
