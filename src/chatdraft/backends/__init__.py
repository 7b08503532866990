"""Reply model backends.

``build_reply_backend`` picks the implementation from settings; it returns
``None`` (with a reason) when the provider is switched off or cannot run.
"""

from __future__ import annotations

from chatdraft.backends.fake import MOCK_DRAFT, MOCK_REPLIES, FakeBackend
from chatdraft.backends.protocols import ReplyBackend
from chatdraft.config import Settings, effective_reply_provider
from chatdraft.observability.logging import get_logger

logger = get_logger(__name__)

__all__ = ["FakeBackend", "MOCK_DRAFT", "MOCK_REPLIES", "ReplyBackend", "build_reply_backend"]


def build_reply_backend(settings: Settings) -> tuple[ReplyBackend | None, str | None]:
    mode = effective_reply_provider(settings)
    if mode == "off":
        return None, "Reply provider is disabled (REPLY_PROVIDER=off)."
    if mode == "fake":
        return FakeBackend.mock(), None

    if settings.reply_backend == "llama_stack":
        from chatdraft.backends.llama_stack import LlamaStackBackend

        return LlamaStackBackend(base_url=settings.llama_stack_url, model=settings.llama_stack_model), None

    if not settings.gemini_api_key:
        logger.warning(
            "gemini_api_key_missing",
            hint="The server will run, but draft generation will fail until GEMINI_API_KEY is set.",
        )
        return None, "Missing GEMINI_API_KEY in .env. Add it, then restart."

    from chatdraft.backends.gemini import GeminiBackend

    return (
        GeminiBackend(
            api_key=settings.gemini_api_key,
            model=settings.gemini_model,
            base_url=settings.gemini_api_url,
        ),
        None,
    )
