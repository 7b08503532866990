"""structlog configuration for the service.

Chat text is customer data: the fields in ``CLIPPED_FIELDS`` are shortened
before rendering so transcripts and drafts never land in logs whole.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar
from typing import Any, MutableMapping

import structlog

request_id_var: ContextVar[str] = ContextVar("request_id", default="")

CLIPPED_FIELDS = ("draft", "transcript", "user_context", "question", "prompt")
CLIP_LENGTH = 50


def _add_request_id(
    _logger: logging.Logger,
    _method_name: str,
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    request_id = request_id_var.get("")
    if request_id:
        event_dict["request_id"] = request_id
    return event_dict


def _clip_chat_text(
    _logger: logging.Logger,
    _method_name: str,
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    for key in CLIPPED_FIELDS:
        value = event_dict.get(key)
        if isinstance(value, str) and len(value) > CLIP_LENGTH:
            event_dict[key] = value[:CLIP_LENGTH] + "..."
    return event_dict


def configure_logging(level: str = "INFO") -> None:
    """Configure structlog with JSON output, request ids and chat-text clipping."""

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            _add_request_id,
            _clip_chat_text,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO))


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    if name is None:
        return structlog.get_logger()
    return structlog.get_logger(name)


def get_request_id() -> str:
    return request_id_var.get("")


logger = get_logger("chatdraft")
