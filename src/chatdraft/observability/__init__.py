"""chatdraft observability module - structured logging.

Logs are structured JSON via structlog; Prometheus metrics live next to the
code that records them and are exposed on `/metrics`.

Usage:
    from chatdraft.observability import get_logger

    logger = get_logger(__name__)
    logger.info("draft_generated", conversation_id=conversation_id)
"""

from __future__ import annotations

from chatdraft.observability.logging import configure_logging, get_logger

__all__ = [
    "configure_logging",
    "get_logger",
    "init_observability",
]

_OBSERVABILITY_INITIALIZED = False


def init_observability() -> None:
    """Initialize logging for the process (idempotent).

    This is intentionally *not* executed on import so `chatdraft` can be used as a
    library without mutating global logging configuration.
    """
    global _OBSERVABILITY_INITIALIZED
    if _OBSERVABILITY_INITIALIZED:
        return
    from chatdraft.config import settings

    configure_logging(settings.log_level)
    _OBSERVABILITY_INITIALIZED = True
