"""Content fingerprints used as draft cache keys.

Both cache reads and writes go through :func:`fingerprint` so truncation and
hashing can never drift apart.
"""

from __future__ import annotations

import hashlib

DEFAULT_MAX_LINES = 80


def truncate_transcript(transcript: str | None, max_lines: int = DEFAULT_MAX_LINES) -> str:
    """Keep only the last ``max_lines`` lines of the transcript."""
    if not transcript:
        return ""
    return "\n".join(transcript.split("\n")[-max_lines:])


def fingerprint(
    transcript: str | None,
    user_context: str | None,
    max_lines: int = DEFAULT_MAX_LINES,
) -> str:
    """Return a SHA-256 hex digest of the transcript tail plus user context."""
    tail = truncate_transcript(transcript, max_lines)
    digest = hashlib.sha256()
    digest.update(tail.encode("utf-8"))
    # NUL keeps ("ab", "c") and ("a", "bc") apart.
    digest.update(b"\x00")
    digest.update((user_context or "").encode("utf-8"))
    return digest.hexdigest()


def conversation_key(provider: str | None, page_url: str | None) -> str:
    """Derive a conversation id from the chat provider and page URL."""
    raw = f"{provider or ''}{page_url or ''}"
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()
