"""Global draft cache keyed by content fingerprint."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable

from cachetools import TTLCache

from chatdraft.observability.logging import get_logger

logger = get_logger(__name__)

Clock = Callable[[], float]


@dataclass(frozen=True)
class CacheEntry:
    draft_text: str
    created_at: float


class DraftCache:
    """TTL-bounded fingerprint -> draft store shared by all conversations.

    Expiry is lazy: an entry older than ``ttl`` is indistinguishable from a
    missing one and a fresh ``put`` replaces it. Entries are never mutated,
    only replaced.
    """

    def __init__(self, ttl: float = 60.0, maxsize: int = 1024, clock: Clock = time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self._entries: TTLCache = TTLCache(maxsize=maxsize, ttl=ttl, timer=clock)
        self._lock = threading.Lock()

    def get(self, fingerprint: str) -> str | None:
        with self._lock:
            entry = self._entries.get(fingerprint)
        if entry is None:
            return None
        return entry.draft_text

    def entry(self, fingerprint: str) -> CacheEntry | None:
        with self._lock:
            return self._entries.get(fingerprint)

    def put(self, fingerprint: str, draft: str) -> None:
        entry = CacheEntry(draft_text=draft, created_at=self._clock())
        with self._lock:
            self._entries[fingerprint] = entry
        logger.debug("draft_cached", fingerprint=fingerprint[:12], draft_length=len(draft))

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            self._entries.expire()
            return len(self._entries)
