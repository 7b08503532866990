"""Per-conversation state and its bounded in-memory store."""

from __future__ import annotations

import asyncio
import threading
import weakref
from collections import deque
from dataclasses import dataclass, field

from cachetools import LRUCache

from chatdraft.observability.logging import get_logger

logger = get_logger(__name__)


@dataclass
class ConversationState:
    """Mutable state owned by one conversation.

    Only the coordinator mutates it, and only while holding ``lock``.
    ``asked_questions`` and ``recent_answers`` are ring buffers: appending to a
    full buffer drops the oldest entry.
    """

    conversation_id: str
    asked_questions: deque[str]
    recent_answers: deque[str]
    last_attempt_at: float | None = None
    last_fingerprint: str | None = None
    last_answer_key: str | None = None
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False, compare=False)

    @classmethod
    def new(
        cls, conversation_id: str, *, asked_limit: int = 10, answers_limit: int = 5
    ) -> "ConversationState":
        return cls(
            conversation_id=conversation_id,
            asked_questions=deque(maxlen=asked_limit),
            recent_answers=deque(maxlen=answers_limit),
        )


class ConversationStore:
    """Lazily creates conversation state; evicts least-recently-used entries.

    An evicted state that a running pipeline still holds is handed back (and
    re-inserted) on the next lookup, so one conversation id never has two
    locks at once.
    """

    def __init__(self, maxsize: int = 10_000, *, asked_limit: int = 10, answers_limit: int = 5):
        self.asked_limit = asked_limit
        self.answers_limit = answers_limit
        self._states: LRUCache = LRUCache(maxsize=maxsize)
        self._live: weakref.WeakValueDictionary[str, ConversationState] = weakref.WeakValueDictionary()
        self._lock = threading.Lock()

    def get(self, conversation_id: str) -> ConversationState:
        with self._lock:
            state = self._states.get(conversation_id)
            if state is not None:
                return state
            state = self._live.get(conversation_id)
            if state is None:
                state = ConversationState.new(
                    conversation_id,
                    asked_limit=self.asked_limit,
                    answers_limit=self.answers_limit,
                )
                logger.debug("conversation_state_created", conversation_id=conversation_id)
            else:
                logger.debug("conversation_state_revived", conversation_id=conversation_id)
            self._states[conversation_id] = state
            self._live[conversation_id] = state
            return state

    def peek(self, conversation_id: str) -> ConversationState | None:
        with self._lock:
            return self._states.peek(conversation_id)

    def clear(self) -> None:
        with self._lock:
            self._states.clear()
            self._live.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._states)
