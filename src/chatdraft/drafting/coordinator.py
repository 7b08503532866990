"""Draft coordinator: one transcript event in, exactly one outcome out.

Pipeline for a single event::

    sensitive last line?      -> NEEDS_USER
    conversation busy?        -> WAITING (busy)
    throttled?                -> WAITING (throttled)
    cached draft?             -> DRAFT (cache_hit)
    transcript unchanged?     -> WAITING (unchanged)
    not the assistant's turn? -> WAITING (turn_gate)
    sensitive user context?   -> ERROR (400)
    provider unavailable?     -> ERROR
    model call                -> ERROR after retries | WAITING (model_waiting)
    repetition guard          -> WAITING (duplicate_question | stuck_loop) | DRAFT

The sensitive-line check runs before the throttle so a request for secrets is
always handed to the human. Everything after it runs under the conversation's
lock; an event for a conversation that is already generating is absorbed like
a throttled one (and moves the cooldown like one) instead of queueing behind it.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Awaitable, Callable

from prometheus_client import Counter

from chatdraft.backends.protocols import ReplyBackend
from chatdraft.config import Settings
from chatdraft.drafting.cache import Clock, DraftCache
from chatdraft.drafting.errors import ClientRejection, ExhaustedRetries
from chatdraft.drafting.fingerprint import fingerprint
from chatdraft.drafting.invoker import ModelInvoker
from chatdraft.drafting.outcomes import (
    Draft,
    Error,
    ErrorKind,
    NeedsUser,
    Outcome,
    Stage,
    Waiting,
)
from chatdraft.drafting.prompt import build_draft_prompt
from chatdraft.drafting.repetition import RepetitionGuard, RepetitionVerdict
from chatdraft.drafting.state import ConversationState, ConversationStore
from chatdraft.drafting.throttle import ConversationThrottle
from chatdraft.drafting.turns import is_assistant_turn, last_line
from chatdraft.observability.logging import get_logger
from chatdraft.safety import looks_sensitive, sensitive_category

logger = get_logger(__name__)

OUTCOMES = Counter(
    "chatdraft_outcomes_total", "Coordinator outcomes", ["action", "stage"]
)
CACHE_HITS = Counter("chatdraft_draft_cache_hits_total", "Drafts served from the cache")

QUOTA_MESSAGE = "Model quota exceeded. Try again later."
SENSITIVE_CONTEXT_MESSAGE = (
    "User context contains sensitive information. Please remove passwords, OTPs, etc."
)


@dataclass(frozen=True)
class TranscriptEvent:
    """A transcript observed for one conversation."""

    conversation_id: str
    transcript: str
    user_context: str = ""
    provider: str | None = None


def reject_sensitive_context(user_context: str | None) -> None:
    """Raise ``ClientRejection`` if the user's context holds a secret."""
    category = sensitive_category(user_context)
    if category is not None:
        raise ClientRejection(f"{SENSITIVE_CONTEXT_MESSAGE} ({category})")


def describe_failure(exc: ExhaustedRetries) -> str:
    """Turn a terminal upstream failure into the message shown to the user."""
    message = str(exc)
    if exc.status == 429 or "quota" in message.lower():
        return QUOTA_MESSAGE
    return message


class DraftCoordinator:
    def __init__(
        self,
        backend: ReplyBackend | None,
        *,
        store: ConversationStore | None = None,
        cache: DraftCache | None = None,
        throttle: ConversationThrottle | None = None,
        guard: RepetitionGuard | None = None,
        invoker: ModelInvoker | None = None,
        clock: Clock = time.monotonic,
        max_transcript_lines: int = 80,
        disabled_reason: str | None = None,
    ):
        self.backend = backend
        self.clock = clock
        self.store = store or ConversationStore()
        self.cache = cache or DraftCache(clock=clock)
        self.throttle = throttle or ConversationThrottle()
        self.guard = guard or RepetitionGuard()
        self.invoker = invoker or (ModelInvoker(backend) if backend is not None else None)
        self.max_transcript_lines = max_transcript_lines
        self.disabled_reason = disabled_reason or "Reply provider is not configured."

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        backend: ReplyBackend | None,
        *,
        disabled_reason: str | None = None,
        clock: Clock = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> "DraftCoordinator":
        invoker = None
        if backend is not None:
            invoker = ModelInvoker(
                backend,
                timeout=settings.model_timeout_seconds,
                attempts=settings.model_retry_attempts,
                backoff_base=settings.model_backoff_base_seconds,
                sleep=sleep,
            )
        return cls(
            backend,
            store=ConversationStore(
                settings.conversation_store_max_size,
                asked_limit=settings.asked_questions_limit,
                answers_limit=settings.recent_answers_limit,
            ),
            cache=DraftCache(
                ttl=settings.draft_cache_ttl_seconds,
                maxsize=settings.draft_cache_max_size,
                clock=clock,
            ),
            throttle=ConversationThrottle(
                settings.throttle_cooldown_seconds,
                extend_on_reject=settings.throttle_extend_on_reject,
            ),
            guard=RepetitionGuard(
                question_threshold=settings.duplicate_question_threshold,
                answer_threshold=settings.stuck_answer_threshold,
            ),
            invoker=invoker,
            clock=clock,
            max_transcript_lines=settings.max_transcript_lines,
            disabled_reason=disabled_reason,
        )

    async def handle(self, event: TranscriptEvent) -> Outcome:
        outcome = await self._run(event)
        OUTCOMES.labels(action=outcome.action, stage=outcome.stage.value).inc()
        logger.info(
            "draft_outcome",
            conversation_id=event.conversation_id,
            action=outcome.action,
            stage=outcome.stage.value,
            provider=event.provider,
        )
        return outcome

    async def _run(self, event: TranscriptEvent) -> Outcome:
        line = last_line(event.transcript)
        if looks_sensitive(line):
            return NeedsUser(f'Sensitive info requested: "{line}". Please reply manually.')

        state = self.store.get(event.conversation_id)
        if state.lock.locked():
            # Still counts as an attempt for the cooldown.
            self.throttle.should_throttle(state, self.clock())
            return Waiting(stage=Stage.BUSY)
        async with state.lock:
            return await self._process(state, event)

    async def _process(self, state: ConversationState, event: TranscriptEvent) -> Outcome:
        if self.throttle.should_throttle(state, self.clock()):
            return Waiting(stage=Stage.THROTTLED)

        fp = fingerprint(event.transcript, event.user_context, self.max_transcript_lines)
        cached = self.cache.get(fp)
        if cached is not None:
            CACHE_HITS.inc()
            state.last_fingerprint = fp
            return Draft(cached, stage=Stage.CACHE_HIT)

        if fp == state.last_fingerprint:
            return Waiting(stage=Stage.UNCHANGED)

        if not is_assistant_turn(event.transcript):
            state.last_fingerprint = fp
            return Waiting(stage=Stage.TURN_GATE)

        try:
            reject_sensitive_context(event.user_context)
        except ClientRejection as exc:
            logger.info("user_context_rejected", conversation_id=state.conversation_id, reason=str(exc))
            return Error(
                SENSITIVE_CONTEXT_MESSAGE,
                kind=ErrorKind.CLIENT_REJECTION,
                stage=Stage.CLIENT_REJECTED,
            )

        if self.invoker is None:
            return Error(
                self.disabled_reason,
                kind=ErrorKind.PROVIDER_DISABLED,
                stage=Stage.PROVIDER_DISABLED,
            )

        prompt = build_draft_prompt(
            event.transcript,
            event.user_context,
            event.provider,
            max_lines=self.max_transcript_lines,
        )
        try:
            result = await self.invoker.invoke(prompt)
        except ExhaustedRetries as exc:
            return Error(describe_failure(exc), stage=Stage.MODEL_ERROR)

        state.last_fingerprint = fp
        if result.waiting:
            return Waiting(stage=Stage.MODEL_WAITING)

        check = self.guard.review(state, result.text, event.transcript)
        if check.verdict is RepetitionVerdict.DUPLICATE_QUESTION:
            return Waiting(stage=Stage.DUPLICATE_QUESTION)
        if check.verdict is RepetitionVerdict.STUCK_LOOP:
            return Waiting(stage=Stage.STUCK_LOOP)

        self.cache.put(fp, result.text)
        logger.info(
            "draft_generated",
            conversation_id=state.conversation_id,
            draft_length=len(result.text),
            attempts=result.attempts,
        )
        return Draft(result.text)
