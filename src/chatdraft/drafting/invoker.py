"""Model invoker: timeout, bounded retry and backoff around a reply backend."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable

from prometheus_client import Counter
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    retry_if_exception_type,
    stop_after_attempt,
    wait_incrementing,
)

from chatdraft.backends.protocols import ReplyBackend
from chatdraft.drafting.errors import ExhaustedRetries, UpstreamError, UpstreamTimeout
from chatdraft.observability.logging import get_logger

logger = get_logger(__name__)

MODEL_ATTEMPTS = Counter(
    "chatdraft_model_attempts_total", "Upstream model attempts", ["result"]
)

WAITING_SENTINELS = frozenset({"", "WAITING", "EMPTY", "(WAITING)"})

Sleep = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class InvokeResult:
    """A successful model call.

    ``waiting`` is set when the model explicitly had nothing to add; such
    results are never drafts and never cached.
    """

    text: str
    attempts: int = 1

    @property
    def waiting(self) -> bool:
        return is_waiting_sentinel(self.text)


def is_waiting_sentinel(text: str | None) -> bool:
    return (text or "").strip().upper() in WAITING_SENTINELS


class ModelInvoker:
    """Call ``backend.generate_reply`` with a hard per-attempt timeout.

    Timeouts and upstream errors are retried up to ``attempts`` total tries,
    waiting ``backoff_base * n`` seconds after the n-th failure. Anything else
    raised by the backend is a bug and propagates on the first attempt.
    """

    def __init__(
        self,
        backend: ReplyBackend,
        *,
        timeout: float = 5.0,
        attempts: int = 3,
        backoff_base: float = 1.0,
        sleep: Sleep = asyncio.sleep,
    ):
        if attempts < 1:
            raise ValueError("attempts must be at least 1")
        self.backend = backend
        self.timeout = timeout
        self.attempts = attempts
        self.backoff_base = backoff_base
        self._sleep = sleep

    async def _attempt(self, prompt: str) -> str:
        try:
            async with asyncio.timeout(self.timeout):
                return await self.backend.generate_reply(prompt)
        except TimeoutError as exc:
            raise UpstreamTimeout(self.timeout) from exc

    def _log_retry(self, retry_state: RetryCallState) -> None:
        outcome = retry_state.outcome
        exc = outcome.exception() if outcome is not None else None
        MODEL_ATTEMPTS.labels(result="retry").inc()
        logger.warning(
            "model_attempt_failed",
            attempt=retry_state.attempt_number,
            max_attempts=self.attempts,
            error=str(exc),
            error_type=type(exc).__name__,
            next_wait_s=retry_state.next_action.sleep if retry_state.next_action else None,
        )

    async def invoke(self, prompt: str) -> InvokeResult:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.attempts),
            wait=wait_incrementing(start=self.backoff_base, increment=self.backoff_base),
            retry=retry_if_exception_type((UpstreamTimeout, UpstreamError)),
            before_sleep=self._log_retry,
            sleep=self._sleep,
            reraise=False,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    text = await self._attempt(prompt)
                if attempt.retry_state.outcome is not None and attempt.retry_state.outcome.failed:
                    continue
                number = attempt.retry_state.attempt_number
                if number > 1:
                    logger.info("model_attempt_recovered", attempt=number)
                MODEL_ATTEMPTS.labels(result="success").inc()
                return InvokeResult(text=text.strip(), attempts=number)
        except RetryError as exc:
            last = exc.last_attempt.exception()
            MODEL_ATTEMPTS.labels(result="exhausted").inc()
            logger.error(
                "model_retries_exhausted",
                attempts=exc.last_attempt.attempt_number,
                error=str(last),
                error_type=type(last).__name__,
            )
            raise ExhaustedRetries(last, exc.last_attempt.attempt_number) from last  # type: ignore[arg-type]
        raise RuntimeError("Retry loop exited unexpectedly")
