"""Repetition guard: stop the assistant re-asking or looping.

Similarity is a cheap word-overlap heuristic, not language understanding.
Suppressing a genuinely new question is preferred to looping forever, so the
thresholds lean towards suppression.
"""

from __future__ import annotations

import hashlib
import re
from dataclasses import dataclass
from enum import Enum

from chatdraft.drafting.state import ConversationState
from chatdraft.drafting.turns import is_user_line, split_lines, strip_role
from chatdraft.observability.logging import get_logger

logger = get_logger(__name__)

_PUNCTUATION = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")


def normalize(text: str) -> str:
    """Lowercase, drop punctuation and collapse whitespace."""
    cleaned = _PUNCTUATION.sub("", text.lower())
    return _WHITESPACE.sub(" ", cleaned).strip()


def similarity(first: str, second: str) -> float:
    """Score two strings in [0, 1].

    Identical after normalization -> 1.0; one contains the other -> 0.85;
    otherwise the fraction of the shorter string's words found in the longer.
    """
    a = normalize(first)
    b = normalize(second)
    if a == b:
        return 1.0
    if not a or not b:
        return 0.0
    if a in b or b in a:
        return 0.85

    words_a = a.split(" ")
    words_b = b.split(" ")
    shorter, longer = (words_a, words_b) if len(words_a) <= len(words_b) else (words_b, words_a)
    vocabulary = set(longer)
    matching = sum(1 for word in shorter if word in vocabulary)
    return matching / len(shorter)


def latest_user_index(lines: list[str]) -> int | None:
    for index in range(len(lines) - 1, -1, -1):
        if is_user_line(lines[index]):
            return index
    return None


def turn_key(turn: list[str]) -> str:
    """Digest of a user turn: the latest user line and every line after it."""
    return hashlib.sha256("\n".join(turn).encode("utf-8")).hexdigest()


class RepetitionVerdict(str, Enum):
    ACCEPT = "accept"
    DUPLICATE_QUESTION = "duplicate_question"
    STUCK_LOOP = "stuck_loop"


@dataclass(frozen=True)
class RepetitionCheck:
    verdict: RepetitionVerdict
    score: float = 0.0

    @property
    def accepted(self) -> bool:
        return self.verdict is RepetitionVerdict.ACCEPT


class RepetitionGuard:
    """Apply duplicate-question and stuck-loop checks to a fresh draft.

    ``review`` records into the conversation's ring buffers as a side effect,
    so callers must hold the conversation lock.
    """

    def __init__(self, question_threshold: float = 0.7, answer_threshold: float = 0.7):
        self.question_threshold = question_threshold
        self.answer_threshold = answer_threshold

    def max_question_similarity(self, state: ConversationState, draft: str) -> float:
        return max((similarity(draft, asked) for asked in state.asked_questions), default=0.0)

    def record_question(self, state: ConversationState, draft: str) -> None:
        state.asked_questions.append(draft)

    def record_answer(self, state: ConversationState, transcript: str) -> bool:
        """Push the latest user line unless this exact user turn was recorded.

        A turn is keyed by the transcript from the latest user line onwards, so
        a capped transcript whose oldest lines scroll off still records each new
        turn, while re-observing the same turn records nothing.
        """
        lines = split_lines(transcript)
        index = latest_user_index(lines)
        if index is None:
            return False
        key = turn_key(lines[index:])
        if key == state.last_answer_key:
            return False
        state.last_answer_key = key
        state.recent_answers.append(strip_role(lines[index]))
        return True

    def answers_repeating(self, state: ConversationState) -> float:
        """Similarity of the two most recent answers (0.0 with fewer than two)."""
        if len(state.recent_answers) < 2:
            return 0.0
        return similarity(state.recent_answers[-1], state.recent_answers[-2])

    def review(self, state: ConversationState, draft: str, transcript: str) -> RepetitionCheck:
        question_score = self.max_question_similarity(state, draft)
        if question_score > self.question_threshold:
            self.record_answer(state, transcript)
            logger.warning(
                "duplicate_question_suppressed",
                conversation_id=state.conversation_id,
                score=round(question_score, 3),
                draft=draft,
            )
            return RepetitionCheck(RepetitionVerdict.DUPLICATE_QUESTION, question_score)

        self.record_answer(state, transcript)
        answer_score = self.answers_repeating(state)
        self.record_question(state, draft)
        if answer_score > self.answer_threshold:
            logger.warning(
                "stuck_loop_detected",
                conversation_id=state.conversation_id,
                score=round(answer_score, 3),
                draft=draft,
            )
            return RepetitionCheck(RepetitionVerdict.STUCK_LOOP, answer_score)

        return RepetitionCheck(RepetitionVerdict.ACCEPT, question_score)
