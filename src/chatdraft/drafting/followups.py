"""Intake follow-up questions generated from the questionnaire answers."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field

from chatdraft.drafting.errors import UpstreamError
from chatdraft.drafting.invoker import ModelInvoker
from chatdraft.drafting.prompt import build_final_question_prompt, build_follow_up_prompt
from chatdraft.observability.logging import get_logger

logger = get_logger(__name__)

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")

MOCK_FOLLOW_UPS = [
    "What condition is the item in?",
    "How long have you had it?",
]
MOCK_FINAL_QUESTION = "What would you prefer if we can't process the return?"


@dataclass(frozen=True)
class IntakeAnswers:
    issue_type: str
    order_number: str | None = None
    product_details: str | None = None
    additional_info: str | None = None


@dataclass(frozen=True)
class FollowUpQuestions:
    follow_up_questions: list[str] = field(default_factory=list)
    final_question: str = ""

    def to_payload(self) -> dict[str, object]:
        return {
            "followUpQuestions": list(self.follow_up_questions),
            "finalQuestion": self.final_question,
        }


def parse_follow_ups(text: str) -> list[str]:
    """Pull ``followUpQuestions`` out of a reply that should contain JSON."""
    match = _JSON_OBJECT.search(text or "")
    if not match:
        raise UpstreamError("Could not parse AI response")
    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError as exc:
        raise UpstreamError("Could not parse AI response") from exc
    questions = data.get("followUpQuestions") if isinstance(data, dict) else None
    if not isinstance(questions, list):
        return []
    return [str(q).strip() for q in questions if str(q).strip()]


async def generate_follow_ups(invoker: ModelInvoker, answers: IntakeAnswers) -> FollowUpQuestions:
    """Ask the model for 2-3 follow-up questions and one fallback-preference question."""
    fields = (
        answers.issue_type,
        answers.order_number,
        answers.product_details,
        answers.additional_info,
    )
    listing = await invoker.invoke(build_follow_up_prompt(*fields))
    questions = parse_follow_ups(listing.text)

    final = await invoker.invoke(build_final_question_prompt(*fields))
    logger.info(
        "follow_ups_generated",
        issue_type=answers.issue_type,
        question_count=len(questions),
    )
    return FollowUpQuestions(follow_up_questions=questions, final_question=final.text)


def mock_follow_ups() -> FollowUpQuestions:
    return FollowUpQuestions(
        follow_up_questions=list(MOCK_FOLLOW_UPS),
        final_question=MOCK_FINAL_QUESTION,
    )
