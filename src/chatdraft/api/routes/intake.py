"""Intake questionnaire and personalized follow-up questions."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from chatdraft.api.dependencies import get_coordinator
from chatdraft.api.errors import ConfigurationError, GenerationError, ValidationError
from chatdraft.api.schemas import (
    ErrorResponse,
    FollowUpRequest,
    FollowUpResponse,
    QuestionnaireResponse,
)
from chatdraft.backends import FakeBackend
from chatdraft.drafting import DraftCoordinator, DraftingError
from chatdraft.drafting.followups import IntakeAnswers, generate_follow_ups, mock_follow_ups
from chatdraft.observability.logging import get_logger

router = APIRouter(tags=["Intake"])
logger = get_logger(__name__)

QUESTIONNAIRE = QuestionnaireResponse.model_validate(
    {
        "title": "What can we help you with?",
        "fields": [
            {
                "name": "issueType",
                "label": "What do you need?",
                "type": "select",
                "required": True,
                "options": [
                    {"value": "return", "label": "I want to return an item"},
                    {"value": "exchange", "label": "I want to exchange an item"},
                    {"value": "refund", "label": "I want a refund"},
                    {"value": "help", "label": "I need help with my order"},
                    {"value": "damage", "label": "Item arrived damaged"},
                    {"value": "missing", "label": "Item missing from order"},
                    {"value": "other", "label": "Something else"},
                ],
            },
            {
                "name": "orderNumber",
                "label": "Order number (if you have it)",
                "type": "text",
                "placeholder": "#12345",
            },
            {
                "name": "productDetails",
                "label": "What product/item is this about?",
                "type": "text",
                "placeholder": "e.g., Blue jacket, size M",
            },
            {
                "name": "additionalInfo",
                "label": "Any other details?",
                "type": "textarea",
                "placeholder": "e.g., Defective after 2 days, purchased on Jan 1",
            },
        ],
    }
)


@router.api_route(
    "/questionnaire",
    methods=["GET", "POST"],
    response_model=QuestionnaireResponse,
    response_model_exclude_none=True,
)
async def questionnaire() -> QuestionnaireResponse:
    """Structured intake form the extension presents before a chat."""
    return QUESTIONNAIRE


@router.post(
    "/generateFollowUpQuestions",
    response_model=FollowUpResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def generate_follow_up_questions(
    body: FollowUpRequest,
    coordinator: DraftCoordinator = Depends(get_coordinator),
) -> FollowUpResponse:
    """Personalize the intake with model-written follow-up questions."""

    if not body.issue_type:
        raise ValidationError("issueType is required")

    if isinstance(coordinator.backend, FakeBackend):
        return FollowUpResponse.model_validate(mock_follow_ups().to_payload())

    if coordinator.invoker is None:
        raise ConfigurationError(coordinator.disabled_reason)

    answers = IntakeAnswers(
        issue_type=body.issue_type,
        order_number=body.order_number,
        product_details=body.product_details,
        additional_info=body.additional_info,
    )
    try:
        result = await generate_follow_ups(coordinator.invoker, answers)
    except DraftingError as exc:
        logger.error("follow_up_generation_failed", error=str(exc), error_type=type(exc).__name__)
        raise GenerationError.from_drafting_error(exc, action="generate questions") from exc
    return FollowUpResponse.model_validate(result.to_payload())


__all__ = ["router", "QUESTIONNAIRE"]
