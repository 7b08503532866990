"""Shared Pydantic request/response models for OpenAPI."""

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from chatdraft.drafting import TranscriptEvent, conversation_key


class ErrorResponse(BaseModel):
    error: str = Field(..., description="Machine-readable error code")
    detail: Optional[str | Dict[str, Any]] = Field(
        None, description="Human-readable or structured error detail"
    )


class HealthResponse(BaseModel):
    ok: bool = True
    status: str
    version: str
    reply_backend: str
    provider_mode: str
    degraded_mode: bool = False
    conversations: Optional[int] = None
    cached_drafts: Optional[int] = None


class AnalyzeRequest(BaseModel):
    """Transcript event posted by the extension.

    Clients either send ``conversationId`` or let the server derive one from
    ``provider`` + ``pageUrl``.
    """

    model_config = ConfigDict(populate_by_name=True)

    conversation_id: Optional[str] = Field(None, alias="conversationId")
    provider: Optional[str] = None
    page_url: Optional[str] = Field(None, alias="pageUrl")
    transcript: str = ""
    user_context: Optional[str] = Field(None, alias="userContext")

    def resolved_conversation_id(self) -> str:
        return self.conversation_id or conversation_key(self.provider, self.page_url)

    def to_event(self) -> TranscriptEvent:
        return TranscriptEvent(
            conversation_id=self.resolved_conversation_id(),
            transcript=self.transcript or "",
            user_context=self.user_context or "",
            provider=self.provider,
        )


class DraftResponse(BaseModel):
    action: Literal["DRAFT"] = "DRAFT"
    draft: str


class WaitingResponse(BaseModel):
    action: Literal["WAITING"] = "WAITING"


class NeedsUserResponse(BaseModel):
    action: Literal["NEEDS_USER"] = "NEEDS_USER"
    question: str


class ActionErrorResponse(BaseModel):
    action: Literal["ERROR"] = "ERROR"
    error: str


AnalyzeResponse = Union[DraftResponse, WaitingResponse, NeedsUserResponse, ActionErrorResponse]


class QuestionnaireOption(BaseModel):
    value: str
    label: str


class QuestionnaireField(BaseModel):
    name: str
    label: str
    type: Literal["select", "text", "textarea"]
    required: bool = False
    placeholder: Optional[str] = None
    options: Optional[List[QuestionnaireOption]] = None


class QuestionnaireResponse(BaseModel):
    title: str
    fields: List[QuestionnaireField]


class FollowUpRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    issue_type: Optional[str] = Field(None, alias="issueType")
    order_number: Optional[str] = Field(None, alias="orderNumber")
    product_details: Optional[str] = Field(None, alias="productDetails")
    additional_info: Optional[str] = Field(None, alias="additionalInfo")


class FollowUpResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    follow_up_questions: List[str] = Field(default_factory=list, alias="followUpQuestions")
    final_question: str = Field("", alias="finalQuestion")
