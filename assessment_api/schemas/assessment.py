"""
Pydantic schemas for /ai-assessment.

Wire names follow the widget (camelCase); attributes are snake_case.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class ConversationTurn(BaseModel):
    """One chat message, tagged with who said it."""

    model_config = ConfigDict(frozen=True)

    role: Literal["user", "assistant"]
    content: str


class BusinessIntake(BaseModel):
    """Free-text answers collected by the assessment questionnaire."""

    business_type: str | None = None
    business_location: str | None = None
    pain_points: str | None = None
    current_solution: str | None = None
    time_savings: str | None = None
    time_value: str | None = None


class AssessmentRecord(BaseModel):
    """A finished assessment, submitted when the prospect asks for a consultation."""

    model_config = ConfigDict(populate_by_name=True)

    contact_name: str | None = Field(None, alias="contactName")
    business_name: str | None = Field(None, alias="businessName")
    contact_email: str | None = Field(None, alias="contactEmail")
    contact_phone: str | None = Field(None, alias="contactPhone")
    business_data: BusinessIntake = Field(default_factory=BusinessIntake, alias="businessData")

    # Caller-supplied value is ignored; the scorer recomputes it.
    lead_score: int | None = Field(None, alias="leadScore")
    conversation_history: str | None = Field(None, alias="conversationHistory")
    solution_proposal: str | None = Field(None, alias="solutionProposal")
    tokens_used: int = Field(0, ge=0, alias="tokensUsed")
    data_completeness: float = Field(0.0, alias="dataCompleteness")


class ConversationRequest(BaseModel):
    """Inbound POST body. Either a conversation turn or a consultation submission."""

    model_config = ConfigDict(populate_by_name=True)

    system_prompt: str = Field("", alias="systemPrompt")
    messages: list[ConversationTurn] = Field(default_factory=list)
    max_tokens: int = Field(200, alias="maxTokens")
    is_consultation_request: bool = Field(False, alias="isConsultationRequest")
    assessment_data: AssessmentRecord | None = Field(None, alias="assessmentData")


class NormalizedReply(BaseModel):
    """Provider-independent reply handed back to the route."""

    text: str
    usage_tokens: int = Field(..., ge=0)
    model_used: str
    input_tokens: int = 0
    output_tokens: int = 0
    provider: str
    used_fallback: bool = False


class ConsultationResponse(BaseModel):
    success: bool = True
    message: str = "Assessment data sent successfully"
    lead_score: int
