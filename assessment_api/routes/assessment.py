"""
POST /ai-assessment — chat relay and consultation submission.

One endpoint, two mutually exclusive paths selected by isConsultationRequest:
  - conversation turn → LLM relay → {content, usage, model_used}
  - consultation      → lead score + webhook → {success, message}
"""

import logging

import pydantic
from fastapi import APIRouter, Depends, Request, Response

from assessment_api.config import Settings, get_settings
from assessment_api.errors import ValidationError
from assessment_api.schemas.assessment import ConsultationResponse, ConversationRequest
from assessment_api.services import lead_scoring, llm_relay, webhook

logger = logging.getLogger(__name__)

router = APIRouter(tags=["assessment"])

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
}


@router.options("")
async def preflight():
    """Preflight for browsers that reach us without the CORS middleware answering."""
    return Response(status_code=200, headers=CORS_HEADERS)


@router.post("")
async def ai_assessment(request: Request, settings: Settings = Depends(get_settings)):
    """
    Relay a conversation turn, or score and forward a finished assessment.

    Errors are raised as AssessmentError subclasses and rendered by the
    handler registered in main.py.
    """
    # ── 1. Parse body ────────────────────────────────────────────────────────
    try:
        payload = await request.json()
    except ValueError as e:
        raise ValidationError("Invalid JSON body.") from e

    if not isinstance(payload, dict):
        raise ValidationError("Payload must be a JSON object.")

    try:
        body = ConversationRequest.model_validate(payload)
    except pydantic.ValidationError as e:
        raise ValidationError(str(e)) from e

    # ── 2. Consultation submission ──────────────────────────────────────────
    if body.is_consultation_request:
        if body.assessment_data is None:
            raise ValidationError("assessmentData is required for a consultation request")
        return await _handle_consultation(body, settings)

    # ── 3. Conversation turn ────────────────────────────────────────────────
    reply = await llm_relay.normalize(body, settings.provider_config())
    return {
        "content": [{"type": "text", "text": reply.text}],
        "usage": {
            "input_tokens": reply.input_tokens,
            "output_tokens": reply.output_tokens,
            "total_tokens": reply.usage_tokens,
        },
        "model_used": reply.model_used,
    }


async def _handle_consultation(body: ConversationRequest, settings: Settings) -> ConsultationResponse:
    record = body.assessment_data
    lead_score = lead_scoring.score(record.business_data)
    logger.info("Processing consultation request (lead_score=%d)", lead_score, extra={"lead_score": lead_score})

    result = await webhook.dispatch(
        record,
        settings.webhook_config(),
        provider=settings.llm_provider,
        lead_score=lead_score,
    )
    logger.info("Webhook outcome: %s", result.status, extra={"webhook_status": result.status})

    return ConsultationResponse(lead_score=lead_score)
