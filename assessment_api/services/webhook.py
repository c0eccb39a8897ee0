"""
Best-effort delivery of finished assessments to an outbound webhook.

dispatch() never raises: delivery problems become a failed DispatchResult
that the route logs and discards.
"""

import logging
from datetime import datetime, timezone
from typing import Literal

import httpx
from pydantic import BaseModel, ConfigDict

from assessment_api.errors import DispatchError
from assessment_api.schemas.assessment import AssessmentRecord
from assessment_api.schemas.provider import WebhookConfig

logger = logging.getLogger(__name__)


class DispatchResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: Literal["skipped", "delivered", "failed"]
    status_code: int | None = None
    error: str | None = None


def build_payload(
    record: AssessmentRecord,
    *,
    source: str,
    provider: str,
    lead_score: int,
    now: datetime | None = None,
) -> dict:
    """Flatten the record into the keys the Zapier zap maps on."""
    intake = record.business_data
    stamp = now or datetime.now(timezone.utc)
    return {
        "timestamp": stamp.isoformat(),
        "source": source,
        # Contact
        "contactName": record.contact_name,
        "businessName": record.business_name,
        "contactEmail": record.contact_email,
        "contactPhone": record.contact_phone,
        # Business intake
        "businessType": intake.business_type,
        "businessLocation": intake.business_location,
        "painPoints": intake.pain_points,
        "currentSolution": intake.current_solution,
        "timeSavings": intake.time_savings,
        "timeValue": intake.time_value,
        # Meta
        "lead_score": lead_score,
        "conversation_summary": record.conversation_history,
        "solution_proposal": record.solution_proposal,
        "tokens_used": record.tokens_used,
        "data_completeness": record.data_completeness,
        "ai_provider": provider,
        "consultation_requested": True,
    }


async def _post(url: str, payload: dict, timeout: float, transport: httpx.AsyncBaseTransport | None) -> int:
    try:
        async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
            response = await client.post(url, json=payload)
    except httpx.InvalidURL as e:
        raise DispatchError(f"Webhook URL is invalid: {e}") from e
    except httpx.HTTPError as e:
        raise DispatchError(f"Webhook transport error: {e}") from e

    # Redirects are not followed; a 3xx means the hook never saw the payload.
    if not response.is_success:
        raise DispatchError(
            f"Webhook failed: {response.status_code} {response.text[:500]}",
            status_code=response.status_code,
        )
    return response.status_code


async def dispatch(
    record: AssessmentRecord,
    config: WebhookConfig,
    *,
    provider: str,
    lead_score: int,
    transport: httpx.AsyncBaseTransport | None = None,
) -> DispatchResult:
    """
    POST the flattened record to the configured webhook.

    No URL configured means no network call and a "skipped" result.
    """
    if not config.url:
        logger.info("No webhook URL configured, skipping webhook send")
        return DispatchResult(status="skipped")

    payload = build_payload(record, source=config.source, provider=provider, lead_score=lead_score)
    try:
        status_code = await _post(config.url, payload, config.timeout_seconds, transport)
    except DispatchError as e:
        logger.error(
            "Webhook delivery failed: %s", e,
            extra={"webhook_status": "failed", "status_code": e.upstream_status},
        )
        return DispatchResult(status="failed", status_code=e.upstream_status, error=str(e))

    logger.info(
        "Webhook sent successfully (status=%d)", status_code,
        extra={"webhook_status": "delivered", "status_code": status_code},
    )
    return DispatchResult(status="delivered", status_code=status_code)
