"""
Test configuration and fixtures.
Every provider and webhook call is faked; nothing leaves the process.
"""
import httpx
import pytest
from unittest.mock import AsyncMock, MagicMock

from assessment_api.config import Settings
from assessment_api.schemas.assessment import AssessmentRecord, BusinessIntake, ConversationRequest
from assessment_api.schemas.provider import ProviderConfig


def anthropic_reply(text="hello", model="claude-3-5-sonnet-20241022", input_tokens=12, output_tokens=3):
    return {
        "id": "msg_test_123",
        "type": "message",
        "role": "assistant",
        "model": model,
        "content": [{"type": "text", "text": text}],
        "stop_reason": "end_turn",
        "usage": {"input_tokens": input_tokens, "output_tokens": output_tokens},
    }


def openai_reply(text="hello", model="gpt-4o", prompt_tokens=10, completion_tokens=2):
    return {
        "id": "chatcmpl-test",
        "object": "chat.completion",
        "model": model,
        "choices": [
            {"index": 0, "message": {"role": "assistant", "content": text}, "finish_reason": "stop"}
        ],
        "usage": {
            "prompt_tokens": prompt_tokens,
            "completion_tokens": completion_tokens,
            "total_tokens": prompt_tokens + completion_tokens,
        },
    }


def status_error(sdk, status, body):
    """Build a real SDK status error (openai.NotFoundError, anthropic.BadRequestError, ...)."""
    request = httpx.Request("POST", "https://api.example.test/v1/messages")
    response = httpx.Response(status, request=request, json=body)
    cls = {
        400: sdk.BadRequestError,
        401: sdk.AuthenticationError,
        404: sdk.NotFoundError,
        500: sdk.InternalServerError,
    }[status]
    return cls(f"Error code: {status}", response=response, body=body)


def fake_anthropic_client(*responses):
    client = MagicMock()
    client.messages.create = AsyncMock(side_effect=list(responses))
    return client


def fake_openai_client(*responses):
    client = MagicMock()
    client.chat.completions.create = AsyncMock(side_effect=list(responses))
    return client


@pytest.fixture
def anthropic_config():
    return ProviderConfig(
        provider="anthropic",
        api_key="sk-ant-test-key",
        model="claude-3-5-sonnet-20241022",
        fallback_model="claude-3-haiku-20240307",
    )


@pytest.fixture
def openai_config():
    return ProviderConfig(
        provider="openai",
        api_key="sk-openai-test",
        model="gpt-4o",
        fallback_model="gpt-4o-mini",
    )


@pytest.fixture
def conversation():
    return ConversationRequest.model_validate({
        "systemPrompt": "You are an automation consultant.",
        "messages": [
            {"role": "user", "content": "hi"},
            {"role": "assistant", "content": "Hello! What kind of business do you run?"},
            {"role": "user", "content": "A dental clinic."},
        ],
        "maxTokens": 50,
    })


@pytest.fixture
def sample_intake():
    return BusinessIntake(
        business_type="Dental Clinic",
        business_location="Jacksonville, FL",
        pain_points="Too much manual appointment scheduling and we forget reminder calls to patients.",
        current_solution="Spreadsheet and a paper calendar",
        time_savings="about 10 hours a week",
        time_value="$150 per hour",
    )


@pytest.fixture
def sample_record(sample_intake):
    return AssessmentRecord.model_validate({
        "contactName": "Dana Reyes",
        "businessName": "Bright Smiles Dental",
        "contactEmail": "dana@brightsmiles.test",
        "contactPhone": "+19045550123",
        "businessData": sample_intake.model_dump(),
        "leadScore": 3,
        "conversationHistory": "user: hi\nassistant: hello",
        "solutionProposal": "Automated reminders and online booking.",
        "tokensUsed": 1420,
        "dataCompleteness": 0.83,
    })


@pytest.fixture
def test_settings():
    return Settings(
        _env_file=None,
        llm_provider="anthropic",
        anthropic_api_key="sk-ant-test-key",
        anthropic_model="claude-3-5-sonnet-20241022",
        anthropic_fallback_model="claude-3-haiku-20240307",
        webhook_url=None,
    )
