"""
Relay a widget conversation to the configured LLM provider.

Builds the provider-native request, performs a single same-provider fallback
when the primary model is reported missing, and decodes whatever came back
into one NormalizedReply. Fail loudly on anything unrecognised.
"""

import json
import logging
from typing import Any

import anthropic
import openai
import pydantic
from anthropic import AsyncAnthropic
from openai import AsyncOpenAI

from assessment_api.errors import ConfigError, UpstreamError, ValidationError
from assessment_api.schemas.assessment import ConversationRequest, NormalizedReply
from assessment_api.schemas.provider import REPLY_VARIANTS, ProviderConfig

logger = logging.getLogger(__name__)

KEY_PREFIXES = {"anthropic": "sk-ant-", "openai": "sk-"}

# OpenAI reasoning families only accept the default sampling temperature.
FIXED_TEMPERATURE_PREFIXES = ("o1", "o3", "o4", "gpt-5")

_STATUS_ERRORS = (anthropic.APIStatusError, openai.APIStatusError)
_TRANSPORT_ERRORS = (anthropic.APIConnectionError, openai.APIConnectionError)


def _mask_key(api_key: str) -> str:
    return f"{api_key[:7]}***" if api_key else "<unset>"


def validate_credentials(config: ProviderConfig) -> None:
    """Raise ConfigError unless the key is present and shaped for the provider."""
    key = config.api_key or ""
    logger.debug("Credential check provider=%s key=%s", config.provider, _mask_key(key))

    if not key:
        raise ConfigError(f"{config.provider.upper()}_API_KEY environment variable is not set")

    prefix = KEY_PREFIXES[config.provider]
    if not key.startswith(prefix):
        raise ConfigError(f"Invalid API key format - should start with {prefix}")
    if config.provider == "openai" and key.startswith(KEY_PREFIXES["anthropic"]):
        raise ConfigError("Invalid API key format - an Anthropic key was supplied for OpenAI")


def validate_request(request: ConversationRequest) -> None:
    if not request.messages:
        raise ValidationError("messages must contain at least one turn")
    if request.max_tokens <= 0:
        raise ValidationError("maxTokens must be a positive integer")


def _accepts_temperature(config: ProviderConfig, model: str) -> bool:
    if config.provider == "openai":
        return not model.lower().startswith(FIXED_TEMPERATURE_PREFIXES)
    return True


def build_provider_request(request: ConversationRequest, config: ProviderConfig, model: str) -> dict:
    """Provider-native keyword arguments for one completion call."""
    turns = [{"role": t.role, "content": t.content} for t in request.messages]

    if config.provider == "anthropic":
        kwargs: dict[str, Any] = {
            "model": model,
            "max_tokens": request.max_tokens,
            "messages": turns,
        }
        if request.system_prompt:
            kwargs["system"] = request.system_prompt
    else:
        if request.system_prompt:
            turns.insert(0, {"role": "system", "content": request.system_prompt})
        kwargs = {
            "model": model,
            "max_completion_tokens": request.max_tokens,
            "messages": turns,
        }

    if config.temperature is not None and _accepts_temperature(config, model):
        kwargs["temperature"] = config.temperature
    return kwargs


def build_client(config: ProviderConfig) -> AsyncAnthropic | AsyncOpenAI:
    """Build the SDK client. SDK retries are disabled; fallback is our only retry."""
    if config.provider == "anthropic":
        return AsyncAnthropic(
            api_key=config.api_key,
            timeout=config.timeout_seconds,
            max_retries=0,
        )
    kwargs: dict = {
        "api_key": config.api_key,
        "timeout": config.timeout_seconds,
        "max_retries": 0,
    }
    if config.base_url:
        kwargs["base_url"] = config.base_url
    return AsyncOpenAI(**kwargs)


async def _send(client: Any, config: ProviderConfig, kwargs: dict) -> Any:
    """One upstream call. Status errors propagate untouched so the caller can inspect them."""
    try:
        if config.provider == "anthropic":
            response = await client.messages.create(**kwargs)
        else:
            response = await client.chat.completions.create(**kwargs)
    except _TRANSPORT_ERRORS as e:
        raise UpstreamError(f"API request failed: {e}") from e

    return response.model_dump() if hasattr(response, "model_dump") else response


def _error_detail(exc: Exception) -> dict:
    body = getattr(exc, "body", None)
    if not isinstance(body, dict):
        return {}
    error = body.get("error", body)
    return error if isinstance(error, dict) else {}


def is_model_not_found(exc: Exception) -> bool:
    """True for OpenAI `model_not_found` and Anthropic `not_found_error` replies."""
    if getattr(exc, "status_code", None) != 404:
        return False
    detail = _error_detail(exc)
    return detail.get("code") == "model_not_found" or detail.get("type") == "not_found_error"


def _upstream_error(exc: Exception) -> UpstreamError:
    status = getattr(exc, "status_code", None)
    body = getattr(exc, "body", None)
    return UpstreamError(
        f"API request failed: {status} - {json.dumps(body, default=str)}",
        status_code=status,
        body=body,
    )


def decode_reply(raw: Any) -> pydantic.BaseModel:
    """Match the raw reply against each known provider shape; first match wins."""
    for variant in REPLY_VARIANTS:
        try:
            return variant.model_validate(raw)
        except pydantic.ValidationError:
            continue
    raise UpstreamError(
        f"Unrecognised provider response: {json.dumps(raw, default=str)[:2000]}",
        body=raw,
    )


async def normalize(
    request: ConversationRequest,
    config: ProviderConfig,
    client: Any = None,
) -> NormalizedReply:
    """
    Send the conversation upstream and return a provider-independent reply.

    Raises ConfigError / ValidationError before any network call,
    UpstreamError when the call (and the one permitted fallback) fails.
    """
    validate_credentials(config)
    validate_request(request)

    client = client or build_client(config)
    model = config.model
    used_fallback = False

    logger.info(
        "Relaying %d turns to %s model=%s max_tokens=%d",
        len(request.messages), config.provider, model, request.max_tokens,
        extra={"provider": config.provider, "model": model},
    )
    try:
        raw = await _send(client, config, build_provider_request(request, config, model))
    except _STATUS_ERRORS as e:
        can_fall_back = config.fallback_on_model_not_found and config.fallback_model
        if not (can_fall_back and is_model_not_found(e)):
            logger.error(
                "%s API error: %s", config.provider, e,
                extra={"provider": config.provider, "model": model, "status_code": getattr(e, "status_code", None)},
            )
            raise _upstream_error(e) from e

        logger.warning(
            "Model %s not found, falling back to %s", model, config.fallback_model,
            extra={"provider": config.provider, "model": model},
        )
        model = config.fallback_model
        used_fallback = True
        try:
            raw = await _send(client, config, build_provider_request(request, config, model))
        except _STATUS_ERRORS as fallback_exc:
            logger.error(
                "%s fallback API error: %s", config.provider, fallback_exc,
                extra={"provider": config.provider, "model": model, "used_fallback": True},
            )
            raise _upstream_error(fallback_exc) from fallback_exc

    reply = decode_reply(raw)
    logger.info(
        "Reply received from %s model=%s fallback=%s", config.provider, model, used_fallback,
        extra={"provider": config.provider, "model": model, "used_fallback": used_fallback},
    )

    return NormalizedReply(
        text=reply.text,
        usage_tokens=reply.input_tokens + reply.output_tokens,
        model_used=model,
        input_tokens=reply.input_tokens,
        output_tokens=reply.output_tokens,
        provider=config.provider,
        used_fallback=used_fallback,
    )
