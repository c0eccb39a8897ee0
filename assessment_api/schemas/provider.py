"""
Provider configuration and the native reply shapes we know how to decode.

Reply models are tried in the order listed in REPLY_VARIANTS; the first that
validates wins.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class ProviderConfig(BaseModel):
    """Explicit LLM configuration handed to the normalizer."""

    model_config = ConfigDict(frozen=True)

    provider: Literal["anthropic", "openai"]
    api_key: str = ""
    model: str
    fallback_model: str | None = None
    fallback_on_model_not_found: bool = True
    base_url: str | None = None
    timeout_seconds: float = 30.0
    temperature: float | None = None


class WebhookConfig(BaseModel):
    """Explicit webhook configuration handed to the dispatcher."""

    model_config = ConfigDict(frozen=True)

    url: str | None = None
    source: str = "JAX AI Assessment"
    timeout_seconds: float = 10.0


# ── Anthropic Messages API ──────────────────────────────────────────────────

class AnthropicContentBlock(BaseModel):
    type: str
    text: str | None = None


class AnthropicUsage(BaseModel):
    input_tokens: int = 0
    output_tokens: int = 0


class AnthropicMessage(BaseModel):
    type: Literal["message"]
    model: str
    content: list[AnthropicContentBlock]
    usage: AnthropicUsage = Field(default_factory=AnthropicUsage)

    @property
    def text(self) -> str:
        return "".join(b.text or "" for b in self.content if b.type == "text")

    @property
    def input_tokens(self) -> int:
        return self.usage.input_tokens

    @property
    def output_tokens(self) -> int:
        return self.usage.output_tokens


# ── OpenAI Chat Completions API ─────────────────────────────────────────────

class OpenAIMessage(BaseModel):
    role: str = "assistant"
    content: str | None = None


class OpenAIChoice(BaseModel):
    index: int = 0
    message: OpenAIMessage


class OpenAIUsage(BaseModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0


class OpenAIChatCompletion(BaseModel):
    model: str
    choices: list[OpenAIChoice] = Field(..., min_length=1)
    usage: OpenAIUsage | None = None

    @property
    def text(self) -> str:
        return self.choices[0].message.content or ""

    @property
    def input_tokens(self) -> int:
        return self.usage.prompt_tokens if self.usage else 0

    @property
    def output_tokens(self) -> int:
        return self.usage.completion_tokens if self.usage else 0


REPLY_VARIANTS: tuple[type[BaseModel], ...] = (AnthropicMessage, OpenAIChatCompletion)
