"""Application configuration."""

from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from assessment_api.schemas.provider import ProviderConfig, WebhookConfig


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,  # so ANTHROPIC_API_KEY works regardless of case
    )

    # Which upstream serves conversation turns
    llm_provider: Literal["anthropic", "openai"] = "anthropic"

    # Anthropic
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-3-5-sonnet-20241022"
    anthropic_fallback_model: str | None = "claude-3-haiku-20240307"

    # OpenAI (or compatible API)
    openai_api_key: str = ""
    openai_model: str = "gpt-4o"
    openai_fallback_model: str | None = "gpt-4o-mini"
    openai_base_url: str | None = None  # For Azure/OpenRouter

    # Shared LLM behaviour
    llm_fallback_enabled: bool = True
    llm_temperature: float | None = None
    llm_timeout_seconds: float = 30.0

    # Outbound webhook (Zapier etc.); unset disables delivery
    webhook_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("webhook_url", "zapier_webhook_url"),
    )
    webhook_source: str = "JAX AI Assessment"
    webhook_timeout_seconds: float = 10.0

    # App
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    log_level: str = "INFO"
    log_json: bool = True

    def provider_config(self) -> ProviderConfig:
        """Project the active provider's settings into an explicit config."""
        if self.llm_provider == "openai":
            return ProviderConfig(
                provider="openai",
                api_key=self.openai_api_key,
                model=self.openai_model,
                fallback_model=self.openai_fallback_model or None,
                fallback_on_model_not_found=self.llm_fallback_enabled,
                base_url=self.openai_base_url or None,
                timeout_seconds=self.llm_timeout_seconds,
                temperature=self.llm_temperature,
            )
        return ProviderConfig(
            provider="anthropic",
            api_key=self.anthropic_api_key,
            model=self.anthropic_model,
            fallback_model=self.anthropic_fallback_model or None,
            fallback_on_model_not_found=self.llm_fallback_enabled,
            timeout_seconds=self.llm_timeout_seconds,
            temperature=self.llm_temperature,
        )

    def webhook_config(self) -> WebhookConfig:
        return WebhookConfig(
            url=self.webhook_url or None,
            source=self.webhook_source,
            timeout_seconds=self.webhook_timeout_seconds,
        )


settings = Settings()


def get_settings() -> Settings:
    """FastAPI dependency; overridden in tests."""
    return settings
