"""Assistant configuration.

A single immutable object carries the provider credential and every tuning
constant, and is injected into the engine constructor.
"""

import os
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

from ..errors import ConfigurationMissingError
from ..llm import SUPPORTED_PROVIDERS

# Environment variable holding the credential for each provider
PROVIDER_KEY_ENV = {
    "openai": "OPENAI_API_KEY",
    "deepseek": "DEEPSEEK_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
}


class AssistantConfig(BaseModel):
    """Configuration for the health assistant engine."""

    model_config = ConfigDict(frozen=True)

    # Provider
    api_key: SecretStr | None = Field(default=None, description="Provider credential")
    provider: str = Field(default="openai", description="openai, deepseek or anthropic")
    model: str = Field(default="gpt-4o", description="Model id sent with every request")
    base_url: str | None = None
    request_timeout: float = Field(default=30.0, gt=0, description="Seconds per provider call")

    # Conversational sampling
    temperature: float = Field(default=0.6, ge=0.0, le=2.0)
    max_tokens: int = Field(default=500, ge=1)
    presence_penalty: float = Field(default=0.1, ge=-2.0, le=2.0)
    frequency_penalty: float = Field(default=0.1, ge=-2.0, le=2.0)

    # One-shot insight sampling
    insight_temperature: float = Field(default=0.3, ge=0.0, le=2.0)
    insight_max_tokens: int = Field(default=1000, ge=1)
    daily_temperature: float = Field(default=0.4, ge=0.0, le=2.0)
    daily_max_tokens: int = Field(default=800, ge=1)

    # Context bounds
    window_size: int = Field(default=20, ge=1, description="History turns sent per request")
    briefing_max_chars: int = Field(default=4000, ge=200)

    # Persistence
    key_prefix: str = Field(default="health_assistant")

    @field_validator("provider")
    @classmethod
    def validate_provider(cls, v: str) -> str:
        """Validate provider name."""
        v = v.lower()
        if v == "claude":
            v = "anthropic"
        if v not in SUPPORTED_PROVIDERS:
            raise ValueError(f"provider must be one of {', '.join(SUPPORTED_PROVIDERS)}")
        return v

    @property
    def has_credential(self) -> bool:
        return self.api_key is not None and bool(self.api_key.get_secret_value().strip())

    def provider_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for ``create_llm_provider``.

        Raises:
            ConfigurationMissingError: If no credential is configured
        """
        if not self.has_credential:
            raise ConfigurationMissingError(f"no {PROVIDER_KEY_ENV.get(self.provider, 'API key')} set")
        kwargs: dict[str, Any] = {
            "api_key": self.api_key.get_secret_value(),
            "model": self.model,
            "timeout": self.request_timeout,
        }
        if self.base_url:
            kwargs["base_url"] = self.base_url
        return kwargs

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, **overrides: Any) -> "AssistantConfig":
        """Build a configuration from environment variables.

        Environment variables:
            LLM_PROVIDER: openai, deepseek or anthropic (default: openai)
            OPENAI_API_KEY / DEEPSEEK_API_KEY / ANTHROPIC_API_KEY: credential
            HEALTH_ASSISTANT_MODEL: model id (default depends on provider)
            HEALTH_ASSISTANT_BASE_URL: custom endpoint
            HEALTH_ASSISTANT_WINDOW: history window size (default: 20)
            HEALTH_ASSISTANT_TIMEOUT: request timeout in seconds (default: 30)
        """
        env = os.environ if environ is None else environ
        provider = env.get("LLM_PROVIDER", "openai").lower()
        if provider == "claude":
            provider = "anthropic"

        default_models = {
            "openai": "gpt-4o",
            "deepseek": "deepseek-chat",
            "anthropic": "claude-sonnet-4-20250514",
        }

        values: dict[str, Any] = {
            "provider": provider,
            "api_key": env.get(PROVIDER_KEY_ENV.get(provider, "OPENAI_API_KEY")) or None,
            "model": env.get("HEALTH_ASSISTANT_MODEL") or default_models.get(provider, "gpt-4o"),
            "base_url": env.get("HEALTH_ASSISTANT_BASE_URL") or None,
        }
        if env.get("HEALTH_ASSISTANT_WINDOW"):
            values["window_size"] = int(env["HEALTH_ASSISTANT_WINDOW"])
        if env.get("HEALTH_ASSISTANT_TIMEOUT"):
            values["request_timeout"] = float(env["HEALTH_ASSISTANT_TIMEOUT"])

        values.update(overrides)
        return cls(**values)
