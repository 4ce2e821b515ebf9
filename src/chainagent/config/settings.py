"""Firewall configuration powered by pydantic-settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from chainagent.config.models import resolve_provider


class FirewallSettings(BaseSettings):
    """Runtime configuration for the prompt firewall.

    The API keys here are never read by the gate itself; callers that want
    configuration-driven credentials build a descriptor explicitly with
    ``FirewallCapabilities.from_settings``.
    """

    # Sanitizer call
    sanitizer_temperature: float = Field(
        default=0.0,
        alias="SANITIZER_TEMPERATURE",
        description="Sampling temperature for the sanitizer call (0.0-2.0)",
    )
    sanitizer_max_tokens: int = Field(
        default=1024,
        alias="SANITIZER_MAX_TOKENS",
        description="Maximum tokens the sanitizer may return",
    )
    sanitizer_timeout_seconds: float = Field(
        default=30.0,
        alias="SANITIZER_TIMEOUT_SECONDS",
        description="Upper bound for one sanitizer round-trip in seconds",
    )
    connect_timeout_seconds: float = Field(
        default=10.0,
        alias="CONNECT_TIMEOUT_SECONDS",
        description="TCP connect timeout for the provider client",
    )

    # Edge defaults for FirewallCapabilities.from_settings
    default_model: str = Field(
        default="gpt-4o-mini",
        alias="DEFAULT_MODEL",
        description="Model used when building capabilities from settings",
    )
    openai_api_key: str = Field(
        default="",
        alias="OPENAI_API_KEY",
        description="OpenAI API key",
    )
    anthropic_api_key: str = Field(
        default="",
        alias="ANTHROPIC_API_KEY",
        description="Anthropic API key",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_prefix="CHAINAGENT_",
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("sanitizer_temperature")
    @classmethod
    def validate_temperature(cls, v: float) -> float:
        """Validate temperature is in valid range."""
        if not 0.0 <= v <= 2.0:
            raise ValueError(f"Temperature must be between 0.0 and 2.0, got {v}")
        return v

    @field_validator("sanitizer_timeout_seconds", "connect_timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Timeouts must be positive; the sanitizer may never wait forever."""
        if v <= 0:
            raise ValueError(f"Timeout must be positive, got {v}")
        return v

    @field_validator("sanitizer_max_tokens")
    @classmethod
    def validate_max_tokens(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"sanitizer_max_tokens must be at least 1, got {v}")
        return v

    @field_validator("default_model")
    @classmethod
    def validate_default_model(cls, v: str) -> str:
        """Validate the default model maps to a supported provider."""
        if resolve_provider(v) is None:
            raise ValueError(f"Unsupported model: {v}")
        return v


@lru_cache(maxsize=1)
def get_settings() -> FirewallSettings:
    """Return a cached settings instance."""

    return FirewallSettings()
