"""Firewall schemas: capability descriptor, guard verdict, sanitizer request."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator, model_validator

from chainagent.schemas.base import ProviderName


if TYPE_CHECKING:
    from chainagent.config.settings import FirewallSettings


class GuardVerdict(BaseModel):
    """Outcome of the pattern matcher for one prompt."""

    model_config = ConfigDict(frozen=True)

    blocked: bool
    reason: str | None = None
    rule: str | None = None

    @model_validator(mode="after")
    def validate_reason_matches_block(self) -> GuardVerdict:
        if self.blocked and not self.reason:
            raise ValueError("A blocked verdict requires a reason")
        if not self.blocked and (self.reason or self.rule):
            raise ValueError("A clear verdict carries no reason or rule")
        return self


class FirewallCapabilities(BaseModel):
    """Which model the sanitizer may call and the caller's own credentials.

    When both credentials are present the provider of ``model`` decides which
    one is used; the other is ignored.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    model: str = Field(min_length=1)
    openai_api_key: SecretStr | None = None
    anthropic_api_key: SecretStr | None = None

    @field_validator("model")
    @classmethod
    def validate_model(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("model must not be blank")
        return v

    @field_validator("openai_api_key", "anthropic_api_key", mode="before")
    @classmethod
    def validate_blank_credentials(cls, v: Any) -> Any:
        if v is None:
            return None
        raw = v.get_secret_value() if isinstance(v, SecretStr) else v
        if isinstance(raw, str) and not raw.strip():
            return None
        return v

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> FirewallCapabilities:
        """Build from a plain mapping; unknown keys are rejected."""

        return cls.model_validate(dict(data))

    @classmethod
    def from_settings(cls, settings: FirewallSettings) -> FirewallCapabilities:
        """Build a descriptor from configuration at the caller's edge."""

        return cls(
            model=settings.default_model,
            openai_api_key=settings.openai_api_key or None,
            anthropic_api_key=settings.anthropic_api_key or None,
        )

    def credential_for(self, provider: ProviderName) -> SecretStr | None:
        """Return the credential supplied for ``provider``, if any."""

        if provider == "openai":
            return self.openai_api_key
        return self.anthropic_api_key


class ProviderCredential(BaseModel):
    """The single credential resolved for one sanitizer call."""

    model_config = ConfigDict(frozen=True)

    provider: ProviderName
    model: str
    api_key: SecretStr


class SanitizerRequest(BaseModel):
    """Input for the LLM sanitizer."""

    prompt: str
    capabilities: FirewallCapabilities
