"""Base schemas and shared models for the firewall stages."""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field


class AgentFailure(BaseModel):
    """Standardized error object for firewall and provider failures."""

    agent_id: str
    error_code: str
    message: str
    recoverable: bool = False
    details: dict[str, Any] | None = None
    timestamp: datetime = Field(default_factory=datetime.utcnow)


class ErrorCodes:
    """Standard error codes for firewall failures."""

    # Stage 1
    FIREWALL_BLOCKED = "ERR_FIREWALL_BLOCKED"

    # Stage 2
    SANITIZER_CONFIG = "ERR_SANITIZER_CONFIG"
    SANITIZER_MALFORMED = "ERR_SANITIZER_MALFORMED"

    # Provider
    PROVIDER_AUTH = "ERR_PROVIDER_AUTH"
    PROVIDER_UNAVAILABLE = "ERR_PROVIDER_UNAVAILABLE"
    PROVIDER_REQUEST = "ERR_PROVIDER_REQUEST"
    PROVIDER_NETWORK = "ERR_PROVIDER_NETWORK"
    PROVIDER_MALFORMED = "ERR_PROVIDER_MALFORMED"
    PROVIDER_UNEXPECTED = "ERR_PROVIDER_UNEXPECTED"

    # General
    TIMEOUT = "ERR_TIMEOUT"


ProviderName = Literal["openai", "anthropic"]
