"""Firewall exception taxonomy.

``BlockedRequestError`` means stage 1 refused the prompt.
``SanitizerFailureError`` covers every stage 2 failure. Its subclasses say
whether the caller's configuration or the provider is to blame. No failure is
ever converted into passing the original prompt through.
"""

from __future__ import annotations

from typing import Any

from chainagent.schemas import AgentFailure, ErrorCodes


class AgentFailureError(RuntimeError):
    """Raised when a firewall stage cannot produce a sanitized prompt."""

    def __init__(
        self,
        *,
        agent_id: str,
        error_code: str,
        message: str,
        recoverable: bool = False,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.failure = AgentFailure(
            agent_id=agent_id,
            error_code=error_code,
            message=message,
            recoverable=recoverable,
            details=details,
        )

    @classmethod
    def from_failure(cls, failure: AgentFailure) -> AgentFailureError:
        """Wrap an existing failure record."""

        return cls(
            agent_id=failure.agent_id,
            error_code=failure.error_code,
            message=failure.message,
            recoverable=failure.recoverable,
            details=failure.details,
        )

    @property
    def error_code(self) -> str:
        return self.failure.error_code

    @property
    def recoverable(self) -> bool:
        return self.failure.recoverable

    def __str__(self) -> str:
        """Return a human-readable form for logging."""

        return f"{self.failure.agent_id}::{self.failure.error_code} - {self.failure.message}"


class BlockedRequestError(AgentFailureError):
    """The prompt asked for private key material; surface as a refusal."""

    def __init__(
        self,
        *,
        agent_id: str,
        reason: str,
        rule: str | None = None,
    ) -> None:
        super().__init__(
            agent_id=agent_id,
            error_code=ErrorCodes.FIREWALL_BLOCKED,
            message=(
                "Prompt blocked by AI firewall due to a potential private key request."
            ),
            recoverable=False,
            details={"reason": reason, "rule": rule},
        )
        self.reason = reason
        self.rule = rule


class SanitizerFailureError(AgentFailureError):
    """The LLM sanitizer did not produce a sanitized prompt."""


class SanitizerConfigurationError(SanitizerFailureError):
    """No usable credential for the requested model; fix configuration first."""

    def __init__(
        self,
        *,
        agent_id: str,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            agent_id=agent_id,
            error_code=ErrorCodes.SANITIZER_CONFIG,
            message=message,
            recoverable=False,
            details=details,
        )


class SanitizerProviderError(SanitizerFailureError):
    """Network, provider, authentication or response-shape failure."""


__all__ = [
    "AgentFailureError",
    "BlockedRequestError",
    "SanitizerConfigurationError",
    "SanitizerFailureError",
    "SanitizerProviderError",
]
