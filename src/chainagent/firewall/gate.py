"""Firewall gate - sequences the pattern matcher and the LLM sanitizer.

Per invocation:

    START -> pattern check --blocked--> BlockedRequestError
                           --clear----> sanitize --ok------> sanitized prompt
                                                 --failure-> SanitizerFailureError

The sanitizer is never reached once the pattern check blocks, and neither
stage is retried. The gate keeps no per-call state, so one instance can
serve many concurrent prompts.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from chainagent.exceptions import BlockedRequestError, SanitizerConfigurationError
from chainagent.firewall.patterns import PrivateKeyRequestDetector
from chainagent.firewall.sanitizer import LLMSanitizer
from chainagent.schemas import FirewallCapabilities, SanitizerRequest


if TYPE_CHECKING:
    from chainagent.firewall.sanitizer import SanitizerProtocol


logger = logging.getLogger(__name__)


class AIFirewall:
    """Two-stage guard in front of an agent with signing authority."""

    def __init__(
        self,
        *,
        detector: PrivateKeyRequestDetector | None = None,
        sanitizer: SanitizerProtocol | None = None,
        agent_id: str = "firewall",
    ) -> None:
        self._agent_id = agent_id
        self._detector = detector or PrivateKeyRequestDetector()
        self._sanitizer = sanitizer or LLMSanitizer()

    async def run(
        self,
        prompt: str,
        capabilities: FirewallCapabilities | Mapping[str, Any],
    ) -> str:
        """Return the sanitized prompt or raise the stage's failure.

        Provider timeouts surface as ``SanitizerProviderError`` with
        ``ERR_TIMEOUT``. Cancelling the awaiting task raises
        ``asyncio.CancelledError`` unchanged so asyncio's task cancellation
        keeps working; no prompt is returned in either case.
        """

        verdict = self._detector.inspect(prompt)
        if verdict.blocked:
            logger.warning(
                "Prompt blocked by pattern check",
                extra={"agent_id": self._agent_id, "rule": verdict.rule},
            )
            raise BlockedRequestError(
                agent_id=self._agent_id,
                reason=verdict.reason or "",
                rule=verdict.rule,
            )

        request = SanitizerRequest(
            prompt=prompt, capabilities=self._coerce_capabilities(capabilities)
        )
        return await self._sanitizer.sanitize(request)

    def _coerce_capabilities(
        self, capabilities: FirewallCapabilities | Mapping[str, Any]
    ) -> FirewallCapabilities:
        if isinstance(capabilities, FirewallCapabilities):
            return capabilities
        try:
            return FirewallCapabilities.from_mapping(capabilities)
        except ValidationError as exc:
            raise SanitizerConfigurationError(
                agent_id=self._agent_id,
                message="Invalid firewall capabilities",
                details={"errors": exc.errors(include_input=False)},
            ) from exc


async def run_firewall(
    prompt: str,
    capabilities: FirewallCapabilities | Mapping[str, Any],
    *,
    firewall: AIFirewall | None = None,
) -> str:
    """Gate ``prompt`` and return what the privileged agent may see.

    Raises:
        BlockedRequestError: The prompt asks for private key material.
        SanitizerConfigurationError: No usable credential for the model.
        SanitizerProviderError: The sanitizer call failed or returned nothing.
    """

    return await (firewall or AIFirewall()).run(prompt, capabilities)


__all__ = ["AIFirewall", "run_firewall"]
