"""ChainAgent - gated entry point for natural-language chain operations.

Every prompt passes the AI firewall before the tool-dispatch executor sees
it. The executor (an LLM agent bound to transfer, balance, deploy and swap
tools) is an external collaborator reached through ``ainvoke``.
"""

from __future__ import annotations

import logging
import secrets
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

from chainagent.firewall import AIFirewall
from chainagent.schemas import AgentReply, FirewallCapabilities


logger = logging.getLogger(__name__)

_RPC_SCHEMES = ("http://", "https://", "ws://", "wss://")


class AgentExecutorProtocol(Protocol):
    async def ainvoke(self, input: dict[str, Any], config: dict[str, Any]) -> Any:
        ...


class AgentConfig(BaseModel):
    """Closed configuration for one ChainAgent."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    private_key: SecretStr
    rpc_url: str
    model: str = "gpt-4o-mini"
    openai_api_key: SecretStr | None = None
    anthropic_api_key: SecretStr | None = None

    @field_validator("private_key")
    @classmethod
    def validate_private_key(cls, v: SecretStr) -> SecretStr:
        if not v.get_secret_value().strip():
            raise ValueError("Private key is required.")
        return v

    @field_validator("rpc_url")
    @classmethod
    def validate_rpc_url(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("RPC URL is required.")
        if not v.lower().startswith(_RPC_SCHEMES):
            raise ValueError(f"Unsupported RPC URL scheme: {v}")
        return v

    def capabilities(self) -> FirewallCapabilities:
        """Sanitizer capabilities; the signing key is never part of them."""

        return FirewallCapabilities(
            model=self.model,
            openai_api_key=self.openai_api_key,
            anthropic_api_key=self.anthropic_api_key,
        )


class ChainAgent:
    """Runs the firewall, then hands the sanitized prompt to the executor."""

    def __init__(
        self,
        config: AgentConfig,
        executor: AgentExecutorProtocol,
        *,
        firewall: AIFirewall | None = None,
        session_id: str | None = None,
    ) -> None:
        self._config = config
        self._executor = executor
        self._firewall = firewall or AIFirewall()
        self._capabilities = config.capabilities()
        self._default_session_id = session_id or f"chainagent-{secrets.token_hex(8)}"

    @property
    def config(self) -> AgentConfig:
        return self._config

    @property
    def default_session_id(self) -> str:
        return self._default_session_id

    async def execute(self, prompt: str, *, session_id: str | None = None) -> AgentReply:
        """Gate ``prompt`` and run it through the executor when actionable.

        Firewall errors propagate unchanged; the executor is never called
        for a blocked or unsanitized prompt.
        """

        sanitized = await self._firewall.run(prompt, self._capabilities)
        if not sanitized:
            logger.info(
                "No actionable request after sanitization",
                extra={"agent_id": "chain_agent"},
            )
            return AgentReply(sanitized_prompt="", actionable=False)

        output = await self._executor.ainvoke(
            {"input": sanitized},
            {"configurable": {"session_id": session_id or self._default_session_id}},
        )
        return AgentReply(sanitized_prompt=sanitized, actionable=True, output=output)


__all__ = ["AgentConfig", "AgentExecutorProtocol", "ChainAgent"]
