"""LLM provider client - one sanitizer round-trip to OpenAI or Anthropic.

This module provides a small async interface for the sanitizer stage with:
- Provider abstraction (OpenAI/Anthropic) selected by the resolved credential
- A single attempt per call; the firewall never retries
- An overall deadline so a stalled provider cannot hang the gate
- Error handling with AgentFailure conversion
- Token usage logging for cost analysis
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, cast

import anthropic
import httpx
import openai
from anthropic import AsyncAnthropic
from openai import AsyncOpenAI

from chainagent.schemas import AgentFailure, ErrorCodes, ProviderCredential


logger = logging.getLogger(__name__)

_AGENT_ID = "llm_service"


class LLMService:
    """Async client bound to one caller-supplied provider credential.

    Instances are cheap and meant to live for a single firewall invocation;
    nothing is cached across callers and the client is closed after each
    ``generate`` call. All provider errors are converted to
    AgentFailure objects with appropriate error codes.
    """

    def __init__(
        self,
        credential: ProviderCredential,
        *,
        timeout_seconds: float = 30.0,
        connect_timeout_seconds: float = 10.0,
        temperature: float = 0.0,
        max_tokens: int = 1024,
    ) -> None:
        self._credential = credential
        self._provider = credential.provider
        self._model = credential.model
        self._timeout = timeout_seconds
        self._connect_timeout = min(connect_timeout_seconds, timeout_seconds)
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._client: AsyncOpenAI | AsyncAnthropic | None = None

    @property
    def provider(self) -> str:
        return self._provider

    @property
    def model(self) -> str:
        return self._model

    def _get_client(self) -> AsyncOpenAI | AsyncAnthropic:
        """Get or create the provider client."""
        if self._client is not None:
            return self._client

        api_key = self._credential.api_key.get_secret_value()
        timeout = httpx.Timeout(self._timeout, connect=self._connect_timeout)
        if self._provider == "openai":
            self._client = AsyncOpenAI(api_key=api_key, timeout=timeout, max_retries=0)
        else:
            self._client = AsyncAnthropic(
                api_key=api_key, timeout=timeout, max_retries=0
            )
        return self._client

    async def generate(self, prompt: str, system: str | None = None) -> str | AgentFailure:
        """Send one prompt to the configured model.

        Args:
            prompt: User message text
            system: Optional system prompt (instructions for the model)

        Returns:
            The model's text, or AgentFailure on any error. A response that
            carries no text payload at all is reported as malformed.
        """
        try:
            return await self._attempt(prompt, system)
        finally:
            await self.close()

    async def close(self) -> None:
        """Release the provider client and its connection pool."""
        client, self._client = self._client, None
        if client is not None:
            await client.close()

    async def _attempt(self, prompt: str, system: str | None) -> str | AgentFailure:
        async def _call() -> str | None:
            if self._provider == "openai":
                return await self._generate_openai(prompt, system)
            return await self._generate_anthropic(prompt, system)

        try:
            content = await asyncio.wait_for(_call(), timeout=self._timeout)
        except (
            asyncio.TimeoutError,
            httpx.TimeoutException,
            openai.APITimeoutError,
            anthropic.APITimeoutError,
        ) as exc:
            logger.error(
                "LLM request timeout",
                extra={
                    "agent_id": _AGENT_ID,
                    "provider": self._provider,
                    "timeout_seconds": self._timeout,
                },
            )
            return AgentFailure(
                agent_id=_AGENT_ID,
                error_code=ErrorCodes.TIMEOUT,
                message=f"LLM request timed out after {self._timeout}s",
                recoverable=True,
                details={"provider": self._provider, "error": type(exc).__name__},
            )
        except httpx.HTTPStatusError as exc:
            return self._handle_status_error(exc.response.status_code, exc.response.text)
        except (openai.APIStatusError, anthropic.APIStatusError) as exc:
            return self._handle_status_error(exc.status_code, str(exc))
        except (
            httpx.TransportError,
            openai.APIConnectionError,
            anthropic.APIConnectionError,
        ) as exc:
            logger.error(
                "LLM connection failed",
                extra={"agent_id": _AGENT_ID, "provider": self._provider},
            )
            return AgentFailure(
                agent_id=_AGENT_ID,
                error_code=ErrorCodes.PROVIDER_NETWORK,
                message=f"Could not reach {self._provider}: {type(exc).__name__}",
                recoverable=True,
                details={"provider": self._provider},
            )
        except Exception as exc:
            logger.exception(
                "Unexpected LLM error",
                extra={"agent_id": _AGENT_ID, "provider": self._provider},
            )
            return AgentFailure(
                agent_id=_AGENT_ID,
                error_code=ErrorCodes.PROVIDER_UNEXPECTED,
                message=f"Unexpected LLM error: {type(exc).__name__}",
                recoverable=False,
                details={"provider": self._provider, "error": str(exc)},
            )

        if content is None:
            return AgentFailure(
                agent_id=_AGENT_ID,
                error_code=ErrorCodes.PROVIDER_MALFORMED,
                message=f"{self._provider} returned a response without text content",
                recoverable=False,
                details={"provider": self._provider, "model": self._model},
            )
        return content

    async def count_tokens(self, text: str) -> int:
        """Estimate token count for text (~4 characters per token)."""
        return max(1, len(text) // 4)

    async def _generate_openai(self, prompt: str, system: str | None) -> str | None:
        """Generate text using OpenAI API."""
        client = cast(AsyncOpenAI, self._get_client())

        messages: list[dict[str, str]] = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        logger.info(
            "OpenAI API call",
            extra={
                "agent_id": _AGENT_ID,
                "model": self._model,
                "max_tokens": self._max_tokens,
                "input_tokens_est": await self.count_tokens(prompt),
            },
        )

        response = await client.chat.completions.create(
            model=self._model,
            messages=messages,  # type: ignore[arg-type]
            temperature=self._temperature,
            max_tokens=self._max_tokens,
        )

        if not response.choices:
            return None

        if response.usage:
            logger.info(
                "OpenAI token usage",
                extra={
                    "agent_id": _AGENT_ID,
                    "input_tokens": response.usage.prompt_tokens,
                    "output_tokens": response.usage.completion_tokens,
                    "total_tokens": response.usage.total_tokens,
                },
            )

        return response.choices[0].message.content

    async def _generate_anthropic(self, prompt: str, system: str | None) -> str | None:
        """Generate text using Anthropic API."""
        client = cast(AsyncAnthropic, self._get_client())

        logger.info(
            "Anthropic API call",
            extra={
                "agent_id": _AGENT_ID,
                "model": self._model,
                "max_tokens": self._max_tokens,
                "input_tokens_est": await self.count_tokens(prompt),
            },
        )

        kwargs: dict[str, Any] = {
            "model": self._model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": self._temperature,
            "max_tokens": self._max_tokens,
        }
        if system:
            kwargs["system"] = system

        response = await client.messages.create(**kwargs)

        texts = [block.text for block in response.content if block.type == "text"]

        logger.info(
            "Anthropic token usage",
            extra={
                "agent_id": _AGENT_ID,
                "input_tokens": response.usage.input_tokens,
                "output_tokens": response.usage.output_tokens,
            },
        )

        if not texts:
            return None
        return "".join(texts)

    def _handle_status_error(self, status: int, body: str) -> AgentFailure:
        """Convert HTTP status failures to AgentFailure objects."""

        if status in (401, 403):
            logger.error(
                "LLM authentication failed",
                extra={
                    "agent_id": _AGENT_ID,
                    "provider": self._provider,
                    "status_code": status,
                },
            )
            return AgentFailure(
                agent_id=_AGENT_ID,
                error_code=ErrorCodes.PROVIDER_AUTH,
                message="Invalid LLM API key or insufficient permissions",
                recoverable=False,
                details={"provider": self._provider, "status_code": status},
            )

        if status == 429 or 500 <= status < 600:
            logger.error(
                "LLM provider unavailable",
                extra={
                    "agent_id": _AGENT_ID,
                    "provider": self._provider,
                    "status_code": status,
                },
            )
            return AgentFailure(
                agent_id=_AGENT_ID,
                error_code=ErrorCodes.PROVIDER_UNAVAILABLE,
                message=f"LLM provider unavailable: {status}",
                recoverable=True,
                details={"provider": self._provider, "status_code": status},
            )

        return AgentFailure(
            agent_id=_AGENT_ID,
            error_code=ErrorCodes.PROVIDER_REQUEST,
            message=f"LLM client error: {status}",
            recoverable=False,
            details={
                "provider": self._provider,
                "status_code": status,
                "response": body[:500],
            },
        )


__all__ = ["LLMService"]
