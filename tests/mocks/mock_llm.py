"""Mock LLM transport and executor for testing.

Provides deterministic sanitizer responses without making API calls.
"""

from __future__ import annotations

import re
from typing import Any

from chainagent.schemas import AgentFailure, ProviderCredential


BENIGN_PROMPT = "Send 0.1 CBTC to 0x742d35Cc6b8C9532E78c12A5C3295c2d6F1A8F3e"

_USER_PROMPT = re.compile(r"<user_prompt>\n(?P<body>.*)\n</user_prompt>", re.DOTALL)


class MockLLMService:
    """Stand-in for ``LLMService`` that echoes the fenced user prompt.

    Pass ``response`` to return a fixed string (or AgentFailure) instead.
    """

    def __init__(self, response: str | AgentFailure | None = None) -> None:
        self.response = response
        self.call_history: list[dict[str, Any]] = []

    async def generate(self, prompt: str, system: str | None = None) -> str | AgentFailure:
        self.call_history.append({"prompt": prompt, "system": system})
        if self.response is not None:
            return self.response
        match = _USER_PROMPT.search(prompt)
        return match.group("body") if match else prompt


class MockLLMFactory:
    """Records every client the sanitizer builds; counts as network calls."""

    def __init__(self, service: MockLLMService | None = None) -> None:
        self.service = service or MockLLMService()
        self.credentials: list[ProviderCredential] = []
        self.options: list[dict[str, Any]] = []

    def __call__(self, credential: ProviderCredential, **kwargs: Any) -> MockLLMService:
        self.credentials.append(credential)
        self.options.append(kwargs)
        return self.service

    @property
    def call_count(self) -> int:
        return len(self.service.call_history)


class EchoSanitizer:
    """Sanitizer stub returning its input unchanged."""

    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.requests: list[Any] = []

    async def sanitize(self, request: Any) -> str:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return request.prompt


class MockExecutor:
    """Downstream agent stub with a LangChain-style ``ainvoke``."""

    def __init__(self, output: Any = None) -> None:
        self.output = output if output is not None else {"output": "ok"}
        self.calls: list[tuple[dict[str, Any], dict[str, Any]]] = []

    async def ainvoke(self, input: dict[str, Any], config: dict[str, Any]) -> Any:
        self.calls.append((input, config))
        return self.output
