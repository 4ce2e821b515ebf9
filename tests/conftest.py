"""Pytest configuration and shared fixtures.

This module provides fixtures for:
- Firewall capabilities for each provider
- Stub LLM transport and sanitizer
- Test settings
"""

from __future__ import annotations

import pytest

from chainagent.config import FirewallSettings
from chainagent.schemas import FirewallCapabilities
from tests.mocks.mock_llm import EchoSanitizer, MockExecutor, MockLLMFactory


@pytest.fixture
def test_settings() -> FirewallSettings:
    """Settings built from explicit values, independent of the environment."""

    return FirewallSettings(
        sanitizer_temperature=0.0,
        sanitizer_max_tokens=256,
        sanitizer_timeout_seconds=5.0,
        connect_timeout_seconds=2.0,
        default_model="gpt-4o-mini",
        openai_api_key="",
        anthropic_api_key="",
        _env_file=None,
    )


@pytest.fixture
def openai_capabilities() -> FirewallCapabilities:
    return FirewallCapabilities(model="gpt-4o-mini", openai_api_key="sk-test-openai")


@pytest.fixture
def anthropic_capabilities() -> FirewallCapabilities:
    return FirewallCapabilities(
        model="claude-3-5-sonnet-latest", anthropic_api_key="sk-ant-test"
    )


@pytest.fixture
def mock_llm_factory() -> MockLLMFactory:
    return MockLLMFactory()


@pytest.fixture
def echo_sanitizer() -> EchoSanitizer:
    return EchoSanitizer()


@pytest.fixture
def mock_executor() -> MockExecutor:
    return MockExecutor()
