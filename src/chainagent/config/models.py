"""Model identifier registry used to pick the sanitizer's provider."""

from __future__ import annotations

from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from chainagent.schemas.base import ProviderName


MODEL_PROVIDERS: dict[str, ProviderName] = {
    "gpt-4o": "openai",
    "gpt-4o-mini": "openai",
    "gpt-4-turbo": "openai",
    "gpt-4.1": "openai",
    "gpt-4.1-mini": "openai",
    "gpt-3.5-turbo": "openai",
    "o1": "openai",
    "o1-mini": "openai",
    "o3-mini": "openai",
    "claude-3-5-sonnet-latest": "anthropic",
    "claude-3-5-haiku-latest": "anthropic",
    "claude-3-7-sonnet-latest": "anthropic",
    "claude-3-opus-latest": "anthropic",
    "claude-sonnet-4-0": "anthropic",
    "claude-opus-4-0": "anthropic",
}

# Dated snapshots ("gpt-4o-2024-08-06", "claude-3-5-sonnet-20241022") fall back here.
_PREFIX_PROVIDERS: tuple[tuple[str, ProviderName], ...] = (
    ("gpt-", "openai"),
    ("o1-", "openai"),
    ("o3-", "openai"),
    ("o4-", "openai"),
    ("claude-", "anthropic"),
)


def resolve_provider(model: str) -> ProviderName | None:
    """Return the provider serving ``model`` or None when it is unknown."""

    normalized = model.strip().lower()
    if normalized in MODEL_PROVIDERS:
        return MODEL_PROVIDERS[normalized]
    for prefix, provider in _PREFIX_PROVIDERS:
        if normalized.startswith(prefix):
            return provider
    return None


__all__ = ["MODEL_PROVIDERS", "resolve_provider"]
