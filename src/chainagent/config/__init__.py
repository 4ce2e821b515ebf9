"""Configuration management using pydantic-settings."""

from chainagent.config.models import MODEL_PROVIDERS, resolve_provider
from chainagent.config.settings import FirewallSettings, get_settings

__all__ = ["FirewallSettings", "MODEL_PROVIDERS", "get_settings", "resolve_provider"]
