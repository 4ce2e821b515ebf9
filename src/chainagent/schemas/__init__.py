"""Pydantic schemas shared by the firewall stages.

Contains:
- AgentFailure, ErrorCodes
- GuardVerdict
- FirewallCapabilities, ProviderCredential, SanitizerRequest
- AgentReply
"""

from chainagent.schemas.agent import AgentReply
from chainagent.schemas.base import AgentFailure, ErrorCodes
from chainagent.schemas.firewall import (
    FirewallCapabilities,
    GuardVerdict,
    ProviderCredential,
    SanitizerRequest,
)


__all__ = [
    # Base
    "AgentFailure",
    "ErrorCodes",
    # Firewall
    "GuardVerdict",
    "FirewallCapabilities",
    "ProviderCredential",
    "SanitizerRequest",
    # Agent
    "AgentReply",
]
