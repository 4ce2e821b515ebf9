"""ChainAgent schemas."""

from typing import Any

from pydantic import BaseModel


class AgentReply(BaseModel):
    """Result of one gated ``ChainAgent.execute`` call."""

    sanitized_prompt: str
    actionable: bool
    output: Any = None
