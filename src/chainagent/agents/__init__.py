"""Agent facades built on the AI firewall."""

from chainagent.agents.chain_agent import AgentConfig, AgentExecutorProtocol, ChainAgent


__all__ = ["AgentConfig", "AgentExecutorProtocol", "ChainAgent"]
