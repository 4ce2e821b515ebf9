"""chainagent - prompt firewall for LLM agents with custodial signing authority.

Every natural-language prompt passes a deterministic private-key request
detector and an LLM sanitizer before it can reach the tool-dispatch agent
that moves funds on an EVM-compatible chain.
"""

__version__ = "0.1.0"
