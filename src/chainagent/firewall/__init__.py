"""AI firewall - "The Shield" in front of the signing agent.

Stage 1 refuses prompts that ask for private key material; stage 2 has an
LLM strip prompt-injection and jailbreak wrappers. Only the sanitized prompt
is ever handed on.
"""

from chainagent.firewall.gate import AIFirewall, run_firewall
from chainagent.firewall.patterns import (
    DEFAULT_RULES,
    PatternRule,
    PrivateKeyRequestDetector,
    detect_private_key_request,
)
from chainagent.firewall.sanitizer import NO_ACTIONABLE_REQUEST, LLMSanitizer


__all__ = [
    "AIFirewall",
    "DEFAULT_RULES",
    "LLMSanitizer",
    "NO_ACTIONABLE_REQUEST",
    "PatternRule",
    "PrivateKeyRequestDetector",
    "detect_private_key_request",
    "run_firewall",
]
