"""Private key request detector - stage 1 of the prompt firewall.

Deterministic, zero-network classifier for prompts that try to make the
agent reveal or export the secret material it signs with. It runs before any
LLM budget is spent, so a positive match rejects the prompt outright.

The rule table is data: callers extend it by passing ``extra_rules`` (or a
whole replacement ``rules`` tuple) to ``PrivateKeyRequestDetector`` and
handing that detector to the gate.
"""

from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass
from typing import TYPE_CHECKING

from chainagent.schemas import GuardVerdict


if TYPE_CHECKING:
    from collections.abc import Iterable
    from re import Pattern


_SEP = r"[\s_\-]*"

# Terms naming the secret material itself.
SECRET_TERM = (
    r"\b(?:"
    rf"private{_SEP}keys?"
    rf"|secret{_SEP}(?:keys?|phrases?|words?)"
    rf"|(?:seed|recovery|backup|wallet){_SEP}(?:phrases?|words?)"
    r"|mnemonics?"
    r"|key\s*stores?"
    rf"|wallet{_SEP}(?:keys?|seeds?|secrets?)"
    rf"|signing{_SEP}keys?"
    r")"
)

_DISCLOSURE_VERBS = (
    r"(?:show|give|tell|reveal|print|display|export|share|send|output|dump|leak"
    r"|expose|provide|disclose|return|repeat|write|spell|read|list|paste|copy"
    r"|post|email|type|echo|recite|hand\s+over|let\s+me\s+(?:see|know|have))"
)

_ZERO_WIDTH = dict.fromkeys(map(ord, "\u200b\u200c\u200d\u2060\ufeff\u00ad"))
_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True, slots=True)
class PatternRule:
    """One named phrase pattern in the detector's rule table."""

    name: str
    pattern: Pattern[str]
    description: str

    @classmethod
    def compile(cls, name: str, regex: str, description: str) -> PatternRule:
        """Compile ``regex`` case-insensitively into a rule."""

        return cls(name=name, pattern=re.compile(regex, re.IGNORECASE), description=description)


DEFAULT_RULES: tuple[PatternRule, ...] = (
    PatternRule.compile(
        "direct_request",
        rf"\b{_DISCLOSURE_VERBS}\b[^.?!\n]{{0,40}}?{SECRET_TERM}",
        "Imperative asking the agent to disclose secret material",
    ),
    PatternRule.compile(
        "interrogative",
        rf"\b(?:what|what's|whats|where|where's|which)\b[^.?!\n]{{0,30}}?{SECRET_TERM}",
        "Question about the value or location of secret material",
    ),
    PatternRule.compile(
        "possessive_reference",
        rf"\b(?:your|ur|yer|its|the\s+agent'?s|agent'?s|the\s+bot'?s)\s+(?:own\s+)?"
        rf"(?:\w+\s+)?{SECRET_TERM}",
        "Reference to the agent's own secret material",
    ),
    PatternRule.compile(
        "wallet_export",
        r"\b(?:export|dump|extract|back\s*up|backup|exfiltrate)\s+"
        r"(?:your\s+|the\s+|my\s+|this\s+|agent'?s?\s+)?(?:own\s+)?"
        r"(?:wallet|keys?|account|credentials?)\b",
        "Request to export the wallet or its keys",
    ),
    PatternRule.compile(
        "mnemonic_mention",
        r"\bmnemonics?\b",
        "Any mention of mnemonic wording",
    ),
)


def normalize_prompt(prompt: str) -> str:
    """Fold compatibility characters, drop zero-width joiners, collapse spaces."""

    folded = unicodedata.normalize("NFKC", prompt).translate(_ZERO_WIDTH)
    folded = folded.replace("\u2019", "'")
    return _WHITESPACE.sub(" ", folded).strip()


class PrivateKeyRequestDetector:
    """Regex rule table matched against every inbound prompt."""

    def __init__(
        self,
        *,
        rules: Iterable[PatternRule] = DEFAULT_RULES,
        extra_rules: Iterable[PatternRule] = (),
    ) -> None:
        self._rules: tuple[PatternRule, ...] = (*tuple(rules), *tuple(extra_rules))

    @property
    def rules(self) -> tuple[PatternRule, ...]:
        return self._rules

    def inspect(self, prompt: str) -> GuardVerdict:
        """Return the verdict for ``prompt``; the first matching rule wins."""

        content = normalize_prompt(prompt)
        for rule in self._rules:
            match = rule.pattern.search(content)
            if match:
                return GuardVerdict(
                    blocked=True,
                    reason=f"{rule.description}: '{match.group(0)}'",
                    rule=rule.name,
                )
        return GuardVerdict(blocked=False)

    def is_blocked(self, prompt: str) -> bool:
        return self.inspect(prompt).blocked


_DEFAULT_DETECTOR = PrivateKeyRequestDetector()


def detect_private_key_request(prompt: str) -> bool:
    """Return True when ``prompt`` asks for private key material."""

    return _DEFAULT_DETECTOR.is_blocked(prompt)


__all__ = [
    "DEFAULT_RULES",
    "PatternRule",
    "PrivateKeyRequestDetector",
    "detect_private_key_request",
    "normalize_prompt",
]
