"""Intent classifier orchestration (remote extraction when configured; rules otherwise)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from src.intent.llm_parser import parse_intent_via_llm
from src.intent.rules_parser import parse_intent as parse_rules_intent
from src.intent.schema import Intent
from src.llm.client import LLMConfig

ParseSource = Literal["llm", "rules"]


@dataclass(frozen=True)
class ParseResult:
    """Validated intent plus information about which extractor produced it."""

    intent: Intent
    source: ParseSource


def classify_with_source(message: str, *, llm_config: LLMConfig | None) -> ParseResult:
    """Classify a message into an Intent.

    Strategy:
        1) If remote inference is configured, ask the model for strict Intent JSON. Malformed
           output resolves to the `other` default; transport errors propagate (no retry, no
           downgrade to rules).
        2) Otherwise use the deterministic rules extractor, which never raises.
    """

    if llm_config is not None:
        return ParseResult(intent=parse_intent_via_llm(message, config=llm_config), source="llm")
    return ParseResult(intent=parse_rules_intent(message), source="rules")


def classify(message: str, *, llm_config: LLMConfig | None = None) -> Intent:
    """Classify a message into a validated Intent (convenience wrapper)."""

    return classify_with_source(message, llm_config=llm_config).intent
