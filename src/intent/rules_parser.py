"""Rules-based intent extractor (used when no remote inference is configured).

The extractor is a fixed, ordered table of `(predicate, constructor)` rules evaluated on the
normalized message; the first rule whose predicate matches builds the Intent. It is deterministic,
holds no state, and never raises: any internal failure resolves to the `other` default.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass

from src.intent.dictionaries import GREETING_RE, POOL_RE, PRICE_RE, UNIT_RE, WIFI_RE
from src.intent.normalize import normalize_text
from src.intent.schema import DatasetIntentType, Intent, IntentKind

logger = logging.getLogger(__name__)

Predicate = Callable[[str], re.Match[str] | None]
Constructor = Callable[[str, str, re.Match[str]], Intent]


@dataclass(frozen=True)
class Rule:
    """One heuristic: `predicate(normalized)` gates `build(message, normalized, match)`."""

    name: str
    predicate: Predicate
    build: Constructor


def _build_pool(message: str, _text: str, _match: re.Match[str]) -> Intent:
    return Intent(
        intent=IntentKind.dataset_query,
        information_to_find="properties with pool",
        dataset_intent_type=DatasetIntentType.properties_with_pool,
        input_message=message,
    )


def _build_wifi(message: str, text: str, _match: re.Match[str]) -> Intent:
    unit = UNIT_RE.search(text)
    if unit is not None:
        return Intent(
            intent=IntentKind.property_query,
            property_name=f"Unit {unit.group('number')}",
            information_to_find="wifi",
            input_message=message,
        )
    return Intent(
        intent=IntentKind.dataset_query,
        information_to_find="wifi",
        dataset_intent_type=DatasetIntentType.properties_with_wifi_speed_above,
        input_message=message,
    )


def _build_greeting(message: str, _text: str, _match: re.Match[str]) -> Intent:
    return Intent(intent=IntentKind.greeting, input_message=message)


def _build_price(message: str, _text: str, match: re.Match[str]) -> Intent:
    amount = match.group("amount")
    return Intent(
        intent=IntentKind.dataset_query,
        information_to_find=f"properties above ${amount}",
        dataset_intent_type=DatasetIntentType.properties_above_price,
        dataset_value=amount,
        input_message=message,
    )


# Order is the tie-break: a message matching several rules is classified by the earliest one.
RULES: tuple[Rule, ...] = (
    Rule(name="pool", predicate=POOL_RE.search, build=_build_pool),
    Rule(name="wifi", predicate=WIFI_RE.search, build=_build_wifi),
    Rule(name="greeting", predicate=GREETING_RE.search, build=_build_greeting),
    Rule(name="price", predicate=PRICE_RE.search, build=_build_price),
)


def parse_intent(message: str) -> Intent:
    """Classify a message with the ordered heuristics.

    Never raises; an inconclusive or failing match yields `Intent.other_default(message)`.
    """

    message = "" if message is None else str(message)

    try:
        normalized = normalize_text(message)
        for rule in RULES:
            match = rule.predicate(normalized)
            if match:
                return rule.build(message, normalized, match)
    except Exception:  # noqa: BLE001 - the fallback path must always yield a usable intent
        logger.warning("rules extractor failed; defaulting to other", exc_info=True)

    return Intent.other_default(message)
