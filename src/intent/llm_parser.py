"""LLM-based intent extractor (schema-constrained remote extraction).

The model is asked for a single JSON object in the Intent shape, with deterministic decoding. The
decoded object is validated by `intent_from_obj`; malformed output degrades to the `other` default.
Transport errors from the inference call propagate.
"""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path

from src.intent.schema import Intent, intent_from_obj
from src.llm.client import LLMConfig, chat_completion

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def load_prompt() -> str:
    prompt_path = Path(__file__).resolve().parent / "prompt_intent_v1.md"
    return prompt_path.read_text(encoding="utf-8").strip()


def _strip_code_fences(text: str) -> str:
    value = (text or "").strip()
    if value.startswith("```"):
        value = value.strip("`")
        # After stripping backticks, try to remove leading "json" marker.
        value = value.removeprefix("json").strip()
    return value


def parse_intent_via_llm(message: str, *, config: LLMConfig) -> Intent:
    """Extract an Intent for `message` via the remote model.

    Raises:
        LLMTransportError: If the inference call fails at the transport level.
    """

    content = chat_completion(
        [
            {"role": "system", "content": load_prompt()},
            {"role": "user", "content": message},
        ],
        config=config,
        temperature=0,
        json_mode=True,
    )
    if content is None:
        return Intent.other_default(message)

    try:
        obj = json.loads(_strip_code_fences(content))
    except json.JSONDecodeError:
        logger.warning("LLM did not return valid JSON; defaulting to other")
        return Intent.other_default(message)

    return intent_from_obj(obj, input_message=message)
