"""General replies for greetings and everything the property handlers don't cover."""

from __future__ import annotations

import asyncio

from src.intent.dictionaries import GREETING_RE
from src.intent.normalize import normalize_text
from src.llm.client import LLMConfig, chat_completion

GREETING_REPLY = (
    "Hi! I can answer questions about a specific property (WiFi, check-in, parking, ...) "
    "or search across all properties (pools, prices, areas, owners). How can I help?"
)
HELP_REPLY = (
    "I can help with questions about our properties, for example "
    "\"What's the WiFi at Unit 5?\" or \"Which properties have a pool?\""
)

_SYSTEM_PROMPT = (
    "You are a friendly assistant for a vacation-rental property company. "
    "Answer briefly (at most two sentences). If the guest asks about properties, "
    "suggest asking about a specific unit or about amenities across all properties."
)


async def generate_general_reply(message: str, *, llm_config: LLMConfig | None = None) -> str:
    """Reply to a greeting or an out-of-scope message.

    With remote inference configured the model writes the reply; transport errors propagate.
    Without it (or when the model returns no content) a canned reply is used.
    """

    if llm_config is not None:
        content = await asyncio.to_thread(
            chat_completion,
            [
                {"role": "system", "content": _SYSTEM_PROMPT},
                {"role": "user", "content": message},
            ],
            config=llm_config,
            temperature=0.7,
        )
        if content and content.strip():
            return content.strip()

    if GREETING_RE.search(normalize_text(message)):
        return GREETING_REPLY
    return HELP_REPLY
