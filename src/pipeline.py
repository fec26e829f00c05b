"""Message pipeline: classify -> resolve fields -> route -> assemble.

Each message is processed independently; nothing is shared between concurrent requests except
the read-only app container.
"""

from __future__ import annotations

import asyncio
import logging
from time import monotonic
from typing import Protocol

from src.intent.fields import resolve_field_type
from src.intent.parser import classify_with_source
from src.llm.client import LLMConfig
from src.routing.assembler import assemble
from src.routing.replies import ReplyEnvelope
from src.routing.router import QueryHandlers, route

logger = logging.getLogger(__name__)

GENERIC_ERROR_REPLY = "Sorry, something went wrong while handling your message. Please try again."


class PipelineDeps(Protocol):
    llm_config: LLMConfig | None
    handlers: QueryHandlers


async def process_message(text: str, app: PipelineDeps) -> ReplyEnvelope:
    """Turn one guest message into a reply envelope.

    Raises:
        LLMTransportError: If remote classification fails at the transport level.
        Exception: Handler failures (DB, general reply) propagate to the transport boundary.
    """

    started = monotonic()

    # The extractor does blocking network I/O when remote inference is configured.
    parsed = await asyncio.to_thread(classify_with_source, text, llm_config=app.llm_config)

    extracted = parsed.intent
    resolution = resolve_field_type(extracted.information_to_find, extracted.input_message)
    enriched = extracted.enrich(resolution)

    raw = await route(enriched, app.handlers)
    envelope = assemble(raw, enriched)

    latency_ms = int((monotonic() - started) * 1000)
    logger.info(
        "handled source=%s intent=%s dataset_type=%s field_type=%s structured=%s latency_ms=%d",
        parsed.source,
        enriched.intent,
        enriched.dataset_intent_type,
        enriched.field_type,
        envelope.structured is not None,
        latency_ms,
    )
    return envelope
