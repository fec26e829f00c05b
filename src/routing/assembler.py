"""Response assembler: normalizes any handler result into a `ReplyEnvelope`."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from src.intent.schema import Intent
from src.routing.replies import ReplyEnvelope, StructuredReply


def assemble(raw: Any, extracted: Intent) -> ReplyEnvelope:
    """Fold a handler's return value into the reply envelope.

    - `str`: used verbatim as `replyText`; no `structured`.
    - `StructuredReply`, or a mapping with a truthy `type`: `replyText` is its `message` and the
      whole payload is attached as `structured`.
    - A mapping without `type`: its `message` (if any) becomes the text.
    - `None` / anything else: stringified (`None` -> empty text).
    """

    if isinstance(raw, str):
        return ReplyEnvelope(reply_text=raw, extracted=extracted)

    if isinstance(raw, Mapping) and raw.get("type"):
        raw = StructuredReply.model_validate(dict(raw))

    if isinstance(raw, StructuredReply):
        return ReplyEnvelope(reply_text=raw.message, extracted=extracted, structured=raw)

    if isinstance(raw, Mapping):
        message = raw.get("message")
        return ReplyEnvelope(reply_text="" if message is None else str(message), extracted=extracted)

    return ReplyEnvelope(reply_text="" if raw is None else str(raw), extracted=extracted)
