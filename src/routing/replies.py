"""Reply types shared by handlers, the router, and the response assembler.

A handler returns either plain text or a `StructuredReply`; the assembler folds both into one
`ReplyEnvelope`.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from src.intent.schema import Intent

PlainReply = str


class StructuredReply(BaseModel):
    """A handler result carrying a machine-readable payload next to its display text.

    Handler-specific keys (`items`, `property`, ...) are kept as extra fields.
    """

    model_config = ConfigDict(extra="allow")

    type: str = Field(min_length=1)
    message: str = ""

    @field_validator("type", mode="before")
    @classmethod
    def coerce_type(cls, value: Any) -> Any:
        return value if value is None or isinstance(value, str) else str(value)

    @field_validator("message", mode="before")
    @classmethod
    def coerce_message(cls, value: Any) -> str:
        return "" if value is None else str(value)


HandlerResult = PlainReply | StructuredReply


class ReplyEnvelope(BaseModel):
    """Terminal output of the pipeline for one message."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    reply_text: str
    extracted: Intent
    structured: StructuredReply | None = None

    def to_payload(self) -> dict[str, Any]:
        """JSON body for transports: `reply`, `extracted`, and `structured` only when present."""

        payload: dict[str, Any] = {
            "reply": self.reply_text,
            "extracted": self.extracted.to_payload(),
        }
        if self.structured is not None:
            payload["structured"] = self.structured.model_dump(mode="json")
        return payload
