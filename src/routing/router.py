"""Query router: pure selection of the downstream handler for a classified intent."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from src.intent.schema import Intent, IntentKind

IntentHandler = Callable[[Intent], Awaitable[Any]]
MessageHandler = Callable[[str], Awaitable[Any]]


@dataclass(frozen=True)
class QueryHandlers:
    """The three downstream collaborators the router can dispatch to."""

    property_query: IntentHandler
    dataset_query: IntentHandler
    general_reply: MessageHandler


async def route(intent: Intent, handlers: QueryHandlers) -> Any:
    """Dispatch an enriched intent and return the handler's raw result.

    `property_query` and `dataset_query` receive the full record; everything else (greetings,
    `other`, unknown kinds) goes to the general reply generator with the raw message only.
    Dataset types are not inspected here.
    """

    if intent.intent == IntentKind.property_query:
        return await handlers.property_query(intent)
    if intent.intent == IntentKind.dataset_query:
        return await handlers.dataset_query(intent)
    return await handlers.general_reply(intent.input_message)
