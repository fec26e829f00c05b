"""Application composition root.

This module wires together configuration, the DB pool, the optional LLM config, the UI button cache
and the downstream query handlers shared by the HTTP service and the Telegram bot.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import partial

from psycopg_pool import AsyncConnectionPool

from src.config.settings import Settings
from src.db.pool import create_pool
from src.handlers.dataset import handle_dataset_query
from src.handlers.general import generate_general_reply
from src.handlers.property import handle_property_query
from src.llm.client import LLMConfig, llm_config_from_settings
from src.routing.router import QueryHandlers
from src.ui.buttons import ButtonCache


@dataclass(frozen=True)
class App:
    """Shared application dependencies for transports."""

    settings: Settings
    pool: AsyncConnectionPool
    llm_config: LLMConfig | None
    handlers: QueryHandlers
    button_cache: ButtonCache


def build_handlers(pool: AsyncConnectionPool, llm_config: LLMConfig | None) -> QueryHandlers:
    """Bind the downstream handlers to their resources."""

    return QueryHandlers(
        property_query=partial(handle_property_query, pool=pool),
        dataset_query=partial(handle_dataset_query, pool=pool),
        general_reply=partial(generate_general_reply, llm_config=llm_config),
    )


def create_app(settings: Settings) -> App:
    """Create the application container.

    Note:
        The returned DB pool is not opened. Call `await app.pool.open()` at startup.
    """

    pool = create_pool(
        settings.database_url,
        statement_timeout_ms=settings.db_statement_timeout_ms,
    )
    llm_config = llm_config_from_settings(settings)
    return App(
        settings=settings,
        pool=pool,
        llm_config=llm_config,
        handlers=build_handlers(pool, llm_config),
        button_cache=ButtonCache(ttl_s=settings.ui_cache_ttl_s),
    )
