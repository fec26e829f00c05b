"""Async Postgres connection pool shared by the HTTP service and the bot.

Chat handlers only ever read the property dataset, so every pooled session is switched to
read-only mode and given a statement timeout when the connection is created.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from functools import partial
from typing import AsyncIterator

from psycopg import AsyncConnection
from psycopg_pool import AsyncConnectionPool

DEFAULT_STATEMENT_TIMEOUT_MS = 5000


async def configure_session(conn: AsyncConnection, *, statement_timeout_ms: int) -> None:
    """Make a fresh pooled connection read-only and bound its statement runtime."""

    await conn.execute("SET default_transaction_read_only = on", prepare=False)
    await conn.execute(
        "SELECT set_config('statement_timeout', %s, false)",
        (f"{statement_timeout_ms}ms",),
        prepare=False,
    )


def create_pool(
        database_url: str,
        *,
        max_size: int = 10,
        statement_timeout_ms: int = DEFAULT_STATEMENT_TIMEOUT_MS,
        timeout: float = 30.0,
) -> AsyncConnectionPool:
    """Create the handlers' pool.

    The pool is created closed (`open=False`); transports call `await pool.open()` on startup.
    Connections run in autocommit mode, so each lookup is its own read-only transaction.
    """

    return AsyncConnectionPool(
        conninfo=database_url,
        min_size=1,
        max_size=max_size,
        timeout=timeout,
        open=False,
        kwargs={"autocommit": True},
        configure=partial(configure_session, statement_timeout_ms=statement_timeout_ms),
    )


@asynccontextmanager
async def get_conn(pool: AsyncConnectionPool) -> AsyncIterator[AsyncConnection]:
    """Borrow a connection for the duration of one handler query."""

    async with pool.connection() as conn:
        yield conn
