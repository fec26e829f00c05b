"""Safe DB query helpers.

These helpers never interpolate user values into SQL; all values are passed via `params`.
DB errors are not swallowed (callers decide how to handle them).
"""

from __future__ import annotations

from typing import Any, LiteralString, cast

from psycopg import AsyncConnection
from psycopg.rows import dict_row


async def fetch_rows(
        conn: AsyncConnection,
        sql: str,
        params: tuple[Any, ...] = (),
) -> list[dict[str, Any]]:
    """Execute a parameterized query and return all rows as column-keyed dicts."""

    async with conn.cursor(row_factory=dict_row) as cur:
        await cur.execute(cast(LiteralString, sql), params)
        return await cur.fetchall()


async def fetch_one(
        conn: AsyncConnection,
        sql: str,
        params: tuple[Any, ...] = (),
) -> dict[str, Any] | None:
    """Execute a parameterized query and return the first row (or `None`)."""

    rows = await fetch_rows(conn, sql, params)
    return rows[0] if rows else None
