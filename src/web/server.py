"""FastAPI HTTP transport for the chat pipeline and the UI button list.

Error contract: a missing message is a 400; any pipeline failure is logged and answered with a
generic 500 body without internal details.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.app import App
from src.pipeline import process_message
from src.ui.buttons import UIButton, UIConfigError, fetch_sheet_buttons, get_ui_buttons

logger = logging.getLogger(__name__)

MESSAGE_KEYS = ("message", "inputMessage", "text")


def extract_message(body: Any) -> str:
    """Return the first non-blank message among the accepted body keys (or "")."""

    if not isinstance(body, dict):
        return ""
    for key in MESSAGE_KEYS:
        value = body.get(key)
        if isinstance(value, str) and value.strip():
            return value
    return ""


def create_web_app(app: App) -> FastAPI:
    """Build the FastAPI application around an app container.

    The DB pool is opened on startup and closed on shutdown.
    """

    @asynccontextmanager
    async def lifespan(_web: FastAPI) -> AsyncIterator[None]:
        await app.pool.open(wait=True)
        try:
            yield
        finally:
            logger.info("shutting down")
            await app.pool.close()

    web = FastAPI(title="Property chat router", lifespan=lifespan)
    web.add_middleware(
        CORSMiddleware,
        allow_origins=app.settings.cors_allow_origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    @web.post("/api/chat")
    async def chat(request: Request) -> JSONResponse:
        try:
            body = await request.json()
        except ValueError:
            body = {}

        message = extract_message(body)
        if not message:
            return JSONResponse({"error": "Missing 'message' in request body"}, status_code=400)

        # noinspection PyBroadException
        try:
            envelope = await process_message(message, app)
        except Exception:
            logger.exception("chat pipeline failed")
            return JSONResponse({"error": "Internal server error"}, status_code=500)

        return JSONResponse(envelope.to_payload())

    @web.get("/api/ui-buttons")
    async def ui_buttons() -> JSONResponse:
        settings = app.settings

        def load() -> list[UIButton]:
            return fetch_sheet_buttons(settings.sheets_json_url)

        try:
            items, cached = await asyncio.to_thread(get_ui_buttons, app.button_cache, load)
        except UIConfigError as exc:
            logger.warning("ui buttons unavailable reason=%s", exc)
            return JSONResponse({"error": str(exc)}, status_code=500)

        return JSONResponse({"items": [b.model_dump() for b in items], "cached": cached})

    return web
