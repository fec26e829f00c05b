"""Bot router composition."""

from __future__ import annotations

from aiogram import Router
from aiogram.filters import Command

from src.bot.handlers import handle_help, handle_message


def build_router() -> Router:
    """`/start` and `/help` get the usage hint; every other message goes through the pipeline."""

    router = Router(name="chat")
    router.message.register(handle_help, Command("start", "help"))
    router.message.register(handle_message)
    return router
