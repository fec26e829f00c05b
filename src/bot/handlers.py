"""aiogram message handlers.

Contract: every incoming message produces exactly one text reply. Empty messages and commands get a
usage hint; any internal error gets a generic apology and is logged internally.
"""

from __future__ import annotations

import logging

from aiogram.types import Message

from src.app import App
from src.handlers.general import HELP_REPLY
from src.pipeline import GENERIC_ERROR_REPLY, process_message

logger = logging.getLogger(__name__)


def _is_command_text(text: str) -> bool:
    return text.lstrip().startswith("/")


async def handle_help(message: Message) -> None:
    await message.answer(HELP_REPLY)


async def handle_message(message: Message, app: App) -> None:
    """Handle any incoming Telegram message and reply with the pipeline's reply text."""

    raw_text = message.text or message.caption or ""
    if not raw_text.strip() or _is_command_text(raw_text):
        await message.answer(HELP_REPLY)
        return

    # noinspection PyBroadException
    try:
        envelope = await process_message(raw_text, app)
        reply = envelope.reply_text or HELP_REPLY
    except Exception:
        # Handler boundary: never leak details to the chat.
        logger.exception("handler failed")
        reply = GENERIC_ERROR_REPLY

    await message.answer(reply)
