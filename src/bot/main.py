"""Telegram bot entrypoint (long polling)."""

from __future__ import annotations

import asyncio
import logging

from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties

from src.app import App, create_app
from src.bot.router import build_router
from src.config.logging import configure_logging
from src.config.settings import load_settings

logger = logging.getLogger(__name__)


async def on_startup(app: App) -> None:
    await app.pool.open(wait=True)
    logger.info("bot started remote_inference=%s", app.llm_config is not None)


async def on_shutdown(app: App) -> None:
    logger.info("shutting down")
    await app.pool.close()


def build_dispatcher(app: App) -> Dispatcher:
    """Dispatcher with the chat router; `app` is injected into handlers and lifecycle hooks."""

    dp = Dispatcher(app=app)
    dp.include_router(build_router())
    dp.startup.register(on_startup)
    dp.shutdown.register(on_shutdown)
    return dp


async def main() -> None:
    """Run the Telegram bot polling loop."""

    settings = load_settings()
    configure_logging(settings.log_level)

    if not settings.telegram_bot_token:
        raise RuntimeError("TELEGRAM_BOT_TOKEN is required to run the bot")

    # Replies are plain text; model-written answers must not be parsed as HTML/Markdown.
    bot = Bot(token=settings.telegram_bot_token, default=DefaultBotProperties(parse_mode=None))
    await build_dispatcher(create_app(settings)).start_polling(bot)


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
