"""Process-wide logging setup for the HTTP service, the Telegram bot and the DB CLIs."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

# Per-update and per-request access lines; our own `handled ...` record already covers them.
_NOISY_LOGGERS = ("aiogram.event", "uvicorn.access")


def configure_logging(level: str = "INFO") -> None:
    """Install the root handler for this process.

    Records carry intent metadata and latencies for operators. They are never echoed back to
    chat users, and neither API keys nor reply bodies are logged.
    """

    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
