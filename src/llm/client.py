"""Minimal client for OpenAI-style `/chat/completions` APIs (Groq by default).

Transport failures (non-success status, connection errors) raise `LLMTransportError` and are never
retried here. A success response whose envelope is not the expected shape yields `None` content so
callers can degrade locally.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from src.config.settings import Settings

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "llama-3.1-70b-versatile"
DEFAULT_API_BASE = "https://api.groq.com/openai/v1"


class LLMTransportError(RuntimeError):
    """Raised when the inference service cannot be reached or answers with a non-success status."""


@dataclass(frozen=True)
class LLMConfig:
    """Configuration for the Chat Completions API call."""

    api_key: str
    model: str = DEFAULT_MODEL
    api_base: str = DEFAULT_API_BASE
    timeout_s: float = 30.0


def _chat_completions_url(api_base: str) -> str:
    return api_base.rstrip("/") + "/chat/completions"


def chat_completion(
        messages: list[dict[str, str]],
        *,
        config: LLMConfig,
        temperature: float = 0,
        json_mode: bool = False,
) -> str | None:
    """POST a chat completion and return the first choice's message content.

    Returns `None` when the response body is not a well-formed completion envelope.
    """

    payload: dict[str, Any] = {
        "model": config.model,
        "temperature": temperature,
        "messages": messages,
    }
    if json_mode:
        payload["response_format"] = {"type": "json_object"}

    req = Request(
        _chat_completions_url(config.api_base),
        method="POST",
        headers={
            "Authorization": f"Bearer {config.api_key}",
            "Content-Type": "application/json",
        },
        data=json.dumps(payload).encode(),
    )

    try:
        with urlopen(req, timeout=config.timeout_s) as resp:  # noqa: S310 (configured API base)
            body = resp.read()
    except HTTPError as exc:
        raise LLMTransportError(f"LLM HTTP error: {exc.code}") from exc
    except (URLError, TimeoutError) as exc:
        raise LLMTransportError("LLM connection error") from exc

    try:
        decoded = json.loads(body)
        content = decoded["choices"][0]["message"]["content"]
    except Exception:  # noqa: BLE001
        logger.warning("unexpected LLM response envelope")
        return None

    return content if isinstance(content, str) else None


def llm_config_from_settings(settings: Settings) -> LLMConfig | None:
    """Build the LLM config, or `None` when no API key is configured (remote inference disabled)."""

    if not settings.llm_api_key:
        return None
    return LLMConfig(
        api_key=settings.llm_api_key,
        model=settings.llm_model,
        api_base=settings.llm_api_base,
        timeout_s=settings.llm_timeout_s,
    )
