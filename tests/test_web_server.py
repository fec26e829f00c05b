"""Tests for the HTTP transport (pipeline and sheet access stubbed).

The TestClient is used without its context manager so the lifespan (DB pool) does not run.
"""

from __future__ import annotations

from types import SimpleNamespace
from typing import Any

import pytest
from fastapi.testclient import TestClient

from src.intent.schema import DatasetIntentType, Intent, IntentKind
from src.routing.replies import ReplyEnvelope, StructuredReply
from src.ui.buttons import ButtonCache, UIButton, UIConfigError
from src.web import server
from src.web.server import create_web_app, extract_message


def _make_app(sheets_json_url: str | None = "https://sheets.example/buttons.json") -> Any:
    return SimpleNamespace(
        settings=SimpleNamespace(cors_allow_origins=["*"], sheets_json_url=sheets_json_url),
        pool=None,
        llm_config=None,
        handlers=None,
        button_cache=ButtonCache(ttl_s=600),
    )


def _client(app: Any) -> TestClient:
    return TestClient(create_web_app(app))


def _install_pipeline(monkeypatch: pytest.MonkeyPatch, envelope_for) -> list[str]:
    seen: list[str] = []

    async def _fake_process(text: str, _app: Any) -> ReplyEnvelope:
        seen.append(text)
        return envelope_for(text)

    monkeypatch.setattr(server, "process_message", _fake_process)
    return seen


def _greeting(text: str) -> ReplyEnvelope:
    return ReplyEnvelope(
        reply_text="Hello!",
        extracted=Intent(intent=IntentKind.greeting, input_message=text),
    )


@pytest.mark.parametrize(
    "body,expected",
    [
        ({"message": "hi"}, "hi"),
        ({"inputMessage": "hi"}, "hi"),
        ({"text": "hi"}, "hi"),
        ({"message": "  ", "text": "fallback"}, "fallback"),
        ({"message": 5}, ""),
        (["message"], ""),
        (None, ""),
    ],
)
def test_extract_message(body: Any, expected: str) -> None:
    assert extract_message(body) == expected


@pytest.mark.parametrize("key", ["message", "inputMessage", "text"])
def test_chat_accepts_message_keys(monkeypatch: pytest.MonkeyPatch, key: str) -> None:
    seen = _install_pipeline(monkeypatch, _greeting)

    response = _client(_make_app()).post("/api/chat", json={key: "Hi there!"})

    assert response.status_code == 200
    assert seen == ["Hi there!"]
    body = response.json()
    assert body["reply"] == "Hello!"
    assert body["extracted"]["intent"] == "greeting"
    assert body["extracted"]["inputMessage"] == "Hi there!"
    assert "structured" not in body


@pytest.mark.parametrize(
    "kwargs",
    [
        {"json": {}},
        {"json": {"message": "   "}},
        {"content": b"not json", "headers": {"Content-Type": "application/json"}},
    ],
)
def test_chat_missing_message_is_400(monkeypatch: pytest.MonkeyPatch, kwargs: dict) -> None:
    seen = _install_pipeline(monkeypatch, _greeting)

    response = _client(_make_app()).post("/api/chat", **kwargs)

    assert response.status_code == 400
    assert response.json() == {"error": "Missing 'message' in request body"}
    assert seen == []


def test_chat_structured_reply(monkeypatch: pytest.MonkeyPatch) -> None:
    def _structured(text: str) -> ReplyEnvelope:
        return ReplyEnvelope(
            reply_text="Properties with a pool or hot tub:\n- Casa Azul",
            extracted=Intent(
                intent=IntentKind.dataset_query,
                dataset_intent_type=DatasetIntentType.properties_with_pool,
                input_message=text,
            ),
            structured=StructuredReply(
                type="properties_with_pool",
                message="Properties with a pool or hot tub:\n- Casa Azul",
                items=[{"id": "p2", "title": "Casa Azul"}],
            ),
        )

    _install_pipeline(monkeypatch, _structured)

    response = _client(_make_app()).post("/api/chat", json={"message": "Which have a pool?"})

    body = response.json()
    assert body["extracted"]["datasetIntentType"] == "properties_with_pool"
    assert body["structured"]["type"] == "properties_with_pool"
    assert body["structured"]["items"] == [{"id": "p2", "title": "Casa Azul"}]


def test_chat_pipeline_failure_is_generic_500(monkeypatch: pytest.MonkeyPatch) -> None:
    async def _failing(_text: str, _app: Any) -> ReplyEnvelope:
        raise RuntimeError("password=hunter2")

    monkeypatch.setattr(server, "process_message", _failing)

    response = _client(_make_app()).post("/api/chat", json={"message": "hi"})

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}


def test_cors_preflight() -> None:
    response = _client(_make_app()).options(
        "/api/chat",
        headers={
            "Origin": "https://guest.example",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "Content-Type",
        },
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"


def test_ui_buttons_are_cached(monkeypatch: pytest.MonkeyPatch) -> None:
    urls: list[str | None] = []

    def _fake_fetch(url: str | None) -> list[UIButton]:
        urls.append(url)
        return [UIButton(label="Pools", payload="Which properties have a pool?", available=True)]

    monkeypatch.setattr(server, "fetch_sheet_buttons", _fake_fetch)
    client = _client(_make_app())

    first = client.get("/api/ui-buttons").json()
    second = client.get("/api/ui-buttons").json()

    assert first["cached"] is False
    assert second["cached"] is True
    assert first["items"][0]["label"] == "Pools"
    assert first["items"][0]["payload"] == "Which properties have a pool?"
    assert urls == ["https://sheets.example/buttons.json"]


def test_ui_buttons_without_source_is_500(monkeypatch: pytest.MonkeyPatch) -> None:
    def _fake_fetch(url: str | None) -> list[UIButton]:
        raise UIConfigError("SHEETS_PUBLIC_JSON_URL is not set")

    monkeypatch.setattr(server, "fetch_sheet_buttons", _fake_fetch)

    response = _client(_make_app(sheets_json_url=None)).get("/api/ui-buttons")

    assert response.status_code == 500
    assert response.json() == {"error": "SHEETS_PUBLIC_JSON_URL is not set"}


def test_ui_buttons_malformed_source_url_is_500_with_body() -> None:
    response = _client(_make_app(sheets_json_url="not a url")).get("/api/ui-buttons")

    assert response.status_code == 500
    assert response.json() == {"error": "SHEETS_PUBLIC_JSON_URL is not a valid URL"}
