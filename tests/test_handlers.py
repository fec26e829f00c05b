"""Tests for the property, dataset and general reply handlers (DB access stubbed)."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import pytest

from src.handlers import dataset as dataset_handler
from src.handlers import general as general_handler
from src.handlers import property as property_handler
from src.handlers.dataset import handle_dataset_query, render_dataset_answer
from src.handlers.general import GREETING_REPLY, HELP_REPLY, generate_general_reply
from src.handlers.property import format_property_answer, handle_property_query
from src.intent.schema import DatasetIntentType, FieldType, Intent, IntentKind
from src.llm.client import LLMConfig, LLMTransportError
from src.routing.replies import StructuredReply


@asynccontextmanager
async def _fake_get_conn(_pool: Any):
    yield object()


class _QueryLog:
    def __init__(self, result: Any) -> None:
        self.result = result
        self.calls: list[tuple[str, tuple[Any, ...]]] = []

    async def __call__(self, _conn: Any, sql: str, params: tuple[Any, ...] = ()) -> Any:
        self.calls.append((sql, params))
        return self.result


def _stub_property_db(monkeypatch: pytest.MonkeyPatch, row: dict[str, Any] | None) -> _QueryLog:
    log = _QueryLog(row)
    monkeypatch.setattr(property_handler, "get_conn", _fake_get_conn)
    monkeypatch.setattr(property_handler, "fetch_one", log)
    return log


def _stub_dataset_db(monkeypatch: pytest.MonkeyPatch, rows: list[dict[str, Any]]) -> _QueryLog:
    log = _QueryLog(rows)
    monkeypatch.setattr(dataset_handler, "get_conn", _fake_get_conn)
    monkeypatch.setattr(dataset_handler, "fetch_rows", log)
    return log


@pytest.mark.asyncio
async def test_property_answer_is_structured(monkeypatch: pytest.MonkeyPatch, make_intent) -> None:
    log = _stub_property_db(
        monkeypatch,
        {
            "id": "p1",
            "title": "Unit 5",
            "wifi_name": "Unit5-Guest",
            "wifi_password": "sunny-days",
            "wifi_speed_mbps": None,
        },
    )
    intent = make_intent(
        intent=IntentKind.property_query,
        property_name="Unit 5",
        field_type=FieldType.wifi,
    )

    result = await handle_property_query(intent, pool=object())

    assert isinstance(result, StructuredReply)
    assert result.type == "property_answer"
    assert result.property == "Unit 5"
    assert result.field_type == "wifi"
    assert result.message == "Unit 5:\nWiFi network: Unit5-Guest\nWiFi password: sunny-days"
    assert log.calls[0][1] == ("Unit 5", "%Unit 5%", "Unit 5")


@pytest.mark.asyncio
async def test_property_without_name_asks_for_it(monkeypatch: pytest.MonkeyPatch, make_intent) -> None:
    log = _stub_property_db(monkeypatch, None)

    result = await handle_property_query(make_intent(intent=IntentKind.property_query), pool=object())

    assert isinstance(result, str)
    assert "Which property" in result
    assert log.calls == []


@pytest.mark.asyncio
async def test_property_not_found(monkeypatch: pytest.MonkeyPatch, make_intent) -> None:
    _stub_property_db(monkeypatch, None)
    intent = make_intent(intent=IntentKind.property_query, property_name="Unit 99")

    result = await handle_property_query(intent, pool=object())

    assert result == "I couldn't find a property called Unit 99."


def test_format_property_answer_values() -> None:
    text = format_property_answer(
        {"id": "p2", "title": "Casa Azul", "has_pool": False, "price_per_night": 1250.0}
    )
    assert text == "Casa Azul:\nPool: no\nPrice per night: $1,250"


def test_format_property_answer_without_values() -> None:
    text = format_property_answer({"id": "p2", "title": "Casa Azul", "parking": None})
    assert text == "I don't have that information for Casa Azul yet."


@pytest.mark.asyncio
async def test_dataset_answer_is_structured(monkeypatch: pytest.MonkeyPatch, make_intent) -> None:
    rows = [{"id": "p2", "title": "Casa Azul", "area": "Las Vegas"}]
    log = _stub_dataset_db(monkeypatch, rows)
    intent = make_intent(
        intent=IntentKind.dataset_query,
        dataset_intent_type=DatasetIntentType.properties_with_pool,
    )

    result = await handle_dataset_query(intent, pool=object())

    assert isinstance(result, StructuredReply)
    assert result.type == "properties_with_pool"
    assert result.items == rows
    assert result.message == "Properties with a pool or hot tub:\n- Casa Azul (Las Vegas)"
    assert len(log.calls) == 1


@pytest.mark.asyncio
async def test_dataset_uses_hint_when_type_missing(monkeypatch: pytest.MonkeyPatch, make_intent) -> None:
    _stub_dataset_db(monkeypatch, [{"area": "Las Vegas", "property_count": 2}])
    intent = make_intent(
        intent=IntentKind.dataset_query,
        dataset_hint=DatasetIntentType.list_all_areas,
    )

    result = await handle_dataset_query(intent, pool=object())

    assert isinstance(result, StructuredReply)
    assert result.type == "list_all_areas"
    assert result.message == "We have properties in:\n- Las Vegas (2)"


@pytest.mark.asyncio
async def test_dataset_without_type_or_hint(monkeypatch: pytest.MonkeyPatch, make_intent) -> None:
    log = _stub_dataset_db(monkeypatch, [])

    result = await handle_dataset_query(make_intent(intent=IntentKind.dataset_query), pool=object())

    assert isinstance(result, str)
    assert log.calls == []


@pytest.mark.asyncio
async def test_dataset_missing_value_asks_for_clarification(
        monkeypatch: pytest.MonkeyPatch,
        make_intent,
) -> None:
    log = _stub_dataset_db(monkeypatch, [])
    intent = make_intent(
        intent=IntentKind.dataset_query,
        dataset_intent_type=DatasetIntentType.properties_by_beds,
    )

    result = await handle_dataset_query(intent, pool=object())

    assert result == "How many bedrooms are you looking for?"
    assert log.calls == []


def test_render_count_by_owner(make_intent) -> None:
    intent = make_intent(dataset_owner_name="John")
    text = render_dataset_answer(
        DatasetIntentType.count_properties_by_owner, intent, [{"property_count": 1}]
    )
    assert text == "John has 1 property."


def test_render_empty_rating() -> None:
    text = render_dataset_answer(
        DatasetIntentType.highest_rated_property, Intent.other_default("q"), []
    )
    assert text == "No properties have a rating yet."


@pytest.mark.parametrize(
    "message,expected",
    [("Hi there!", GREETING_REPLY), ("What's your favorite color?", HELP_REPLY)],
)
@pytest.mark.asyncio
async def test_general_reply_without_llm(message: str, expected: str) -> None:
    assert await generate_general_reply(message) == expected


@pytest.mark.asyncio
async def test_general_reply_with_llm(monkeypatch: pytest.MonkeyPatch) -> None:
    seen: list[Any] = []

    def _fake_completion(messages: list[dict[str, str]], **kwargs: Any) -> str:
        seen.append((messages, kwargs))
        return "  Hello from the model!  "

    monkeypatch.setattr(general_handler, "chat_completion", _fake_completion)
    config = LLMConfig(api_key="k")

    reply = await generate_general_reply("Hi", llm_config=config)

    assert reply == "Hello from the model!"
    messages, kwargs = seen[0]
    assert messages[-1] == {"role": "user", "content": "Hi"}
    assert kwargs["config"] is config


@pytest.mark.asyncio
async def test_general_reply_empty_model_content_falls_back(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(general_handler, "chat_completion", lambda *_a, **_k: None)

    reply = await generate_general_reply("hello", llm_config=LLMConfig(api_key="k"))

    assert reply == GREETING_REPLY


@pytest.mark.asyncio
async def test_general_reply_transport_error_propagates(monkeypatch: pytest.MonkeyPatch) -> None:
    def _failing(*_args: Any, **_kwargs: Any) -> str:
        raise LLMTransportError("LLM connection error")

    monkeypatch.setattr(general_handler, "chat_completion", _failing)

    with pytest.raises(LLMTransportError):
        await generate_general_reply("hello", llm_config=LLMConfig(api_key="k"))
