"""Aggregate answers over the whole property dataset."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from psycopg_pool import AsyncConnectionPool

from src.db.pool import get_conn
from src.db.query import fetch_rows
from src.intent.schema import DatasetIntentType, Intent
from src.routing.replies import HandlerResult, StructuredReply
from src.sql.builder import SQLBuilderError, build_dataset_query

logger = logging.getLogger(__name__)

Row = dict[str, Any]

_CLARIFICATIONS: dict[DatasetIntentType, str] = {
    DatasetIntentType.count_properties_by_owner: "Which owner do you mean?",
    DatasetIntentType.list_properties_by_owner: "Which owner do you mean?",
    DatasetIntentType.properties_above_price: "What nightly price should I compare against?",
    DatasetIntentType.properties_by_beds: "How many bedrooms are you looking for?",
    DatasetIntentType.properties_by_max_guests: "How many guests need to fit?",
    DatasetIntentType.properties_by_style: "Which style are you looking for (e.g. mansion, villa)?",
    DatasetIntentType.properties_by_type: "Which property type are you looking for?",
    DatasetIntentType.properties_in_area: "Which area are you interested in?",
}


def _titles(rows: list[Row]) -> str:
    return "\n".join(f"- {r['title']}" + (f" ({r['area']})" if r.get("area") else "") for r in rows)


def _list_message(heading: str, empty: str) -> Callable[[Intent, list[Row]], str]:
    def render(_intent: Intent, rows: list[Row]) -> str:
        if not rows:
            return empty
        return f"{heading}\n{_titles(rows)}"

    return render


def _owner_with_most(_intent: Intent, rows: list[Row]) -> str:
    if not rows:
        return "I don't have owner information yet."
    top = rows[0]
    return f"{top['owner_name']} has the most properties ({top['property_count']})."


def _count_by_owner(intent: Intent, rows: list[Row]) -> str:
    count = rows[0]["property_count"] if rows else 0
    return f"{intent.dataset_owner_name} has {count} propert{'y' if count == 1 else 'ies'}."


def _rated(label: str) -> Callable[[Intent, list[Row]], str]:
    def render(_intent: Intent, rows: list[Row]) -> str:
        if not rows:
            return "No properties have a rating yet."
        top = rows[0]
        return f"The {label} property is {top['title']} with a rating of {top['rating']}."

    return render


def _wifi_speeds(_intent: Intent, rows: list[Row]) -> str:
    if not rows:
        return "No properties match that WiFi speed."
    lines = "\n".join(f"- {r['title']}: {r['wifi_speed_mbps']} Mbps" for r in rows)
    return f"WiFi speeds:\n{lines}"


def _areas(_intent: Intent, rows: list[Row]) -> str:
    if not rows:
        return "No areas are listed yet."
    lines = "\n".join(f"- {r['area']} ({r['property_count']})" for r in rows)
    return f"We have properties in:\n{lines}"


def _nearby(_intent: Intent, rows: list[Row]) -> str:
    if not rows:
        return "None of the properties are close to each other."
    lines = "\n".join(
        f"- {r['first_title']} and {r['second_title']}: {r['distance_km']} km" for r in rows
    )
    return f"Properties close to each other:\n{lines}"


_RENDERERS: dict[DatasetIntentType, Callable[[Intent, list[Row]], str]] = {
    DatasetIntentType.owner_with_most_properties: _owner_with_most,
    DatasetIntentType.count_properties_by_owner: _count_by_owner,
    DatasetIntentType.list_properties_by_owner: _list_message(
        "Properties for that owner:", "I couldn't find properties for that owner."
    ),
    DatasetIntentType.properties_with_pool: _list_message(
        "Properties with a pool or hot tub:", "No properties have a pool or hot tub."
    ),
    DatasetIntentType.properties_without_cameras: _list_message(
        "Properties without cameras:", "Every property has cameras."
    ),
    DatasetIntentType.highest_rated_property: _rated("highest-rated"),
    DatasetIntentType.lowest_rated_property: _rated("lowest-rated"),
    DatasetIntentType.properties_above_price: _list_message(
        "Properties above that price:", "No properties are above that price."
    ),
    DatasetIntentType.properties_by_beds: _list_message(
        "Properties with that many bedrooms:", "No properties have that many bedrooms."
    ),
    DatasetIntentType.properties_by_max_guests: _list_message(
        "Properties that fit your group:", "No properties fit that many guests."
    ),
    DatasetIntentType.properties_with_wifi_speed_above: _wifi_speeds,
    DatasetIntentType.properties_by_style: _list_message(
        "Properties in that style:", "No properties match that style."
    ),
    DatasetIntentType.properties_by_type: _list_message(
        "Properties of that type:", "No properties match that type."
    ),
    DatasetIntentType.list_all_areas: _areas,
    DatasetIntentType.properties_in_area: _list_message(
        "Properties in that area:", "No properties are in that area."
    ),
    DatasetIntentType.properties_near_each_other: _nearby,
}


def render_dataset_answer(dataset_type: DatasetIntentType, intent: Intent, rows: list[Row]) -> str:
    """Render query rows as display text for the given dataset type."""

    return _RENDERERS[dataset_type](intent, rows)


async def handle_dataset_query(intent: Intent, *, pool: AsyncConnectionPool) -> HandlerResult:
    """Answer an aggregate query; falls back to the resolver's hint when the type is missing."""

    dataset_type = intent.dataset_intent_type or intent.dataset_hint
    if dataset_type is None:
        return "I'm not sure which properties you're asking about. Could you rephrase?"

    try:
        sql, params = build_dataset_query(intent, dataset_type)
    except SQLBuilderError as exc:
        logger.info("dataset query needs clarification type=%s reason=%s", dataset_type, exc)
        return _CLARIFICATIONS.get(dataset_type, "Could you give me a bit more detail?")

    async with get_conn(pool) as conn:
        rows = await fetch_rows(conn, sql, params)

    return StructuredReply(
        type=dataset_type.value,
        message=render_dataset_answer(dataset_type, intent, rows),
        items=rows,
    )
