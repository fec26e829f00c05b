"""Single-property answers: look up one property and report the requested field group."""

from __future__ import annotations

import logging
from typing import Any

from psycopg_pool import AsyncConnectionPool

from src.db.pool import get_conn
from src.db.query import fetch_one
from src.intent.schema import FieldType, Intent
from src.routing.replies import HandlerResult, StructuredReply
from src.sql.builder import build_property_lookup

logger = logging.getLogger(__name__)

_LABELS: dict[str, str] = {
    "wifi_name": "WiFi network",
    "wifi_password": "WiFi password",
    "wifi_speed_mbps": "WiFi speed (Mbps)",
    "check_in_time": "Check-in",
    "check_out_time": "Check-out",
    "parking": "Parking",
    "address": "Address",
    "area": "Area",
    "price_per_night": "Price per night",
    "bedrooms": "Bedrooms",
    "max_guests": "Max guests",
    "has_pool": "Pool",
    "has_hot_tub": "Hot tub",
    "has_cameras": "Security cameras",
    "rating": "Rating",
    "owner_name": "Owner",
    "style": "Style",
    "property_type": "Type",
    "house_rules": "House rules",
}


def _format_value(column: str, value: Any) -> str:
    if isinstance(value, bool):
        return "yes" if value else "no"
    if column == "price_per_night":
        return f"${value:,.0f}"
    return str(value)


def format_property_answer(row: dict[str, Any]) -> str:
    """Render the looked-up columns as `Label: value` lines under the property title."""

    lines = [
        f"{_LABELS.get(column, column)}: {_format_value(column, value)}"
        for column, value in row.items()
        if column not in {"id", "title"} and value is not None
    ]
    if not lines:
        return f"I don't have that information for {row['title']} yet."
    return "\n".join([f"{row['title']}:"] + lines)


async def handle_property_query(intent: Intent, *, pool: AsyncConnectionPool) -> HandlerResult:
    """Answer a question about one named property."""

    if not intent.property_name:
        return "Which property are you asking about? Please include its name or unit number."

    field_type = intent.field_type or FieldType.general
    sql, params = build_property_lookup(intent.property_name, field_type)

    async with get_conn(pool) as conn:
        row = await fetch_one(conn, sql, params)

    if row is None:
        logger.info("property not found name=%s", intent.property_name)
        return f"I couldn't find a property called {intent.property_name}."

    return StructuredReply(
        type="property_answer",
        message=format_property_answer(row),
        property=row["title"],
        field_type=field_type.value,
        details={k: v for k, v in row.items() if k not in {"id", "title"}},
    )
