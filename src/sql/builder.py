"""Deterministic SQL builder.

The builder converts a validated `Intent` into a parameterized SQL query over the `properties`
table. Identifiers are strictly allowlisted; only values become bound parameters.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from src.intent.schema import DatasetIntentType, FieldType, Intent
from src.sql.columns import FIELD_COLUMNS, PROPERTY_LIST_COLUMNS


class SQLBuilderError(ValueError):
    """Raised when an Intent cannot be converted into deterministic SQL."""


@dataclass(frozen=True)
class BuiltQuery:
    """A parameterized SQL query ready for execution."""

    sql: str
    params: tuple[Any, ...]


LIST_LIMIT = 50
NEARBY_RADIUS_KM = 5.0
EARTH_RADIUS_KM = 6371.0

_NUMBER_RE = re.compile(r"\d+(?:\.\d+)?")

_LIST_SELECT = "SELECT " + ", ".join(f"p.{c}" for c in PROPERTY_LIST_COLUMNS) + " FROM properties p"


def escape_like(value: str) -> str:
    """Escape LIKE/ILIKE wildcards so user text matches literally."""

    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _contains(value: str) -> str:
    return f"%{escape_like(value)}%"


def _require_text(value: str | None, what: str) -> str:
    if not value:
        raise SQLBuilderError(f"{what} is required")
    return value


def _parse_number(value: str | None) -> float | None:
    match = _NUMBER_RE.search((value or "").replace(",", ""))
    if match is None:
        return None
    return float(match.group(0))


def _require_number(value: str | None, what: str) -> float:
    number = _parse_number(value)
    if number is None:
        raise SQLBuilderError(f"a numeric {what} is required")
    return number


def _list_query(where: str, order_by: str, params: tuple[Any, ...] = ()) -> BuiltQuery:
    sql = f"{_LIST_SELECT} WHERE {where} ORDER BY {order_by} LIMIT {LIST_LIMIT}"
    return BuiltQuery(sql=sql, params=params)


def _build_owner_with_most_properties(_intent: Intent) -> BuiltQuery:
    return BuiltQuery(
        sql=(
            "SELECT p.owner_name, COUNT(*)::int AS property_count FROM properties p"
            " WHERE p.owner_name IS NOT NULL"
            " GROUP BY p.owner_name ORDER BY property_count DESC, p.owner_name LIMIT 1"
        ),
        params=(),
    )


def _build_count_properties_by_owner(intent: Intent) -> BuiltQuery:
    owner = _require_text(intent.dataset_owner_name, "owner name")
    return BuiltQuery(
        sql="SELECT COUNT(*)::int AS property_count FROM properties p WHERE p.owner_name ILIKE %s",
        params=(_contains(owner),),
    )


def _build_list_properties_by_owner(intent: Intent) -> BuiltQuery:
    owner = _require_text(intent.dataset_owner_name, "owner name")
    return _list_query("p.owner_name ILIKE %s", "p.title", (_contains(owner),))


def _build_properties_with_pool(_intent: Intent) -> BuiltQuery:
    return _list_query("p.has_pool OR p.has_hot_tub", "p.title")


def _build_properties_without_cameras(_intent: Intent) -> BuiltQuery:
    return _list_query("NOT p.has_cameras", "p.title")


def _build_highest_rated(_intent: Intent) -> BuiltQuery:
    return BuiltQuery(
        sql=f"{_LIST_SELECT} WHERE p.rating IS NOT NULL ORDER BY p.rating DESC, p.title LIMIT 1",
        params=(),
    )


def _build_lowest_rated(_intent: Intent) -> BuiltQuery:
    return BuiltQuery(
        sql=f"{_LIST_SELECT} WHERE p.rating IS NOT NULL ORDER BY p.rating ASC, p.title LIMIT 1",
        params=(),
    )


def _build_properties_above_price(intent: Intent) -> BuiltQuery:
    price = _require_number(intent.dataset_value, "price")
    return _list_query("p.price_per_night > %s", "p.price_per_night, p.title", (price,))


def _build_properties_by_beds(intent: Intent) -> BuiltQuery:
    beds = int(_require_number(intent.dataset_value, "bedroom count"))
    return BuiltQuery(
        sql=(
            "SELECT p.id, p.title, p.area, p.bedrooms FROM properties p"
            f" WHERE p.bedrooms = %s ORDER BY p.title LIMIT {LIST_LIMIT}"
        ),
        params=(beds,),
    )


def _build_properties_by_max_guests(intent: Intent) -> BuiltQuery:
    guests = int(_require_number(intent.dataset_value, "guest count"))
    return BuiltQuery(
        sql=(
            "SELECT p.id, p.title, p.area, p.max_guests FROM properties p"
            f" WHERE p.max_guests >= %s ORDER BY p.max_guests, p.title LIMIT {LIST_LIMIT}"
        ),
        params=(guests,),
    )


def _build_properties_with_wifi_speed_above(intent: Intent) -> BuiltQuery:
    select = "SELECT p.id, p.title, p.area, p.wifi_speed_mbps FROM properties p"
    order = f"ORDER BY p.wifi_speed_mbps DESC, p.title LIMIT {LIST_LIMIT}"

    speed = _parse_number(intent.dataset_value)
    if speed is None:
        # No threshold: rank every property with a known speed.
        return BuiltQuery(sql=f"{select} WHERE p.wifi_speed_mbps IS NOT NULL {order}", params=())
    return BuiltQuery(sql=f"{select} WHERE p.wifi_speed_mbps > %s {order}", params=(speed,))


def _build_properties_by_style(intent: Intent) -> BuiltQuery:
    style = _require_text(intent.dataset_value, "style")
    return _list_query("p.style ILIKE %s", "p.title", (_contains(style),))


def _build_properties_by_type(intent: Intent) -> BuiltQuery:
    property_type = _require_text(intent.dataset_value, "property type")
    return _list_query("p.property_type ILIKE %s", "p.title", (_contains(property_type),))


def _build_list_all_areas(_intent: Intent) -> BuiltQuery:
    return BuiltQuery(
        sql=(
            "SELECT p.area, COUNT(*)::int AS property_count FROM properties p"
            " WHERE p.area IS NOT NULL GROUP BY p.area ORDER BY p.area"
        ),
        params=(),
    )


def _build_properties_in_area(intent: Intent) -> BuiltQuery:
    area = _require_text(intent.dataset_value, "area")
    return _list_query("p.area ILIKE %s", "p.title", (_contains(area),))


def _build_properties_near_each_other(intent: Intent) -> BuiltQuery:
    radius_km = _parse_number(intent.dataset_value) or NEARBY_RADIUS_KM
    # Haversine distance; LEAST() guards ASIN against rounding just above 1.
    distance = (
        f"2 * {EARTH_RADIUS_KM} * ASIN(LEAST(1, SQRT("
        "POWER(SIN(RADIANS(b.latitude - a.latitude) / 2), 2)"
        " + COS(RADIANS(a.latitude)) * COS(RADIANS(b.latitude))"
        " * POWER(SIN(RADIANS(b.longitude - a.longitude) / 2), 2))))"
    )
    sql = (
        "WITH pairs AS ("
        f" SELECT a.title AS first_title, b.title AS second_title, {distance} AS distance_km"
        "   FROM properties a JOIN properties b ON a.id < b.id"
        "  WHERE a.latitude IS NOT NULL AND a.longitude IS NOT NULL"
        "    AND b.latitude IS NOT NULL AND b.longitude IS NOT NULL"
        ") "
        "SELECT first_title, second_title, ROUND(distance_km::numeric, 2)::float8 AS distance_km"
        " FROM pairs WHERE distance_km <= %s"
        f" ORDER BY distance_km, first_title, second_title LIMIT {LIST_LIMIT}"
    )
    return BuiltQuery(sql=sql, params=(radius_km,))


_DATASET_BUILDERS: dict[DatasetIntentType, Callable[[Intent], BuiltQuery]] = {
    DatasetIntentType.owner_with_most_properties: _build_owner_with_most_properties,
    DatasetIntentType.count_properties_by_owner: _build_count_properties_by_owner,
    DatasetIntentType.list_properties_by_owner: _build_list_properties_by_owner,
    DatasetIntentType.properties_with_pool: _build_properties_with_pool,
    DatasetIntentType.properties_without_cameras: _build_properties_without_cameras,
    DatasetIntentType.highest_rated_property: _build_highest_rated,
    DatasetIntentType.lowest_rated_property: _build_lowest_rated,
    DatasetIntentType.properties_above_price: _build_properties_above_price,
    DatasetIntentType.properties_by_beds: _build_properties_by_beds,
    DatasetIntentType.properties_by_max_guests: _build_properties_by_max_guests,
    DatasetIntentType.properties_with_wifi_speed_above: _build_properties_with_wifi_speed_above,
    DatasetIntentType.properties_by_style: _build_properties_by_style,
    DatasetIntentType.properties_by_type: _build_properties_by_type,
    DatasetIntentType.list_all_areas: _build_list_all_areas,
    DatasetIntentType.properties_in_area: _build_properties_in_area,
    DatasetIntentType.properties_near_each_other: _build_properties_near_each_other,
}


def build_dataset_query(
        intent: Intent,
        dataset_type: DatasetIntentType | None = None,
) -> tuple[str, tuple[Any, ...]]:
    """Build SQL + params for an aggregate query.

    `dataset_type` overrides `intent.dataset_intent_type` (the handler passes the resolver's hint
    when the extractor left the type empty).
    """

    kind = dataset_type or intent.dataset_intent_type
    if kind is None:
        raise SQLBuilderError("dataset query type is required")

    try:
        builder = _DATASET_BUILDERS[kind]
    except KeyError as exc:
        raise SQLBuilderError(f"Unsupported dataset query: {kind}") from exc

    built = builder(intent)
    return built.sql, built.params


def build_property_lookup(
        property_name: str,
        field_type: FieldType | None = None,
) -> tuple[str, tuple[Any, ...]]:
    """Build SQL + params fetching one property by title and the columns for `field_type`.

    An exact (case-insensitive) title match is preferred over a substring match.
    """

    name = _require_text((property_name or "").strip(), "property name")
    columns = ("id", "title") + FIELD_COLUMNS[field_type or FieldType.general]
    select = ", ".join(f"p.{c}" for c in dict.fromkeys(columns))

    sql = (
        f"SELECT {select} FROM properties p"
        " WHERE LOWER(p.title) = LOWER(%s) OR p.title ILIKE %s"
        " ORDER BY (LOWER(p.title) = LOWER(%s)) DESC, p.title LIMIT 1"
    )
    return sql, (name, _contains(name), name)
