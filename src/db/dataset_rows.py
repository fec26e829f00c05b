"""Dataset-to-row conversion helpers.

Both the production JSON loader and integration tests convert a parsed property dataset
(`{"properties": [...]}`) into row tuples matching the `properties` table.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

PROPERTY_COLUMNS: tuple[str, ...] = (
    "id",
    "title",
    "owner_name",
    "area",
    "address",
    "latitude",
    "longitude",
    "price_per_night",
    "bedrooms",
    "max_guests",
    "wifi_name",
    "wifi_password",
    "wifi_speed_mbps",
    "has_pool",
    "has_hot_tub",
    "has_cameras",
    "rating",
    "style",
    "property_type",
    "check_in_time",
    "check_out_time",
    "parking",
    "house_rules",
)

_FLOAT_COLUMNS = {"latitude", "longitude", "price_per_night", "rating"}
_INT_COLUMNS = {"bedrooms", "max_guests", "wifi_speed_mbps"}
_BOOL_COLUMNS = {"has_pool", "has_hot_tub", "has_cameras"}
_TRUTHY = {"true", "yes", "y", "1"}


def _convert(column: str, value: Any) -> Any:
    if column in _BOOL_COLUMNS:
        if isinstance(value, bool):
            return value
        return str(value or "").strip().lower() in _TRUTHY
    if value is None or value == "":
        return None
    if column in _FLOAT_COLUMNS:
        return float(value)
    if column in _INT_COLUMNS:
        return int(value)
    return str(value)


def iter_property_rows(properties: Sequence[dict[str, Any]]) -> Iterable[tuple[Any, ...]]:
    """Yield row tuples (in `PROPERTY_COLUMNS` order) for inserting into `properties`."""

    for prop in properties:
        yield tuple(_convert(column, prop.get(column)) for column in PROPERTY_COLUMNS)
