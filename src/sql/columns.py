"""Allowlisted SQL identifiers.

All column names referenced in generated SQL must come from these mappings; no user-provided
identifier should ever be interpolated into SQL.
"""

from __future__ import annotations

from src.intent.schema import FieldType

# Columns shown for every property in list-style dataset answers.
PROPERTY_LIST_COLUMNS: tuple[str, ...] = ("id", "title", "area", "price_per_night", "rating")

# Columns answering a single-property question, per field type.
FIELD_COLUMNS: dict[FieldType, tuple[str, ...]] = {
    FieldType.wifi: ("wifi_name", "wifi_password", "wifi_speed_mbps"),
    FieldType.check_in: ("check_in_time",),
    FieldType.check_out: ("check_out_time",),
    FieldType.parking: ("parking",),
    FieldType.address: ("address", "area"),
    FieldType.price: ("price_per_night",),
    FieldType.bedrooms: ("bedrooms",),
    FieldType.guests: ("max_guests",),
    FieldType.pool: ("has_pool", "has_hot_tub"),
    FieldType.cameras: ("has_cameras",),
    FieldType.rating: ("rating",),
    FieldType.owner: ("owner_name",),
    FieldType.style: ("style",),
    FieldType.property_type: ("property_type",),
    FieldType.area: ("area",),
    FieldType.house_rules: ("house_rules",),
    FieldType.general: (
        "area",
        "property_type",
        "bedrooms",
        "max_guests",
        "price_per_night",
        "rating",
    ),
}
