"""Tests for deterministic SQL builder (allowlists + parameter binding)."""

from __future__ import annotations

import pytest

from src.intent.schema import DatasetIntentType, FieldType, Intent, IntentKind
from src.sql.builder import (
    SQLBuilderError,
    build_dataset_query,
    build_property_lookup,
    escape_like,
)


def _placeholder_count(sql: str) -> int:
    return sql.count("%s")


def _dataset(dataset_type: DatasetIntentType | None, **fields) -> Intent:
    return Intent(
        intent=IntentKind.dataset_query,
        dataset_intent_type=dataset_type,
        input_message="q",
        **fields,
    )


@pytest.mark.parametrize(
    "dataset_type,fields",
    [
        (DatasetIntentType.owner_with_most_properties, {}),
        (DatasetIntentType.count_properties_by_owner, {"dataset_owner_name": "John"}),
        (DatasetIntentType.list_properties_by_owner, {"dataset_owner_name": "John"}),
        (DatasetIntentType.properties_with_pool, {}),
        (DatasetIntentType.properties_without_cameras, {}),
        (DatasetIntentType.highest_rated_property, {}),
        (DatasetIntentType.lowest_rated_property, {}),
        (DatasetIntentType.properties_above_price, {"dataset_value": "150"}),
        (DatasetIntentType.properties_by_beds, {"dataset_value": "3"}),
        (DatasetIntentType.properties_by_max_guests, {"dataset_value": "8"}),
        (DatasetIntentType.properties_with_wifi_speed_above, {"dataset_value": "100"}),
        (DatasetIntentType.properties_with_wifi_speed_above, {}),
        (DatasetIntentType.properties_by_style, {"dataset_value": "mansion"}),
        (DatasetIntentType.properties_by_type, {"dataset_value": "villa"}),
        (DatasetIntentType.list_all_areas, {}),
        (DatasetIntentType.properties_in_area, {"dataset_value": "Las Vegas"}),
        (DatasetIntentType.properties_near_each_other, {}),
    ],
)
def test_every_dataset_type_builds_parameterized_sql(
        dataset_type: DatasetIntentType,
        fields: dict,
) -> None:
    sql, params = build_dataset_query(_dataset(dataset_type, **fields))

    assert "FROM properties" in sql
    assert _placeholder_count(sql) == len(params)
    for value in fields.values():
        assert value not in sql


def test_owner_filter_is_escaped_substring_match() -> None:
    sql, params = build_dataset_query(
        _dataset(DatasetIntentType.list_properties_by_owner, dataset_owner_name="50%_Owner")
    )
    assert "p.owner_name ILIKE %s" in sql
    assert params == ("%50\\%\\_Owner%",)


def test_price_threshold_is_numeric() -> None:
    sql, params = build_dataset_query(
        _dataset(DatasetIntentType.properties_above_price, dataset_value="$1,250 per night")
    )
    assert "p.price_per_night > %s" in sql
    assert params == (1250.0,)


def test_beds_are_integer() -> None:
    _sql, params = build_dataset_query(
        _dataset(DatasetIntentType.properties_by_beds, dataset_value="3 bedrooms")
    )
    assert params == (3,)


def test_wifi_without_threshold_ranks_all() -> None:
    sql, params = build_dataset_query(_dataset(DatasetIntentType.properties_with_wifi_speed_above))
    assert "p.wifi_speed_mbps IS NOT NULL" in sql
    assert "ORDER BY p.wifi_speed_mbps DESC" in sql
    assert params == ()


def test_near_each_other_uses_default_radius() -> None:
    sql, params = build_dataset_query(_dataset(DatasetIntentType.properties_near_each_other))
    assert "a.id < b.id" in sql
    assert params == (5.0,)


def test_near_each_other_custom_radius() -> None:
    _sql, params = build_dataset_query(
        _dataset(DatasetIntentType.properties_near_each_other, dataset_value="within 2 km")
    )
    assert params == (2.0,)


def test_rating_queries_limit_to_one() -> None:
    high_sql, _ = build_dataset_query(_dataset(DatasetIntentType.highest_rated_property))
    low_sql, _ = build_dataset_query(_dataset(DatasetIntentType.lowest_rated_property))
    assert "ORDER BY p.rating DESC" in high_sql and high_sql.endswith("LIMIT 1")
    assert "ORDER BY p.rating ASC" in low_sql and low_sql.endswith("LIMIT 1")


def test_hint_overrides_missing_type() -> None:
    intent = _dataset(None)
    sql, _ = build_dataset_query(intent, DatasetIntentType.properties_with_pool)
    assert "p.has_pool OR p.has_hot_tub" in sql


@pytest.mark.parametrize(
    "dataset_type,fields",
    [
        (None, {}),
        (DatasetIntentType.count_properties_by_owner, {}),
        (DatasetIntentType.properties_above_price, {"dataset_value": "cheap"}),
        (DatasetIntentType.properties_by_beds, {}),
        (DatasetIntentType.properties_by_style, {}),
        (DatasetIntentType.properties_in_area, {}),
    ],
)
def test_missing_required_values_raise(dataset_type: DatasetIntentType | None, fields: dict) -> None:
    with pytest.raises(SQLBuilderError):
        build_dataset_query(_dataset(dataset_type, **fields))


def test_property_lookup_selects_field_columns() -> None:
    sql, params = build_property_lookup("Unit 5", FieldType.wifi)
    assert sql.startswith("SELECT p.id, p.title, p.wifi_name, p.wifi_password, p.wifi_speed_mbps ")
    assert "Unit 5" not in sql
    assert params == ("Unit 5", "%Unit 5%", "Unit 5")
    assert _placeholder_count(sql) == len(params)


def test_property_lookup_defaults_to_general_columns() -> None:
    sql, _ = build_property_lookup("Casa Azul")
    assert "p.bedrooms" in sql and "p.rating" in sql


def test_property_lookup_requires_name() -> None:
    with pytest.raises(SQLBuilderError):
        build_property_lookup("   ")


def test_escape_like() -> None:
    assert escape_like("a%b_c\\d") == "a\\%b\\_c\\\\d"
