"""Intent record schema (Pydantic models).

This schema is the contract between the extractors (remote LLM / deterministic rules) and the
query router. Both extractors must produce exactly this shape; anything the remote model returns is
validated here and degrades to the `other` default instead of propagating untrusted values.
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator
from pydantic.alias_generators import to_camel

if TYPE_CHECKING:
    from src.intent.fields import FieldResolution


class IntentKind(StrEnum):
    """Top-level message categories."""

    property_query = "property_query"
    dataset_query = "dataset_query"
    greeting = "greeting"
    other = "other"


class DatasetIntentType(StrEnum):
    """Closed set of aggregate queries over the property dataset."""

    owner_with_most_properties = "owner_with_most_properties"
    count_properties_by_owner = "count_properties_by_owner"
    list_properties_by_owner = "list_properties_by_owner"
    properties_with_pool = "properties_with_pool"
    properties_without_cameras = "properties_without_cameras"
    highest_rated_property = "highest_rated_property"
    lowest_rated_property = "lowest_rated_property"
    properties_above_price = "properties_above_price"
    properties_by_beds = "properties_by_beds"
    properties_by_max_guests = "properties_by_max_guests"
    properties_with_wifi_speed_above = "properties_with_wifi_speed_above"
    properties_by_style = "properties_by_style"
    properties_by_type = "properties_by_type"
    list_all_areas = "list_all_areas"
    properties_in_area = "properties_in_area"
    properties_near_each_other = "properties_near_each_other"


class FieldType(StrEnum):
    """Canonical groups of property attributes a user can ask about."""

    wifi = "wifi"
    check_in = "check_in"
    check_out = "check_out"
    parking = "parking"
    address = "address"
    price = "price"
    bedrooms = "bedrooms"
    guests = "guests"
    pool = "pool"
    cameras = "cameras"
    rating = "rating"
    owner = "owner"
    style = "style"
    property_type = "property_type"
    area = "area"
    house_rules = "house_rules"
    general = "general"


_NULLABLE_TEXT_FIELDS = (
    "property_name",
    "information_to_find",
    "dataset_owner_name",
    "dataset_value",
)


class Intent(BaseModel):
    """A validated, immutable intent record for one incoming message."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    intent: IntentKind = IntentKind.other
    property_name: str | None = None
    information_to_find: str | None = None
    dataset_intent_type: DatasetIntentType | None = None
    dataset_owner_name: str | None = None
    dataset_value: str | None = None
    input_message: str

    # Attached once by the field resolver; `None` until enrichment.
    field_type: FieldType | None = None
    dataset_hint: DatasetIntentType | None = None

    @field_validator(*_NULLABLE_TEXT_FIELDS, mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> Any:
        """Coerce scalar values to text, trim strings and map blank ones to `None`."""

        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        if isinstance(value, str):
            return value.strip() or None
        return value

    @field_validator("dataset_intent_type", "dataset_hint", mode="before")
    @classmethod
    def blank_enum_to_none(cls, value: Any) -> Any:
        """Models emit `""` for unused fields; that means "not set", not an unknown type."""

        if isinstance(value, str) and not value.strip():
            return None
        return value

    @classmethod
    def other_default(cls, message: str) -> Intent:
        """The record every inconclusive extraction resolves to."""

        return cls(intent=IntentKind.other, input_message=message)

    def enrich(self, resolution: FieldResolution) -> Intent:
        """Return a copy carrying the field resolver's `fieldType` / `datasetHint`."""

        return self.model_copy(
            update={
                "field_type": resolution.field_type,
                "dataset_hint": resolution.dataset_hint,
            }
        )

    def to_payload(self) -> dict[str, Any]:
        """JSON-ready camelCase dict (used for replies and logs)."""

        return self.model_dump(mode="json", by_alias=True)


_EXTRACTED_KEYS = (
    "intent",
    "propertyName",
    "informationToFind",
    "datasetIntentType",
    "datasetOwnerName",
    "datasetValue",
)


def intent_from_obj(obj: Any, *, input_message: str) -> Intent:
    """Validate an arbitrary decoded JSON object into an Intent.

    Only the extractor-owned keys are read; anything else is ignored. Missing keys take their
    defaults. An unknown `intent` or `datasetIntentType`, or any other validation failure, yields
    `Intent.other_default(input_message)`. This function never raises.
    """

    if not isinstance(obj, dict):
        return Intent.other_default(input_message)

    data: dict[str, Any] = {key: obj.get(key) for key in _EXTRACTED_KEYS}
    data["intent"] = data["intent"] or IntentKind.other

    raw_message = obj.get("inputMessage")
    data["inputMessage"] = (
        raw_message if isinstance(raw_message, str) and raw_message.strip() else input_message
    )

    try:
        return Intent.model_validate(data)
    except ValidationError:
        return Intent.other_default(input_message)
