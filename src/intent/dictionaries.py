"""English vocabularies for the heuristic extractor and the field resolver.

These mappings are used by the rules-based parser and the field resolver and should remain small and
deterministic. Phrases are matched on normalized (lower-cased) text, longest phrase first.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from src.intent.schema import DatasetIntentType, FieldType

POOL_RE = re.compile(r"\b(?:pool|hot tub)\b")
# Only `internet` is bounded on the right; run-together forms such as "wifipassword" still count.
WIFI_RE = re.compile(r"\bwifi|wi-?fi|internet\b")
UNIT_RE = re.compile(r"(?:unit\s*#?\s*|#)(?P<number>\d+)")
GREETING_RE = re.compile(r"\b(?:hi|hello|hey)\b")
PRICE_RE = re.compile(r"\$(?P<amount>\d+)")

FIELD_SYNONYMS: dict[FieldType, tuple[str, ...]] = {
    FieldType.wifi: ("wifi", "wi-fi", "internet", "wifi password", "network", "router", "mbps"),
    FieldType.check_in: ("check-in", "check in", "checkin", "arrival"),
    FieldType.check_out: ("check-out", "check out", "checkout", "departure"),
    FieldType.parking: ("parking", "park", "garage", "driveway"),
    FieldType.address: ("address", "directions", "street", "where is"),
    FieldType.price: ("price", "prices", "cost", "nightly", "per night", "rate"),
    FieldType.bedrooms: ("bedroom", "bedrooms", "bed", "beds"),
    FieldType.guests: ("guest", "guests", "max guests", "sleeps", "sleep", "people", "occupancy"),
    FieldType.pool: ("pool", "pools", "hot tub", "hot tubs", "jacuzzi", "spa"),
    FieldType.cameras: ("camera", "cameras", "security camera", "security cameras"),
    FieldType.rating: ("rating", "rated", "reviews", "stars", "highest-rated", "lowest-rated"),
    FieldType.owner: ("owner", "owners", "own", "owns", "owned"),
    FieldType.style: ("style", "mansion", "villa", "chalet", "cabin"),
    FieldType.property_type: ("type", "apartment", "condo", "townhouse", "studio"),
    FieldType.area: ("area", "areas", "city", "cities", "neighborhood", "region", "located"),
    FieldType.house_rules: ("rules", "house rules", "pets", "smoking", "quiet hours", "parties"),
}

FIELD_DATASET_HINTS: dict[FieldType, DatasetIntentType] = {
    FieldType.pool: DatasetIntentType.properties_with_pool,
    FieldType.cameras: DatasetIntentType.properties_without_cameras,
    FieldType.rating: DatasetIntentType.highest_rated_property,
    FieldType.price: DatasetIntentType.properties_above_price,
    FieldType.bedrooms: DatasetIntentType.properties_by_beds,
    FieldType.guests: DatasetIntentType.properties_by_max_guests,
    FieldType.wifi: DatasetIntentType.properties_with_wifi_speed_above,
    FieldType.style: DatasetIntentType.properties_by_style,
    FieldType.property_type: DatasetIntentType.properties_by_type,
    FieldType.area: DatasetIntentType.properties_in_area,
    FieldType.owner: DatasetIntentType.list_properties_by_owner,
}

# Phrase cues that pin down an aggregate query more precisely than the field type alone.
# Evaluated in order; first match wins.
DATASET_PHRASE_HINTS: tuple[tuple[re.Pattern[str], DatasetIntentType], ...] = (
    (re.compile(r"\bmost properties\b"), DatasetIntentType.owner_with_most_properties),
    (
        re.compile(r"\b(?:near|close to|next to) each other\b"),
        DatasetIntentType.properties_near_each_other,
    ),
    (
        re.compile(r"\b(?:all|what|which) areas\b|\blist (?:of )?areas\b"),
        DatasetIntentType.list_all_areas,
    ),
    (
        re.compile(r"\b(?:lowest|worst)[- ]rated\b|\blowest rating\b"),
        DatasetIntentType.lowest_rated_property,
    ),
    (
        re.compile(r"\b(?:highest|best|top)[- ]rated\b|\bhighest rating\b"),
        DatasetIntentType.highest_rated_property,
    ),
    (
        re.compile(r"\bhow many\b.*\b(?:own|owns|owned|owner)\b"),
        DatasetIntentType.count_properties_by_owner,
    ),
    (
        re.compile(r"\b(?:without|no|don't have|do not have) (?:security )?cameras?\b"),
        DatasetIntentType.properties_without_cameras,
    ),
)


@dataclass(frozen=True)
class FieldMatch:
    """A concrete phrase matched to a canonical field type."""

    field_type: FieldType
    phrase: str
    pattern: re.Pattern[str]


_FIELD_MATCHES: list[FieldMatch] = sorted(
    (
        FieldMatch(
            field_type=field_type,
            phrase=phrase,
            pattern=re.compile(rf"(?<![\w-]){re.escape(phrase)}(?![\w-])"),
        )
        for field_type, phrases in FIELD_SYNONYMS.items()
        for phrase in phrases
    ),
    key=lambda m: -len(m.phrase),
)


def detect_field_type(text: str) -> FieldType | None:
    """Detect the field type mentioned in normalized text (longest phrase wins)."""

    if not text:
        return None
    for match in _FIELD_MATCHES:
        if match.pattern.search(text):
            return match.field_type
    return None


def detect_dataset_phrase(text: str) -> DatasetIntentType | None:
    """Detect an aggregate query from explicit phrase cues."""

    if not text:
        return None
    for pattern, dataset_type in DATASET_PHRASE_HINTS:
        if pattern.search(text):
            return dataset_type
    return None
