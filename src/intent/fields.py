"""Field resolver: maps what the user asks about to a field type and an aggregate-query hint."""

from __future__ import annotations

from dataclasses import dataclass

from src.intent.dictionaries import FIELD_DATASET_HINTS, detect_dataset_phrase, detect_field_type
from src.intent.normalize import normalize_text
from src.intent.schema import DatasetIntentType, FieldType


@dataclass(frozen=True)
class FieldResolution:
    """Field type plus an optional dataset-query hint for downstream handlers."""

    field_type: FieldType
    dataset_hint: DatasetIntentType | None


def resolve_field_type(
        information_to_find: str | None,
        input_message: str | None,
) -> FieldResolution:
    """Resolve `(informationToFind, inputMessage)` into a `FieldResolution`.

    The extracted phrase is more specific than the raw message, so it is searched first. Both
    arguments may be null/empty; the result is then `(general, None)`.
    """

    info = normalize_text(information_to_find or "")
    message = normalize_text(input_message or "")

    field_type = detect_field_type(info) or detect_field_type(message) or FieldType.general

    dataset_hint = detect_dataset_phrase(info) or detect_dataset_phrase(message)
    if dataset_hint is None:
        dataset_hint = FIELD_DATASET_HINTS.get(field_type)

    return FieldResolution(field_type=field_type, dataset_hint=dataset_hint)
