"""UI quick-action buttons sourced from a spreadsheet, served through a short-lived cache.

Rows come from a public sheet JSON endpoint in one of several shapes, are normalized to `UIButton`,
filtered to available + labeled items and sorted by descending priority.
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from pydantic import BaseModel

logger = logging.getLogger(__name__)

_TRUTHY = {"true", "yes", "1", "y"}


class UIConfigError(RuntimeError):
    """Raised when the button source is not configured or cannot be read."""


class UIButton(BaseModel):
    """One normalized quick-action button."""

    label: str
    type: str = "action"
    icon: str = ""
    payload: str = ""
    groups: str = ""
    priority: float = 0.0
    available: bool = False


def _first(row: Mapping[str, Any], *keys: str) -> Any:
    """First truthy value among `keys` (JS `a || b || c` semantics)."""

    for key in keys:
        value = row.get(key)
        if value:
            return value
    return None


def _first_present(row: Mapping[str, Any], *keys: str) -> Any:
    """First non-null value among `keys` (JS `a ?? b ?? c` semantics)."""

    for key in keys:
        value = row.get(key)
        if value is not None:
            return value
    return None


def _to_priority(value: Any) -> float:
    try:
        number = float(value if value is not None else 0)
    except (TypeError, ValueError):
        return 0.0
    return number if number == number else 0.0  # NaN -> 0


def normalize_row(raw: Mapping[str, Any]) -> UIButton:
    """Normalize one sheet row (header casing and aliases vary between sheets)."""

    row = {str(k).strip(): v for k, v in raw.items()}

    available = str(_first_present(row, "available", "Available", "AVAILABLE") or "").strip()
    label = _first(row, "label", "Label", "name", "Name") or ""

    return UIButton(
        label=str(label),
        type=str(_first(row, "type", "Type") or "action").lower(),
        icon=str(_first(row, "icon", "Icon") or ""),
        payload=str(_first(row, "payload", "Payload", "action", "Action", "label") or label),
        groups=str(_first(row, "groups", "Groups") or ""),
        priority=_to_priority(_first_present(row, "priority", "Priority")),
        available=available.lower() in _TRUTHY,
    )


def _rows_from_values(values: list[Any]) -> list[dict[str, Any]]:
    if not values:
        return []
    headers, *body = values
    keys = [str(h or "").strip() for h in headers]
    return [
        {key: (row[i] if i < len(row) else None) for i, key in enumerate(keys)}
        for row in body
        if isinstance(row, list)
    ]


def rows_from_payload(data: Any) -> list[dict[str, Any]]:
    """Extract raw row dicts from the supported sheet JSON shapes; unknown shapes yield `[]`."""

    if isinstance(data, list):
        rows: list[Any] = data
    elif not isinstance(data, dict):
        rows = []
    elif isinstance(data.get("values"), list):
        rows = _rows_from_values(data["values"])
    elif isinstance(data.get("rows"), list):
        rows = data["rows"]
    elif isinstance(data.get("feed"), dict) and isinstance(data["feed"].get("entry"), list):
        rows = [e.get("content", e) if isinstance(e, dict) else e for e in data["feed"]["entry"]]
    elif isinstance(data.get("items"), list):
        rows = data["items"]
    else:
        rows = []
    return [r for r in rows if isinstance(r, Mapping)]


def normalize_buttons(rows: list[Mapping[str, Any]]) -> list[UIButton]:
    """Normalize, keep available + labeled buttons, sort by priority (highest first, stable)."""

    buttons = [normalize_row(r) for r in rows]
    visible = [b for b in buttons if b.label and b.available]
    return sorted(visible, key=lambda b: -b.priority)


def fetch_sheet_buttons(url: str | None, *, timeout_s: float = 15.0) -> list[UIButton]:
    """Fetch and normalize buttons from a public sheet JSON URL."""

    if not url:
        raise UIConfigError("SHEETS_PUBLIC_JSON_URL is not set")

    try:
        req = Request(url, headers={"Cache-Control": "no-cache"})
        with urlopen(req, timeout=timeout_s) as resp:  # noqa: S310 (configured URL)
            data = json.loads(resp.read())
    except HTTPError as exc:
        raise UIConfigError(f"Failed to fetch sheet JSON: {exc.code}") from exc
    except (URLError, TimeoutError) as exc:
        raise UIConfigError("Failed to reach sheet JSON endpoint") from exc
    except json.JSONDecodeError as exc:
        raise UIConfigError("Sheet endpoint did not return JSON") from exc
    except ValueError as exc:
        raise UIConfigError("SHEETS_PUBLIC_JSON_URL is not a valid URL") from exc

    return normalize_buttons(rows_from_payload(data))


@dataclass
class ButtonCache:
    """Time-boxed cache state for the button list.

    Concurrent refreshes are not coordinated; two callers may both miss and both reload.
    """

    ttl_s: float = 600.0
    fetched_at: float = 0.0
    items: list[UIButton] | None = None

    def is_fresh(self, now: float) -> bool:
        return self.items is not None and now - self.fetched_at < self.ttl_s

    def store(self, items: list[UIButton], now: float) -> None:
        self.items = items
        self.fetched_at = now


def get_ui_buttons(
        cache: ButtonCache,
        loader: Callable[[], list[UIButton]],
        *,
        now: float | None = None,
) -> tuple[list[UIButton], bool]:
    """Return `(items, cached)`: fresh cached items, or freshly loaded ones stored into `cache`."""

    current = time.monotonic() if now is None else now
    if cache.is_fresh(current) and cache.items is not None:
        return cache.items, True

    items = loader()
    cache.store(items, current)
    logger.info("ui buttons refreshed count=%d", len(items))
    return items, False
