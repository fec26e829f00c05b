"""Text normalization for deterministic intent parsing."""

from __future__ import annotations

import re

_MULTISPACE_RE = re.compile(r"\s+")


def normalize_text(text: str) -> str:
    """Normalize user text for rules-based parsing.

    Normalization is intentionally conservative:
        - Lowercase.
        - Normalize unicode dashes and curly apostrophes to ASCII.
        - Collapse whitespace.

    Punctuation is kept: the rules rely on `$` and `#` markers.
    """

    value = (text or "").strip().lower()

    value = value.replace("—", "-").replace("–", "-")
    value = value.replace("’", "'").replace("‘", "'")

    value = _MULTISPACE_RE.sub(" ", value).strip()
    return value
