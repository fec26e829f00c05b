"""Pytest configuration.

The repository uses a flat `src/` namespace layout. This conftest ensures tests can import from the
`src.*` namespace when running `pytest` without installing the package.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure `import src...` works when running pytest without installing the package.
REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT))


@pytest.fixture
def make_intent():
    """Factory for Intent records (snake_case field overrides)."""

    from src.intent.schema import Intent

    def _make(**fields) -> Intent:
        fields.setdefault("input_message", "test message")
        return Intent(**fields)

    return _make
