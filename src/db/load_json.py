"""Load a property dataset JSON file into Postgres.

The dataset is expected to be a JSON object with a top-level key `"properties"` containing a list of
property objects keyed by the `properties` table column names.
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import LiteralString, cast
from urllib.request import urlopen

from dotenv import load_dotenv

from src.db.connection import connect, require_database_url
from src.db.dataset_rows import PROPERTY_COLUMNS, iter_property_rows


def _load_json_bytes(*, path: str | None, url: str | None) -> bytes:
    if bool(path) == bool(url):
        raise ValueError("Exactly one of --path or --url must be provided")

    if path:
        return Path(path).read_bytes()

    assert url is not None
    with urlopen(url) as resp:  # noqa: S310 (controlled URL from CLI)
        return resp.read()


def _upsert_sql() -> str:
    columns = ", ".join(PROPERTY_COLUMNS)
    placeholders = ", ".join("%s" for _ in PROPERTY_COLUMNS)
    updates = ", ".join(f"{c} = EXCLUDED.{c}" for c in PROPERTY_COLUMNS if c != "id")
    return (
        f"INSERT INTO properties ({columns}) VALUES ({placeholders}) "
        f"ON CONFLICT (id) DO UPDATE SET {updates}, updated_at = NOW()"
    )


def load_dataset(*, path: str | None, url: str | None, truncate: bool) -> int:
    """Upsert the dataset into the `properties` table and return the number of rows."""

    load_dotenv(".env")
    database_url = require_database_url()

    payload = json.loads(_load_json_bytes(path=path, url=url))

    if (
            not isinstance(payload, dict)
            or "properties" not in payload
            or not isinstance(payload["properties"], list)
    ):
        raise ValueError(
            "Unexpected dataset format: expected object with key 'properties' containing a list"
        )

    rows = list(iter_property_rows(payload["properties"]))

    with connect(database_url) as conn:
        with conn.transaction():
            with conn.cursor() as cur:
                if truncate:
                    cur.execute("TRUNCATE properties", prepare=False)
                cur.executemany(cast(LiteralString, _upsert_sql()), rows)

    return len(rows)


def main() -> None:
    """CLI entry point for loading the dataset into Postgres."""

    parser = argparse.ArgumentParser(description="Load a property dataset into Postgres.")
    src = parser.add_mutually_exclusive_group(required=True)
    src.add_argument("--path", help="Path to the dataset JSON file (e.g. properties.json).")
    src.add_argument("--url", help="URL to download the dataset JSON.")
    parser.add_argument(
        "--truncate",
        action="store_true",
        help="TRUNCATE the properties table before loading (destructive).",
    )
    args = parser.parse_args()

    count = load_dataset(path=args.path, url=args.url, truncate=args.truncate)
    print(f"loaded {count} properties")


if __name__ == "__main__":
    main()
