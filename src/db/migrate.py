"""Create or upgrade the `properties` schema.

Migrations are plain `.sql` files under `src/db/migrations/`, applied in lexicographic order, each
in its own transaction. Applied filenames are recorded in `schema_migrations`.
"""

from __future__ import annotations

import argparse
import logging
import os
from collections.abc import Collection, Sequence
from pathlib import Path
from typing import LiteralString, cast

import psycopg
from dotenv import load_dotenv

from src.config.logging import configure_logging
from src.db.connection import connect, require_database_url

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"

_CREATE_LEDGER = """
    CREATE TABLE IF NOT EXISTS schema_migrations
    (
        filename   TEXT PRIMARY KEY,
        applied_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    )
"""


def list_migration_files(directory: Path = MIGRATIONS_DIR) -> list[Path]:
    """Return migration files in apply order."""

    files = sorted(p for p in directory.glob("*.sql") if p.is_file())
    if not files:
        raise RuntimeError(f"No .sql migration files found in {directory}")
    return files


def pending_migrations(files: Sequence[Path], applied: Collection[str]) -> list[Path]:
    """Files not yet recorded in the ledger, in apply order."""

    return [f for f in files if f.name not in applied]


def _applied_names(conn: psycopg.Connection) -> set[str]:
    conn.execute(_CREATE_LEDGER, prepare=False)
    return {row[0] for row in conn.execute("SELECT filename FROM schema_migrations").fetchall()}


def migrate(*, recreate: bool = False, dry_run: bool = False) -> list[str]:
    """Apply pending migrations to `DATABASE_URL` and return the applied filenames.

    With `dry_run` nothing is executed; the pending filenames are returned instead.
    """

    load_dotenv(".env")
    files = list_migration_files()

    with connect(require_database_url()) as conn:
        if recreate and not dry_run:
            logger.warning("dropping properties and schema_migrations")
            conn.execute(
                "DROP TABLE IF EXISTS properties; DROP TABLE IF EXISTS schema_migrations;",
                prepare=False,
            )

        pending = pending_migrations(files, _applied_names(conn))
        if dry_run:
            return [f.name for f in pending]

        for path in pending:
            with conn.transaction():
                conn.execute(cast(LiteralString, path.read_text(encoding="utf-8")), prepare=False)
                conn.execute(
                    "INSERT INTO schema_migrations (filename) VALUES (%s)",
                    (path.name,),
                    prepare=False,
                )
            logger.info("applied migration %s", path.name)

    return [f.name for f in pending]


def main() -> None:
    """CLI entry point for applying migrations."""

    parser = argparse.ArgumentParser(description="Apply SQL migrations to Postgres.")
    parser.add_argument(
        "--recreate",
        action="store_true",
        help="Drop the properties table and the ledger, then re-apply everything (destructive).",
    )
    parser.add_argument(
        "--list",
        dest="dry_run",
        action="store_true",
        help="Only print pending migrations.",
    )
    args = parser.parse_args()

    load_dotenv(".env")
    configure_logging(os.getenv("LOG_LEVEL", "INFO"))
    names = migrate(recreate=args.recreate, dry_run=args.dry_run)
    print("\n".join(names) if names else "nothing to apply")


if __name__ == "__main__":
    main()
