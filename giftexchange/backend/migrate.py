"""Apply the local event storage schema to PostgreSQL."""

from __future__ import annotations

from pathlib import Path

from giftexchange.backend.config import load_settings
from giftexchange.backend.errors import LocalStorageError

SCHEMA_PATH = Path(__file__).with_name("db_schema.sql")


def main() -> None:
    settings = load_settings()
    if not settings.database_url:
        raise LocalStorageError("GIFTEXCHANGE_DATABASE_URL is required for migration")

    import psycopg

    schema_sql = SCHEMA_PATH.read_text(encoding="utf-8")

    try:
        with psycopg.connect(settings.database_url) as conn:
            with conn.cursor() as cur:
                cur.execute(schema_sql)
            conn.commit()
    except psycopg.Error as exc:
        raise LocalStorageError(f"Schema migration failed: {exc}") from exc


if __name__ == "__main__":
    main()
