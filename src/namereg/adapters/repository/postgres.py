"""
PostgreSQL repository adapter - Implements NameRepository protocol.

This module provides the PostgreSQL implementation of the domain's
repository port using psycopg3 with raw SQL.

Durability Design:
------------------
1. **Upsert writes**: save() uses INSERT ... ON CONFLICT (name) DO UPDATE,
   so re-applying the same record after a crash converges to the same row.

2. **Idempotent deletes**: delete() of an absent name affects zero rows and
   is not an error.

3. **Commit before return**: every write commits inside the pooled
   connection block. The domain only swaps in-memory state after this
   returns, so an unacknowledged write never becomes visible.

4. **Error translation**: any psycopg.Error (including pool timeouts) is
   re-raised as RegistryUnavailable so the domain never sees driver types.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import psycopg
from psycopg.types.json import Jsonb
from psycopg_pool import ConnectionPool

from namereg.domain.exceptions import RegistryUnavailable
from namereg.domain.ports import NameEntry, NameRecord

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).parent / "migrations"


@contextmanager
def _translate_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except psycopg.Error as e:
        logger.error("Name repository %s failed: %s", operation, e)
        raise RegistryUnavailable(f"{operation} failed: {e}") from e


class PostgresNameRepository:
    """
    Implements NameRepository protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries for security.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """
        Initialize repository with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
        """
        self._pool = pool

    def load_all(self) -> list[NameRecord]:
        """
        Load every persisted name record.

        Returns:
            Records in name order
        """
        sql = """
            SELECT name, owner, expires_at, registered_at, locked, primary_address, records
            FROM name_records
            ORDER BY name
        """

        with _translate_errors("load_all"):
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(sql)
                rows = cursor.fetchall()

        return [_row_to_record(row) for row in rows]

    def save(self, record: NameRecord) -> None:
        """
        Durably write a record, replacing any existing row for its name.

        Args:
            record: Snapshot to persist
        """
        sql = """
            INSERT INTO name_records
                (name, owner, expires_at, registered_at, locked, primary_address, records)
            VALUES (%s, %s, %s, %s, %s, %s, %s)
            ON CONFLICT (name) DO UPDATE
            SET owner = EXCLUDED.owner,
                expires_at = EXCLUDED.expires_at,
                registered_at = EXCLUDED.registered_at,
                locked = EXCLUDED.locked,
                primary_address = EXCLUDED.primary_address,
                records = EXCLUDED.records,
                updated_at = NOW()
        """
        entries = [{"key": e.key, "value": e.value} for e in record.records]

        with _translate_errors("save"):
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(
                    sql,
                    (
                        record.name,
                        record.owner,
                        record.expires_at,
                        record.registered_at,
                        record.locked,
                        record.primary_address,
                        Jsonb(entries),
                    ),
                )
                conn.commit()

    def delete(self, name: str) -> None:
        """
        Durably remove the record for a name (no-op when absent).

        Args:
            name: Normalized name
        """
        with _translate_errors("delete"):
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute("DELETE FROM name_records WHERE name = %s", (name,))
                conn.commit()


def _row_to_record(row: tuple) -> NameRecord:
    name, owner, expires_at, registered_at, locked, primary_address, entries = row
    return NameRecord(
        name=name,
        owner=owner,
        expires_at=float(expires_at),
        registered_at=float(registered_at),
        locked=bool(locked),
        primary_address=primary_address,
        records=tuple(NameEntry(e["key"], e["value"]) for e in entries or []),
    )


def run_migrations(pool: ConnectionPool, migrations_dir: Path = MIGRATIONS_DIR) -> None:
    """
    Execute all SQL migration files from the migrations directory.

    Migrations are executed in sorted order (alphabetically by filename).
    Each migration should be idempotent (use IF NOT EXISTS, etc.).

    Args:
        pool: psycopg3 ConnectionPool instance
        migrations_dir: Directory holding *.sql files
    """
    if not migrations_dir.exists():
        logger.warning("Migrations directory not found: %s", migrations_dir)
        return

    sql_files = sorted(migrations_dir.glob("*.sql"))

    if not sql_files:
        logger.info("No migration files found")
        return

    logger.info("Running %d migration(s)", len(sql_files))

    for sql_file in sql_files:
        logger.info("Executing migration: %s", sql_file.name)
        try:
            sql_content = sql_file.read_text()

            with pool.connection() as conn:
                conn.execute(sql_content)

            logger.info("Migration complete: %s", sql_file.name)
        except Exception as e:
            logger.error("Migration failed: %s - %s", sql_file.name, e)
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e
