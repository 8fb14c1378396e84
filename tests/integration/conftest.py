"""
Shared fixtures for integration tests.

Requires PostgreSQL reachable at settings.database_url (e.g. via
docker-compose). Every test in this directory is skipped when it is not.
"""

from collections.abc import Generator

import psycopg
import pytest
from psycopg_pool import ConnectionPool

from namereg.adapters.repository.postgres import PostgresNameRepository, run_migrations
from namereg.config.settings import get_settings

pytestmark = pytest.mark.integration


@pytest.fixture(scope="module")
def pool() -> Generator[ConnectionPool, None, None]:
    """Create connection pool for integration tests, skipping if no database."""
    settings = get_settings()
    try:
        with psycopg.connect(settings.database_url, connect_timeout=2):
            pass
    except psycopg.OperationalError as e:
        pytest.skip(f"PostgreSQL not available: {e}")

    pool = ConnectionPool(
        conninfo=settings.database_url,
        min_size=1,
        max_size=10,
        open=True,
    )
    run_migrations(pool)
    yield pool
    pool.close()


@pytest.fixture
def repository(pool: ConnectionPool) -> PostgresNameRepository:
    """Create repository instance for each test."""
    return PostgresNameRepository(pool)


@pytest.fixture(autouse=True)
def clean_database(pool: ConnectionPool) -> Generator[None, None, None]:
    """Clean name_records table before each test."""
    with pool.connection() as conn:
        conn.execute("DELETE FROM name_records")
        conn.commit()
    yield
