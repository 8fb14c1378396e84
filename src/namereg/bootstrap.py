"""
Registry bootstrap - composition root.

Wires settings, adapters and the domain service together, and manages
startup and shutdown:
- Creates the database connection pool and runs migrations (postgres backend)
- Loads persisted records into the registry
- Starts and stops the background expiry sweeper
- Closes the connection pool on shutdown
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from psycopg_pool import ConnectionPool

from namereg.adapters.clock.system import SystemClock
from namereg.adapters.notifier.console import ConsoleEventNotifier
from namereg.adapters.repository import (
    InMemoryNameRepository,
    PostgresNameRepository,
    run_migrations,
)
from namereg.config.settings import Settings, get_settings
from namereg.domain.ports import Clock, EventNotifier, NameRepository
from namereg.domain.registry import NameRegistry
from namereg.domain.sweeper import ExpirySweeper

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    """Configure root logging from settings."""
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_registry(
    settings: Settings,
    repository: NameRepository,
    clock: Clock | None = None,
    notifier: EventNotifier | None = None,
) -> NameRegistry:
    """
    Create a registry service with injected dependencies.

    Defaults to the system clock and the console notifier.
    """
    return NameRegistry(
        repository=repository,
        clock=clock or SystemClock(),
        notifier=notifier or ConsoleEventNotifier(),
        default_term_seconds=settings.default_term_seconds,
        grace_period_seconds=settings.grace_period_seconds,
        max_name_length=settings.max_name_length,
    )


@contextmanager
def open_registry(
    settings: Settings | None = None,
    clock: Clock | None = None,
    notifier: EventNotifier | None = None,
) -> Iterator[NameRegistry]:
    """
    Open a fully wired registry for the lifetime of the block.

    Usage:
        with open_registry() as registry:
            registry.register("example.stx", "principal-user1")
    """
    settings = settings or get_settings()
    configure_logging(settings)

    logger.info("Starting name registry (backend=%s)...", settings.backend)

    pool: ConnectionPool | None = None
    sweeper: ExpirySweeper | None = None
    try:
        repository: NameRepository
        if settings.backend == "postgres":
            logger.info("Connecting to database...")
            pool = ConnectionPool(
                conninfo=settings.database_url,
                min_size=settings.pool_min_size,
                max_size=settings.pool_max_size,
                open=True,
            )
            logger.info("Running database migrations...")
            run_migrations(pool)
            repository = PostgresNameRepository(pool)
        else:
            repository = InMemoryNameRepository()

        registry = build_registry(settings, repository, clock=clock, notifier=notifier)
        registry.load()

        if settings.sweep_interval_seconds > 0:
            sweeper = ExpirySweeper(registry, settings.sweep_interval_seconds)
            sweeper.start()

        logger.info("Name registry startup complete")
        yield registry
    finally:
        logger.info("Shutting down name registry...")
        if sweeper is not None:
            sweeper.stop()
        if pool is not None:
            pool.close()
            logger.info("Database connection pool closed")
