"""Repository adapters - Durability backend implementations."""

from .memory import InMemoryNameRepository
from .postgres import PostgresNameRepository, run_migrations

__all__ = ["InMemoryNameRepository", "PostgresNameRepository", "run_migrations"]
