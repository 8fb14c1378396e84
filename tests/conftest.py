"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- A manually advanced clock for deterministic expiry tests
- A notifier that records published events
- A registry wired to the in-memory repository
"""

import pytest
from registry_fakes import ManualClock, RecordingNotifier

from namereg.adapters.repository.memory import InMemoryNameRepository
from namereg.domain.registry import NameRegistry


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def repository() -> InMemoryNameRepository:
    return InMemoryNameRepository()


@pytest.fixture
def registry(
    repository: InMemoryNameRepository, clock: ManualClock, notifier: RecordingNotifier
) -> NameRegistry:
    """Registry with no grace period and a one-year default term."""
    return NameRegistry(repository=repository, clock=clock, notifier=notifier)
