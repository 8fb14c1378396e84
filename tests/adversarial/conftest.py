"""
Shared fixtures for adversarial tests.

Provides a registry on the real system clock so concurrent operations
race against genuine wall-clock time, plus a repository whose writes can
be held open to widen race windows.
"""

import threading

import pytest
from registry_fakes import RecordingNotifier

from namereg.adapters.clock.system import SystemClock
from namereg.adapters.repository.memory import InMemoryNameRepository
from namereg.domain.ports import NameRecord
from namereg.domain.registry import NameRegistry

# Module-level marker for all adversarial tests
pytestmark = pytest.mark.adversarial


class GatedRepository(InMemoryNameRepository):
    """In-memory repository that blocks saves for chosen names until released."""

    def __init__(self) -> None:
        super().__init__()
        self.gated: set[str] = set()
        self.entered = threading.Event()
        self.release = threading.Event()

    def save(self, record: NameRecord) -> None:
        if record.name in self.gated:
            self.entered.set()
            self.release.wait(timeout=10)
        super().save(record)


@pytest.fixture
def concurrent_registry() -> NameRegistry:
    """Registry on the system clock with a recording notifier."""
    return NameRegistry(
        repository=InMemoryNameRepository(),
        clock=SystemClock(),
        notifier=RecordingNotifier(),
    )


@pytest.fixture
def gated_repository() -> GatedRepository:
    return GatedRepository()
