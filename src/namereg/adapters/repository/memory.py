"""
In-memory repository adapter - Implements NameRepository protocol.

Process-local backend for development and tests. Records are immutable
snapshots, so storing the instances themselves is safe.
"""

import threading

from namereg.domain.ports import NameRecord


class InMemoryNameRepository:
    """
    Implements NameRepository protocol with a guarded dict.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self, records: list[NameRecord] | None = None) -> None:
        self._lock = threading.Lock()
        self._records: dict[str, NameRecord] = {r.name: r for r in records or []}

    def load_all(self) -> list[NameRecord]:
        with self._lock:
            return list(self._records.values())

    def save(self, record: NameRecord) -> None:
        with self._lock:
            self._records[record.name] = record

    def delete(self, name: str) -> None:
        with self._lock:
            self._records.pop(name, None)

    def get(self, name: str) -> NameRecord | None:
        """Read back a persisted record."""
        with self._lock:
            return self._records.get(name)
