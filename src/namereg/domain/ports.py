"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the value types shared across the registry and the
interfaces (ports) the domain requires from infrastructure: a durability
backend, a clock source and an event notifier. Adapters implement these
protocols.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol


class NameState(str, Enum):
    """
    Lifecycle states of a registrable name.

    State Transitions:
    - UNREGISTERED -> ACTIVE (successful register)
    - ACTIVE -> EXPIRED (clock passes expires_at)
    - EXPIRED -> ACTIVE (owner renews within the grace period)
    - EXPIRED -> UNREGISTERED (sweep or lazy release on register)

    The locked flag is orthogonal: an ACTIVE name may be locked or not,
    and locking never extends its life.
    """

    UNREGISTERED = "UNREGISTERED"
    ACTIVE = "ACTIVE"
    EXPIRED = "EXPIRED"


class RegistryResult(Enum):
    """
    Outcome of a registry operation.

    Every expected business condition is reported through one of these
    values rather than an exception.
    """

    SUCCESS = "success"
    NAME_TAKEN = "name_taken"
    NAME_NOT_FOUND = "name_not_found"
    UNAUTHORIZED = "unauthorized"
    NAME_LOCKED = "name_locked"


class EventKind(str, Enum):
    """Kinds of events published to the event notifier."""

    REGISTERED = "REGISTERED"
    RENEWED = "RENEWED"
    LOCKED = "LOCKED"
    UNLOCKED = "UNLOCKED"
    UPDATED = "UPDATED"
    TRANSFERRED = "TRANSFERRED"
    EXPIRED = "EXPIRED"


@dataclass(frozen=True)
class NameEntry:
    """Auxiliary key/value entry attached to a name (DNS-like)."""

    key: str
    value: str


@dataclass(frozen=True)
class NameRecord:
    """
    Immutable snapshot of a registered name.

    Mutations never modify a record in place; the registry swaps in a new
    instance, so readers always observe a fully applied state.
    """

    name: str
    owner: str
    expires_at: float
    registered_at: float
    locked: bool = False
    primary_address: str | None = None
    records: tuple[NameEntry, ...] = field(default_factory=tuple)

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


@dataclass(frozen=True)
class Lookup:
    """Result of a lookup: SUCCESS with a snapshot, or NAME_NOT_FOUND."""

    result: RegistryResult
    record: NameRecord | None = None

    @property
    def found(self) -> bool:
        return self.result == RegistryResult.SUCCESS


@dataclass(frozen=True)
class RegistryEvent:
    """Notification emitted after a state change has been committed."""

    kind: EventKind
    name: str
    owner: str
    expires_at: float
    occurred_at: float


class NameRepository(Protocol):
    """Port interface for the durability backend."""

    def load_all(self) -> list[NameRecord]:
        """
        Load every persisted record.

        Used on startup to rebuild the in-memory registry.

        Raises:
            RegistryUnavailable: If the backend cannot be reached
        """
        ...

    def save(self, record: NameRecord) -> None:
        """
        Durably write a record, replacing any previous record for its name.

        Writes must be idempotent so that re-applying a log on restart
        converges to the same state.

        Raises:
            RegistryUnavailable: If the write was not acknowledged
        """
        ...

    def delete(self, name: str) -> None:
        """
        Durably remove the record for a name. Deleting an absent name is a no-op.

        Raises:
            RegistryUnavailable: If the delete was not acknowledged
        """
        ...


class Clock(Protocol):
    """Port interface for the clock source."""

    def now(self) -> float:
        """Return the current time as seconds since the epoch."""
        ...


class EventNotifier(Protocol):
    """Port interface for downstream event delivery."""

    def publish(self, event: RegistryEvent) -> None:
        """
        Deliver a registry event.

        Args:
            event: Committed state change
        """
        ...
