"""
Name registry domain service - authoritative owner of all name records.

Lifecycle per name
==================

    UNREGISTERED -> ACTIVE -> EXPIRED -> UNREGISTERED

- register creates an ACTIVE record owned by the caller.
- A record becomes EXPIRED once the clock reaches expires_at. Expired
  records are invisible to lookup and reject every owner operation
  except renew, which stays allowed until expires_at + grace period.
- Past the grace period the name is released, either by sweep_expired
  or lazily by the next register for that name.

The locked flag is independent of expiry. It blocks transfer and
address/record changes, never renewal.

Concurrency
===========

Mutations on the same name are serialized by a per-name lock. Different
names never contend, except for the O(1) insert/remove on the shared
table. Each mutation writes to the repository first and only then swaps
the new immutable snapshot into memory, so a backend failure leaves
state untouched and lookups never observe partial updates.
"""

import logging
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field, replace

from .exceptions import InvalidRequest, RegistryUnavailable
from .ports import (
    Clock,
    EventKind,
    EventNotifier,
    Lookup,
    NameEntry,
    NameRecord,
    NameRepository,
    NameState,
    RegistryEvent,
    RegistryResult,
)

logger = logging.getLogger(__name__)

ONE_YEAR_SECONDS = 31_536_000


class _LockEntry:
    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.users = 0


class _NameLocks:
    """
    Table of per-name mutexes.

    Entries are reference-counted and removed once no thread holds or waits
    on them, so the table only grows with the number of names in flight.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._entries: dict[str, _LockEntry] = {}

    @contextmanager
    def hold(self, name: str) -> Iterator[None]:
        with self._guard:
            entry = self._entries.get(name)
            if entry is None:
                entry = self._entries[name] = _LockEntry()
            entry.users += 1

        entry.lock.acquire()
        try:
            yield
        finally:
            entry.lock.release()
            with self._guard:
                entry.users -= 1
                if entry.users == 0:
                    del self._entries[name]

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)


@dataclass
class NameRegistry:
    """
    Domain service for name registration.

    Orchestrates ownership, expiry and lock rules, persistence through the
    repository port, and event publication through the notifier port.
    """

    repository: NameRepository
    clock: Clock
    notifier: EventNotifier
    default_term_seconds: int = ONE_YEAR_SECONDS
    grace_period_seconds: int = 0
    max_name_length: int = 253

    _records: dict[str, NameRecord] = field(default_factory=dict, init=False, repr=False)
    _table_lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)
    _name_locks: _NameLocks = field(default_factory=_NameLocks, init=False, repr=False)

    def load(self) -> int:
        """
        Rebuild in-memory state from the repository.

        Returns:
            Number of records loaded

        Raises:
            RegistryUnavailable: If the backend cannot be read
        """
        records = self.repository.load_all()
        with self._table_lock:
            self._records = {record.name: record for record in records}
        logger.info("Loaded %d name record(s) from repository", len(records))
        return len(records)

    def register(
        self, name: str, caller: str, duration_seconds: int | None = None
    ) -> RegistryResult:
        """
        Register a name to the caller for the given duration.

        An existing record past its grace period is released first; any
        other existing record makes the name unavailable.

        Args:
            name: Name to register (will be normalized)
            caller: Attested identity of the registering principal
            duration_seconds: Term length, defaults to one term

        Returns:
            SUCCESS or NAME_TAKEN

        Raises:
            InvalidRequest: Malformed name, caller or duration
            RegistryUnavailable: Backend write failed
        """
        name = self._normalize_name(name)
        self._check_caller(caller)
        duration = self._positive_seconds(duration_seconds, "duration_seconds")

        with self._name_locks.hold(name):
            now = self.clock.now()
            current = self._records.get(name)
            if current is not None and not self._is_released(current, now):
                return RegistryResult.NAME_TAKEN

            record = NameRecord(
                name=name,
                owner=caller,
                expires_at=now + duration,
                registered_at=now,
            )
            self.repository.save(record)
            self._put(record)

            if current is not None:
                logger.info("Released expired name %s from %s", name, current.owner)
                self._publish(EventKind.EXPIRED, current, now)
            self._publish(EventKind.REGISTERED, record, now)
        return RegistryResult.SUCCESS

    def lookup(self, name: str) -> Lookup:
        """
        Return a snapshot of an active record.

        Expired records are reported as NAME_NOT_FOUND so stale ownership
        never leaks to callers.
        """
        name = self._normalize_name(name)
        record = self._records.get(name)
        if record is None or record.is_expired(self.clock.now()):
            return Lookup(RegistryResult.NAME_NOT_FOUND)
        return Lookup(RegistryResult.SUCCESS, record)

    def state_of(self, name: str) -> NameState:
        """Report the lifecycle state of a name at the current time."""
        name = self._normalize_name(name)
        record = self._records.get(name)
        now = self.clock.now()
        if record is None or self._is_released(record, now):
            return NameState.UNREGISTERED
        if record.is_expired(now):
            return NameState.EXPIRED
        return NameState.ACTIVE

    def renew(
        self, name: str, caller: str, extension_seconds: int | None = None
    ) -> RegistryResult:
        """
        Extend a name's expiry by the given amount.

        Renewal is additive to the current expiry, so stacked renewals never
        lose remaining time. Locked names can still be renewed. An owner may
        renew an expired name until the grace period ends.

        Returns:
            SUCCESS, NAME_NOT_FOUND or UNAUTHORIZED
        """
        name = self._normalize_name(name)
        extension = self._positive_seconds(extension_seconds, "extension_seconds")

        with self._name_locks.hold(name):
            now = self.clock.now()
            current = self._records.get(name)
            if current is None or self._is_released(current, now):
                return RegistryResult.NAME_NOT_FOUND
            if current.owner != caller:
                return RegistryResult.UNAUTHORIZED

            renewed = replace(current, expires_at=current.expires_at + extension)
            self._commit(renewed, EventKind.RENEWED, now)
        return RegistryResult.SUCCESS

    def lock(self, name: str, caller: str) -> RegistryResult:
        """Lock a name against transfer and record changes. Idempotent."""
        return self._owner_update(
            name, caller, EventKind.LOCKED, lambda r: replace(r, locked=True)
        )

    def unlock(self, name: str, caller: str) -> RegistryResult:
        """Clear the lock flag. Idempotent."""
        return self._owner_update(
            name, caller, EventKind.UNLOCKED, lambda r: replace(r, locked=False)
        )

    def set_primary_address(
        self, name: str, caller: str, address: str | None
    ) -> RegistryResult:
        """Set or clear (address=None) the resolved target of a name."""
        return self._owner_update(
            name,
            caller,
            EventKind.UPDATED,
            lambda r: replace(r, primary_address=address),
            lock_gated=True,
        )

    def add_record(self, name: str, caller: str, entry: NameEntry) -> RegistryResult:
        """Append an auxiliary entry. Adding an identical entry again is a no-op."""

        def change(record: NameRecord) -> NameRecord:
            if entry in record.records:
                return record
            return replace(record, records=record.records + (entry,))

        return self._owner_update(name, caller, EventKind.UPDATED, change, lock_gated=True)

    def remove_record(self, name: str, caller: str, entry: NameEntry) -> RegistryResult:
        """Remove an auxiliary entry. Removing an absent entry is a no-op."""

        def change(record: NameRecord) -> NameRecord:
            if entry not in record.records:
                return record
            remaining = tuple(e for e in record.records if e != entry)
            return replace(record, records=remaining)

        return self._owner_update(name, caller, EventKind.UPDATED, change, lock_gated=True)

    def transfer(self, name: str, caller: str, new_owner: str) -> RegistryResult:
        """Hand ownership to another principal. Rejected while locked."""
        self._check_caller(new_owner)
        return self._owner_update(
            name,
            caller,
            EventKind.TRANSFERRED,
            lambda r: replace(r, owner=new_owner),
            lock_gated=True,
        )

    def sweep_expired(self, now: float | None = None) -> int:
        """
        Release every name whose grace period has ended.

        Each release is an independent atomic transition taken under the
        name's lock, with expiry re-checked after acquiring it since a
        concurrent renew may have won. Backend failures are logged and the
        name is left for the next pass; this method never raises for them.

        Args:
            now: Reference time, defaults to the clock

        Returns:
            Number of names released
        """
        if now is None:
            now = self.clock.now()

        with self._table_lock:
            candidates = [
                name for name, record in self._records.items() if self._is_released(record, now)
            ]

        released = 0
        for name in candidates:
            with self._name_locks.hold(name):
                current = self._records.get(name)
                if current is None or not self._is_released(current, now):
                    continue
                try:
                    self.repository.delete(name)
                except RegistryUnavailable as e:
                    logger.warning("Sweep could not release %s, retrying next pass: %s", name, e)
                    continue
                self._drop(name)
                self._publish(EventKind.EXPIRED, current, now)
                released += 1

        if released:
            logger.info("Sweep released %d expired name(s)", released)
        return released

    def _owner_update(
        self,
        name: str,
        caller: str,
        kind: EventKind,
        change: Callable[[NameRecord], NameRecord],
        lock_gated: bool = False,
    ) -> RegistryResult:
        """
        Apply an owner-only change to an active record.

        A change that yields an equal record is a successful no-op: nothing
        is written and no event is published.
        """
        name = self._normalize_name(name)

        with self._name_locks.hold(name):
            now = self.clock.now()
            current = self._records.get(name)
            if current is None or current.is_expired(now):
                return RegistryResult.NAME_NOT_FOUND
            if current.owner != caller:
                return RegistryResult.UNAUTHORIZED
            if lock_gated and current.locked:
                return RegistryResult.NAME_LOCKED

            updated = change(current)
            if updated != current:
                self._commit(updated, kind, now)
        return RegistryResult.SUCCESS

    def _commit(self, record: NameRecord, kind: EventKind, now: float) -> None:
        # Durable write first: a RegistryUnavailable here leaves memory untouched.
        self.repository.save(record)
        self._put(record)
        self._publish(kind, record, now)

    def _put(self, record: NameRecord) -> None:
        with self._table_lock:
            self._records[record.name] = record

    def _drop(self, name: str) -> None:
        with self._table_lock:
            self._records.pop(name, None)

    def _publish(self, kind: EventKind, record: NameRecord, now: float) -> None:
        """
        Deliver an event for a change that is already committed.

        Notifier failures are logged and not propagated: the caller's
        operation has succeeded and reporting it as failed would invite a
        retry against the new state.
        """
        event = RegistryEvent(
            kind=kind,
            name=record.name,
            owner=record.owner,
            expires_at=record.expires_at,
            occurred_at=now,
        )
        try:
            self.notifier.publish(event)
        except Exception:
            logger.exception("Failed to publish %s event for %s", kind.value, record.name)

    def _is_released(self, record: NameRecord, now: float) -> bool:
        return now >= record.expires_at + self.grace_period_seconds

    def _normalize_name(self, name: str) -> str:
        """
        Normalize a name for consistent storage and lookup.

        Applies: strip whitespace + lowercase, then validates shape.
        """
        normalized = name.strip().lower()
        if not normalized:
            raise InvalidRequest("name must not be empty")
        if len(normalized) > self.max_name_length:
            raise InvalidRequest(f"name exceeds {self.max_name_length} characters")
        if any(ch.isspace() for ch in normalized):
            raise InvalidRequest(f"name must not contain whitespace: {normalized!r}")
        return normalized

    def _check_caller(self, caller: str) -> None:
        if not caller or not caller.strip():
            raise InvalidRequest("caller identity must not be empty")

    def _positive_seconds(self, value: int | None, label: str) -> int:
        if value is None:
            return self.default_term_seconds
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise InvalidRequest(f"{label} must be a positive integer, got {value!r}")
        return value
