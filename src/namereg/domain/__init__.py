"""
Domain layer - Pure business logic with zero framework imports.

This package contains the core business logic for the name registry:
ownership, expiry, renewal and locking rules. It defines its own port
interfaces for infrastructure abstraction, ensuring true hexagonal
architecture decoupling.
"""

from .exceptions import InvalidRequest, RegistryError, RegistryUnavailable
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
from .registry import ONE_YEAR_SECONDS, NameRegistry
from .sweeper import ExpirySweeper

__all__ = [
    "Clock",
    "EventKind",
    "EventNotifier",
    "ExpirySweeper",
    "InvalidRequest",
    "Lookup",
    "NameEntry",
    "NameRecord",
    "NameRegistry",
    "NameRepository",
    "NameState",
    "ONE_YEAR_SECONDS",
    "RegistryError",
    "RegistryEvent",
    "RegistryResult",
    "RegistryUnavailable",
]
