"""Authoritative name registry with ownership, expiry and locking."""

__version__ = "0.1.0"
