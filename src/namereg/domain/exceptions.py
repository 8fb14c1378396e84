"""
Domain exceptions - Error types that are not business outcomes.

Expected business outcomes (name taken, not found, unauthorized, locked)
are returned as RegistryResult values and never raised. The exceptions
here signal conditions the caller cannot treat as a normal answer.
"""


class RegistryError(Exception):
    """Base class for name registry errors."""

    pass


class RegistryUnavailable(RegistryError):
    """Durability backend failed; the operation was not applied."""

    pass


class InvalidRequest(RegistryError, ValueError):
    """Malformed name or non-positive duration."""

    pass
