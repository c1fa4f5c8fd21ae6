"""
Custom exceptions for the gridstore.io module.

Purpose
- Provide IO-layer error types for the persistence gateways.
- Keep gridstore.core as the source of truth for structural/coercion/data-loss errors
  (see gridstore.core.errors); both families share GridStoreError as base.

Errors
- StoreConnectionError: backing connection missing, of the wrong kind, closed or broken.
- PersistenceError: the backing store's load/replace operation itself failed
  (IO error, constraint violation, unreadable file).
- StoreConfigError: invalid or unsupported settings.

Notes
- These exceptions do not perform any IO and are stdlib-only.
"""

from __future__ import annotations

from gridstore.core.errors import ErrorKind, GridStoreError

__all__ = [
    "StoreConnectionError",
    "PersistenceError",
    "StoreConfigError",
]


class StoreConnectionError(GridStoreError):
    """Raised when the backing connection is unusable (null, wrong kind, not live)."""

    kind = ErrorKind.CONNECTION
    default_summary = "Invalid database connection"


class PersistenceError(GridStoreError):
    """
    Raised when reading from or writing to the backing store fails.

    Notes:
        Writes are all-or-nothing from the caller's perspective: on PersistenceError the
        previously stored table is left in place.
    """

    kind = ErrorKind.PERSISTENCE
    default_summary = "Database operation failed"


class StoreConfigError(StoreConnectionError):
    """
    Raised when store settings are invalid or unsupported.

    Examples:
        - Unknown backend name
        - Table name that is not a plain SQL identifier
    """

    default_summary = "Invalid store configuration"
