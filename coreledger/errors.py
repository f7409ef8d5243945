"""
Exception hierarchy for the Core Ledger.

Every failure the core surfaces to its callers derives from ``LedgerError`` so
that the presentation layer (here, the CLI) can render one actionable message
per failure. Underlying ``sqlite3`` / ``pydantic`` errors are always chained.
"""

from __future__ import annotations


class LedgerError(Exception):
    """Base exception for ledger operations."""


class InitializationError(LedgerError):
    """The store could not be opened or created; fatal at startup."""


class PersistenceError(LedgerError):
    """A single read, write, or delete against the store failed."""


class InvalidRecordError(LedgerError, ValueError):
    """A record violates the data model and was refused before writing."""


class EncodeError(LedgerError):
    """The in-memory dataset could not be serialized to a backup document."""


class DecodeError(LedgerError):
    """Backup bytes are unusable. Raised before anything destructive happens."""


class MalformedBackupError(DecodeError):
    """The bytes are not parseable JSON (or not UTF-8 text)."""


class InvalidBackupError(DecodeError):
    """Parsed JSON lacks the ``clients`` or ``deals`` collection."""

    def __init__(self, message: str = "This does not appear to be a valid backup file.") -> None:
        super().__init__(message)


class EmptyLedgerError(LedgerError):
    """Export was requested while the ledger holds no clients and no deals."""

    def __init__(self, message: str = "There is no data to export.") -> None:
        super().__init__(message)


class RestoreError(LedgerError):
    """A restore aborted after the backup document was decoded."""


class PartialRestoreError(RestoreError):
    """The wipe was committed but the client batch failed: the store is empty."""


__all__ = [
    "LedgerError",
    "InitializationError",
    "PersistenceError",
    "InvalidRecordError",
    "EncodeError",
    "DecodeError",
    "MalformedBackupError",
    "InvalidBackupError",
    "EmptyLedgerError",
    "RestoreError",
    "PartialRestoreError",
]
