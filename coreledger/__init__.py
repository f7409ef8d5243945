"""
Core Ledger - local persistence and backup/restore for a personal business ledger.

The package keeps track of clients (counterparties) and deals (transactions
with those clients) in a single local SQLite file, and moves the whole dataset
in and out of a self-describing JSON backup:

- Schema and connection management (``LedgerStore``)
- Typed CRUD and join queries (``LedgerRepository``)
- Backup encoding and decoding (``encode`` / ``decode``)
- Wipe-and-restore with a defined partial-failure policy (``RestoreOrchestrator``)
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from coreledger.backup import RestoreOrchestrator, RestoreReport, decode, encode
from coreledger.config import Settings, get_settings
from coreledger.domain import BackupDocument, Client, Deal, DealDraft, Unit
from coreledger.errors import (
    DecodeError,
    EmptyLedgerError,
    EncodeError,
    InitializationError,
    InvalidBackupError,
    InvalidRecordError,
    LedgerError,
    MalformedBackupError,
    PartialRestoreError,
    PersistenceError,
    RestoreError,
)
from coreledger.infrastructure import BatchResult, DealFailure, LedgerRepository, LedgerStore
from coreledger.ledger import Ledger
from coreledger.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Composition root
    "Ledger",
    # Domain
    "BackupDocument",
    "Client",
    "Deal",
    "DealDraft",
    "Unit",
    # Storage
    "LedgerStore",
    "LedgerRepository",
    "BatchResult",
    "DealFailure",
    # Backup
    "encode",
    "decode",
    "RestoreOrchestrator",
    "RestoreReport",
    # Errors
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
    # Logging
    "configure_logging",
    "get_logger",
]
