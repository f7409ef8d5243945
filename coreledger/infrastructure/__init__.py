"""
Infrastructure package for the Core Ledger.

Centralizes storage concerns: the SQLite store and its schema, and the
repository that reads and writes clients and deals. Keep this layer focused on
I/O and transactions, decoupled from backup encoding and restore sequencing.
"""

from coreledger.infrastructure.repository import BatchResult, DealFailure, LedgerRepository
from coreledger.infrastructure.store import LedgerStore

__all__ = [
    "BatchResult",
    "DealFailure",
    "LedgerRepository",
    "LedgerStore",
]
