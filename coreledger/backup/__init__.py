"""
Backup package for the Core Ledger.

Exports the JSON codec for backup documents and the restore orchestrator that
replays a decoded document into the store.
"""

from coreledger.backup.codec import decode, encode
from coreledger.backup.restore import RestoreOrchestrator, RestoreReport

__all__ = [
    "decode",
    "encode",
    "RestoreOrchestrator",
    "RestoreReport",
]
