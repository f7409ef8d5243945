"""
Domain package for the Core Ledger.

Exports the client, deal, and backup-envelope models shared by the repository,
the backup codec, and the restore orchestrator.
"""

from coreledger.domain.models import BackupDocument, Client, Deal, DealDraft, Unit

__all__ = [
    "BackupDocument",
    "Client",
    "Deal",
    "DealDraft",
    "Unit",
]
