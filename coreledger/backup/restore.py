"""
Restore orchestrator: replace the whole ledger with the content of a backup.

Stages run strictly in order and never overlap:

1. decode   - any DecodeError aborts before the store is touched
2. wipe     - ``clear_all()``
3. clients  - ``insert_clients_atomic()``, all or nothing
4. deals    - ``insert_deals_best_effort()``, failures skipped and reported

In atomic mode (the default) stages 2-4 share one outer transaction, so a
failed wipe or client batch rolls back to the data that existed before the
restore. Sequential mode commits each stage on its own: a failed client batch
then leaves an empty ledger and raises ``PartialRestoreError``.
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass, field
from typing import List, Optional

from coreledger.backup.codec import decode
from coreledger.domain.models import BackupDocument
from coreledger.errors import (
    InvalidRecordError,
    PartialRestoreError,
    PersistenceError,
    RestoreError,
)
from coreledger.infrastructure.repository import BatchResult, DealFailure, LedgerRepository
from coreledger.infrastructure.store import LedgerStore
from coreledger.utils.logging import get_logger

log = get_logger(__name__)


@dataclass
class RestoreReport:
    """
    Result of a successful restore.

    Counts describe what the document contained, not what was persisted;
    ``deals_restored`` and ``failed_deals`` carry the difference.
    """

    clients_found: int
    deals_found: int
    deals_restored: int
    export_date: Optional[str] = None
    failed_deals: List[DealFailure] = field(default_factory=list)

    @property
    def message(self) -> str:
        return (
            f"Import successful. Restored {self.clients_found} clients "
            f"and {self.deals_found} deals."
        )


class RestoreOrchestrator:
    """
    Drive one restore attempt against a store through its repository.

    Parameters
    ----------
    store : LedgerStore
        The store whose transaction spans the restore in atomic mode.
    repository : LedgerRepository
        Repository bound to ``store``.
    atomic : bool
        Whether wipe and inserts share one transaction.
    """

    def __init__(
        self, store: LedgerStore, repository: LedgerRepository, atomic: bool = True
    ) -> None:
        self._store = store
        self._repository = repository
        self.atomic = atomic

    def restore(self, data: bytes | str) -> RestoreReport:
        """
        Decode ``data`` and replace all clients and deals with its content.

        Raises
        ------
        DecodeError
            The bytes are not a backup document; nothing was changed.
        RestoreError
            Wipe or client batch failed (atomic mode: nothing was changed).
        PartialRestoreError
            Sequential mode only: the wipe was committed, the ledger is empty.
        """
        document = decode(data)
        log.info(
            f"Found {len(document.clients)} clients and {len(document.deals)} deals to import",
            extra={"clients": len(document.clients), "deals": len(document.deals)},
        )

        if self.atomic:
            batch = self._restore_atomic(document)
        else:
            batch = self._restore_sequential(document)

        report = RestoreReport(
            clients_found=len(document.clients),
            deals_found=len(document.deals),
            deals_restored=batch.inserted,
            export_date=document.export_date,
            failed_deals=list(batch.failures),
        )
        if report.failed_deals:
            log.warning(
                f"{len(report.failed_deals)} deal(s) were skipped during restore",
                extra={"failed": len(report.failed_deals)},
            )
        log.info(report.message)
        return report

    def _restore_atomic(self, document: BackupDocument) -> BatchResult:
        try:
            with self._store.transaction():
                log.info("Clearing existing data...")
                self._repository.clear_all()
                log.info("Importing clients...")
                self._repository.insert_clients_atomic(document.clients)
                log.info("Importing deals...")
                return self._repository.insert_deals_best_effort(document.deals)
        except (PersistenceError, InvalidRecordError, sqlite3.Error) as exc:
            log.exception("Restore rolled back; existing data was kept")
            raise RestoreError(f"{exc} (existing data was kept)") from exc

    def _restore_sequential(self, document: BackupDocument) -> BatchResult:
        log.info("Clearing existing data...")
        try:
            self._repository.clear_all()
        except PersistenceError as exc:
            log.exception("Wipe failed; restore aborted")
            raise RestoreError(str(exc)) from exc

        log.info("Importing clients...")
        try:
            self._repository.insert_clients_atomic(document.clients)
        except (PersistenceError, InvalidRecordError) as exc:
            log.exception("Client batch failed after wipe; the ledger is now empty")
            raise PartialRestoreError(f"{exc} (the ledger was cleared and is now empty)") from exc

        log.info("Importing deals...")
        return self._repository.insert_deals_best_effort(document.deals)


__all__ = ["RestoreOrchestrator", "RestoreReport"]
