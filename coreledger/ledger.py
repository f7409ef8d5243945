"""
Composition root for the Core Ledger.

``Ledger`` constructs the store, the repository bound to it, and the restore
orchestrator, and exposes the three entry points the presentation layer uses:

- ``initialize()``
- ``repository`` (day-to-day reads and writes)
- ``export_snapshot()`` / ``import_snapshot(bytes)``

Usage:
    from coreledger.ledger import Ledger

    with Ledger.from_settings() as ledger:
        client = ledger.repository.add_client("Acme Textiles", "", "555-0100")
        artifact = ledger.export_to_directory("backups")
"""

from __future__ import annotations

from datetime import date, datetime
from pathlib import Path
from typing import List, Optional

from coreledger.backup.codec import encode
from coreledger.backup.restore import RestoreOrchestrator, RestoreReport
from coreledger.config import Settings, get_settings
from coreledger.domain.models import Deal
from coreledger.errors import DecodeError, EmptyLedgerError
from coreledger.infrastructure.repository import LedgerRepository
from coreledger.infrastructure.store import LedgerStore
from coreledger.utils.logging import get_logger

log = get_logger(__name__)


class Ledger:
    """Owns one store and everything that operates on it."""

    def __init__(
        self,
        store: LedgerStore,
        backup_prefix: str = "coreapp_backup",
        restore_atomic: bool = True,
    ) -> None:
        self.store = store
        self.repository = LedgerRepository(store)
        self.restorer = RestoreOrchestrator(store, self.repository, atomic=restore_atomic)
        self.backup_prefix = backup_prefix

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "Ledger":
        settings = settings or get_settings()
        store = LedgerStore(settings.db_path, open_retry_attempts=settings.open_retry_attempts)
        return cls(
            store,
            backup_prefix=settings.backup_prefix,
            restore_atomic=settings.restore_atomic,
        )

    def initialize(self) -> None:
        """Open the store and ensure its schema. Raises InitializationError."""
        self.store.initialize()

    def close(self) -> None:
        self.store.close()

    def __enter__(self) -> "Ledger":
        self.initialize()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        del exc_type, exc, tb
        self.close()

    # --- Export ---

    def export_snapshot(self, exported_at: Optional[datetime] = None) -> bytes:
        """
        Encode every client and deal as backup bytes.

        Raises
        ------
        EmptyLedgerError
            If there are no clients and no deals.
        """
        clients = self.repository.list_clients()
        deals = self.repository.list_deals()
        if not clients and not deals:
            raise EmptyLedgerError()
        return encode(clients, deals, exported_at)

    def export_to_directory(
        self, directory: Path | str, now: Optional[datetime] = None
    ) -> Path:
        """
        Write a backup file into ``directory`` and return its path.

        The file is named ``<prefix>_<YYYYMMDD_HHMMSS>.json`` using local time.
        """
        now = now or datetime.now().astimezone()
        payload = self.export_snapshot(exported_at=now)
        target_dir = Path(directory)
        target_dir.mkdir(parents=True, exist_ok=True)
        path = target_dir / f"{self.backup_prefix}_{now:%Y%m%d_%H%M%S}.json"
        path.write_bytes(payload)
        log.info("Backup written", extra={"backup_path": str(path), "bytes": len(payload)})
        return path

    # --- Import ---

    def import_snapshot(self, data: bytes | str) -> RestoreReport:
        """Replace all data with the backup in ``data``."""
        return self.restorer.restore(data)

    def import_from_file(self, path: Path | str) -> RestoreReport:
        """Read a local backup file and restore it."""
        path = Path(path)
        log.info("Reading file from path", extra={"backup_path": str(path)})
        try:
            data = path.read_bytes()
        except OSError as exc:
            raise DecodeError(f"Could not read backup file {path}: {exc}") from exc
        return self.import_snapshot(data)

    # --- Queries ---

    def search_deals(self, query: str = "", on_date: Optional[date] = None) -> List[Deal]:
        """
        Deals whose party name or quality contains ``query`` (case-insensitive),
        optionally limited to one calendar day (UTC). Newest first.
        """
        needle = query.strip().lower()
        matches = []
        for deal in self.repository.list_deals():
            text_match = needle in (deal.party_name or "").lower() or needle in deal.quality.lower()
            date_match = on_date is None or deal.date.date() == on_date
            if text_match and date_match:
                matches.append(deal)
        return matches


__all__ = ["Ledger"]
