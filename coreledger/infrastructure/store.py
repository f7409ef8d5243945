"""
Schema and connection management for the Core Ledger.

``LedgerStore`` owns the single on-disk SQLite file, its fixed two-table
schema, and the one shared connection. It is constructed explicitly by the
composition root (see ``coreledger.ledger``) and handed to the repository and
the restore orchestrator; nothing here is a module-level singleton.

Opening is retried with tenacity for transient ``sqlite3.OperationalError``
(e.g. a locked file), then surfaced as ``InitializationError``.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Optional

from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from coreledger.errors import InitializationError, PersistenceError
from coreledger.utils.logging import get_logger

log = get_logger(__name__)

DATABASE_NAME = "CoreApp.db"

CREATE_CLIENTS_TABLE = """
CREATE TABLE IF NOT EXISTS clients (
    id          TEXT PRIMARY KEY,
    name        TEXT NOT NULL,
    companyName TEXT,
    phoneNumber TEXT NOT NULL
);
"""

# The foreign key documents intent only: PRAGMA foreign_keys stays off, so a
# deal may outlive its client and is read back with a missing party name.
CREATE_DEALS_TABLE = """
CREATE TABLE IF NOT EXISTS deals (
    id       TEXT PRIMARY KEY,
    partyId  TEXT NOT NULL,
    date     TEXT NOT NULL,
    quality  TEXT NOT NULL,
    quantity REAL NOT NULL,
    unit     TEXT NOT NULL,
    rate     REAL NOT NULL,
    notes    TEXT,
    FOREIGN KEY (partyId) REFERENCES clients (id)
);
"""

SCHEMA = (CREATE_CLIENTS_TABLE, CREATE_DEALS_TABLE)


class LedgerStore:
    """
    The single named local store.

    Lifecycle: ``open()`` connects, ``initialize()`` connects if needed and
    ensures both tables exist, ``close()`` releases the connection. Using
    ``connection()`` before ``open()`` raises ``InitializationError``.
    """

    def __init__(self, path: Path | str, open_retry_attempts: int = 3) -> None:
        self.path = Path(path)
        self.open_retry_attempts = open_retry_attempts
        self._conn: Optional[sqlite3.Connection] = None
        self._initialized = False
        self._depth = 0

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def _connect(self) -> sqlite3.Connection:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # isolation_level=None: transaction boundaries are issued by transaction().
        conn = sqlite3.connect(self.path, isolation_level=None)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys=OFF")
        return conn

    def open(self) -> sqlite3.Connection:
        """
        Open the shared connection (idempotent).

        Raises
        ------
        InitializationError
            If the file cannot be opened after all retry attempts.
        """
        if self._conn is not None:
            return self._conn

        retrying = Retrying(
            stop=stop_after_attempt(self.open_retry_attempts),
            wait=wait_exponential(multiplier=0.1, min=0.1, max=2),
            retry=retry_if_exception_type(sqlite3.OperationalError),
            reraise=True,
        )
        try:
            self._conn = retrying(self._connect)
        except (sqlite3.Error, OSError) as exc:
            raise InitializationError(f"Could not open ledger store at {self.path}: {exc}") from exc

        log.info("Ledger store opened", extra={"path": str(self.path)})
        return self._conn

    def initialize(self) -> None:
        """
        Ensure both tables exist. Create-if-absent only; no migrations.

        Calling this more than once is a no-op after the first success.
        """
        if self._initialized:
            return

        conn = self.open()
        try:
            for statement in SCHEMA:
                conn.execute(statement)
        except sqlite3.Error as exc:
            raise InitializationError(
                f"Could not create ledger schema at {self.path}: {exc}"
            ) from exc

        self._initialized = True
        log.info("Database initialized.", extra={"path": str(self.path)})

    def connection(self) -> sqlite3.Connection:
        """Return the shared connection handle."""
        if self._conn is None:
            raise InitializationError("Ledger store is not open; call initialize() first.")
        return self._conn

    @contextmanager
    def transaction(self) -> Generator[sqlite3.Connection, None, None]:
        """
        Run the enclosed block as one atomic unit.

        The outermost use maps to BEGIN/COMMIT/ROLLBACK; nested uses map to
        SAVEPOINTs, so a failing inner block only undoes its own writes.

        Example
        -------
            with store.transaction() as conn:
                conn.execute("DELETE FROM deals")
                conn.execute("DELETE FROM clients")
        """
        conn = self.connection()
        savepoint = f"sp_{self._depth}" if self._depth else None
        if savepoint and not conn.in_transaction:
            # SQLite ended the enclosing transaction on its own (e.g. disk full);
            # a SAVEPOINT now would open and commit a top-level one instead.
            raise PersistenceError("The enclosing transaction was rolled back by SQLite.")
        conn.execute(f"SAVEPOINT {savepoint}" if savepoint else "BEGIN")
        self._depth += 1
        try:
            yield conn
        except BaseException:
            self._depth -= 1
            # SQLite may already have rolled back on its own (e.g. disk full).
            if conn.in_transaction:
                if savepoint:
                    conn.execute(f"ROLLBACK TO SAVEPOINT {savepoint}")
                    conn.execute(f"RELEASE SAVEPOINT {savepoint}")
                else:
                    conn.execute("ROLLBACK")
            raise
        self._depth -= 1
        conn.execute(f"RELEASE SAVEPOINT {savepoint}" if savepoint else "COMMIT")

    @property
    def in_transaction(self) -> bool:
        return self._depth > 0

    def table_names(self) -> list[str]:
        rows = self.connection().execute(
            "SELECT name FROM sqlite_master WHERE type = 'table' ORDER BY name"
        ).fetchall()
        return [row["name"] for row in rows]

    def close(self) -> None:
        """Close the shared connection. Safe to call repeatedly."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            self._initialized = False
            self._depth = 0
            log.info("Ledger store closed", extra={"path": str(self.path)})

    def __enter__(self) -> "LedgerStore":
        self.initialize()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        del exc_type, exc, tb
        self.close()


__all__ = ["LedgerStore", "DATABASE_NAME", "SCHEMA"]
