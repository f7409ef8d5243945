"""
Record repository: typed CRUD and join queries over clients and deals.

All reads return validated domain models. All writes run inside
``LedgerStore.transaction()``, so each call is atomic on its own and nests
into a caller's transaction as a savepoint (the restore orchestrator relies
on this).

Two bulk paths exist on purpose and are not interchangeable:

- ``insert_clients_atomic``: all clients or none.
- ``insert_deals_best_effort``: each deal on its own; failures are recorded
  and skipped.
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from coreledger.domain.models import Client, Deal, DealDraft
from coreledger.errors import InvalidRecordError, PersistenceError
from coreledger.infrastructure.store import LedgerStore
from coreledger.utils.ids import new_id
from coreledger.utils.logging import get_logger
from coreledger.utils.timefmt import format_instant

log = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

_SELECT_CLIENTS = "SELECT id, name, companyName, phoneNumber FROM clients ORDER BY name ASC;"

_SELECT_DEALS = """
    SELECT d.id, d.partyId, d.date, d.quality, d.quantity, d.unit, d.rate, d.notes,
           c.name AS partyName
    FROM deals d
    LEFT JOIN clients c ON d.partyId = c.id
"""

_INSERT_CLIENT = (
    "INSERT INTO clients (id, name, companyName, phoneNumber) VALUES (?, ?, ?, ?);"
)
_UPSERT_CLIENT = (
    "INSERT OR REPLACE INTO clients (id, name, companyName, phoneNumber) VALUES (?, ?, ?, ?);"
)
_INSERT_DEAL = (
    "INSERT INTO deals (id, partyId, date, quality, quantity, unit, rate, notes) "
    "VALUES (?, ?, ?, ?, ?, ?, ?, ?);"
)
_UPSERT_DEAL = (
    "INSERT OR REPLACE INTO deals (id, partyId, date, quality, quantity, unit, rate, notes) "
    "VALUES (?, ?, ?, ?, ?, ?, ?, ?);"
)


@dataclass(frozen=True)
class DealFailure:
    """One deal that could not be inserted during a best-effort batch."""

    index: int
    deal_id: Optional[str]
    reason: str


@dataclass
class BatchResult:
    """Outcome of ``insert_deals_best_effort``."""

    attempted: int = 0
    inserted: int = 0
    failures: List[DealFailure] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.failures)


def _describe(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"]) or "record"
        parts.append(f"{location}: {error['msg']}")
    return "; ".join(parts)


def _validated(model: Type[ModelT], data: Any, label: str) -> ModelT:
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise InvalidRecordError(f"Invalid {label}: {_describe(exc)}") from exc


def _from_rows(model: Type[ModelT], rows: Sequence[sqlite3.Row]) -> List[ModelT]:
    try:
        return [model.model_validate(dict(row)) for row in rows]
    except ValidationError as exc:
        raise PersistenceError(
            f"Stored {model.__name__.lower()} row is unreadable: {_describe(exc)}"
        ) from exc


def _without_party_name(record: Any) -> Any:
    # The party name is derived from the clients table on every read.
    if isinstance(record, Mapping):
        return {k: v for k, v in record.items() if k not in ("partyName", "party_name")}
    return record


def _record_id(record: Any) -> Optional[str]:
    if isinstance(record, (Client, Deal)):
        return record.id
    if isinstance(record, Mapping):
        value = record.get("id")
        return value if isinstance(value, str) else None
    return None


def _client_params(client: Client) -> tuple:
    return (client.id, client.name, client.company_name, client.phone_number)


def _deal_params(deal: Deal) -> tuple:
    return (
        deal.id,
        deal.party_id,
        format_instant(deal.date),
        deal.quality,
        deal.quantity,
        deal.unit.value,
        deal.rate,
        deal.notes,
    )


class LedgerRepository:
    """
    CRUD surface over the store.

    Parameters
    ----------
    store : LedgerStore
        An opened (normally initialized) store owned by the caller.
    """

    def __init__(self, store: LedgerStore) -> None:
        self._store = store

    @property
    def store(self) -> LedgerStore:
        return self._store

    def _fetch(self, sql: str, params: Sequence[Any] = ()) -> List[sqlite3.Row]:
        try:
            return self._store.connection().execute(sql, params).fetchall()
        except sqlite3.Error as exc:
            raise PersistenceError(f"Could not read from the ledger: {exc}") from exc

    def _write(self, sql: str, params: Sequence[Any], action: str) -> int:
        try:
            with self._store.transaction() as conn:
                return conn.execute(sql, params).rowcount
        except sqlite3.Error as exc:
            raise PersistenceError(f"Could not {action}: {exc}") from exc

    # --- Clients ---

    def list_clients(self) -> List[Client]:
        """All clients ordered by name (SQLite default collation)."""
        return _from_rows(Client, self._fetch(_SELECT_CLIENTS))

    def add_client(self, name: str, company_name: str, phone_number: str) -> Client:
        """
        Create a client with a fresh id. Inputs are stored exactly as given.

        Raises
        ------
        InvalidRecordError
            If name or phone number is empty.
        PersistenceError
            If the insert cannot be committed.
        """
        client = _validated(
            Client,
            {
                "id": new_id(),
                "name": name,
                "company_name": company_name,
                "phone_number": phone_number,
            },
            "client",
        )
        self._write(_INSERT_CLIENT, _client_params(client), "save the client")
        return client

    def count_clients(self) -> int:
        return self._fetch("SELECT COUNT(*) AS n FROM clients;")[0]["n"]

    # --- Deals ---

    def list_deals(self) -> List[Deal]:
        """All deals, newest first, each decorated with its client's name."""
        return _from_rows(Deal, self._fetch(_SELECT_DEALS + " ORDER BY d.date DESC;"))

    def get_deal(self, deal_id: str) -> Optional[Deal]:
        deals = _from_rows(Deal, self._fetch(_SELECT_DEALS + " WHERE d.id = ?;", (deal_id,)))
        return deals[0] if deals else None

    def add_deal(self, draft: Union[DealDraft, Mapping[str, Any]]) -> Deal:
        """
        Create a deal with a fresh id and return it as stored.

        Text fields are not trimmed here; callers trim before submitting.
        """
        draft = _validated(DealDraft, draft, "deal")
        deal = _validated(Deal, {**draft.model_dump(), "id": new_id()}, "deal")
        self._write(_INSERT_DEAL, _deal_params(deal), "save the deal")
        return self.get_deal(deal.id) or deal

    def delete_deal(self, deal_id: str) -> None:
        """Delete by id. Unknown ids are a silent no-op."""
        self._write("DELETE FROM deals WHERE id = ?;", (deal_id,), "delete the deal")
        log.info(f"Deal {deal_id} deleted.", extra={"deal_id": deal_id})

    def count_deals(self) -> int:
        return self._fetch("SELECT COUNT(*) AS n FROM deals;")[0]["n"]

    # --- Bulk ---

    def clear_all(self) -> None:
        """
        Delete every deal, then every client, as one atomic unit.

        The tables themselves are kept. Missing tables (a store that was opened
        but never initialized) count as already clear.
        """
        try:
            with self._store.transaction() as conn:
                conn.execute("DELETE FROM deals;")
                conn.execute("DELETE FROM clients;")
        except sqlite3.OperationalError as exc:
            if "no such table" not in str(exc):
                raise PersistenceError(f"Could not clear the ledger: {exc}") from exc
            log.info("Tables may not exist yet, continuing...")
            return
        except sqlite3.Error as exc:
            raise PersistenceError(f"Could not clear the ledger: {exc}") from exc
        log.info("All data cleared.")

    def insert_clients_atomic(self, records: Iterable[Union[Client, Mapping[str, Any]]]) -> int:
        """
        Upsert every client by id inside one transaction.

        Any invalid record or failed write rolls the whole batch back.

        Returns
        -------
        int
            Number of clients written.

        Raises
        ------
        InvalidRecordError
            A record does not describe a valid client.
        PersistenceError
            A write failed.
        """
        records = list(records)
        try:
            with self._store.transaction() as conn:
                for index, record in enumerate(records):
                    client = _validated(Client, record, f"client #{index + 1}")
                    conn.execute(_UPSERT_CLIENT, _client_params(client))
        except sqlite3.Error as exc:
            raise PersistenceError(f"Client batch rolled back: {exc}") from exc
        log.info(f"Inserted {len(records)} clients.", extra={"clients": len(records)})
        return len(records)

    def insert_deals_best_effort(
        self, records: Iterable[Union[Deal, Mapping[str, Any]]]
    ) -> BatchResult:
        """
        Upsert each deal by id in its own atomic unit.

        A deal that is invalid or fails to write is logged, recorded in the
        result, and skipped; the remaining deals are still attempted. A
        ``partyName`` carried by the record is ignored.
        """
        records = list(records)
        result = BatchResult(attempted=len(records))
        for index, record in enumerate(records):
            try:
                deal = _validated(Deal, _without_party_name(record), f"deal #{index + 1}")
                with self._store.transaction() as conn:
                    conn.execute(_UPSERT_DEAL, _deal_params(deal))
            except (InvalidRecordError, sqlite3.Error) as exc:
                failure = DealFailure(index=index, deal_id=_record_id(record), reason=str(exc))
                result.failures.append(failure)
                log.warning(
                    f"Failed to insert deal {index + 1}",
                    extra={"deal_id": failure.deal_id, "error": failure.reason},
                )
                continue
            result.inserted += 1

        log.info(
            f"Processed {result.attempted} deals.",
            extra={"inserted": result.inserted, "failed": result.failed},
        )
        return result


__all__ = ["LedgerRepository", "BatchResult", "DealFailure"]
