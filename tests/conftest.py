"""
Pytest configuration for the Core Ledger.

Provides fixtures for:
- Settings pointing at a per-test temporary directory
- An initialized SQLite store and its repository
- A composition-root ``Ledger``
- Raw backup records for restore tests
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Dict, Generator

import pytest

from coreledger.config import Settings, get_settings
from coreledger.infrastructure.repository import LedgerRepository
from coreledger.infrastructure.store import LedgerStore
from coreledger.ledger import Ledger


@pytest.fixture(autouse=True)
def _fresh_settings_cache() -> Generator[None, None, None]:
    """Make every test read environment-driven settings from scratch."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def _restore_root_logging() -> Generator[None, None, None]:
    """Drop handlers a test installed via configure_logging (they may hold closed streams)."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """
    Settings with test-specific overrides: everything lives under tmp_path.
    """
    return Settings(
        db_path=tmp_path / "data" / "CoreApp.db",
        backup_dir=tmp_path / "backups",
        open_retry_attempts=1,
        log_level="DEBUG",
    )


@pytest.fixture
def store(tmp_path: Path) -> Generator[LedgerStore, None, None]:
    """
    Provide an initialized store backed by a temporary file.
    """
    ledger_store = LedgerStore(tmp_path / "ledger.db", open_retry_attempts=1)
    ledger_store.initialize()
    try:
        yield ledger_store
    finally:
        ledger_store.close()


@pytest.fixture
def repository(store: LedgerStore) -> LedgerRepository:
    return LedgerRepository(store)


@pytest.fixture
def ledger(test_settings: Settings) -> Generator[Ledger, None, None]:
    with Ledger.from_settings(test_settings) as instance:
        yield instance


@pytest.fixture
def client_record() -> Callable[..., Dict[str, Any]]:
    """Factory for backup-shaped client dicts."""

    def _make(client_id: str, name: str, **overrides: Any) -> Dict[str, Any]:
        record = {
            "id": client_id,
            "name": name,
            "companyName": "",
            "phoneNumber": "555-0100",
        }
        record.update(overrides)
        return record

    return _make


@pytest.fixture
def deal_record() -> Callable[..., Dict[str, Any]]:
    """Factory for backup-shaped deal dicts."""

    def _make(deal_id: str, party_id: str, **overrides: Any) -> Dict[str, Any]:
        record = {
            "id": deal_id,
            "partyId": party_id,
            "date": "2025-03-01T00:00:00.000Z",
            "quality": "Cotton",
            "quantity": 10,
            "unit": "Meters",
            "rate": 250,
            "notes": "",
        }
        record.update(overrides)
        return record

    return _make
