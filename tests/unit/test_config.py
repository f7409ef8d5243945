from __future__ import annotations

from pathlib import Path

import pytest

from coreledger import config

ENV_VARS = (
    "LEDGER_DB_PATH",
    "LEDGER_BACKUP_DIR",
    "LEDGER_BACKUP_PREFIX",
    "LEDGER_RESTORE_ATOMIC",
    "LEDGER_OPEN_RETRY_ATTEMPTS",
    "LOG_LEVEL",
    "LOG_JSON",
)
EXPECTED_RETRY_ATTEMPTS = 3


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # Keep a stray .env in the working tree from leaking in.
    monkeypatch.chdir(tmp_path)
    return monkeypatch


def test_get_settings_defaults(clean_env):
    settings = config.get_settings()
    assert settings.db_path == Path("data/CoreApp.db")
    assert settings.backup_dir == Path("backups")
    assert settings.backup_prefix == "coreapp_backup"
    assert settings.restore_atomic is True
    assert settings.open_retry_attempts == EXPECTED_RETRY_ATTEMPTS
    assert settings.log_level == "INFO"
    assert settings.json_logs is False


def test_settings_read_environment(clean_env, tmp_path):
    clean_env.setenv("LEDGER_DB_PATH", str(tmp_path / "ledger.db"))
    clean_env.setenv("LEDGER_RESTORE_ATOMIC", "false")
    clean_env.setenv("LOG_JSON", "1")

    settings = config.Settings()

    assert settings.db_path == tmp_path / "ledger.db"
    assert settings.restore_atomic is False
    assert settings.json_logs is True


def test_settings_read_dotenv_file(clean_env, tmp_path):
    (tmp_path / ".env").write_text("LEDGER_BACKUP_PREFIX=shop_backup\n", encoding="utf-8")
    assert config.Settings().backup_prefix == "shop_backup"


def test_get_settings_is_cached(clean_env):
    assert config.get_settings() is config.get_settings()
