"""
Configuration settings for the Core Ledger.

Uses Pydantic Settings to load environment variables for the on-disk store
location, backup artifacts, restore policy, and logging.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Store
    db_path: Path = Field(Path("data/CoreApp.db"), alias="LEDGER_DB_PATH")
    open_retry_attempts: int = Field(3, ge=1, alias="LEDGER_OPEN_RETRY_ATTEMPTS")

    # Backup / restore
    backup_dir: Path = Field(Path("backups"), alias="LEDGER_BACKUP_DIR")
    backup_prefix: str = Field("coreapp_backup", alias="LEDGER_BACKUP_PREFIX")
    restore_atomic: bool = Field(True, alias="LEDGER_RESTORE_ATOMIC")

    # Application
    app_env: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    json_logs: bool = Field(False, alias="LOG_JSON")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["Settings", "get_settings"]
