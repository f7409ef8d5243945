"""
Domain models for the Core Ledger.

Field names follow Python conventions; aliases carry the camelCase names used
by the store's columns and by the backup document, so rows and backup entries
validate directly into these models.
"""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_serializer, field_validator

from coreledger.utils.timefmt import format_instant, to_utc


class Unit(str, Enum):
    """Units a deal quantity can be expressed in."""

    LOTS = "Lots"
    METERS = "Meters"


class Client(BaseModel):
    """
    A counterparty the user transacts with.

    Inputs are stored as given; trimming is the caller's job.
    """

    id: str = Field(..., min_length=1, description="Opaque URL-safe id.")
    name: str = Field(..., min_length=1, description="Display name.")
    company_name: str = Field("", alias="companyName", description="Optional company.")
    phone_number: str = Field(..., min_length=1, alias="phoneNumber")

    model_config = {
        "frozen": True,
        "populate_by_name": True,
    }

    @field_validator("company_name", mode="before")
    @classmethod
    def _missing_company_is_blank(cls, value: Any) -> Any:
        return "" if value is None else value


class DealDraft(BaseModel):
    """
    Everything needed to create a deal except its id.

    Quantity and rate must be positive; quality must contain non-blank text.
    """

    party_id: str = Field(..., min_length=1, alias="partyId")
    date: datetime = Field(..., description="Transaction date, normalized to UTC.")
    quality: str = Field(..., description="Quality / fabric description.")
    quantity: float = Field(..., gt=0, allow_inf_nan=False)
    unit: Unit
    rate: float = Field(..., gt=0, allow_inf_nan=False)
    notes: str = ""

    model_config = {
        "frozen": True,
        "populate_by_name": True,
    }

    @field_validator("date")
    @classmethod
    def _normalize_date(cls, value: datetime) -> datetime:
        try:
            return to_utc(value)
        except OverflowError as exc:
            raise ValueError("date is out of range once converted to UTC") from exc

    @field_validator("quality")
    @classmethod
    def _quality_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("quality must not be blank")
        return value

    @field_validator("notes", mode="before")
    @classmethod
    def _missing_notes_are_blank(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_serializer("date")
    def _serialize_date(self, value: datetime) -> str:
        return format_instant(value)

    @field_serializer("unit")
    def _serialize_unit(self, value: Unit) -> str:
        return value.value


class Deal(DealDraft):
    """
    A stored transaction with a client.

    ``party_name`` is decorated on at read time by joining the owning client;
    it is ``None`` when that client no longer exists and is never persisted.
    """

    id: str = Field(..., min_length=1)
    party_name: Optional[str] = Field(None, alias="partyName")

    @property
    def amount(self) -> float:
        """Quantity times rate."""
        return self.quantity * self.rate


class BackupDocument(BaseModel):
    """
    Envelope of a backup file.

    Records are kept as the raw decoded JSON values: each one is validated
    individually when it is restored, so one bad deal cannot sink the document.
    """

    export_date: Optional[str] = Field(None, alias="exportDate")
    clients: List[Any]
    deals: List[Any]

    model_config = {
        "populate_by_name": True,
        "extra": "ignore",
    }


__all__ = ["Unit", "Client", "DealDraft", "Deal", "BackupDocument"]
