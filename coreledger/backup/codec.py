"""
Backup codec: the full dataset to a self-describing JSON document and back.

Document layout (UTF-8, pretty-printed)::

    {
      "exportDate": "2025-03-01T09:30:00.000Z",
      "clients": [{"id": ..., "name": ..., "companyName": ..., "phoneNumber": ...}],
      "deals": [{"id": ..., "partyId": ..., "date": ..., "quality": ...,
                 "quantity": ..., "unit": ..., "rate": ..., "notes": ...,
                 "partyName": ...}]
    }

``partyName`` is written as captured at export time so the file reads on its
own; it is ignored on restore.
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from pydantic import ValidationError
from pydantic_core import PydanticSerializationError

from coreledger.domain.models import BackupDocument, Client, Deal
from coreledger.errors import EncodeError, InvalidBackupError, MalformedBackupError
from coreledger.utils.timefmt import now_instant

REQUIRED_KEYS = ("clients", "deals")


def _client_payload(client: Client) -> Dict[str, Any]:
    return client.model_dump(mode="json", by_alias=True)


def _deal_payload(deal: Deal) -> Dict[str, Any]:
    payload = deal.model_dump(
        mode="json",
        by_alias=True,
        exclude={"party_name"} if deal.party_name is None else None,
    )
    return {"id": payload.pop("id"), **payload}


def build_document(
    clients: Sequence[Client],
    deals: Sequence[Deal],
    exported_at: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Assemble the plain-JSON document for ``clients`` and ``deals``."""
    try:
        return {
            "exportDate": now_instant(exported_at),
            "clients": [_client_payload(client) for client in clients],
            "deals": [_deal_payload(deal) for deal in deals],
        }
    except (AttributeError, PydanticSerializationError) as exc:
        raise EncodeError(f"Could not serialize ledger data: {exc}") from exc


def encode(
    clients: Sequence[Client],
    deals: Sequence[Deal],
    exported_at: Optional[datetime] = None,
) -> bytes:
    """
    Serialize the dataset to backup bytes.

    Raises
    ------
    EncodeError
        If the records cannot be serialized (not expected for valid models).
    """
    document = build_document(clients, deals, exported_at)
    try:
        text = json.dumps(document, indent=2, ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError) as exc:
        raise EncodeError(f"Could not serialize ledger data: {exc}") from exc
    return text.encode("utf-8")


def decode(data: bytes | str) -> BackupDocument:
    """
    Parse backup bytes and check the envelope.

    Only the envelope is checked here: both ``clients`` and ``deals`` must be
    present as lists (empty is fine). Individual records are validated when
    they are restored.

    Raises
    ------
    MalformedBackupError
        The bytes are not UTF-8 JSON.
    InvalidBackupError
        The JSON is not a backup document.
    """
    try:
        text = data.decode("utf-8-sig") if isinstance(data, (bytes, bytearray)) else data
        parsed = json.loads(text)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise MalformedBackupError(f"Backup file is not readable JSON: {exc}") from exc

    if not isinstance(parsed, dict) or any(parsed.get(key) is None for key in REQUIRED_KEYS):
        raise InvalidBackupError()

    try:
        return BackupDocument.model_validate(parsed)
    except ValidationError as exc:
        raise InvalidBackupError() from exc


__all__ = ["encode", "decode", "build_document", "REQUIRED_KEYS"]
