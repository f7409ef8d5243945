from __future__ import annotations

import json
from datetime import datetime, timezone

import pytest

from coreledger.backup.codec import decode, encode
from coreledger.domain.models import Client, Deal
from coreledger.errors import (
    DecodeError,
    EncodeError,
    InvalidBackupError,
    MalformedBackupError,
)

EXPORTED_AT = datetime(2025, 3, 2, 8, 0, tzinfo=timezone.utc)


@pytest.fixture
def clients():
    return [
        Client(id="c1", name="Acme Textiles", company_name="", phone_number="555-0100"),
        Client(id="c2", name="Bolt Fabrics", company_name="Bolt Ltd", phone_number="555-0101"),
    ]


@pytest.fixture
def deals():
    return [
        Deal(
            id="d1",
            party_id="c1",
            date="2025-03-01T00:00:00.000Z",
            quality="Cotton",
            quantity=10,
            unit="Meters",
            rate=250,
            notes="",
            party_name="Acme Textiles",
        ),
        Deal(
            id="d2",
            party_id="gone",
            date="2025-02-01T10:15:00.000Z",
            quality="Silk",
            quantity=2.5,
            unit="Lots",
            rate=1200.75,
            notes="dangling client",
        ),
    ]


def test_round_trip_preserves_records(clients, deals):
    document = decode(encode(clients, deals, EXPORTED_AT))

    assert [Client.model_validate(c) for c in document.clients] == clients
    restored = [Deal.model_validate(d) for d in document.deals]
    assert [d.model_dump(exclude={"party_name"}) for d in restored] == [
        d.model_dump(exclude={"party_name"}) for d in deals
    ]


def test_encode_writes_pretty_printed_camel_case_document(clients, deals):
    data = encode(clients, deals, EXPORTED_AT)
    text = data.decode("utf-8")
    payload = json.loads(text)

    assert list(payload) == ["exportDate", "clients", "deals"]
    assert payload["exportDate"] == "2025-03-02T08:00:00.000Z"
    assert '\n  "clients": [' in text
    assert payload["clients"][1] == {
        "id": "c2",
        "name": "Bolt Fabrics",
        "companyName": "Bolt Ltd",
        "phoneNumber": "555-0101",
    }
    first_deal = payload["deals"][0]
    assert list(first_deal)[0] == "id"
    assert first_deal["partyName"] == "Acme Textiles"
    assert first_deal["date"] == "2025-03-01T00:00:00.000Z"


def test_encode_omits_absent_party_name(clients, deals):
    payload = json.loads(encode(clients, deals, EXPORTED_AT))
    assert "partyName" not in payload["deals"][1]


def test_encode_keeps_non_ascii_text_as_utf8():
    client = Client(id="c1", name="Çelik Tekstil", phone_number="555")
    data = encode([client], [], EXPORTED_AT)
    assert "Çelik Tekstil".encode("utf-8") in data


def test_encode_rejects_objects_that_are_not_records():
    with pytest.raises(EncodeError):
        encode([{"id": "c1"}], [], EXPORTED_AT)  # type: ignore[list-item]


def test_decode_accepts_empty_collections():
    document = decode(b'{"exportDate": "2025-03-01T00:00:00.000Z", "clients": [], "deals": []}')
    assert document.clients == []
    assert document.deals == []


def test_decode_accepts_missing_export_date_and_utf8_bom():
    document = decode(b"\xef\xbb\xbf" + b'{"clients": [], "deals": []}')
    assert document.export_date is None


def test_decode_keeps_structurally_invalid_records_for_later():
    document = decode(b'{"clients": [], "deals": [{"id": "d1"}, 7]}')
    assert document.deals == [{"id": "d1"}, 7]


@pytest.mark.parametrize("data", [b"not json", b"", b"\xff\xfe\x00", b'{"clients": ['])
def test_decode_rejects_unparseable_bytes(data):
    with pytest.raises(MalformedBackupError) as excinfo:
        decode(data)
    assert isinstance(excinfo.value, DecodeError)


@pytest.mark.parametrize(
    "payload",
    [
        {"clients": []},
        {"deals": []},
        {"clients": None, "deals": []},
        {"clients": {}, "deals": []},
        {"clients": [], "deals": "none"},
        {"exportDate": 5, "clients": [], "deals": []},
        ["clients", "deals"],
        "backup",
    ],
)
def test_decode_rejects_documents_without_both_collections(payload):
    with pytest.raises(InvalidBackupError) as excinfo:
        decode(json.dumps(payload).encode("utf-8"))
    assert str(excinfo.value) == "This does not appear to be a valid backup file."
