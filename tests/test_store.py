"""
Tests for reading primary rows: payload normalisation across column types
(text on SQLite, decoded json/jsonb on PostgreSQL, bytes from some drivers).
"""

from __future__ import annotations

import json
from types import SimpleNamespace

from account_txs.database import load_payload, payload_receiver_id
from account_txs.database.database import _row_to_record
from account_txs.extractor import extract_accounts
from factories import b64_args, function_call, payload, receipt

BODY = payload(
    "h1",
    "alice.near",
    "app.near",
    [function_call("ft_transfer", b64_args({"receiver_id": "bob.near"}))],
    [receipt("alice.near", "app.near", [function_call("ft_transfer", b64_args({"receiver_id": "bob.near"}))])],
)


def _row(transaction):
    return SimpleNamespace(
        transaction_hash="h1",
        signer_id="alice.near",
        tx_block_height=10,
        tx_block_hash="block-10",
        tx_block_timestamp=10_000_000_000,
        transaction=transaction,
    )


def test_load_payload_accepts_every_column_shape():
    text = json.dumps(BODY)
    assert load_payload(BODY) is BODY
    assert load_payload(text) == BODY
    assert load_payload(text.encode("utf-8")) == BODY
    assert load_payload(memoryview(text.encode("utf-8"))) == BODY
    assert load_payload("not json") is None
    assert load_payload(b"\xff\xfe") is None
    assert load_payload("") is None
    assert load_payload(None) is None


def test_payload_receiver_id():
    assert payload_receiver_id(BODY) == "app.near"
    assert payload_receiver_id(json.dumps(BODY)) == "app.near"
    assert payload_receiver_id({"transaction": {"receiver_id": 5}}) == ""
    assert payload_receiver_id("[1, 2]") == ""


def test_decoded_json_column_is_parsed():
    tx = _row_to_record(_row(BODY))
    assert tx.receiver_id == "app.near"

    result = extract_accounts(tx)
    assert not result.unparseable
    assert result.accounts == ("app.near", "alice.near", "bob.near")


def test_text_and_bytes_columns_give_the_same_record():
    from_text = _row_to_record(_row(json.dumps(BODY)))
    from_bytes = _row_to_record(_row(json.dumps(BODY).encode("utf-8")))
    from_dict = _row_to_record(_row(BODY))
    assert from_text == from_bytes == from_dict


def test_stored_records_round_trip_through_the_text_column(store):
    tx = _row_to_record(_row(BODY))
    store.insert_transactions([tx])
    [fetched] = store.fetch_transactions(0, None, upper_inclusive=True, limit=10, offset=0, skip_indexed=True)
    assert fetched == tx
