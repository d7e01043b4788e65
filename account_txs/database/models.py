"""
Domain models for store entities.

Primary transaction records (read-only to the indexer) and derived
account-transaction index rows. Plain dataclasses; no ORM coupling.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class TransactionRecord:
    """One row of the primary ``transactions`` table, as read by the scanner."""

    transaction_hash: str
    signer_id: str
    receiver_id: str
    """``$.transaction.receiver_id`` of the payload; "" when it cannot be read."""
    block_height: int
    block_timestamp: int
    """Block timestamp in nanoseconds; the true ordering key."""
    payload: Any
    """Transaction with its receipts and outcomes: decoded JSON as read by the store
    (None when undecodable); raw JSON text is accepted too."""
    block_hash: str | None = None


@dataclass(frozen=True)
class AccountTxRow:
    """One (account, transaction) row of ``account_txs`` or its staging table."""

    account_id: str
    transaction_hash: str
    signer_id: str
    tx_block_height: int
    tx_block_timestamp: int

    @classmethod
    def for_account(cls, account_id: str, tx: TransactionRecord) -> AccountTxRow:
        return cls(
            account_id=account_id,
            transaction_hash=tx.transaction_hash,
            signer_id=tx.signer_id,
            tx_block_height=tx.block_height,
            tx_block_timestamp=tx.block_timestamp,
        )

    def to_dict(self) -> dict[str, str | int]:
        return {
            "account_id": self.account_id,
            "transaction_hash": self.transaction_hash,
            "signer_id": self.signer_id,
            "tx_block_height": self.tx_block_height,
            "tx_block_timestamp": self.tx_block_timestamp,
        }


@dataclass(frozen=True)
class MergeResult:
    rows_merged: int
    rows_replaced: int = 0
    """Index rows at the checkpoint height deleted in the same transaction."""


def load_payload(raw: Any) -> Any:
    """
    Normalise a ``transactions.transaction`` value to decoded JSON.

    json/jsonb columns come back from the driver already decoded (dict/list);
    text columns come back as str, some drivers return bytes. Returns None
    when the value is not valid JSON.
    """
    if raw is None or isinstance(raw, (dict, list)):
        return raw
    if isinstance(raw, memoryview):
        raw = raw.tobytes()
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = bytes(raw).decode("utf-8")
        except UnicodeDecodeError:
            return None
    if not isinstance(raw, str) or not raw:
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return None


def payload_receiver_id(payload: Any) -> str:
    """
    Return ``$.transaction.receiver_id`` of a payload (decoded or raw), or ""
    when the payload is not JSON or the field is missing / not a string.
    """
    data = load_payload(payload)
    tx = data.get("transaction") if isinstance(data, dict) else None
    receiver = tx.get("receiver_id") if isinstance(tx, dict) else None
    return receiver if isinstance(receiver, str) else ""
