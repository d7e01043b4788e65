"""
Builders for NEAR transaction payloads and primary records used across tests.
"""

from __future__ import annotations

import base64
import json
from typing import Any

from account_txs.database.models import TransactionRecord

SUCCESS_VALUE = {"SuccessValue": ""}
SUCCESS_RECEIPT = {"SuccessReceiptId": "9cHkCbP8uPVu8mWpuzZ4SdZtL4azzuUbTkEd1JMRHj7N"}
FAILURE = {"Failure": {"ActionError": {"index": 0, "kind": {"FunctionCallError": {}}}}}

NS = 1_000_000_000


def b64_args(obj: Any) -> str:
    return base64.b64encode(json.dumps(obj).encode("utf-8")).decode("ascii")


def byte_array_args(obj: Any) -> str:
    """Args rendered as a JSON array of byte values, e.g. "[123, 125]"."""
    return json.dumps(list(json.dumps(obj).encode("utf-8")))


def function_call(method: str, args: Any = None) -> dict:
    return {
        "FunctionCall": {
            "method_name": method,
            "args": args,
            "gas": 30_000_000_000_000,
            "deposit": "0",
        }
    }


def receipt(
    predecessor: str,
    receiver: str,
    actions: list,
    *,
    status: Any = None,
    logs: list[str] | None = None,
    receipt_id: str = "rcpt",
) -> dict:
    return {
        "receipt": {
            "predecessor_id": predecessor,
            "receiver_id": receiver,
            "receipt_id": receipt_id,
            "receipt": {"Action": {"signer_id": predecessor, "actions": actions}},
        },
        "execution_outcome": {
            "id": receipt_id,
            "outcome": {
                "logs": logs or [],
                "status": SUCCESS_VALUE if status is None else status,
            },
        },
    }


def payload(
    tx_hash: str,
    signer: str,
    receiver: str,
    actions: list,
    receipts: list | None = None,
) -> dict:
    return {
        "transaction": {
            "hash": tx_hash,
            "signer_id": signer,
            "receiver_id": receiver,
            "actions": actions,
        },
        "execution_outcome": {"outcome": {"status": SUCCESS_RECEIPT}},
        "receipts": receipts or [],
        "data_receipts": [],
    }


def call_tx(
    tx_hash: str,
    signer: str,
    receiver: str,
    method: str,
    args: Any,
    *,
    height: int = 10,
    timestamp: int | None = None,
    status: Any = None,
) -> TransactionRecord:
    """A signer -> receiver function call with one matching receipt."""
    body = payload(
        tx_hash,
        signer,
        receiver,
        [function_call(method, args)],
        [receipt(signer, receiver, [function_call(method, args)], status=status, receipt_id=f"r-{tx_hash}")],
    )
    return record(tx_hash, signer, receiver, body, height=height, timestamp=timestamp)


def record(
    tx_hash: str,
    signer: str,
    receiver: str,
    body: Any,
    *,
    height: int = 10,
    timestamp: int | None = None,
) -> TransactionRecord:
    text = body if isinstance(body, str) else json.dumps(body)
    return TransactionRecord(
        transaction_hash=tx_hash,
        signer_id=signer,
        receiver_id=receiver,
        block_height=height,
        block_timestamp=timestamp if timestamp is not None else height * NS,
        payload=text,
        block_hash=f"block-{height}",
    )


def seed_index(store, rows) -> None:
    """Insert AccountTxRow objects straight into ``account_txs``."""
    from sqlalchemy import insert

    from account_txs.database.init_tables import account_txs

    values = [r.to_dict() for r in rows]
    if values:
        with store.engine.begin() as conn:
            conn.execute(insert(account_txs), values)
