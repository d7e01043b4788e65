"""
NEAR transaction payload: raw JSON to a tagged-variant tree.

The primary table stores each transaction as the indexer's "transaction with
outcome" JSON: the signed transaction (with its top-level actions) plus every
receipt it spawned and each receipt's execution outcome. This module turns
that untyped structure into small frozen dataclasses. Decoding is total:
unknown or malformed nodes become explicit OTHER / UNKNOWN variants (or are
counted as malformed) instead of raising.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from account_txs.database.models import load_payload

SYSTEM_ACCOUNT_ID = "system"


class ActionKind(Enum):
    FUNCTION_CALL = "function_call"
    OTHER = "other"


class OutcomeStatus(Enum):
    """Execution outcome status of a receipt."""

    SUCCESS_VALUE = "SuccessValue"
    SUCCESS_RECEIPT_ID = "SuccessReceiptId"
    FAILURE = "Failure"
    UNKNOWN = "Unknown"

    @property
    def is_success(self) -> bool:
        return self in (OutcomeStatus.SUCCESS_VALUE, OutcomeStatus.SUCCESS_RECEIPT_ID)


@dataclass(frozen=True)
class ActionNode:
    """One action; method_name/args are set only for function calls."""

    kind: ActionKind
    method_name: str | None = None
    args: Any = None
    """Raw argument blob: base64 text, "[..]" byte-array text, a list, or None."""

    @property
    def is_function_call(self) -> bool:
        return self.kind is ActionKind.FUNCTION_CALL and bool(self.method_name)


@dataclass(frozen=True)
class ReceiptNode:
    predecessor_id: str | None
    receiver_id: str | None
    actions: tuple[ActionNode, ...]
    status: OutcomeStatus
    logs: tuple[str, ...] = ()
    receipt_id: str | None = None

    @property
    def is_system(self) -> bool:
        return self.predecessor_id == SYSTEM_ACCOUNT_ID


@dataclass(frozen=True)
class TransactionPayload:
    hash: str
    signer_id: str | None
    receiver_id: str | None
    actions: tuple[ActionNode, ...]
    receipts: tuple[ReceiptNode, ...]
    malformed_receipts: int = 0
    """Receipt entries that were not objects; they contribute nothing."""


def _str_or_none(value: Any) -> str | None:
    return value if isinstance(value, str) and value else None


def parse_action(raw: Any) -> ActionNode:
    """
    Parse one action. Function calls look like
    {"FunctionCall": {"method_name": ..., "args": ..., "gas": ..., "deposit": ...}};
    everything else ("CreateAccount", {"Transfer": {...}}, ...) is OTHER.
    """
    if isinstance(raw, dict):
        call = raw.get("FunctionCall")
        if isinstance(call, dict):
            return ActionNode(
                kind=ActionKind.FUNCTION_CALL,
                method_name=_str_or_none(call.get("method_name")),
                args=call.get("args"),
            )
    return ActionNode(kind=ActionKind.OTHER)


def parse_status(raw: Any) -> OutcomeStatus:
    """{"SuccessValue": ""} / {"SuccessReceiptId": "..."} / {"Failure": {...}} / "Unknown"."""
    if isinstance(raw, dict):
        for status in (
            OutcomeStatus.SUCCESS_VALUE,
            OutcomeStatus.SUCCESS_RECEIPT_ID,
            OutcomeStatus.FAILURE,
        ):
            if status.value in raw:
                return status
    return OutcomeStatus.UNKNOWN


def _parse_actions(raw: Any) -> tuple[ActionNode, ...]:
    if not isinstance(raw, list):
        return ()
    return tuple(parse_action(a) for a in raw)


def parse_receipt(raw: dict[str, Any]) -> ReceiptNode:
    """Parse one entry of ``receipts``: {"receipt": {...}, "execution_outcome": {...}}."""
    receipt = raw.get("receipt")
    if not isinstance(receipt, dict):
        receipt = {}
    body = receipt.get("receipt")
    action_body = body.get("Action") if isinstance(body, dict) else None
    actions = _parse_actions(action_body.get("actions")) if isinstance(action_body, dict) else ()

    outcome_wrapper = raw.get("execution_outcome")
    outcome = outcome_wrapper.get("outcome") if isinstance(outcome_wrapper, dict) else None
    if not isinstance(outcome, dict):
        outcome = {}
    logs = outcome.get("logs")
    logs_tuple = tuple(entry for entry in logs if isinstance(entry, str)) if isinstance(logs, list) else ()

    return ReceiptNode(
        predecessor_id=_str_or_none(receipt.get("predecessor_id")),
        receiver_id=_str_or_none(receipt.get("receiver_id")),
        actions=actions,
        status=parse_status(outcome.get("status")),
        logs=logs_tuple,
        receipt_id=_str_or_none(receipt.get("receipt_id")),
    )


def parse_payload(data: Any) -> TransactionPayload | None:
    """
    Build the tree from already-decoded JSON.

    Returns None when there is no ``transaction`` object with a hash: the
    payload is not a transaction the extractor understands.
    """
    if not isinstance(data, dict):
        return None
    tx = data.get("transaction")
    if not isinstance(tx, dict):
        return None
    tx_hash = _str_or_none(tx.get("hash"))
    if tx_hash is None:
        return None

    receipts: list[ReceiptNode] = []
    malformed = 0
    raw_receipts = data.get("receipts")
    for raw in raw_receipts if isinstance(raw_receipts, list) else ():
        if isinstance(raw, dict):
            receipts.append(parse_receipt(raw))
        else:
            malformed += 1

    return TransactionPayload(
        hash=tx_hash,
        signer_id=_str_or_none(tx.get("signer_id")),
        receiver_id=_str_or_none(tx.get("receiver_id")),
        actions=_parse_actions(tx.get("actions")),
        receipts=tuple(receipts),
        malformed_receipts=malformed,
    )


def decode_payload(payload: Any) -> TransactionPayload | None:
    """
    Build the tree from a payload that is either already decoded (dict) or
    raw JSON text / bytes; None for invalid JSON or no hash.
    """
    return parse_payload(load_payload(payload))
