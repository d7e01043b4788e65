"""
Account extractor: transaction record to candidate account ids.

Walks the receipt tree of one transaction and recovers every plausible
account id: receipt predecessors/receivers, account-bearing call arguments,
method-specific argument shapes, and NEP-297 event logs. Pure and total:
malformed fragments are skipped, never raised, and the transaction's own
receiver and signer are always returned.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum

from account_txs.database.models import TransactionRecord
from account_txs.extractor.accounts import (
    ACCOUNT_ARG_KEYS,
    EVENT_ARG_KEYS,
    EVENT_JSON_PREFIX,
    accounts_from_keys,
    is_valid_account_id,
)
from account_txs.extractor.args import decode_args
from account_txs.extractor.payload import (
    ActionNode,
    ReceiptNode,
    TransactionPayload,
    decode_payload,
)
from account_txs.extractor.rules import MethodRules, default_bounty_rules
from account_txs.logging import get_logger

logger = get_logger(__name__)


class SelectionMode(Enum):
    BROAD = "broad"
    """Descend into receipts when any top-level action is a function call."""
    NARROW = "narrow"
    """Descend only when a top-level call's method is in the allow-list."""


@dataclass(frozen=True)
class ExtractionPolicy:
    """What the extractor looks at. Use broad() / narrow() for the two job modes."""

    mode: SelectionMode = SelectionMode.BROAD
    methods: frozenset[str] = frozenset()
    rules: MethodRules = field(default_factory=MethodRules)
    include_event_logs: bool = True
    validate_accounts: bool = True
    """Drop argument/event candidates that are not valid NEAR account ids."""

    @classmethod
    def broad(cls) -> ExtractionPolicy:
        return cls(mode=SelectionMode.BROAD, include_event_logs=True)

    @classmethod
    def narrow(
        cls,
        methods: tuple[str, ...] | frozenset[str],
        rules: MethodRules | None = None,
    ) -> ExtractionPolicy:
        return cls(
            mode=SelectionMode.NARROW,
            methods=frozenset(methods),
            rules=rules if rules is not None else default_bounty_rules(),
            include_event_logs=False,
        )

    def selects(self, action: ActionNode) -> bool:
        if not action.is_function_call:
            return False
        if self.mode is SelectionMode.NARROW:
            return action.method_name in self.methods
        return True


@dataclass(frozen=True)
class ExtractionResult:
    """
    Candidates for one transaction, deduplicated in first-seen order.

    unparseable: the payload was not a decodable transaction; accounts then
    holds only the baseline receiver/signer.
    """

    accounts: tuple[str, ...]
    unparseable: bool = False
    skipped_fragments: int = 0
    """Argument blobs / event logs that failed to decode."""


def dedupe(candidates: list[str]) -> tuple[str, ...]:
    """Drop empty values and repeats, keeping first-seen order."""
    return tuple(dict.fromkeys(c for c in candidates if c))


class _Collector:
    """Accumulates candidates for one transaction."""

    def __init__(self, policy: ExtractionPolicy) -> None:
        self.policy = policy
        self.accounts: list[str] = []
        self.skipped = 0

    def add_trusted(self, *account_ids: str | None) -> None:
        self.accounts.extend(a for a in account_ids if a)

    def add_untrusted(self, account_ids: list[str]) -> None:
        for account_id in account_ids:
            if not self.policy.validate_accounts or is_valid_account_id(account_id):
                self.accounts.append(account_id)


def _collect_call(collector: _Collector, receipt: ReceiptNode, action: ActionNode, tx_hash: str) -> None:
    collector.add_trusted(receipt.predecessor_id, receipt.receiver_id)
    decoded = decode_args(action.args)
    if not decoded.ok:
        collector.skipped += 1
        logger.debug(
            "extractor_args_undecodable",
            transaction_hash=tx_hash,
            method_name=action.method_name,
            receipt_id=receipt.receipt_id,
        )
        return
    if decoded.value is None:
        return
    collector.add_untrusted(accounts_from_keys(decoded.value, ACCOUNT_ARG_KEYS))
    collector.add_untrusted(collector.policy.rules.apply(action.method_name, decoded.value))


def _collect_events(collector: _Collector, receipt: ReceiptNode, tx_hash: str) -> None:
    for log in receipt.logs:
        if not log.startswith(EVENT_JSON_PREFIX):
            continue
        try:
            event = json.loads(log[len(EVENT_JSON_PREFIX):])
        except json.JSONDecodeError:
            collector.skipped += 1
            logger.debug("extractor_event_undecodable", transaction_hash=tx_hash, receipt_id=receipt.receipt_id)
            continue
        data = event.get("data") if isinstance(event, dict) else None
        if not isinstance(data, list):
            continue
        for item in data:
            if isinstance(item, dict):
                collector.add_untrusted(accounts_from_keys(item, EVENT_ARG_KEYS))


def _collect_receipts(collector: _Collector, payload: TransactionPayload) -> None:
    if not any(collector.policy.selects(a) for a in payload.actions):
        return
    for receipt in payload.receipts:
        if receipt.is_system or not receipt.status.is_success:
            continue
        calls = [a for a in receipt.actions if a.is_function_call]
        for action in calls:
            _collect_call(collector, receipt, action, payload.hash)
        if calls and collector.policy.include_event_logs:
            _collect_events(collector, receipt, payload.hash)


def extract_accounts(tx: TransactionRecord, policy: ExtractionPolicy | None = None) -> ExtractionResult:
    """
    Return every candidate account of a transaction.

    Always starts with the record's receiver_id and signer_id. Receipts are
    only walked when a top-level action passes the policy's selection, and
    only successful, non-system receipts contribute.
    """
    policy = policy or ExtractionPolicy.broad()
    collector = _Collector(policy)
    collector.add_trusted(tx.receiver_id, tx.signer_id)

    payload = decode_payload(tx.payload)
    if payload is None:
        return ExtractionResult(accounts=dedupe(collector.accounts), unparseable=True)

    _collect_receipts(collector, payload)
    return ExtractionResult(
        accounts=dedupe(collector.accounts),
        skipped_fragments=collector.skipped + payload.malformed_receipts,
    )
