"""
Account extraction from NEAR transaction payloads.

Decodes the payload into a tagged-variant tree (actions, receipts, outcome
statuses, argument encodings) and recovers candidate account ids. Purely
structural; no I/O beyond debug logging.
"""

from account_txs.extractor.args import ArgsEncoding, DecodedArgs, decode_args, decode_args_text
from account_txs.extractor.extractor import (
    ExtractionPolicy,
    ExtractionResult,
    SelectionMode,
    extract_accounts,
)
from account_txs.extractor.payload import (
    ActionKind,
    OutcomeStatus,
    TransactionPayload,
    decode_payload,
)
from account_txs.extractor.rules import MethodRules, default_bounty_rules

__all__ = [
    "ActionKind",
    "ArgsEncoding",
    "DecodedArgs",
    "ExtractionPolicy",
    "ExtractionResult",
    "MethodRules",
    "OutcomeStatus",
    "SelectionMode",
    "TransactionPayload",
    "decode_args",
    "decode_args_text",
    "decode_payload",
    "default_bounty_rules",
    "extract_accounts",
]
