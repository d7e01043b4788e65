"""
Account-bearing keys and NEAR account id validation.

Call arguments and NEP-297 event logs are untyped; these key sets name the
fields that usually carry an account id.
"""

from __future__ import annotations

import re
from typing import Any

ACCOUNT_ARG_KEYS: frozenset[str] = frozenset(
    {
        "receiver_id",
        "account_id",
        "sender_id",
        "new_account_id",
        "predecessor_account_id",
        "contract_id",
        "owner_id",
        "token_owner_id",
        "nft_contract_id",
        "token_account_id",
        "creator_id",
        "referral_id",
        "previous_owner_id",
        "seller_id",
        "buyer_id",
        "user_id",
        "beneficiary_id",
        "staking_pool_account_id",
        "owner_account_id",
        "voting_account_id",
        "claimer",
        "bounty_owner",
    }
)

EVENT_ARG_KEYS: frozenset[str] = frozenset(
    {
        "account_id",
        "owner_id",
        "old_owner_id",
        "new_owner_id",
        "payer_id",
        "farmer_id",
        "validator_id",
        "liquidation_account_id",
        "contract_id",
        "nft_contract_id",
    }
)

EVENT_JSON_PREFIX = "EVENT_JSON:"

MIN_ACCOUNT_ID_LEN = 2
MAX_ACCOUNT_ID_LEN = 64
# Named (alice.near, app_1.v2.near) and implicit (64 hex / 0x + 40 hex) ids.
_ACCOUNT_ID_RE = re.compile(r"^(([a-z\d]+[\-_])*[a-z\d]+\.)*([a-z\d]+[\-_])*[a-z\d]+$")


def is_valid_account_id(value: Any) -> bool:
    """True for a syntactically valid NEAR account id."""
    if not isinstance(value, str):
        return False
    if not MIN_ACCOUNT_ID_LEN <= len(value) <= MAX_ACCOUNT_ID_LEN:
        return False
    return _ACCOUNT_ID_RE.match(value) is not None


def accounts_from_keys(obj: dict[str, Any], keys: frozenset[str]) -> list[str]:
    """Non-empty string values of obj under any of keys, in obj's key order."""
    return [value for key, value in obj.items() if key in keys and isinstance(value, str) and value]
