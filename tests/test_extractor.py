"""
Tests for the account extractor: baseline accounts, receipt walk, argument
keys, method rules, event logs and account id validation.
"""

from __future__ import annotations

import json

from account_txs.extractor import ExtractionPolicy, extract_accounts
from account_txs.extractor.payload import OutcomeStatus, decode_payload
from factories import (
    FAILURE,
    SUCCESS_RECEIPT,
    b64_args,
    byte_array_args,
    call_tx,
    function_call,
    payload,
    receipt,
    record,
)

SIGNER = "alice.near"
APP = "app.near"
BOUNTIES = "bounties.heroes.near"


def _tx_with_receipts(actions: list, receipts: list, *, receiver: str = APP):
    return record("h1", SIGNER, receiver, payload("h1", SIGNER, receiver, actions, receipts))


def test_baseline_is_receiver_then_signer():
    tx = call_tx("h1", SIGNER, APP, "ping", b64_args({}))
    result = extract_accounts(tx)
    assert result.accounts[:2] == (APP, SIGNER)
    assert not result.unparseable


def test_unparseable_payload_returns_baseline_only():
    tx = record("h1", SIGNER, APP, "not json at all")
    result = extract_accounts(tx)
    assert result.accounts == (APP, SIGNER)
    assert result.unparseable


def test_payload_without_hash_is_unparseable():
    body = {"transaction": {"signer_id": SIGNER, "receiver_id": APP, "actions": []}}
    result = extract_accounts(record("h1", SIGNER, APP, body))
    assert result.unparseable
    assert result.accounts == (APP, SIGNER)


def test_base64_receiver_id_argument_is_extracted():
    tx = call_tx("h1", SIGNER, APP, "ft_transfer", b64_args({"receiver_id": "bob.near", "amount": "5"}))
    assert extract_accounts(tx).accounts == (APP, SIGNER, "bob.near")


def test_byte_array_argument_is_extracted():
    tx = call_tx("h1", SIGNER, APP, "nft_mint", byte_array_args({"owner_id": "carol.near"}))
    assert "carol.near" in extract_accounts(tx).accounts


def test_accounts_are_deduplicated_in_first_seen_order():
    tx = call_tx(
        "h1",
        SIGNER,
        APP,
        "ft_transfer",
        b64_args({"receiver_id": SIGNER, "sender_id": APP, "owner_id": "bob.near"}),
    )
    accounts = extract_accounts(tx).accounts
    assert accounts == (APP, SIGNER, "bob.near")
    assert len(accounts) == len(set(accounts))


def test_failed_receipt_contributes_nothing():
    tx = call_tx("h1", SIGNER, APP, "ft_transfer", b64_args({"receiver_id": "bob.near"}), status=FAILURE)
    assert extract_accounts(tx).accounts == (APP, SIGNER)


def test_success_receipt_id_counts_as_success():
    tx = call_tx("h1", SIGNER, APP, "ft_transfer", b64_args({"receiver_id": "bob.near"}), status=SUCCESS_RECEIPT)
    assert "bob.near" in extract_accounts(tx).accounts


def test_system_receipts_are_skipped():
    call = function_call("ft_transfer", b64_args({"receiver_id": "bob.near"}))
    tx = _tx_with_receipts([call], [receipt("system", "refund.near", [call])])
    assert extract_accounts(tx).accounts == (APP, SIGNER)


def test_receipt_accounts_are_collected():
    call = function_call("ft_transfer_call", b64_args({}))
    inner = function_call("ft_on_transfer", b64_args({"sender_id": SIGNER}))
    tx = _tx_with_receipts(
        [call],
        [
            receipt(SIGNER, APP, [call], receipt_id="r1"),
            receipt(APP, "dex.near", [inner], receipt_id="r2"),
        ],
    )
    assert extract_accounts(tx).accounts == (APP, SIGNER, "dex.near")


def test_no_function_call_means_no_descent():
    transfer = {"Transfer": {"deposit": "1"}}
    call = function_call("ft_transfer", b64_args({"receiver_id": "bob.near"}))
    tx = _tx_with_receipts([transfer], [receipt(APP, "other.near", [call])])
    assert extract_accounts(tx).accounts == (APP, SIGNER)


def test_narrow_policy_descends_only_for_allowed_methods():
    args = b64_args({"receiver_id": "bob.near"})
    policy = ExtractionPolicy.narrow(["bounty_claim"])

    allowed = call_tx("h1", SIGNER, BOUNTIES, "bounty_claim", args)
    other = call_tx("h2", SIGNER, BOUNTIES, "ft_transfer", args)

    assert "bob.near" in extract_accounts(allowed, policy).accounts
    assert extract_accounts(other, policy).accounts == (BOUNTIES, SIGNER)


def test_narrow_policy_applies_bounty_rules():
    policy = ExtractionPolicy.narrow(["bounty_action", "bounty_finalize"])
    action = call_tx(
        "h1",
        "owner.near",
        BOUNTIES,
        "bounty_action",
        b64_args({"id": 7, "action": {"ClaimRejected": {"receiver_id": "worker.near"}}}),
    )
    finalize = call_tx(
        "h2",
        "owner.near",
        BOUNTIES,
        "bounty_finalize",
        b64_args({"id": 7, "claimant": ["hunter.near", 2]}),
    )
    assert "worker.near" in extract_accounts(action, policy).accounts
    assert "hunter.near" in extract_accounts(finalize, policy).accounts


def test_broad_policy_has_no_method_rules():
    tx = call_tx("h1", "owner.near", BOUNTIES, "bounty_finalize", b64_args({"claimant": ["hunter.near", 2]}))
    assert "hunter.near" not in extract_accounts(tx).accounts


def test_malformed_args_do_not_drop_other_candidates():
    bad = function_call("broken", "abc")
    good = function_call("ft_transfer", b64_args({"receiver_id": "bob.near"}))
    tx = _tx_with_receipts([good], [receipt(SIGNER, APP, [bad, good])])
    result = extract_accounts(tx)
    assert "bob.near" in result.accounts
    assert result.skipped_fragments == 1
    assert not result.unparseable


def test_event_logs_are_read_in_broad_mode_only():
    event = {
        "standard": "nep171",
        "version": "1.0.0",
        "event": "nft_transfer",
        "data": [{"old_owner_id": "x.near", "new_owner_id": "y.near", "token_ids": ["1"]}],
    }
    call = function_call("nft_transfer", b64_args({"token_id": "1"}))
    logs = ["plain log line", "EVENT_JSON:" + json.dumps(event), "EVENT_JSON:{broken"]
    tx = _tx_with_receipts([call], [receipt(SIGNER, APP, [call], logs=logs)])

    broad = extract_accounts(tx)
    assert "x.near" in broad.accounts
    assert "y.near" in broad.accounts
    assert broad.skipped_fragments == 1

    narrow = extract_accounts(tx, ExtractionPolicy.narrow(["nft_transfer"]))
    assert "x.near" not in narrow.accounts


def test_invalid_account_ids_are_dropped():
    args = b64_args({"receiver_id": "Not Valid!", "owner_id": "ok.near"})
    tx = call_tx("h1", SIGNER, APP, "ft_transfer", args)
    assert extract_accounts(tx).accounts == (APP, SIGNER, "ok.near")

    lenient = ExtractionPolicy(validate_accounts=False)
    assert "Not Valid!" in extract_accounts(tx, lenient).accounts


def test_decode_payload_counts_malformed_receipts():
    body = payload("h1", SIGNER, APP, [function_call("f", None)], ["junk", 3])
    body["receipts"].append(receipt(SIGNER, APP, [], status="Unknown"))
    tree = decode_payload(json.dumps(body))
    assert tree is not None
    assert tree.malformed_receipts == 2
    assert len(tree.receipts) == 1
    assert tree.receipts[0].status is OutcomeStatus.UNKNOWN
