"""
Tests for per-method extraction rules (registry and bounty contract rules).
"""

from __future__ import annotations

from account_txs.extractor.rules import (
    MethodRules,
    bounty_action_receiver,
    bounty_finalize_claimant,
    default_bounty_rules,
)


def test_register_and_apply():
    rules = MethodRules()
    rules.register("stake", lambda args: [args["validator"]])
    assert "stake" in rules
    assert rules.apply("stake", {"validator": "pool.near"}) == ["pool.near"]
    assert rules.apply("unstake", {"validator": "pool.near"}) == []
    assert rules.apply(None, {}) == []


def test_decorator_registers_rule():
    rules = MethodRules()

    @rules.rule("swap")
    def _swap_referrer(args):
        return [args.get("referrer"), "", 5]

    assert rules.methods() == ["swap"]
    assert len(rules) == 1
    assert rules.apply("swap", {"referrer": "ref.near"}) == ["ref.near"]


def test_rule_that_raises_contributes_nothing():
    rules = MethodRules({"m": [lambda args: [args["missing"]], lambda args: ["ok.near"]]})
    assert rules.apply("m", {}) == ["ok.near"]


def test_bounty_action_variants():
    for variant in ("ClaimApproved", "ClaimRejected", "Finalize"):
        args = {"id": 1, "action": {variant: {"receiver_id": "worker.near"}}}
        assert bounty_action_receiver(args) == ["worker.near"]
    assert bounty_action_receiver({"action": {"ClaimApproved": {}}}) == []
    assert bounty_action_receiver({"action": "Finalize"}) == []
    assert bounty_action_receiver({}) == []


def test_bounty_finalize_claimant_pair():
    assert bounty_finalize_claimant({"claimant": ["hunter.near", 3]}) == ["hunter.near"]
    assert bounty_finalize_claimant({"claimant": "hunter.near"}) == []
    assert bounty_finalize_claimant({"claimant": ["hunter.near"]}) == []
    assert bounty_finalize_claimant({}) == []


def test_default_bounty_rules():
    rules = default_bounty_rules()
    assert rules.methods() == ["bounty_action", "bounty_finalize"]
