"""
Per-method extraction rules.

Some contracts nest account ids in argument shapes the generic key scan
cannot see: a tagged variant ({"ClaimApproved": {"receiver_id": ...}}) or a
positional pair (["alice.near", 3]). A rule is a callable taking the decoded
argument object and returning extra candidates; rules are registered per
method name so new applications plug in without touching the extractor.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable

MethodRule = Callable[[dict[str, Any]], list[str]]

BOUNTY_ACTION_VARIANTS = ("ClaimApproved", "ClaimRejected", "Finalize")


class MethodRules:
    """Registry: method name -> rules applied to that method's decoded args."""

    def __init__(self, rules: dict[str, Iterable[MethodRule]] | None = None) -> None:
        self._rules: dict[str, list[MethodRule]] = {}
        for method, method_rules in (rules or {}).items():
            for rule in method_rules:
                self.register(method, rule)

    def register(self, method_name: str, rule: MethodRule) -> MethodRule:
        self._rules.setdefault(method_name, []).append(rule)
        return rule

    def rule(self, method_name: str) -> Callable[[MethodRule], MethodRule]:
        """Decorator form of register()."""

        def decorator(fn: MethodRule) -> MethodRule:
            return self.register(method_name, fn)

        return decorator

    def methods(self) -> list[str]:
        return sorted(self._rules)

    def __contains__(self, method_name: object) -> bool:
        return method_name in self._rules

    def __len__(self) -> int:
        return len(self._rules)

    def apply(self, method_name: str | None, args: dict[str, Any]) -> list[str]:
        """Run every rule for method_name; a rule that raises contributes nothing."""
        if not method_name:
            return []
        out: list[str] = []
        for rule in self._rules.get(method_name, ()):
            try:
                out.extend(a for a in rule(args) if isinstance(a, str) and a)
            except (AttributeError, IndexError, KeyError, TypeError, ValueError):
                continue
        return out


def bounty_action_receiver(args: dict[str, Any]) -> list[str]:
    """
    bounty_action(action=...): the first of ClaimApproved / ClaimRejected /
    Finalize that carries a receiver_id names the affected account.
    """
    action = args.get("action")
    if not isinstance(action, dict):
        return []
    for variant in BOUNTY_ACTION_VARIANTS:
        body = action.get(variant)
        if isinstance(body, dict):
            receiver = body.get("receiver_id")
            if isinstance(receiver, str) and receiver:
                return [receiver]
    return []


def bounty_finalize_claimant(args: dict[str, Any]) -> list[str]:
    """bounty_finalize(claimant=[account_id, claim_number])."""
    claimant = args.get("claimant")
    if isinstance(claimant, (list, tuple)) and len(claimant) == 2 and isinstance(claimant[0], str):
        return [claimant[0]]
    return []


def default_bounty_rules() -> MethodRules:
    """Rules for the bounties contract's calling convention."""
    return MethodRules(
        {
            "bounty_action": [bounty_action_receiver],
            "bounty_finalize": [bounty_finalize_claimant],
        }
    )
