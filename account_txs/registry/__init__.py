"""
Token registry lookup: exclude set (full mode) / contract allow-list (filtered mode).
"""

from account_txs.registry.exclude import ExcludeSetProvider, fetch_token_ids

__all__ = ["ExcludeSetProvider", "fetch_token_ids"]
