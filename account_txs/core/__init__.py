"""
Core: shared exceptions and cross-cutting helpers.
"""

from account_txs.core.exceptions import (
    ConfigError,
    IndexerError,
    OrderingViolationError,
    StoreUnavailableError,
)

__all__ = [
    "ConfigError",
    "IndexerError",
    "OrderingViolationError",
    "StoreUnavailableError",
]
