"""
Application-level exceptions.

Decode problems in transaction payloads are not exceptions: the extractor
reports them through ExtractionResult.unparseable. Everything here either
aborts a pipeline run (and is retried by the driver) or aborts startup.
"""

from __future__ import annotations


class IndexerError(Exception):
    """Base class for account_txs errors."""


class ConfigError(IndexerError):
    """Invalid configuration value (bad number, unknown mode)."""


class StoreUnavailableError(IndexerError):
    """The transaction store cannot be reached before the retry loop starts."""


class OrderingViolationError(IndexerError):
    """
    The store returned pages whose timestamps go backwards.

    Fatal to the current run: continuing would corrupt checkpoint semantics.
    """

    def __init__(self, previous_timestamp: int, page_timestamp: int, block_height: int) -> None:
        self.previous_timestamp = previous_timestamp
        self.page_timestamp = page_timestamp
        self.block_height = block_height
        super().__init__(
            "Violation of the sequence of timestamps: "
            f"page ends at {page_timestamp} (height {block_height}) "
            f"after previous page ended at {previous_timestamp}"
        )
