"""
Account-transactions indexer for NEAR.

Builds the derived ``account_txs`` index ("which accounts touched which
transaction") from the append-only ``transactions`` table. Periodic,
resumable backfill job: checkpoint, scan, extract, stage, merge.
"""

__version__ = "0.1.0"
