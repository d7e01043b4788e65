"""
Table definitions for the primary and derived tables.

``transactions`` is owned by the ingester; it is declared here so local runs
and tests can create it. ``account_txs`` is the derived index and
``account_txs_staging`` the per-run staging table with the same shape.
init_tables() is safe to run multiple times.
"""

from __future__ import annotations

from sqlalchemy import BigInteger, Column, Index, MetaData, String, Table, Text
from sqlalchemy.engine import Engine

TRANSACTIONS_TABLE = "transactions"
ACCOUNT_TXS_TABLE = "account_txs"
STAGING_TABLE = "account_txs_staging"

metadata = MetaData()

transactions = Table(
    TRANSACTIONS_TABLE,
    metadata,
    Column("transaction_hash", String(64), primary_key=True),
    Column("signer_id", String(64), nullable=False),
    Column("tx_block_height", BigInteger, nullable=False),
    Column("tx_block_hash", String(64), nullable=True),
    Column("tx_block_timestamp", BigInteger, nullable=False),  # nanoseconds
    Column("transaction", Text, nullable=False),  # JSON payload
    Column("last_block_height", BigInteger, nullable=True),
    Index("ix_transactions_height", "tx_block_height"),
    Index("ix_transactions_timestamp", "tx_block_timestamp"),
)


def _account_tx_columns() -> list[Column]:
    return [
        Column("account_id", String(64), nullable=False),
        Column("transaction_hash", String(64), nullable=False),
        Column("signer_id", String(64), nullable=False),
        Column("tx_block_height", BigInteger, nullable=False),
        Column("tx_block_timestamp", BigInteger, nullable=False),
    ]


account_txs = Table(
    ACCOUNT_TXS_TABLE,
    metadata,
    *_account_tx_columns(),
    Index("ix_account_txs_account_height", "account_id", "tx_block_height"),
    Index("ix_account_txs_hash", "transaction_hash"),
    Index("ix_account_txs_height", "tx_block_height"),
)

# Separate MetaData: staging is created/dropped per run, never by init_tables().
staging_metadata = MetaData()

account_txs_staging = Table(
    STAGING_TABLE,
    staging_metadata,
    *_account_tx_columns(),
)


def init_tables(engine: Engine) -> None:
    """Create ``transactions`` and ``account_txs`` (and indexes) if missing."""
    metadata.create_all(engine, checkfirst=True)
