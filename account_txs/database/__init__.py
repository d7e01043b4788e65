"""
Store layer: primary transactions, the derived account_txs index, staging.

SQLAlchemy-backed; SQLite for local runs and tests, PostgreSQL via DATABASE_URL.
"""

from account_txs.database.database import (
    SqlTransactionStore,
    TransactionStore,
    get_store,
)
from account_txs.database.models import (
    AccountTxRow,
    MergeResult,
    TransactionRecord,
    load_payload,
    payload_receiver_id,
)

__all__ = [
    "AccountTxRow",
    "MergeResult",
    "SqlTransactionStore",
    "TransactionRecord",
    "TransactionStore",
    "get_store",
    "load_payload",
    "payload_receiver_id",
]
