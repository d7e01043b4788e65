"""
Store abstraction for the primary transactions table and the derived index.

All pipeline access goes through the abstract TransactionStore interface; the
SQLAlchemy implementation runs on SQLite (local runs, tests) and PostgreSQL
(DATABASE_URL). Every method is a short transaction of its own. The only
write to the permanent index is merge_staging(), which replaces the checkpoint
height and adds the staged rows atomically.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from typing import Any, Iterable

from sqlalchemy import and_, delete, func, insert, inspect, literal, select
from sqlalchemy.engine import Engine

from account_txs.database.connection import create_store_engine
from account_txs.database.init_tables import (
    STAGING_TABLE,
    account_txs,
    account_txs_staging,
    init_tables,
    transactions,
)
from account_txs.database.models import (
    AccountTxRow,
    MergeResult,
    TransactionRecord,
    load_payload,
    payload_receiver_id,
)
from account_txs.logging import get_logger

logger = get_logger(__name__)


# -----------------------------------------------------------------------------
# Abstract store
# -----------------------------------------------------------------------------


class TransactionStore(ABC):
    """Interface the pipeline needs from the storage engine."""

    @abstractmethod
    def ping(self) -> None:
        """Raise if the store cannot be reached."""
        ...

    # --- primary table (read-only to the indexer) ---

    @abstractmethod
    def max_primary_height(self) -> int | None:
        """Max tx_block_height in ``transactions``; None when empty."""
        ...

    @abstractmethod
    def fetch_transactions(
        self,
        lower_height: int,
        upper_height: int | None,
        *,
        upper_inclusive: bool,
        limit: int,
        offset: int,
        skip_indexed: bool,
        indexed_below: int | None = None,
    ) -> list[TransactionRecord]:
        """
        Return primary records with ``lower_height <= height`` and below (or at)
        ``upper_height``, ordered by (timestamp, hash), limit/offset applied.
        skip_indexed: anti-join against hashes already present in ``account_txs``;
        indexed_below limits that anti-join to index rows below the given height.
        """
        ...

    # --- derived index ---

    @abstractmethod
    def max_index_height(self) -> int | None:
        ...

    @abstractmethod
    def max_index_timestamp(self, below_height: int | None = None) -> int | None:
        """Max tx_block_timestamp in ``account_txs``, optionally below a height."""
        ...

    @abstractmethod
    def get_account_transactions(self, account_id: str, *, limit: int = 100) -> list[AccountTxRow]:
        """Index rows for one account, newest first."""
        ...

    # --- staging ---

    @abstractmethod
    def staging_exists(self) -> bool:
        ...

    @abstractmethod
    def create_staging(self) -> None:
        ...

    @abstractmethod
    def drop_staging(self) -> None:
        """Drop staging if it exists."""
        ...

    @abstractmethod
    def append_staging(self, row: AccountTxRow) -> None:
        ...

    @abstractmethod
    def merge_staging(self, *, replace_height: int | None = None) -> MergeResult:
        """
        In one transaction: delete index rows at replace_height (when given),
        then insert staging rows whose (account_id, transaction_hash) is not
        yet in ``account_txs``, ordered by height.
        """
        ...


# -----------------------------------------------------------------------------
# SQLAlchemy implementation
# -----------------------------------------------------------------------------


def _row_to_record(row: Any) -> TransactionRecord:
    # text on SQLite, already-decoded dict on a PostgreSQL json/jsonb column
    payload = load_payload(row.transaction)
    return TransactionRecord(
        transaction_hash=row.transaction_hash,
        signer_id=row.signer_id or "",
        receiver_id=payload_receiver_id(payload),
        block_height=int(row.tx_block_height),
        block_timestamp=int(row.tx_block_timestamp),
        payload=payload,
        block_hash=row.tx_block_hash,
    )


class SqlTransactionStore(TransactionStore):
    """SQLAlchemy Core implementation; one connection (and commit) per operation."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    @property
    def engine(self) -> Engine:
        return self._engine

    def ping(self) -> None:
        with self._engine.connect() as conn:
            conn.execute(select(literal(1))).scalar()

    def ensure_schema(self) -> None:
        init_tables(self._engine)

    def _scalar(self, stmt: Any) -> Any:
        with self._engine.connect() as conn:
            return conn.execute(stmt).scalar()

    # --- primary table ---

    def max_primary_height(self) -> int | None:
        value = self._scalar(select(func.max(transactions.c.tx_block_height)))
        return int(value) if value is not None else None

    def fetch_transactions(
        self,
        lower_height: int,
        upper_height: int | None,
        *,
        upper_inclusive: bool,
        limit: int,
        offset: int,
        skip_indexed: bool,
        indexed_below: int | None = None,
    ) -> list[TransactionRecord]:
        t = transactions
        stmt = select(
            t.c.transaction_hash,
            t.c.signer_id,
            t.c.tx_block_height,
            t.c.tx_block_hash,
            t.c.tx_block_timestamp,
            t.c.transaction,
        ).where(t.c.tx_block_height >= lower_height)
        if upper_height is not None:
            if upper_inclusive:
                stmt = stmt.where(t.c.tx_block_height <= upper_height)
            else:
                stmt = stmt.where(t.c.tx_block_height < upper_height)
        if skip_indexed:
            indexed = (
                select(literal(1))
                .select_from(account_txs)
                .where(account_txs.c.transaction_hash == t.c.transaction_hash)
                .correlate(t)
            )
            if indexed_below is not None:
                indexed = indexed.where(account_txs.c.tx_block_height < indexed_below)
            stmt = stmt.where(~indexed.exists())
        stmt = (
            stmt.order_by(t.c.tx_block_timestamp, t.c.transaction_hash)
            .limit(limit)
            .offset(offset)
        )
        with self._engine.connect() as conn:
            rows = conn.execute(stmt).fetchall()
        return [_row_to_record(r) for r in rows]

    def insert_transactions(self, records: Iterable[TransactionRecord]) -> int:
        """Append primary records (the ingester's job; used by local runs and tests)."""
        values = [
            {
                "transaction_hash": r.transaction_hash,
                "signer_id": r.signer_id,
                "tx_block_height": r.block_height,
                "tx_block_hash": r.block_hash,
                "tx_block_timestamp": r.block_timestamp,
                "transaction": r.payload if isinstance(r.payload, str) else json.dumps(r.payload),
                "last_block_height": r.block_height,
            }
            for r in records
        ]
        if not values:
            return 0
        with self._engine.begin() as conn:
            conn.execute(insert(transactions), values)
        return len(values)

    # --- derived index ---

    def max_index_height(self) -> int | None:
        value = self._scalar(select(func.max(account_txs.c.tx_block_height)))
        return int(value) if value is not None else None

    def max_index_timestamp(self, below_height: int | None = None) -> int | None:
        stmt = select(func.max(account_txs.c.tx_block_timestamp))
        if below_height is not None:
            stmt = stmt.where(account_txs.c.tx_block_height < below_height)
        value = self._scalar(stmt)
        return int(value) if value is not None else None

    def get_account_transactions(self, account_id: str, *, limit: int = 100) -> list[AccountTxRow]:
        a = account_txs
        stmt = (
            select(a)
            .where(a.c.account_id == account_id)
            .order_by(a.c.tx_block_timestamp.desc(), a.c.transaction_hash)
            .limit(limit)
        )
        with self._engine.connect() as conn:
            rows = conn.execute(stmt).fetchall()
        return [_row_to_account_tx(r) for r in rows]

    def list_account_txs(self) -> list[AccountTxRow]:
        """Whole index ordered by (height, hash, account); for tests and audits."""
        a = account_txs
        stmt = select(a).order_by(a.c.tx_block_height, a.c.transaction_hash, a.c.account_id)
        with self._engine.connect() as conn:
            return [_row_to_account_tx(r) for r in conn.execute(stmt).fetchall()]

    # --- staging ---

    def staging_exists(self) -> bool:
        return inspect(self._engine).has_table(STAGING_TABLE)

    def create_staging(self) -> None:
        account_txs_staging.create(self._engine, checkfirst=True)

    def drop_staging(self) -> None:
        account_txs_staging.drop(self._engine, checkfirst=True)

    def append_staging(self, row: AccountTxRow) -> None:
        with self._engine.begin() as conn:
            conn.execute(insert(account_txs_staging).values(**row.to_dict()))

    def count_staging(self) -> int:
        return int(self._scalar(select(func.count()).select_from(account_txs_staging)) or 0)

    def merge_staging(self, *, replace_height: int | None = None) -> MergeResult:
        s = account_txs_staging
        existing = account_txs.alias("existing")
        already_indexed = (
            select(literal(1))
            .select_from(existing)
            .where(
                and_(
                    existing.c.account_id == s.c.account_id,
                    existing.c.transaction_hash == s.c.transaction_hash,
                )
            )
            .correlate(s)
        )
        pending = (
            select(
                s.c.account_id,
                s.c.transaction_hash,
                s.c.signer_id,
                s.c.tx_block_height,
                s.c.tx_block_timestamp,
            )
            .distinct()
            .where(~already_indexed.exists())
            .order_by(s.c.tx_block_height)
        )
        stmt = insert(account_txs).from_select(
            ["account_id", "transaction_hash", "signer_id", "tx_block_height", "tx_block_timestamp"],
            pending,
        )
        replaced = 0
        with self._engine.begin() as conn:
            if replace_height is not None:
                deleted = conn.execute(
                    delete(account_txs).where(account_txs.c.tx_block_height == replace_height)
                )
                replaced = max(deleted.rowcount or 0, 0)
            result = conn.execute(stmt)
            merged = result.rowcount if result.rowcount and result.rowcount > 0 else 0
        return MergeResult(rows_merged=merged, rows_replaced=replaced)


def _row_to_account_tx(row: Any) -> AccountTxRow:
    return AccountTxRow(
        account_id=row.account_id,
        transaction_hash=row.transaction_hash,
        signer_id=row.signer_id,
        tx_block_height=int(row.tx_block_height),
        tx_block_timestamp=int(row.tx_block_timestamp),
    )


def get_store(url: str, *, ensure_schema: bool = False) -> SqlTransactionStore:
    """
    Return a store for the SQLAlchemy URL.

    ensure_schema: create ``transactions`` / ``account_txs`` when missing
    (local SQLite runs and tests; production tables come from the ingester).
    """
    store = SqlTransactionStore(create_store_engine(url))
    if ensure_schema:
        store.ensure_schema()
    return store
