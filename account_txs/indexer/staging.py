"""
Staging writer and merge committer.

Rows are appended to a per-run staging table as they are produced; nothing is
durable until merge(), which (in one transaction) replaces the checkpoint
height and adds only the (account_id, transaction_hash) pairs not already in
``account_txs``. Running merge twice adds nothing the second time. Staging is
dropped at the end of every run.
"""

from __future__ import annotations

from typing import Iterable

from account_txs.database.database import TransactionStore
from account_txs.database.models import AccountTxRow, MergeResult
from account_txs.logging import get_logger

logger = get_logger(__name__)


class StagingWriter:
    def __init__(self, store: TransactionStore) -> None:
        self._store = store
        self.rows_appended = 0

    def create(self) -> bool:
        """
        Create a fresh staging table. A table left behind by a crashed run is
        dropped first (it is never a resume point). Returns True in that case.
        """
        leftover = self._store.staging_exists()
        if leftover:
            logger.warning("staging_leftover_dropped")
            self._store.drop_staging()
        self._store.create_staging()
        self.rows_appended = 0
        return leftover

    def append(self, row: AccountTxRow) -> None:
        self._store.append_staging(row)
        self.rows_appended += 1

    def append_rows(self, rows: Iterable[AccountTxRow]) -> int:
        count = 0
        for row in rows:
            self.append(row)
            count += 1
        return count

    def merge(self, replace_height: int | None = None) -> MergeResult:
        """Set-difference merge into ``account_txs``, replacing replace_height's rows."""
        result = self._store.merge_staging(replace_height=replace_height)
        logger.info(
            "staging_merged",
            rows_staged=self.rows_appended,
            rows_merged=result.rows_merged,
            rows_replaced=result.rows_replaced,
            replace_height=replace_height,
        )
        return result

    def drop(self) -> None:
        self._store.drop_staging()
