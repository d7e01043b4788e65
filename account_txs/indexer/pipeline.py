"""
One indexing run: checkpoint -> scan to exhaustion -> extract -> filter -> stage
-> merge -> drop staging.

A run either merges everything it staged (replacing the checkpoint height in
the same transaction) or changes nothing in the index; staging is dropped in
both cases. Failures propagate to the driver, which starts a new
run from a fresh checkpoint.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from account_txs.config.settings import MODE_FILTERED, MODE_FULL, Settings
from account_txs.database.database import TransactionStore
from account_txs.database.models import AccountTxRow, TransactionRecord
from account_txs.extractor import ExtractionPolicy, extract_accounts
from account_txs.indexer.checkpoint import Checkpoint, CheckpointManager
from account_txs.indexer.scanner import DEFAULT_PAGE_SIZE, BatchScanner
from account_txs.indexer.staging import StagingWriter
from account_txs.logging import get_logger
from account_txs.registry import ExcludeSetProvider

logger = get_logger(__name__)


@dataclass
class RunStats:
    """Counters for one run; logged by the driver."""

    mode: str = MODE_FULL
    resume_height: int | None = None
    upper_height: int | None = None
    rewound: bool = False
    rows_rewound: int = 0
    pages: int = 0
    transactions_seen: int = 0
    transactions_indexed: int = 0
    transactions_excluded: int = 0
    unparseable: int = 0
    fragments_skipped: int = 0
    duplicates: int = 0
    rows_staged: int = 0
    rows_merged: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class IndexPipeline:
    """
    Full-history mode: resume from the checkpoint, skip transactions whose
    accounts hit the exclude set. Filtered mode: start from block_height_from
    every time and keep only transactions sent to the allow-listed contracts.
    """

    def __init__(
        self,
        store: TransactionStore,
        *,
        mode: str = MODE_FULL,
        block_height_from: int = 0,
        block_height_to: int | None = None,
        page_size: int = DEFAULT_PAGE_SIZE,
        exclude_provider: ExcludeSetProvider | None = None,
        policy: ExtractionPolicy | None = None,
    ) -> None:
        if mode not in (MODE_FULL, MODE_FILTERED):
            raise ValueError(f"unknown mode {mode!r}")
        self._store = store
        self._mode = mode
        self._from = block_height_from
        self._to = block_height_to
        self._page_size = page_size
        self._exclude = exclude_provider or ExcludeSetProvider(None)
        self._policy = policy or ExtractionPolicy.broad()

    @classmethod
    def from_settings(
        cls,
        store: TransactionStore,
        settings: Settings,
        exclude_provider: ExcludeSetProvider | None = None,
    ) -> IndexPipeline:
        if exclude_provider is None:
            exclude_provider = ExcludeSetProvider(
                settings.registry_api_url,
                settings.contract_ids,
                timeout=settings.registry_timeout_sec,
            )
        if settings.is_filtered:
            policy = ExtractionPolicy.narrow(settings.narrow_methods)
        else:
            policy = ExtractionPolicy.broad()
        return cls(
            store,
            mode=settings.mode,
            block_height_from=settings.block_height_from,
            block_height_to=settings.block_height_to,
            page_size=settings.page_size,
            exclude_provider=exclude_provider,
            policy=policy,
        )

    @property
    def is_filtered(self) -> bool:
        return self._mode == MODE_FILTERED

    def run(self) -> RunStats:
        stats = RunStats(mode=self._mode)
        staging = StagingWriter(self._store)
        staging.create()
        try:
            account_ids = self._exclude.refresh()
            upper = self._to if self._to is not None else self._store.max_primary_height()
            checkpoint = self._resume(upper)
            stats.resume_height = checkpoint.height
            stats.upper_height = upper
            stats.rewound = checkpoint.rewound
            logger.info(
                "pipeline_run_started",
                mode=self._mode,
                lower_height=checkpoint.height,
                upper_height=upper,
                replace_height=checkpoint.replace_height,
                account_set_size=len(account_ids),
            )

            if upper is None:
                logger.info("pipeline_primary_store_empty")
            elif checkpoint.beyond_upper:
                logger.info("pipeline_nothing_to_scan", lower_height=checkpoint.height, upper_height=upper)
            else:
                scanner = self._scanner(account_ids, checkpoint)
                pages = scanner.pages(checkpoint.height, upper, last_timestamp=checkpoint.last_timestamp)
                for page in pages:
                    for tx in page:
                        self._index_transaction(tx, account_ids, staging, stats)
                stats.pages = scanner.stats.pages
                stats.duplicates = scanner.stats.duplicates

            stats.rows_staged = staging.rows_appended
            merged = staging.merge(replace_height=checkpoint.replace_height)
            stats.rows_merged = merged.rows_merged
            stats.rows_rewound = merged.rows_replaced
        finally:
            staging.drop()

        logger.info("pipeline_run_completed", **stats.to_dict())
        return stats

    def _resume(self, upper: int | None) -> Checkpoint:
        """Filtered runs, and runs over an empty primary store, never touch the checkpoint."""
        if self.is_filtered or upper is None:
            return Checkpoint(height=self._from)
        return CheckpointManager(self._store).resume(self._from, upper)

    def _scanner(self, account_ids: frozenset[str], checkpoint: Checkpoint) -> BatchScanner:
        if self.is_filtered:
            return BatchScanner.filtered(self._store, account_ids, page_size=self._page_size)
        return BatchScanner.full_history(
            self._store,
            page_size=self._page_size,
            indexed_below=checkpoint.replace_height,
        )

    def _index_transaction(
        self,
        tx: TransactionRecord,
        account_ids: frozenset[str],
        staging: StagingWriter,
        stats: RunStats,
    ) -> None:
        stats.transactions_seen += 1
        result = extract_accounts(tx, self._policy)
        stats.fragments_skipped += result.skipped_fragments
        if result.unparseable:
            stats.unparseable += 1
            logger.warning(
                "pipeline_payload_unparseable",
                transaction_hash=tx.transaction_hash,
                block_height=tx.block_height,
            )

        if not self.is_filtered and any(a in account_ids for a in result.accounts):
            stats.transactions_excluded += 1
            return

        for account_id in result.accounts:
            staging.append(AccountTxRow.for_account(account_id, tx))
        stats.transactions_indexed += 1
