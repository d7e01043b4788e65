"""
Batch scanner: pages of primary transactions in ascending timestamp order.

Two selection modes:
- full history: every transaction in [lower, upper] whose hash is not yet in
  ``account_txs`` (the anti-join makes re-scans skip indexed rows);
- filtered: transactions in [lower, upper) whose receiver is one of a fixed
  set of contract accounts.

Pagination moves the lower height bound to the last record's height and
offsets past the records already yielded at that height, so a page boundary
in the middle of a height neither drops nor repeats rows. Page timestamps
must never go backwards; a regression aborts the run.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator

from account_txs.core.exceptions import OrderingViolationError
from account_txs.database.database import TransactionStore
from account_txs.database.models import TransactionRecord
from account_txs.logging import get_logger

logger = get_logger(__name__)

DEFAULT_PAGE_SIZE = 500


@dataclass
class ScanStats:
    pages: int = 0
    records: int = 0
    duplicates: int = 0
    filtered_out: int = 0


class BatchScanner:
    """
    Lazy, finite page iterator over the primary table.

    Use full_history() / filtered() rather than the constructor. A scanner
    keeps per-run state (seen hashes, stats); build a new one per run.
    """

    def __init__(
        self,
        store: TransactionStore,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
        skip_indexed: bool = True,
        upper_inclusive: bool = True,
        receivers: Iterable[str] | None = None,
        indexed_below: int | None = None,
    ) -> None:
        if page_size <= 0:
            raise ValueError("page_size must be positive")
        self._store = store
        self._page_size = page_size
        self._skip_indexed = skip_indexed
        self._upper_inclusive = upper_inclusive
        self._receivers = frozenset(receivers) if receivers is not None else None
        self._indexed_below = indexed_below
        # hash -> height, for heights at or above the current lower bound only
        self._seen: dict[str, int] = {}
        self.stats = ScanStats()

    @classmethod
    def full_history(
        cls,
        store: TransactionStore,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
        indexed_below: int | None = None,
    ) -> BatchScanner:
        """indexed_below: the checkpoint height; its index rows do not count as indexed."""
        return cls(
            store,
            page_size=page_size,
            skip_indexed=True,
            upper_inclusive=True,
            indexed_below=indexed_below,
        )

    @classmethod
    def filtered(
        cls,
        store: TransactionStore,
        receivers: Iterable[str],
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> BatchScanner:
        return cls(
            store,
            page_size=page_size,
            skip_indexed=False,
            upper_inclusive=False,
            receivers=receivers,
        )

    def _select(self, raw: list[TransactionRecord]) -> list[TransactionRecord]:
        page: list[TransactionRecord] = []
        for tx in raw:
            if tx.transaction_hash in self._seen:
                self.stats.duplicates += 1
                logger.warning(
                    "scanner_duplicate_transaction",
                    transaction_hash=tx.transaction_hash,
                    block_height=tx.block_height,
                )
                continue
            self._seen[tx.transaction_hash] = tx.block_height
            if self._receivers is not None and tx.receiver_id not in self._receivers:
                self.stats.filtered_out += 1
                continue
            page.append(tx)
        return page

    def _forget_below(self, height: int) -> None:
        """Pages never repeat records below the lower bound; drop their hashes."""
        if any(h < height for h in self._seen.values()):
            self._seen = {k: h for k, h in self._seen.items() if h >= height}

    def pages(
        self,
        lower_height: int,
        upper_height: int | None,
        *,
        last_timestamp: int | None = None,
    ) -> Iterator[list[TransactionRecord]]:
        """
        Yield non-empty pages until the store returns an empty one.

        last_timestamp: timestamp the first page must not go below (the
        checkpoint's); None disables the check for the first page.
        Raises OrderingViolationError when a page ends before the previous one.
        """
        lower = lower_height
        offset = 0
        previous_ts = last_timestamp
        while True:
            raw = self._store.fetch_transactions(
                lower,
                upper_height,
                upper_inclusive=self._upper_inclusive,
                limit=self._page_size,
                offset=offset,
                skip_indexed=self._skip_indexed,
                indexed_below=self._indexed_below,
            )
            if not raw:
                logger.info("scanner_exhausted", pages=self.stats.pages, records=self.stats.records)
                return

            last = raw[-1]
            if previous_ts is not None and last.block_timestamp < previous_ts:
                raise OrderingViolationError(previous_ts, last.block_timestamp, last.block_height)
            previous_ts = last.block_timestamp

            self.stats.pages += 1
            self.stats.records += len(raw)
            logger.info(
                "scanner_page_fetched",
                fetched=len(raw),
                lower_height=lower,
                offset=offset,
                last_block_height=last.block_height,
            )

            if last.block_height != lower:
                lower = last.block_height
                offset = 0
            offset += sum(1 for tx in raw if tx.block_height >= lower)

            page = self._select(raw)
            self._forget_below(lower)
            if page:
                yield page
