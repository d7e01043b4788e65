"""
Checkpoint manager: where the previous run left off.

The checkpoint is implicit: the highest tx_block_height already in
``account_txs``. That height may be half-written (crash mid-merge, or a height
still receiving transactions), so it is re-derived from the immutable primary
table. Nothing is deleted here: the old rows at that height are replaced by the
merge, in the same transaction that adds the new rows, so a run that aborts
leaves the index as it found it. Re-derivation cost is bounded to one height.
"""

from __future__ import annotations

from dataclasses import dataclass

from account_txs.database.database import TransactionStore
from account_txs.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Checkpoint:
    height: int
    """Height to resume scanning from (inclusive)."""
    replace_height: int | None = None
    """Index height to re-derive: the scan ignores its rows and the merge replaces them."""
    last_timestamp: int | None = None
    """Max index timestamp below ``height``; seeds the ordering check."""
    beyond_upper: bool = False
    """The index already reaches past the scan's upper height; nothing to do."""

    @property
    def rewound(self) -> bool:
        return self.replace_height is not None


class CheckpointManager:
    def __init__(self, store: TransactionStore) -> None:
        self._store = store

    def resume(self, start_height: int, upper_height: int | None = None) -> Checkpoint:
        """
        Return the resume point.

        Empty index: resume from start_height. An index whose last height is
        above upper_height is left alone (beyond_upper=True).
        """
        last_height = self._store.max_index_height()
        if last_height is None:
            logger.info("checkpoint_first_run", start_height=start_height)
            return Checkpoint(height=start_height)

        if upper_height is not None and last_height > upper_height:
            logger.warning(
                "checkpoint_beyond_upper_height",
                block_height=last_height,
                upper_height=upper_height,
            )
            return Checkpoint(height=last_height, beyond_upper=True)

        last_timestamp = self._store.max_index_timestamp(below_height=last_height)
        logger.info(
            "checkpoint_rewound",
            block_height=last_height,
            last_timestamp=last_timestamp,
        )
        return Checkpoint(
            height=last_height,
            replace_height=last_height,
            last_timestamp=last_timestamp,
        )
