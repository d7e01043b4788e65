"""
Incremental indexing pipeline: checkpoint manager, batch scanner, staging
writer / merge committer, pipeline run and the retrying driver.
"""

from account_txs.indexer.checkpoint import Checkpoint, CheckpointManager
from account_txs.indexer.driver import connect_store, main, run_forever
from account_txs.indexer.pipeline import IndexPipeline, RunStats
from account_txs.indexer.scanner import BatchScanner, ScanStats
from account_txs.indexer.staging import StagingWriter

__all__ = [
    "BatchScanner",
    "Checkpoint",
    "CheckpointManager",
    "IndexPipeline",
    "RunStats",
    "ScanStats",
    "StagingWriter",
    "connect_store",
    "main",
    "run_forever",
]
