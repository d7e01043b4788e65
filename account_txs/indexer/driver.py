"""
Driver: process lifetime and the retry loop.

run_forever() executes pipeline runs until one completes. Any unhandled
failure (store error, ordering violation) is logged and the whole pipeline
restarts immediately from a fresh checkpoint read; the checkpoint rewind makes
that safe. There is no retry bound: the job keeps trying until it completes
or the process is killed.

main() exits 0 once the loop completes, 1 when configuration is invalid or
the store is unreachable before the loop can start.
"""

from __future__ import annotations

import time
from typing import Callable

from sqlalchemy.exc import SQLAlchemyError

from account_txs.config.settings import Settings, get_settings
from account_txs.core.exceptions import ConfigError, StoreUnavailableError
from account_txs.database.database import SqlTransactionStore, get_store
from account_txs.indexer.pipeline import IndexPipeline, RunStats
from account_txs.logging import configure_structlog, get_logger
from account_txs.registry import ExcludeSetProvider

logger = get_logger(__name__)


def run_forever(
    pipeline_factory: Callable[[], IndexPipeline],
    *,
    max_attempts: int | None = None,
    retry_delay_sec: float = 0.0,
    sleep: Callable[[float], None] = time.sleep,
) -> RunStats:
    """
    Run the pipeline until one attempt succeeds; return that attempt's stats.

    max_attempts: None (default) retries forever; otherwise the last failure
    is re-raised after that many attempts.
    """
    attempt = 0
    while True:
        attempt += 1
        try:
            stats = pipeline_factory().run()
        except Exception as e:
            logger.error(
                "driver_run_failed",
                attempt=attempt,
                error=str(e),
                error_type=type(e).__name__,
                exc_info=True,
            )
            if max_attempts is not None and attempt >= max_attempts:
                raise
            logger.info("driver_restarting", attempt=attempt + 1, delay_sec=retry_delay_sec)
            if retry_delay_sec > 0:
                sleep(retry_delay_sec)
            continue
        logger.info("driver_run_succeeded", attempt=attempt, rows_merged=stats.rows_merged)
        return stats


def connect_store(settings: Settings) -> SqlTransactionStore:
    """
    Create the store and check it answers. Local SQLite stores get their tables
    created; a remote DATABASE_URL store must already have them.
    Raises StoreUnavailableError.
    """
    try:
        store = get_store(settings.store_url, ensure_schema=settings.database_url is None)
        store.ping()
    except SQLAlchemyError as e:
        raise StoreUnavailableError(f"cannot reach transaction store: {e}") from e
    return store


def main() -> int:
    """Entry point: load settings, connect, run until complete."""
    try:
        settings = get_settings()
    except ConfigError as e:
        logger.error("driver_config_error", error=str(e))
        return 1
    configure_structlog(settings.log_level, settings.log_format)

    try:
        store = connect_store(settings)
    except StoreUnavailableError as e:
        logger.error("driver_store_unreachable", error=str(e))
        return 1

    logger.info(
        "driver_started",
        mode=settings.mode,
        block_height_from=settings.block_height_from,
        block_height_to=settings.block_height_to,
        page_size=settings.page_size,
    )
    exclude_provider = ExcludeSetProvider(
        settings.registry_api_url,
        settings.contract_ids,
        timeout=settings.registry_timeout_sec,
    )
    run_forever(
        lambda: IndexPipeline.from_settings(store, settings, exclude_provider),
        retry_delay_sec=settings.retry_delay_sec,
    )
    return 0
