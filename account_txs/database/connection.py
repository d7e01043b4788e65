"""
Engine creation for the transaction store.

DATABASE_URL for PostgreSQL (postgresql+psycopg://...) or any SQLAlchemy URL;
otherwise a local SQLite file.
"""

from __future__ import annotations

from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url

from account_txs.logging import get_logger

logger = get_logger(__name__)


def create_store_engine(url: str) -> Engine:
    """Create an engine; for SQLite the parent directory is created first."""
    parsed = make_url(url)
    connect_args = {}
    if parsed.get_backend_name() == "sqlite":
        if parsed.database and parsed.database != ":memory:":
            Path(parsed.database).parent.mkdir(parents=True, exist_ok=True)
        connect_args["check_same_thread"] = False
    engine = create_engine(url, connect_args=connect_args, pool_pre_ping=True)
    logger.info(
        "store_engine_created",
        backend=parsed.get_backend_name(),
        database=parsed.database,
        host=parsed.host,
    )
    return engine
