"""
Pytest fixtures for account_txs tests. Uses a temporary SQLite store per test.
"""

from __future__ import annotations

import pytest

from account_txs.database import get_store

INDEXER_ENV_KEYS = (
    "DATABASE_URL",
    "ACCOUNT_TXS_DB_PATH",
    "INDEXER_MODE",
    "BLOCK_HEIGHT_FROM",
    "BLOCK_HEIGHT_TO",
    "CONTRACT_IDS",
    "NARROW_METHODS",
    "REGISTRY_API_URL",
    "REGISTRY_TIMEOUT_SEC",
    "PAGE_SIZE",
    "RETRY_DELAY_SEC",
    "LOG_LEVEL",
    "LOG_FORMAT",
)


@pytest.fixture
def clean_env(monkeypatch):
    """Unset every indexer env var so settings come from defaults."""
    for key in INDEXER_ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


@pytest.fixture
def store(tmp_path):
    """Fresh SQLite store with ``transactions`` and ``account_txs`` created."""
    return get_store(f"sqlite:///{tmp_path / 'account_txs.db'}", ensure_schema=True)
