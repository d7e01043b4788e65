"""
Environment loading for the indexer.

- Loads .env from the project root (and the working directory) when available.
- Small typed getters used by settings.py; invalid values raise ConfigError.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

from account_txs.core.exceptions import ConfigError

# Project root: config is account_txs/config/, root is 2 levels up
_CONFIG_DIR = Path(__file__).resolve().parent
_PACKAGE_DIR = _CONFIG_DIR.parent
_ROOT = _PACKAGE_DIR.parent
_ENV_PATH = _ROOT / ".env"


def load_indexer_env() -> None:
    """Load .env from project root, then from cwd. Never overrides real env vars."""
    load_dotenv(_ENV_PATH)
    load_dotenv()


def get_str(name: str, default: str = "") -> str:
    return (os.getenv(name) or default).strip()


def get_int(name: str, default: int | None = None) -> int | None:
    """Return int env value; empty/unset -> default. Non-integer -> ConfigError."""
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from e


def get_float(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from e


def get_list(name: str, default: tuple[str, ...] = ()) -> tuple[str, ...]:
    """Comma-separated env value -> tuple of stripped, non-empty items."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return tuple(item.strip() for item in raw.split(",") if item.strip())
