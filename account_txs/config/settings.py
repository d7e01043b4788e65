"""
Application settings.

Responsibilities:
- Load configuration from environment variables and .env files.
- Validate values and provide defaults for optional ones.
- Expose typed settings (store URL, height range, mode, registry URL, page
  size) for the driver and pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from account_txs.config.env import (
    get_float,
    get_int,
    get_list,
    get_str,
    load_indexer_env,
)
from account_txs.core.exceptions import ConfigError

MODE_FULL = "full"
MODE_FILTERED = "filtered"
MODES = (MODE_FULL, MODE_FILTERED)

DEFAULT_DB_PATH = "account_txs.db"
DEFAULT_CONTRACT_IDS = ("bounties.heroes.near",)
DEFAULT_REGISTRY_API_URL = "http://localhost:8080/api"
DEFAULT_PAGE_SIZE = 500

# Bounty contract methods worth descending into in narrow (filtered) mode.
DEFAULT_NARROW_METHODS = (
    "bounty_claim",
    "bounty_give_up",
    "bounty_done",
    "open_dispute",
    "accept_claimant",
    "decline_claimant",
    "ft_transfer_call",
    "bounty_cancel",
    "bounty_update",
    "bounty_approve",
    "bounty_reject",
    "bounty_approve_of_several",
    "bounty_finalize",
    "extend_claim_deadline",
    "bounty_create",
    "mark_as_paid",
    "confirm_payment",
    "start_competition",
    "withdraw",
    "bounty_action",
    "decision_on_claim",
)


@dataclass(frozen=True)
class Settings:
    """Indexer configuration. Built by get_settings(); construct directly in tests."""

    database_url: str | None = None
    db_path: Path = Path(DEFAULT_DB_PATH)
    mode: str = MODE_FULL
    block_height_from: int = 0
    block_height_to: int | None = None
    """None -> derive from the max height currently in the primary store."""
    contract_ids: tuple[str, ...] = DEFAULT_CONTRACT_IDS
    """Exclude-set seed (full mode) / receiver allow-list seed (filtered mode)."""
    narrow_methods: tuple[str, ...] = DEFAULT_NARROW_METHODS
    registry_api_url: str | None = DEFAULT_REGISTRY_API_URL
    registry_timeout_sec: float = 30.0
    page_size: int = DEFAULT_PAGE_SIZE
    retry_delay_sec: float = 0.0
    log_level: str = "INFO"
    log_format: str = "json"

    @property
    def is_filtered(self) -> bool:
        return self.mode == MODE_FILTERED

    @property
    def store_url(self) -> str:
        """SQLAlchemy URL: DATABASE_URL when set, otherwise the SQLite file."""
        if self.database_url:
            return self.database_url
        return f"sqlite:///{self.db_path}"


def get_settings() -> Settings:
    """
    Return settings from the environment (.env loaded first).

    Raises ConfigError on invalid numbers, an unknown INDEXER_MODE, a
    non-positive PAGE_SIZE or a negative height.
    """
    load_indexer_env()
    mode = get_str("INDEXER_MODE", MODE_FULL).lower()
    if mode not in MODES:
        raise ConfigError(f"INDEXER_MODE must be one of {MODES}, got {mode!r}")

    block_from = get_int("BLOCK_HEIGHT_FROM", 0) or 0
    block_to = get_int("BLOCK_HEIGHT_TO")
    if block_from < 0:
        raise ConfigError("BLOCK_HEIGHT_FROM must be >= 0")
    # 0 keeps the old "unset" meaning: derive from the primary store
    if not block_to:
        block_to = None

    page_size = get_int("PAGE_SIZE", DEFAULT_PAGE_SIZE)
    if page_size is None or page_size <= 0:
        raise ConfigError("PAGE_SIZE must be a positive integer")

    registry_url = get_str("REGISTRY_API_URL", DEFAULT_REGISTRY_API_URL) or None

    return Settings(
        database_url=get_str("DATABASE_URL") or None,
        db_path=Path(get_str("ACCOUNT_TXS_DB_PATH", DEFAULT_DB_PATH)),
        mode=mode,
        block_height_from=block_from,
        block_height_to=block_to,
        contract_ids=get_list("CONTRACT_IDS", DEFAULT_CONTRACT_IDS),
        narrow_methods=get_list("NARROW_METHODS", DEFAULT_NARROW_METHODS),
        registry_api_url=registry_url,
        registry_timeout_sec=get_float("REGISTRY_TIMEOUT_SEC", 30.0),
        page_size=page_size,
        retry_delay_sec=get_float("RETRY_DELAY_SEC", 0.0),
        log_level=get_str("LOG_LEVEL", "INFO").upper(),
        log_format=get_str("LOG_FORMAT", "json").lower(),
    )
