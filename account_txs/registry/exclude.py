"""
Exclude-set provider backed by the token registry API.

GET {registry_url}/conf/tokens -> [{"tokenId": "usdc.near", ...}, ...]

The set is the configured seed ids plus every registry token id. Registry
errors never abort a run: the provider logs a warning and falls back to the
seed ids alone.
"""

from __future__ import annotations

from typing import Any, Iterable

import requests

from account_txs.logging import get_logger

logger = get_logger(__name__)

TOKENS_PATH = "/conf/tokens"
REQUEST_TIMEOUT = 30.0


def fetch_token_ids(registry_url: str, *, timeout: float = REQUEST_TIMEOUT) -> list[str]:
    """
    Return token ids from the registry. Raises requests.RequestException on
    network/HTTP errors and ValueError on a body that is not a JSON list.
    """
    url = registry_url.rstrip("/") + TOKENS_PATH
    r = requests.get(url, timeout=timeout)
    r.raise_for_status()
    data: Any = r.json()
    if data is None:
        return []
    if not isinstance(data, list):
        raise ValueError(f"registry returned {type(data).__name__}, expected a list")
    out: list[str] = []
    for item in data:
        token_id = item.get("tokenId") if isinstance(item, dict) else None
        if isinstance(token_id, str) and token_id:
            out.append(token_id)
    return out


class ExcludeSetProvider:
    """
    Cached lookup of identifiers to suppress (or, in filtered mode, to allow).

    get() fetches once and caches; refresh() forces a new fetch (the pipeline
    calls it at the start of every attempt).
    """

    def __init__(
        self,
        registry_url: str | None,
        seed_ids: Iterable[str] = (),
        *,
        timeout: float = REQUEST_TIMEOUT,
    ) -> None:
        self._registry_url = (registry_url or "").strip() or None
        self._seed_ids = frozenset(s for s in seed_ids if s)
        self._timeout = timeout
        self._cached: frozenset[str] | None = None

    @property
    def seed_ids(self) -> frozenset[str]:
        return self._seed_ids

    def get(self) -> frozenset[str]:
        if self._cached is None:
            self._cached = self._load()
        return self._cached

    def refresh(self) -> frozenset[str]:
        self._cached = None
        return self.get()

    def _load(self) -> frozenset[str]:
        if self._registry_url is None:
            logger.info("exclude_set_registry_disabled", seed_count=len(self._seed_ids))
            return self._seed_ids
        try:
            tokens = fetch_token_ids(self._registry_url, timeout=self._timeout)
        except (requests.RequestException, ValueError) as e:
            logger.warning(
                "exclude_set_registry_failed",
                registry_url=self._registry_url,
                error=str(e),
                seed_count=len(self._seed_ids),
            )
            return self._seed_ids
        ids = self._seed_ids | frozenset(tokens)
        logger.info(
            "exclude_set_loaded",
            token_count=len(tokens),
            total=len(ids),
        )
        return ids
