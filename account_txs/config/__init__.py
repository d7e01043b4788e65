"""
Configuration management for the account-transactions indexer.

Loads settings from environment variables and an optional .env file.
Exposes a single source of truth for all job configuration.
"""

from account_txs.config.settings import Settings, get_settings  # noqa: F401

__all__ = ["Settings", "get_settings"]
