"""
Structured logging for the account-transactions indexer.

JSON logs with timestamp, level, event_type and keyword context.
Use get_logger() in every module so output stays aggregation-friendly.
"""

from account_txs.logging.logger import configure_structlog, get_logger

__all__ = ["configure_structlog", "get_logger"]
