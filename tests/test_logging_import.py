"""
Test that account_txs.logging can be imported without circular import and logger works.
"""

from __future__ import annotations


def test_logging_import():
    """Import get_logger from account_txs.logging and use the logger."""
    from account_txs.logging import get_logger

    logger = get_logger("test")
    assert logger is not None
    assert hasattr(logger, "info")
    assert hasattr(logger, "warning")
    assert hasattr(logger, "error")
    logger.info("test_message", key="value")


def test_configure_console_format():
    """Console renderer can be selected and used without raising."""
    from account_txs.logging import configure_structlog, get_logger

    configure_structlog("DEBUG", "console")
    try:
        get_logger("test").debug("console_message", height=10)
    finally:
        configure_structlog("INFO", "json")
