"""
Logging Module
==============

Structured logging using structlog with JSON output for production
and colored console output for development.

Usage:
    from shared.logging import get_logger, setup_logging

    setup_logging()
    logger = get_logger(__name__)
    logger.info("ownership_transferred", product_id="P1", transfer_id=1)
"""

from shared.logging.logger import (
    get_logger,
    setup_logging,
    transaction_context,
)


__all__ = [
    "get_logger",
    "setup_logging",
    "transaction_context",
]
