"""
Lifespan startup and shutdown task functions.

This module contains individual task functions for application startup
and shutdown sequences. Each function handles a specific responsibility.
"""

import logging


async def initialize_logging(settings, log_config):
    """Setup logging configuration."""
    from core.logging_config import setup_logging

    logger = logging.getLogger("main")
    setup_logging(log_config)
    logger.info(f"Starting {settings.api.app_name} {settings.api.app_version}...")


async def check_database(logger):
    """Log whether the record store is reachable at startup."""
    from core.database import ping_database
    from core.decorators import DatabaseErrorHandler

    try:
        if await ping_database():
            logger.info("Record store reachable")
    except DatabaseErrorHandler.DATABASE_EXCEPTIONS as e:
        logger.warning(f"Record store not reachable at startup: {e}")


async def shutdown_database():
    """Close database connections."""
    from core.database import close_db

    logger = logging.getLogger("main")
    await close_db()
    logger.info("Database connections closed")


def shutdown_logging():
    """Stop the logging queue listener, flushing pending records."""
    from core.logging_config import stop_queue_listener

    stop_queue_listener()
