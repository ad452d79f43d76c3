"""
Application lifespan manager.

This module provides the lifespan context manager that handles
startup and shutdown events for the FastAPI application.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from core.config import settings
from core.logging_config import LogConfig
from . import tasks


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    # Setup logging
    log_config = LogConfig(**settings.logging.log_config)
    await tasks.initialize_logging(settings, log_config)

    logger = logging.getLogger("main")

    # Report whether the record store answers; reports fail with 503 until it does
    await tasks.check_database(logger)

    yield

    # Shutdown
    logger.info(f"Shutting down {settings.api.app_name}...")

    # Close database connections
    await tasks.shutdown_database()

    # Stop logging queue listener last so shutdown messages are flushed
    tasks.shutdown_logging()
