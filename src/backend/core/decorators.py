"""
Error handling and logging decorators for record store reads.

Every read the reporting engine issues is wrapped so that driver and
connection errors surface as a single UpstreamQueryFailure, logged once with
context, and are never swallowed.
"""
import asyncio
import functools
import inspect
import logging
from typing import Any, Callable, Optional

from sqlalchemy.exc import (
    DisconnectionError,
    OperationalError,
    SQLAlchemyError,
    StatementError,
    TimeoutError as PoolTimeoutError,
)

from core.exceptions import UpstreamQueryFailure


logger = logging.getLogger(__name__)


class DatabaseErrorHandler:
    """Centralized database error classification."""

    # Errors that mean "the record store could not answer"
    DATABASE_EXCEPTIONS = (
        SQLAlchemyError,
        ConnectionError,
        OSError,
        asyncio.TimeoutError,
    )

    @staticmethod
    def describe_database_error(
        exc: BaseException,
        operation: str,
        context: Optional[dict] = None
    ) -> str:
        """
        Build a log message for a failed read.

        Args:
            exc: The exception that occurred
            operation: Description of the database operation
            context: Additional context information

        Returns:
            Error message describing the failure
        """
        context_str = f" | Context: {context}" if context else ""

        if isinstance(exc, (ConnectionError, DisconnectionError)):
            kind = "connection error"
        elif isinstance(exc, (PoolTimeoutError, asyncio.TimeoutError)):
            kind = "timeout"
        elif isinstance(exc, OperationalError):
            kind = "operational error"
        elif isinstance(exc, StatementError):
            kind = "statement error"
        else:
            kind = f"unexpected error ({type(exc).__name__})"

        return f"Database {kind} during {operation}: {exc}{context_str}"


def upstream_query(operation_name: Optional[str] = None) -> Callable:
    """
    Decorator translating record store failures into UpstreamQueryFailure.

    Args:
        operation_name: Name of the operation for logging (defaults to function name)

    Returns:
        Decorated coroutine function
    """
    def decorator(func: Callable) -> Callable:
        if not inspect.iscoroutinefunction(func):
            raise TypeError(f"upstream_query requires a coroutine function, got {func!r}")

        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs) -> Any:
            operation = operation_name or getattr(func, "__name__", "unknown")
            try:
                return await func(*args, **kwargs)
            except UpstreamQueryFailure:
                raise
            except DatabaseErrorHandler.DATABASE_EXCEPTIONS as exc:
                context = {
                    "function": getattr(func, "__name__", "unknown"),
                    "kwargs_keys": list(kwargs.keys()) if kwargs else [],
                }
                logger.error(
                    DatabaseErrorHandler.describe_database_error(exc, operation, context)
                )
                raise UpstreamQueryFailure(operation, exc) from exc

        return async_wrapper

    return decorator


def log_database_operation(
    operation: str,
    level: str = "debug"
) -> Callable:
    """
    Decorator to log database operations with context.

    Args:
        operation: Description of the operation
        level: Logging level ('debug', 'info', 'warning', 'error')

    Returns:
        Decorated function with operation logging
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs) -> Any:
            logger_method = getattr(logger, level)
            func_name = getattr(func, '__name__', 'unknown')
            logger_method(f"Starting {operation} via {func_name}")

            try:
                result = await func(*args, **kwargs)
                logger_method(f"Completed {operation} via {func_name}")
                return result
            except Exception as exc:
                logger_method(f"Failed {operation} via {func_name}: {str(exc)}")
                raise

        return async_wrapper

    return decorator
