"""
Error taxonomy of the reporting engine.

- InvalidArgument: malformed caller input (filters, SLA lead days).
- UpstreamQueryFailure: the record store failed or timed out.

A reference that cannot be resolved to a display name is not an error; it is
rendered with a placeholder label.
"""

from typing import Optional


class ReportingError(Exception):
    """Base class for reporting engine errors."""

    pass


class InvalidArgument(ReportingError, ValueError):
    """Raised when caller input cannot be used to compute a report."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field


class UpstreamQueryFailure(ReportingError):
    """Raised when a read against the record store fails.

    Never retried here; retry policy belongs to the caller.
    """

    def __init__(self, operation: str, cause: Optional[BaseException] = None):
        detail = f": {type(cause).__name__}: {cause}" if cause is not None else ""
        super().__init__(f"Record store query failed during {operation}{detail}")
        self.operation = operation
        self.cause = cause
