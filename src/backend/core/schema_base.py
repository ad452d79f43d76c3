"""
Base schema models for report values and API payloads.

Provides automatic camelCase aliases, consistent datetime serialization with a
UTC indicator, and a frozen variant for immutable report values.
"""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, field_serializer


def to_camel(string: str) -> str:
    """
    Convert snake_case to camelCase.

    Example:
        >>> to_camel("created_at")
        'createdAt'
    """
    parts = string.split("_")
    return parts[0] + "".join(word.capitalize() for word in parts[1:])


def as_utc_naive(dt: datetime | None) -> datetime | None:
    """Normalize a datetime to naive UTC, the storage convention of the record store."""
    if dt is None or dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def serialize_datetime(dt: datetime | None) -> str | None:
    """
    Serialize datetime to ISO 8601 format with UTC timezone indicator.

    Naive datetimes are assumed to be UTC. Aware datetimes are converted to
    UTC first.

    Returns:
        ISO 8601 string with 'Z' suffix (e.g., "2025-12-18T14:30:00Z")
        or None if input is None
    """
    if dt is None:
        return None
    return as_utc_naive(dt).isoformat() + "Z"


class HTTPSchemaModel(BaseModel):
    """
    Base model for all schemas.

    - camelCase aliases for field names, snake_case accepted on input
    - construction from ORM objects (from_attributes=True)
    - datetimes serialized as ISO 8601 with 'Z' suffix
    """

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    @field_serializer("*", mode="wrap")
    @classmethod
    def serialize_any_datetime(cls, value: Any, handler: Any) -> Any:
        if isinstance(value, datetime):
            return serialize_datetime(value)
        return handler(value)


class ReportSchemaModel(HTTPSchemaModel):
    """Immutable report value. Built once per request and never modified."""

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )
