"""Report filter criteria and grouping dimensions."""

from datetime import date, datetime, time
from enum import Enum
from typing import Any, Optional

from pydantic import ConfigDict, ValidationError, field_validator, model_validator

from core.exceptions import InvalidArgument
from core.schema_base import HTTPSchemaModel, as_utc_naive, to_camel
from db.enums import DemandSource, DemandStatus, Priority


class DistributionDimension(str, Enum):
    """Dimensions a demand set can be grouped by."""
    STATUS = "status"
    PRIORITY = "priority"
    SOURCE = "source"
    ORGANIZATIONAL_UNIT = "organizational_unit"
    CATEGORY = "category"
    NEIGHBORHOOD = "neighborhood"


class FilterCriteria(HTTPSchemaModel):
    """
    Optional filters applied to every query of a report.

    All fields are optional; an empty criteria matches every demand.
    `end_date` given as a bare date is inclusive of that whole day.
    `neighborhood` is a case-insensitive substring match.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="forbid",
    )

    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    organizational_unit_id: Optional[int] = None
    category_id: Optional[int] = None
    status: Optional[DemandStatus] = None
    priority: Optional[Priority] = None
    source: Optional[DemandSource] = None
    neighborhood: Optional[str] = None

    @field_validator("start_date", mode="before")
    @classmethod
    def parse_start_date(cls, v: Any) -> Any:
        if isinstance(v, str) and len(v.strip()) == 10:
            v = date.fromisoformat(v.strip())
        if isinstance(v, date) and not isinstance(v, datetime):
            return datetime.combine(v, time.min)
        return v

    @field_validator("end_date", mode="before")
    @classmethod
    def parse_end_date(cls, v: Any) -> Any:
        if isinstance(v, str) and len(v.strip()) == 10:
            v = date.fromisoformat(v.strip())
        if isinstance(v, date) and not isinstance(v, datetime):
            return datetime.combine(v, time.max)
        return v

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_timezone(cls, v: Optional[datetime]) -> Optional[datetime]:
        return as_utc_naive(v)

    @field_validator("neighborhood")
    @classmethod
    def strip_neighborhood(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        return v or None

    @model_validator(mode="after")
    def check_date_order(self) -> "FilterCriteria":
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError("start_date must not be after end_date")
        return self

    @classmethod
    def parse(cls, **raw: Any) -> "FilterCriteria":
        """
        Build criteria from raw caller input, dropping empty values.

        Raises:
            InvalidArgument: If any value cannot be parsed
        """
        cleaned = {k: v for k, v in raw.items() if v is not None and v != ""}
        try:
            return cls.model_validate(cleaned)
        except ValidationError as exc:
            first = exc.errors()[0]
            field = ".".join(str(part) for part in first.get("loc", ())) or None
            raise InvalidArgument(
                f"Invalid filter value{f' for {field}' if field else ''}: {first['msg']}",
                field=field,
            ) from exc

    def for_unit(self, unit_id: int) -> "FilterCriteria":
        """Same criteria restricted to one organizational unit."""
        return self.model_copy(update={"organizational_unit_id": unit_id})

    def created_since(self, since: datetime) -> "FilterCriteria":
        """Same criteria with the start date moved forward to `since` if later."""
        start = self.start_date if self.start_date and self.start_date > since else since
        return self.model_copy(update={"start_date": start})

    def matches(self, demand: Any, exact_neighborhood: Optional[str] = None) -> bool:
        """In-memory form of the predicate, for snapshot stores."""
        created_at = as_utc_naive(demand.created_at)
        if self.start_date and (created_at is None or created_at < self.start_date):
            return False
        if self.end_date and (created_at is None or created_at > self.end_date):
            return False
        if self.organizational_unit_id is not None and demand.organizational_unit_id != self.organizational_unit_id:
            return False
        if self.category_id is not None and demand.category_id != self.category_id:
            return False
        if self.status is not None and demand.status != self.status:
            return False
        if self.priority is not None and demand.priority != self.priority:
            return False
        if self.source is not None and demand.source != self.source:
            return False
        if self.neighborhood is not None:
            if not demand.neighborhood or self.neighborhood.casefold() not in demand.neighborhood.casefold():
                return False
        if exact_neighborhood is not None and demand.neighborhood != exact_neighborhood:
            return False
        return True

    def describe(self) -> str:
        """Compact text form for log lines."""
        applied = self.model_dump(exclude_none=True, mode="json")
        return ", ".join(f"{k}={v}" for k, v in applied.items()) or "none"
