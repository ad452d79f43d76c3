"""
Database models of the record store, read by the reporting engine.

The reporting engine never writes these tables; the models describe the
columns it queries. Lifecycle of every row is owned by the demand management
API.
"""

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, String, text
from sqlalchemy import Enum as SAEnum
from sqlmodel import Field, SQLModel

from db.enums import DemandSource, DemandStatus, Priority


def utc_now() -> datetime:
    """
    Get current time in UTC (timezone-naive) for database storage.

    All timestamps in the record store are naive UTC; conversion to the
    user's timezone happens at display time.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


class TableModel(SQLModel):
    """Base table model with common functionality."""

    pass


class OrganizationalUnit(TableModel, table=True):
    """Municipal secretariat owning categories, operators and demands."""

    __tablename__ = "organizational_units"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(
        max_length=150,
        sa_column=Column(String(150), nullable=False, unique=True),
        description="Organizational unit name",
    )
    acronym: Optional[str] = Field(
        default=None, max_length=20, description="Short name (e.g. SEMSUR)"
    )
    is_active: bool = Field(
        default=True,
        sa_column=Column(Boolean, default=True, nullable=False),
    )


class Category(TableModel, table=True):
    """Demand category; defines the SLA lead time in business days."""

    __tablename__ = "categories"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(
        max_length=100,
        sa_column=Column(String(100), nullable=False),
        description="Category name",
    )
    sla_days: int = Field(
        default=15,
        sa_column=Column(Integer, nullable=False, server_default=text("15")),
        description="Resolution lead time in business days",
    )
    organizational_unit_id: Optional[int] = Field(
        default=None,
        sa_column=Column(
            Integer, ForeignKey("organizational_units.id"), nullable=True, index=True
        ),
    )
    is_active: bool = Field(
        default=True,
        sa_column=Column(Boolean, default=True, nullable=False),
    )


class User(TableModel, table=True):
    """Operator a demand can be assigned to."""

    __tablename__ = "users"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str = Field(
        max_length=150,
        sa_column=Column(String(150), nullable=False),
        description="Display name",
    )
    organizational_unit_id: Optional[int] = Field(
        default=None,
        sa_column=Column(
            Integer, ForeignKey("organizational_units.id"), nullable=True, index=True
        ),
    )
    is_active: bool = Field(
        default=True,
        sa_column=Column(Boolean, default=True, nullable=False),
    )


class Demand(TableModel, table=True):
    """Citizen service request."""

    __tablename__ = "demands"
    __table_args__ = (
        Index("ix_demands_unit_created", "organizational_unit_id", "created_at"),
        Index("ix_demands_status_resolved", "status", "resolved_at"),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    protocol: str = Field(
        max_length=20,
        sa_column=Column(String(20), nullable=False, unique=True),
        description="Human-readable protocol (year + sequence)",
    )
    title: str = Field(
        max_length=200,
        sa_column=Column(String(200), nullable=False),
    )
    status: DemandStatus = Field(
        default=DemandStatus.OPEN,
        sa_column=Column(SAEnum(DemandStatus, name="demand_status"), nullable=False),
    )
    priority: Priority = Field(
        default=Priority.MEDIUM,
        sa_column=Column(SAEnum(Priority, name="demand_priority"), nullable=False),
    )
    source: DemandSource = Field(
        default=DemandSource.INTERNAL,
        sa_column=Column(SAEnum(DemandSource, name="demand_source"), nullable=False),
    )
    organizational_unit_id: Optional[int] = Field(
        default=None,
        sa_column=Column(Integer, ForeignKey("organizational_units.id"), nullable=True),
    )
    category_id: Optional[int] = Field(
        default=None,
        sa_column=Column(Integer, ForeignKey("categories.id"), nullable=True, index=True),
    )
    neighborhood: Optional[str] = Field(
        default=None,
        sa_column=Column(String(120), nullable=True, index=True),
    )
    requester_name: Optional[str] = Field(
        default=None,
        sa_column=Column(String(150), nullable=True),
    )
    assigned_operator_id: Optional[UUID] = Field(
        default=None, foreign_key="users.id", nullable=True, index=True
    )
    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime, nullable=False, index=True),
    )
    resolved_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime, nullable=True),
    )
    sla_deadline: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime, nullable=True),
        description="Resolution deadline computed from the category lead time",
    )
