"""
Enums for demand fields.

These replace lookup tables that have a fixed, small set of values and are
never modified at runtime. Stored values match the record store's enum
values; `label` is the display name used in reports.
"""
from enum import Enum


class DemandStatus(str, Enum):
    """Lifecycle status of a demand."""
    OPEN = "OPEN"
    IN_PROGRESS = "IN_PROGRESS"
    RESOLVED = "RESOLVED"
    CLOSED = "CLOSED"
    CANCELLED = "CANCELLED"

    @property
    def label(self) -> str:
        return _STATUS_LABELS[self]


class Priority(str, Enum):
    """Priority of a demand, lowest to highest."""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class DemandSource(str, Enum):
    """Channel through which a demand was registered."""
    WHATSAPP = "WHATSAPP"
    PHONE = "PHONE"
    SITE = "SITE"
    APP = "APP"
    IN_PERSON = "IN_PERSON"
    INTERNAL = "INTERNAL"

    @property
    def label(self) -> str:
        return _SOURCE_LABELS[self]


_STATUS_LABELS = {
    DemandStatus.OPEN: "Open",
    DemandStatus.IN_PROGRESS: "In Progress",
    DemandStatus.RESOLVED: "Resolved",
    DemandStatus.CLOSED: "Closed",
    DemandStatus.CANCELLED: "Cancelled",
}

_SOURCE_LABELS = {
    DemandSource.WHATSAPP: "WhatsApp",
    DemandSource.PHONE: "Phone",
    DemandSource.SITE: "Website",
    DemandSource.APP: "App",
    DemandSource.IN_PERSON: "In Person",
    DemandSource.INTERNAL: "Internal",
}

RESOLVED_STATUSES = frozenset({DemandStatus.RESOLVED, DemandStatus.CLOSED})
