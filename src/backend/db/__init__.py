"""
Database models and enums of the record store read by the reporting engine.
"""
from .enums import RESOLVED_STATUSES, DemandSource, DemandStatus, Priority
from .models import Category, Demand, OrganizationalUnit, User, utc_now

__all__ = [
    "Category",
    "Demand",
    "DemandSource",
    "DemandStatus",
    "OrganizationalUnit",
    "Priority",
    "RESOLVED_STATUSES",
    "User",
    "utc_now",
]
