"""Domain models and data access layer."""

from .models import Backup, Base, Capacity, Need, PeriodClaim, Physician, Secretary, Site, StaffAssignment
from .repositories import (
    CapacityRepository,
    ClaimRepository,
    NeedRepository,
    PersonRepository,
    SessionClaimsStore,
    SessionDirectory,
    SiteRepository,
    StaffAssignmentRepository,
)

__all__ = [
    "Base",
    "Site",
    "Physician",
    "Secretary",
    "Backup",
    "Need",
    "Capacity",
    "PeriodClaim",
    "StaffAssignment",
    "SiteRepository",
    "PersonRepository",
    "NeedRepository",
    "CapacityRepository",
    "ClaimRepository",
    "StaffAssignmentRepository",
    "SessionDirectory",
    "SessionClaimsStore",
]
