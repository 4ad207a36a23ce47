"""
Data Models Package

This package contains all Pydantic models used in the SIPM registry.
All data flowing through the system must conform to these schemas.
"""

from sipm.models.resident import (
    NIK_LENGTH,
    Gender,
    MaritalStatus,
    Resident,
    ResidentInput,
    ResidentStatus,
    ResidentUpdate,
    seed_resident,
)
from sipm.models.report import (
    DashboardStats,
    ReportCriteria,
    ReportPeriod,
    StatusFilter,
    TrendPoint,
)
from sipm.models.session import User, UserRole
from sipm.models.validation import ValidationIssue, ValidationResult

__all__ = [
    # Resident models
    "NIK_LENGTH",
    "Gender",
    "MaritalStatus",
    "Resident",
    "ResidentInput",
    "ResidentStatus",
    "ResidentUpdate",
    "seed_resident",
    # Report models
    "DashboardStats",
    "ReportCriteria",
    "ReportPeriod",
    "StatusFilter",
    "TrendPoint",
    # Session
    "User",
    "UserRole",
    # Validation
    "ValidationIssue",
    "ValidationResult",
]
