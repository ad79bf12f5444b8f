"""
Schemas module - Response schemas for API endpoints.

The wire format is camelCase; see CamelModel in schemas.py.
"""

from jobboard.schemas.schemas import (
    UserRole, ApplicationStatus, DateRange, TrendDirection, ValueStatus,
    JobSeekerReport, EmployerReport, Report
)

__all__ = [
    "UserRole",
    "ApplicationStatus",
    "DateRange",
    "TrendDirection",
    "ValueStatus",
    "JobSeekerReport",
    "EmployerReport",
    "Report"
]
