"""
Report Routes

GET /reports/job-seeker?range=30d - Period report over own applications
GET /reports/employer?range=30d - Period report over own jobs

Range tokens: 7d, 30d, 90d, 6m, 1y (default from settings, normally 30d)
"""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Depends, Query

from jobboard.core.auth import get_current_job_seeker, get_current_employer
from jobboard.core.config import Settings, get_settings
from jobboard.schemas.schemas import DateRange, JobSeekerReport, EmployerReport
from jobboard.services.periods import parse_range
from jobboard.services.report_service import ReportService, get_report_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reports", tags=["Reports"])


def resolve_range_param(
    range_token: Optional[str] = Query(None, alias="range", description="7d, 30d, 90d, 6m or 1y"),
    settings: Settings = Depends(get_settings)
) -> DateRange:
    """
    Dependency - Turn the ?range= token into a DateRange.

    Unknown tokens either fall back to the default range or are rejected
    with 400, depending on settings.invalid_range_policy.
    """
    token = range_token or settings.default_range
    resolution = parse_range(token)
    if resolution.ok:
        return resolution.range

    if settings.invalid_range_policy == "reject":
        raise HTTPException(status_code=400, detail=str(resolution.error))

    logger.warning("Unknown range %r, falling back to %s", token, settings.default_range.value)
    return settings.default_range


@router.get("/job-seeker", response_model=JobSeekerReport)
def job_seeker_report(
    user: dict = Depends(get_current_job_seeker),
    date_range: DateRange = Depends(resolve_range_param),
    service: ReportService = Depends(get_report_service)
):
    """
    Application report for the current job seeker.

    Compares the selected window with the window of equal length right
    before it, and projects the next 30 days from the recent daily rate.
    """
    try:
        return service.build_job_seeker_report(user["user_id"], date_range)
    except Exception:
        logger.exception("Error fetching job seeker reports for user %s", user["user_id"])
        raise HTTPException(status_code=500, detail="Failed to fetch reports data")


@router.get("/employer", response_model=EmployerReport)
def employer_report(
    user: dict = Depends(get_current_employer),
    date_range: DateRange = Depends(resolve_range_param),
    service: ReportService = Depends(get_report_service)
):
    """Hiring report for the current employer's jobs."""
    try:
        return service.build_employer_report(user["user_id"], date_range)
    except Exception:
        logger.exception("Error fetching employer reports for user %s", user["user_id"])
        raise HTTPException(status_code=500, detail="Failed to fetch reports data")
