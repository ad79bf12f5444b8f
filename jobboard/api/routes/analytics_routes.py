"""
Analytics Routes

GET /analytics/job-seeker - Application dashboard for job seekers
GET /analytics/employer - Hiring dashboard for employers
GET /analytics/platform - Platform growth (admin only)
"""

import logging

from fastapi import APIRouter, HTTPException, Depends

from jobboard.core.auth import get_current_job_seeker, get_current_employer, get_current_admin
from jobboard.schemas.schemas import (
    JobSeekerAnalyticsResponse, EmployerAnalyticsResponse, PlatformAnalyticsResponse
)
from jobboard.services.report_service import ReportService, get_report_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/analytics", tags=["Analytics"])


@router.get("/job-seeker", response_model=JobSeekerAnalyticsResponse)
def job_seeker_analytics(
    user: dict = Depends(get_current_job_seeker),
    service: ReportService = Depends(get_report_service)
):
    """Application stats, 30-day timeline, recent activity and response time."""
    try:
        return service.job_seeker_analytics(user["user_id"])
    except Exception:
        logger.exception("Error fetching job seeker analytics for user %s", user["user_id"])
        raise HTTPException(status_code=500, detail="Failed to fetch analytics data")


@router.get("/employer", response_model=EmployerAnalyticsResponse)
def employer_analytics(
    user: dict = Depends(get_current_employer),
    service: ReportService = Depends(get_report_service)
):
    """Job stats, applications and views over 30 days, top jobs, conversion rate."""
    try:
        return service.employer_analytics(user["user_id"])
    except Exception:
        logger.exception("Error fetching employer analytics for user %s", user["user_id"])
        raise HTTPException(status_code=500, detail="Failed to fetch analytics data")


@router.get("/platform", response_model=PlatformAnalyticsResponse)
def platform_analytics(
    user: dict = Depends(get_current_admin),
    service: ReportService = Depends(get_report_service)
):
    """Sign-ups, job postings and platform totals."""
    try:
        return service.platform_analytics()
    except Exception:
        logger.exception("Error fetching platform analytics")
        raise HTTPException(status_code=500, detail="Failed to fetch platform analytics data")
