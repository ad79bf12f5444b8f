"""
Pydantic Schemas - Response Validation

All API response schemas in one file for simplicity.
Field names are snake_case in Python and camelCase on the wire.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Annotated, Optional, List, Dict, Any, Literal, Union
from datetime import date as CalendarDate, datetime
from enum import Enum


# ============================================================
# ENUMS
# ============================================================

class UserRole(str, Enum):
    job_seeker = "job_seeker"
    employer = "employer"
    admin = "admin"


class ApplicationStatus(str, Enum):
    pending = "pending"
    reviewed = "reviewed"
    interview = "interview"
    rejected = "rejected"
    accepted = "accepted"


class DateRange(str, Enum):
    last_7_days = "7d"
    last_30_days = "30d"
    last_90_days = "90d"
    last_6_months = "6m"
    last_year = "1y"


class TrendDirection(str, Enum):
    up = "up"
    down = "down"
    stable = "stable"


class ValueStatus(str, Enum):
    measured = "measured"
    estimated = "estimated"
    unavailable = "unavailable"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================
# SHARED REPORT PIECES
# ============================================================

class MetricValue(CamelModel):
    """A value that may not be backed by stored data."""
    value: Optional[int] = None
    status: ValueStatus = ValueStatus.measured


class TimelinePoint(CamelModel):
    date: CalendarDate
    applications: int = Field(0, ge=0)
    views: int = Field(0, ge=0)


class CategorySlice(CamelModel):
    name: str
    value: int = Field(..., ge=0)
    color: str


class PredictiveAnalytics(CamelModel):
    next_month_projection: int
    trend_direction: TrendDirection
    confidence: int = Field(..., ge=0, le=100)
    confidence_status: ValueStatus = ValueStatus.estimated


# ============================================================
# JOB SEEKER REPORT
# ============================================================

class JobSeekerPeriodMetrics(CamelModel):
    applications: int = Field(0, ge=0)
    views: int = Field(0, ge=0)
    success_rate: float = Field(0.0, ge=0, le=100)


class JobSeekerPercentageChange(CamelModel):
    applications: float = 0.0
    views: float = 0.0
    success_rate: float = 0.0


class JobSeekerComparison(CamelModel):
    current: JobSeekerPeriodMetrics
    previous: JobSeekerPeriodMetrics
    percentage_change: JobSeekerPercentageChange


class CandidateEngagement(CamelModel):
    profile_views: MetricValue
    messages_sent: MetricValue
    response_rate: MetricValue


class JobSeekerDetailedMetrics(CamelModel):
    average_response_time: int
    candidate_engagement: CandidateEngagement


class JobSeekerReport(CamelModel):
    role: Literal["job_seeker"] = "job_seeker"
    range: DateRange
    timeline: List[TimelinePoint]
    comparison: JobSeekerComparison
    category_breakdown: List[CategorySlice]
    predictive_analytics: PredictiveAnalytics
    detailed_metrics: JobSeekerDetailedMetrics


# ============================================================
# EMPLOYER REPORT
# ============================================================

class EmployerPeriodMetrics(CamelModel):
    applications: int = Field(0, ge=0)
    views: int = Field(0, ge=0)
    jobs_posted: int = Field(0, ge=0)
    success_rate: float = Field(0.0, ge=0, le=100)


class EmployerPercentageChange(CamelModel):
    applications: float = 0.0
    views: float = 0.0
    jobs_posted: float = 0.0
    success_rate: float = 0.0


class EmployerComparison(CamelModel):
    current: EmployerPeriodMetrics
    previous: EmployerPeriodMetrics
    percentage_change: EmployerPercentageChange


class TopPerformingJob(CamelModel):
    title: str
    applications: int = 0
    success_rate: float = 0.0


class EmployerDetailedMetrics(CamelModel):
    average_time_to_hire: int
    top_performing_jobs: List[TopPerformingJob] = []


class EmployerReport(CamelModel):
    role: Literal["employer"] = "employer"
    range: DateRange
    timeline: List[TimelinePoint]
    comparison: EmployerComparison
    category_breakdown: List[CategorySlice]
    predictive_analytics: PredictiveAnalytics
    detailed_metrics: EmployerDetailedMetrics


# Either report variant, told apart by its role field
Report = Annotated[Union[JobSeekerReport, EmployerReport], Field(discriminator="role")]


# ============================================================
# DASHBOARD ANALYTICS SCHEMAS
# ============================================================

class DailyCount(CamelModel):
    date: CalendarDate
    count: int = Field(0, ge=0)


class ActivityEntry(CamelModel):
    id: int
    action: str
    timestamp: datetime
    metadata: Optional[Any] = None


class JobSeekerAnalyticsResponse(CamelModel):
    application_stats: Dict[str, int]
    application_timeline: List[DailyCount]
    recent_activity: List[ActivityEntry]
    total_applications: int
    accepted_applications: int
    success_rate: float
    average_response_time: int


class TopJob(CamelModel):
    id: int
    title: str
    application_count: int = 0
    view_count: int = 0
    created_at: datetime


class EmployerAnalyticsResponse(CamelModel):
    job_stats: Dict[str, int]
    applications_received: List[DailyCount]
    job_views_data: List[DailyCount]
    top_jobs: List[TopJob]
    application_status_breakdown: Dict[str, int]
    recent_activity: List[ActivityEntry]
    total_views: int
    total_applications_received: int
    conversion_rate: float


class UserGrowthPoint(CamelModel):
    date: CalendarDate
    job_seekers: int = 0
    employers: int = 0


class PlatformAnalyticsResponse(CamelModel):
    user_growth: List[UserGrowthPoint]
    job_posting_trends: List[DailyCount]
    total_users: int
    total_jobs: int
    total_applications: int
    total_companies: int
