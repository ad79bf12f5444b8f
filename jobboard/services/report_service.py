"""
Report Service - builds dashboard reports for one request.

FLOW:
1. Resolve the range token into current/previous windows
2. Pull grouped rows for both windows from ReportQueryService
3. Feed them through the aggregation engine
4. Reshape the results into the role-specific response model

Nothing is cached between calls; every report is recomputed from the
database. Query failures propagate to the caller unchanged.
"""

import logging
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from jobboard.schemas.schemas import (
    ApplicationStatus, DateRange, UserRole, ValueStatus,
    MetricValue, TimelinePoint, CategorySlice, PredictiveAnalytics,
    JobSeekerReport, JobSeekerComparison, JobSeekerPeriodMetrics, JobSeekerPercentageChange,
    JobSeekerDetailedMetrics, CandidateEngagement,
    EmployerReport, EmployerComparison, EmployerPeriodMetrics, EmployerPercentageChange,
    EmployerDetailedMetrics, TopPerformingJob,
    DailyCount, ActivityEntry, TopJob, UserGrowthPoint,
    JobSeekerAnalyticsResponse, EmployerAnalyticsResponse, PlatformAnalyticsResponse
)
from jobboard.services.aggregation import (
    ComparisonResult, PeriodMetrics, TrendProjection, TimeBucketCount,
    build_category_breakdown, build_timeline, compare_periods, compute_success_rate,
    compute_totals, counts_by_category, merge_timelines, project_trend,
    average_whole_days, round_half_up
)
from jobboard.services.periods import PeriodWindow, resolve_period
from jobboard.services.report_queries import QueryScope, ReportQueryService, get_report_query_service

logger = logging.getLogger(__name__)

# Fixed per-role confidence shown next to the projection (not statistically derived)
JOB_SEEKER_CONFIDENCE = 75
EMPLOYER_CONFIDENCE = 80

DASHBOARD_DAYS = 30
TOP_JOBS_LIMIT = 5
RECENT_ACTIVITY_LIMIT = 10

ACCEPTED = ApplicationStatus.accepted.value


# ============================================================
# RESPONSE ASSEMBLY (pure reshaping)
# ============================================================

def _predictive(trend: TrendProjection) -> PredictiveAnalytics:
    return PredictiveAnalytics(
        next_month_projection=trend.next_period_projection,
        trend_direction=trend.direction,
        confidence=trend.confidence,
        confidence_status=ValueStatus.estimated
    )


def _unavailable() -> MetricValue:
    return MetricValue(value=None, status=ValueStatus.unavailable)


def assemble_job_seeker_report(
    date_range: DateRange,
    timeline: List[TimeBucketCount],
    comparison: ComparisonResult,
    breakdown: List[CategorySlice],
    trend: TrendProjection,
    average_response_time: int
) -> JobSeekerReport:
    current, previous, change = comparison.current, comparison.previous, comparison.percentage_change
    return JobSeekerReport(
        range=date_range,
        timeline=[TimelinePoint(date=row.date, applications=row.count, views=0) for row in timeline],
        comparison=JobSeekerComparison(
            current=JobSeekerPeriodMetrics(
                applications=current.applications, views=current.views, success_rate=current.success_rate
            ),
            previous=JobSeekerPeriodMetrics(
                applications=previous.applications, views=previous.views, success_rate=previous.success_rate
            ),
            percentage_change=JobSeekerPercentageChange(
                applications=change.applications, views=change.views, success_rate=change.success_rate
            )
        ),
        category_breakdown=breakdown,
        predictive_analytics=_predictive(trend),
        detailed_metrics=JobSeekerDetailedMetrics(
            average_response_time=average_response_time,
            # No profile-view or messaging data is stored for job seekers
            candidate_engagement=CandidateEngagement(
                profile_views=_unavailable(),
                messages_sent=_unavailable(),
                response_rate=_unavailable()
            )
        )
    )


def assemble_employer_report(
    date_range: DateRange,
    timeline: List[TimelinePoint],
    comparison: ComparisonResult,
    breakdown: List[CategorySlice],
    trend: TrendProjection,
    average_time_to_hire: int,
    top_jobs: List[TopPerformingJob]
) -> EmployerReport:
    current, previous, change = comparison.current, comparison.previous, comparison.percentage_change
    return EmployerReport(
        range=date_range,
        timeline=timeline,
        comparison=EmployerComparison(
            current=EmployerPeriodMetrics(
                applications=current.applications, views=current.views,
                jobs_posted=current.jobs_posted or 0, success_rate=current.success_rate
            ),
            previous=EmployerPeriodMetrics(
                applications=previous.applications, views=previous.views,
                jobs_posted=previous.jobs_posted or 0, success_rate=previous.success_rate
            ),
            percentage_change=EmployerPercentageChange(
                applications=change.applications, views=change.views,
                jobs_posted=change.jobs_posted or 0.0, success_rate=change.success_rate
            )
        ),
        category_breakdown=breakdown,
        predictive_analytics=_predictive(trend),
        detailed_metrics=EmployerDetailedMetrics(
            average_time_to_hire=average_time_to_hire,
            top_performing_jobs=top_jobs
        )
    )


def _daily(rows: List[TimeBucketCount]) -> List[DailyCount]:
    return [DailyCount(date=row.date, count=row.count) for row in build_timeline(rows)]


# ============================================================
# REPORT SERVICE
# ============================================================

class ReportService:
    """
    Computes reports and dashboard analytics for job seekers, employers and admins.
    """

    def __init__(
        self,
        queries: Optional[ReportQueryService] = None,
        clock: Callable[[], datetime] = datetime.utcnow
    ):
        self.queries = queries or get_report_query_service()
        self.clock = clock

    def _now(self, now: Optional[datetime]) -> datetime:
        return now or self.clock()

    # --------------------------------------------------------
    # Period reports
    # --------------------------------------------------------

    def build_job_seeker_report(
        self,
        user_id: int,
        date_range: DateRange = DateRange.last_30_days,
        now: Optional[datetime] = None
    ) -> JobSeekerReport:
        """Report over the job seeker's own applications."""
        logger.info("Building job seeker report for user %s (range=%s)", user_id, date_range.value)
        current_window, previous_window = resolve_period(date_range, self._now(now))
        scope = QueryScope(role=UserRole.job_seeker, user_id=user_id)
        q = self.queries

        current_rows = q.fetch_time_bucket_counts(scope, "applications", current_window)
        previous_rows = q.fetch_time_bucket_counts(scope, "applications", previous_window)
        current_accepted = q.fetch_scalar_aggregate(scope, "applications", current_window, status=ACCEPTED)
        previous_accepted = q.fetch_scalar_aggregate(scope, "applications", previous_window, status=ACCEPTED)
        categories = q.fetch_category_counts(scope, "applications", current_window)
        durations = q.fetch_review_durations(scope, current_window)

        current_total = compute_totals(current_rows)
        previous_total = compute_totals(previous_rows)

        comparison = compare_periods(
            PeriodMetrics(
                applications=current_total,
                views=0,
                success_rate=compute_success_rate(current_total, current_accepted)
            ),
            PeriodMetrics(
                applications=previous_total,
                views=0,
                success_rate=compute_success_rate(previous_total, previous_accepted)
            )
        )
        timeline = build_timeline(current_rows)

        return assemble_job_seeker_report(
            date_range=date_range,
            timeline=timeline,
            comparison=comparison,
            breakdown=build_category_breakdown(categories),
            trend=project_trend(timeline, JOB_SEEKER_CONFIDENCE),
            average_response_time=average_whole_days(durations)
        )

    def build_employer_report(
        self,
        user_id: int,
        date_range: DateRange = DateRange.last_30_days,
        now: Optional[datetime] = None
    ) -> EmployerReport:
        """Report over the employer's jobs and the applications/views they received."""
        logger.info("Building employer report for user %s (range=%s)", user_id, date_range.value)
        current_window, previous_window = resolve_period(date_range, self._now(now))
        scope = QueryScope(role=UserRole.employer, user_id=user_id)
        q = self.queries

        current_apps = q.fetch_time_bucket_counts(scope, "applications", current_window)
        previous_apps = q.fetch_time_bucket_counts(scope, "applications", previous_window)
        current_views = q.fetch_time_bucket_counts(scope, "views", current_window)
        previous_views = q.fetch_time_bucket_counts(scope, "views", previous_window)
        current_jobs = q.fetch_time_bucket_counts(scope, "jobs", current_window)
        previous_jobs = q.fetch_time_bucket_counts(scope, "jobs", previous_window)
        current_accepted = q.fetch_scalar_aggregate(scope, "applications", current_window, status=ACCEPTED)
        previous_accepted = q.fetch_scalar_aggregate(scope, "applications", previous_window, status=ACCEPTED)
        categories = q.fetch_category_counts(scope, "applications", current_window)
        hire_durations = q.fetch_review_durations(scope, current_window, status=ACCEPTED)
        top_rows = q.fetch_top_jobs(user_id, current_window, limit=TOP_JOBS_LIMIT)

        current_app_total = compute_totals(current_apps)
        previous_app_total = compute_totals(previous_apps)

        comparison = compare_periods(
            PeriodMetrics(
                applications=current_app_total,
                views=compute_totals(current_views),
                jobs_posted=compute_totals(current_jobs),
                success_rate=compute_success_rate(current_app_total, current_accepted)
            ),
            PeriodMetrics(
                applications=previous_app_total,
                views=compute_totals(previous_views),
                jobs_posted=compute_totals(previous_jobs),
                success_rate=compute_success_rate(previous_app_total, previous_accepted)
            )
        )

        top_jobs = [
            TopPerformingJob(
                title=row["title"],
                applications=int(row["application_count"] or 0),
                success_rate=round_half_up(
                    compute_success_rate(int(row["application_count"] or 0), int(row["accepted_count"] or 0)), 1
                )
            )
            for row in top_rows
        ]

        return assemble_employer_report(
            date_range=date_range,
            timeline=merge_timelines(current_apps, current_views),
            comparison=comparison,
            breakdown=build_category_breakdown(categories),
            trend=project_trend(build_timeline(current_apps), EMPLOYER_CONFIDENCE),
            average_time_to_hire=average_whole_days(hire_durations),
            top_jobs=top_jobs
        )

    # --------------------------------------------------------
    # Dashboards
    # --------------------------------------------------------

    def _dashboard_window(self, now: Optional[datetime]) -> PeriodWindow:
        end = self._now(now)
        return PeriodWindow(start=end - timedelta(days=DASHBOARD_DAYS), end=end)

    def _activity(self, user_id: int) -> List[ActivityEntry]:
        rows = self.queries.fetch_recent_activity(user_id, limit=RECENT_ACTIVITY_LIMIT)
        return [
            ActivityEntry(id=r["id"], action=r["action"], timestamp=r["timestamp"], metadata=r.get("metadata"))
            for r in rows
        ]

    def job_seeker_analytics(self, user_id: int, now: Optional[datetime] = None) -> JobSeekerAnalyticsResponse:
        """All-time application stats plus the last 30 days of activity."""
        scope = QueryScope(role=UserRole.job_seeker, user_id=user_id)
        q = self.queries
        window = self._dashboard_window(now)

        total = q.fetch_scalar_aggregate(scope, "applications", None)
        accepted = q.fetch_scalar_aggregate(scope, "applications", None, status=ACCEPTED)

        return JobSeekerAnalyticsResponse(
            application_stats=counts_by_category(q.fetch_category_counts(scope, "applications", None)),
            application_timeline=_daily(q.fetch_time_bucket_counts(scope, "applications", window)),
            recent_activity=self._activity(user_id),
            total_applications=total,
            accepted_applications=accepted,
            success_rate=compute_success_rate(total, accepted),
            average_response_time=average_whole_days(q.fetch_review_durations(scope, None))
        )

    def employer_analytics(self, user_id: int, now: Optional[datetime] = None) -> EmployerAnalyticsResponse:
        scope = QueryScope(role=UserRole.employer, user_id=user_id)
        q = self.queries
        window = self._dashboard_window(now)

        counters = q.fetch_total_counters(user_id)
        # Conversion: applications per 100 views, same zero guard as a success rate
        conversion = compute_success_rate(counters["views"], counters["applications"])

        return EmployerAnalyticsResponse(
            job_stats=counts_by_category(q.fetch_category_counts(scope, "jobs", None)),
            applications_received=_daily(q.fetch_time_bucket_counts(scope, "applications", window)),
            job_views_data=_daily(q.fetch_time_bucket_counts(scope, "views", window)),
            top_jobs=[
                TopJob(
                    id=r["id"], title=r["title"], application_count=int(r["application_count"] or 0),
                    view_count=int(r["view_count"] or 0), created_at=r["created_at"]
                )
                for r in q.fetch_top_jobs(user_id, None, limit=TOP_JOBS_LIMIT)
            ],
            application_status_breakdown=counts_by_category(q.fetch_category_counts(scope, "applications", None)),
            recent_activity=self._activity(user_id),
            total_views=counters["views"],
            total_applications_received=counters["applications"],
            conversion_rate=round_half_up(conversion, 2)
        )

    def platform_analytics(self, now: Optional[datetime] = None) -> PlatformAnalyticsResponse:
        q = self.queries
        window = self._dashboard_window(now)
        totals = q.fetch_platform_totals()

        return PlatformAnalyticsResponse(
            user_growth=[UserGrowthPoint(**row) for row in q.fetch_user_growth(window)],
            job_posting_trends=_daily(q.fetch_job_posting_trends(window)),
            total_users=totals["users"],
            total_jobs=totals["jobs"],
            total_applications=totals["applications"],
            total_companies=totals["companies"]
        )


# Singleton instance
_report_service: Optional[ReportService] = None


def get_report_service() -> ReportService:
    """Get or create report service singleton."""
    global _report_service
    if _report_service is None:
        _report_service = ReportService()
    return _report_service
