"""
Report Query Service - aggregate SQL for the analytics dashboards.

Every query is scoped to the caller:
- job seeker: applications the user submitted
- employer: jobs the user created, and the applications/views on them

Windows are bound half-open (>= start AND < end). Passing no window
reads all time.

Tables read: users, companies, jobs, job_applications, job_views, activity_logs
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Dict, List, Optional, Tuple

from sqlalchemy import DateTime, Integer, bindparam, text

from jobboard.db.postgres import execute_raw_sql
from jobboard.schemas.schemas import ApplicationStatus, UserRole
from jobboard.services.aggregation import CategoryCount, TimeBucketCount
from jobboard.services.periods import PeriodWindow


@dataclass(frozen=True)
class QueryScope:
    role: UserRole
    user_id: int


@dataclass(frozen=True)
class MetricSource:
    """Where a metric lives: FROM/JOIN clause, owner column, date column, category column."""
    from_clause: str
    owner_column: str
    date_column: str
    category_column: Optional[str] = None
    status_column: Optional[str] = None


# Metric families per role
SOURCES: Dict[UserRole, Dict[str, MetricSource]] = {
    UserRole.job_seeker: {
        "applications": MetricSource(
            from_clause="job_applications a",
            owner_column="a.user_id",
            date_column="a.applied_at",
            category_column="a.status",
            status_column="a.status",
        ),
    },
    UserRole.employer: {
        "applications": MetricSource(
            from_clause="job_applications a JOIN jobs j ON a.job_id = j.id",
            owner_column="j.created_by_id",
            date_column="a.applied_at",
            category_column="a.status",
            status_column="a.status",
        ),
        "views": MetricSource(
            from_clause="job_views v JOIN jobs j ON v.job_id = j.id",
            owner_column="j.created_by_id",
            date_column="v.viewed_at",
        ),
        "jobs": MetricSource(
            from_clause="jobs j",
            owner_column="j.created_by_id",
            date_column="j.created_at",
            category_column="j.status",
            status_column="j.status",
        ),
    },
}


class UnknownMetricError(LookupError):
    pass


def _to_date(value) -> date:
    # DATE() comes back as a string on SQLite and as a date on PostgreSQL
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


class ReportQueryService:
    """
    Read-only aggregate queries for reports and analytics.

    Methods return plain rows; all arithmetic happens in the aggregation engine.
    """

    def _source(self, scope: QueryScope, metric: str) -> MetricSource:
        try:
            return SOURCES[scope.role][metric]
        except KeyError:
            raise UnknownMetricError(f"No '{metric}' metric for role '{scope.role.value}'")

    def _where(self, scope: QueryScope, source: MetricSource, window: Optional[PeriodWindow], status: Optional[str]):
        clauses = [f"{source.owner_column} = :user_id"]
        params = {"user_id": scope.user_id}
        binds = [bindparam("user_id", type_=Integer)]

        if window is not None:
            clauses.append(f"{source.date_column} >= :start AND {source.date_column} < :end")
            params["start"] = window.start
            params["end"] = window.end
            binds += [bindparam("start", type_=DateTime), bindparam("end", type_=DateTime)]

        if status is not None:
            if source.status_column is None:
                raise UnknownMetricError("Metric has no status column")
            clauses.append(f"{source.status_column} = :status")
            params["status"] = status

        return " AND ".join(clauses), params, binds

    # --------------------------------------------------------
    # Core aggregates
    # --------------------------------------------------------

    def fetch_time_bucket_counts(
        self,
        scope: QueryScope,
        metric: str,
        window: Optional[PeriodWindow]
    ) -> List[TimeBucketCount]:
        """Per-day event counts. Order is not guaranteed."""
        source = self._source(scope, metric)
        where, params, binds = self._where(scope, source, window, None)

        sql = text(f"""
            SELECT DATE({source.date_column}) AS day, COUNT(*) AS count
            FROM {source.from_clause}
            WHERE {where}
            GROUP BY DATE({source.date_column})
        """).bindparams(*binds)

        rows = execute_raw_sql(sql, params)
        return [TimeBucketCount(date=_to_date(r["day"]), count=int(r["count"])) for r in rows]

    def fetch_category_counts(
        self,
        scope: QueryScope,
        metric: str,
        window: Optional[PeriodWindow]
    ) -> List[CategoryCount]:
        """Counts per status label. Labels with no rows are absent."""
        source = self._source(scope, metric)
        if source.category_column is None:
            raise UnknownMetricError(f"Metric '{metric}' has no category column")
        where, params, binds = self._where(scope, source, window, None)

        sql = text(f"""
            SELECT {source.category_column} AS category, COUNT(*) AS count
            FROM {source.from_clause}
            WHERE {where}
            GROUP BY {source.category_column}
            ORDER BY {source.category_column}
        """).bindparams(*binds)

        rows = execute_raw_sql(sql, params)
        return [CategoryCount(category=str(r["category"]), count=int(r["count"])) for r in rows]

    def fetch_scalar_aggregate(
        self,
        scope: QueryScope,
        metric: str,
        window: Optional[PeriodWindow],
        status: Optional[str] = None
    ) -> int:
        """Row count for a metric, optionally restricted to one status."""
        source = self._source(scope, metric)
        where, params, binds = self._where(scope, source, window, status)

        sql = text(f"""
            SELECT COUNT(*) AS total FROM {source.from_clause} WHERE {where}
        """).bindparams(*binds)

        rows = execute_raw_sql(sql, params)
        return int(rows[0]["total"] or 0) if rows else 0

    # --------------------------------------------------------
    # Auxiliary queries
    # --------------------------------------------------------

    def fetch_review_durations(
        self,
        scope: QueryScope,
        window: Optional[PeriodWindow],
        status: Optional[str] = None
    ) -> List[Tuple[datetime, datetime]]:
        """(applied_at, reviewed_at) pairs for reviewed applications."""
        source = self._source(scope, "applications")
        where, params, binds = self._where(scope, source, window, status)

        sql = text(f"""
            SELECT a.applied_at AS applied_at, a.reviewed_at AS reviewed_at
            FROM {source.from_clause}
            WHERE {where} AND a.reviewed_at IS NOT NULL
        """).bindparams(*binds).columns(applied_at=DateTime, reviewed_at=DateTime)

        rows = execute_raw_sql(sql, params)
        return [(r["applied_at"], r["reviewed_at"]) for r in rows]

    def fetch_top_jobs(
        self,
        user_id: int,
        window: Optional[PeriodWindow] = None,
        limit: int = 5
    ) -> List[dict]:
        """
        Employer's jobs ordered by application count.

        Each row carries the denormalized counters plus the number of
        accepted applications.
        """
        sql = f"""
            SELECT j.id, j.title, j.created_at,
                   COALESCE(j.application_count, 0) AS application_count,
                   COALESCE(j.view_count, 0) AS view_count,
                   (SELECT COUNT(*) FROM job_applications a
                    WHERE a.job_id = j.id AND a.status = '{ApplicationStatus.accepted.value}') AS accepted_count
            FROM jobs j
            WHERE j.created_by_id = :user_id
        """
        params = {"user_id": user_id}
        binds = [bindparam("user_id", type_=Integer)]

        if window is not None:
            sql += " AND j.created_at >= :start AND j.created_at < :end"
            params["start"] = window.start
            params["end"] = window.end
            binds += [bindparam("start", type_=DateTime), bindparam("end", type_=DateTime)]

        sql += f" ORDER BY application_count DESC, j.id LIMIT {int(limit)}"
        statement = text(sql).bindparams(*binds).columns(created_at=DateTime)
        return execute_raw_sql(statement, params)

    def fetch_recent_activity(self, user_id: int, limit: int = 10) -> List[dict]:
        sql = text(f"""
            SELECT id, action, timestamp, metadata
            FROM activity_logs
            WHERE user_id = :user_id
            ORDER BY timestamp DESC, id DESC
            LIMIT {int(limit)}
        """).columns(timestamp=DateTime)
        return execute_raw_sql(sql, {"user_id": user_id})

    def fetch_total_counters(self, user_id: int) -> Dict[str, int]:
        """Sum of the denormalized view/application counters over the employer's jobs."""
        rows = execute_raw_sql("""
            SELECT COALESCE(SUM(view_count), 0) AS views,
                   COALESCE(SUM(application_count), 0) AS applications
            FROM jobs WHERE created_by_id = :user_id
        """, {"user_id": user_id})
        r = rows[0]
        return {"views": int(r["views"]), "applications": int(r["applications"])}

    # --------------------------------------------------------
    # Platform-wide (admin)
    # --------------------------------------------------------

    def fetch_platform_totals(self) -> Dict[str, int]:
        rows = execute_raw_sql("""
            SELECT
                (SELECT COUNT(*) FROM users) AS users,
                (SELECT COUNT(*) FROM jobs) AS jobs,
                (SELECT COUNT(*) FROM job_applications) AS applications,
                (SELECT COUNT(*) FROM companies) AS companies
        """)
        return {key: int(value) for key, value in rows[0].items()}

    def fetch_user_growth(self, window: PeriodWindow) -> List[dict]:
        """Sign-ups per day split by role."""
        sql = text(f"""
            SELECT DATE(created_at) AS day,
                   SUM(CASE WHEN role = '{UserRole.job_seeker.value}' THEN 1 ELSE 0 END) AS job_seekers,
                   SUM(CASE WHEN role = '{UserRole.employer.value}' THEN 1 ELSE 0 END) AS employers
            FROM users
            WHERE created_at >= :start AND created_at < :end
            GROUP BY DATE(created_at)
            ORDER BY DATE(created_at)
        """).bindparams(bindparam("start", type_=DateTime), bindparam("end", type_=DateTime))

        rows = execute_raw_sql(sql, {"start": window.start, "end": window.end})
        return [
            {"date": _to_date(r["day"]), "job_seekers": int(r["job_seekers"] or 0), "employers": int(r["employers"] or 0)}
            for r in rows
        ]

    def fetch_job_posting_trends(self, window: PeriodWindow) -> List[TimeBucketCount]:
        sql = text("""
            SELECT DATE(created_at) AS day, COUNT(*) AS count
            FROM jobs
            WHERE created_at >= :start AND created_at < :end
            GROUP BY DATE(created_at)
        """).bindparams(bindparam("start", type_=DateTime), bindparam("end", type_=DateTime))

        rows = execute_raw_sql(sql, {"start": window.start, "end": window.end})
        return [TimeBucketCount(date=_to_date(r["day"]), count=int(r["count"])) for r in rows]


# Singleton instance
_query_service: Optional[ReportQueryService] = None


def get_report_query_service() -> ReportQueryService:
    """Get or create report query service singleton."""
    global _query_service
    if _query_service is None:
        _query_service = ReportQueryService()
    return _query_service
