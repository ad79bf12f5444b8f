"""
Report Aggregation Engine

PURPOSE:
Turn raw grouped rows from the query layer into the numbers shown on the
analytics and report dashboards.

HOW IT WORKS:
1. Query layer returns per-day counts (TimeBucketCount) and per-status
   counts (CategoryCount) for the current and previous windows
2. Totals, success rates and period-over-period changes are computed here
3. Timelines are sorted (never gap-filled, missing days stay missing)
4. A naive trend projection is derived from the last 7 timeline entries

Everything in this module is a pure function of its arguments: no I/O,
no shared state. Division by zero is defined as 0 for rates and changes,
callers rely on that and never check denominators.
"""

import math
from dataclasses import dataclass
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from jobboard.schemas.schemas import CategorySlice, TimelinePoint, TrendDirection


# Trend projection parameters
TREND_WINDOW = 7
PROJECTION_DAYS = 30
UP_THRESHOLD = 1.1
DOWN_THRESHOLD = 0.9

DEFAULT_STATUS_COLOR = "#6b7280"

STATUS_COLORS = {
    "pending": "#f59e0b",
    "reviewed": "#3b82f6",
    "interview": "#8b5cf6",
    "accepted": "#10b981",
    "rejected": "#ef4444",
    "withdrawn": "#6b7280",
}


# ============================================================
# ROW TYPES
# ============================================================

@dataclass(frozen=True)
class TimeBucketCount:
    """Event count for one calendar day."""
    date: date
    count: int

    def __post_init__(self):
        if not isinstance(self.date, date):
            raise TypeError(f"TimeBucketCount.date must be a date, got {type(self.date).__name__}")
        if self.count < 0:
            raise ValueError(f"TimeBucketCount.count must be >= 0, got {self.count}")


@dataclass(frozen=True)
class CategoryCount:
    """Event count for one status/category label."""
    category: str
    count: int

    def __post_init__(self):
        if self.count < 0:
            raise ValueError(f"CategoryCount.count must be >= 0, got {self.count}")


@dataclass(frozen=True)
class PeriodMetrics:
    applications: int = 0
    views: int = 0
    success_rate: float = 0.0
    jobs_posted: Optional[int] = None  # employer reports only


@dataclass(frozen=True)
class PercentageChange:
    applications: float = 0.0
    views: float = 0.0
    success_rate: float = 0.0
    jobs_posted: Optional[float] = None


@dataclass(frozen=True)
class ComparisonResult:
    current: PeriodMetrics
    previous: PeriodMetrics
    percentage_change: PercentageChange


@dataclass(frozen=True)
class TrendProjection:
    next_period_projection: int
    direction: TrendDirection
    confidence: int


# ============================================================
# SCALAR HELPERS
# ============================================================

def round_half_up(value: float, ndigits: int = 0) -> float:
    """
    Round with halves going up, like JavaScript's Math.round.

    Python's round() rounds halves to even, which would make 2.5 -> 2.
    """
    factor = 10 ** ndigits
    return math.floor(value * factor + 0.5) / factor


def compute_totals(rows: Iterable[TimeBucketCount]) -> int:
    """Sum of counts across all rows. Empty input gives 0."""
    return sum(row.count for row in rows)


def compute_success_rate(total: int, success_count: int) -> float:
    """
    Percentage of successful outcomes.

    Returns:
        Float between 0 and 100 (0 when total is 0)
    """
    if total > 0:
        return success_count / total * 100
    return 0.0


def compute_percentage_change(current: float, previous: float) -> float:
    """
    Relative change from previous to current, in percent.

    A zero previous value yields 0, even when current is positive.
    """
    if previous > 0:
        return (current - previous) / previous * 100
    return 0.0


def average_whole_days(pairs: Sequence[Tuple[datetime, datetime]]) -> int:
    """
    Mean number of whole days elapsed between (start, end) pairs,
    rounded half up. Partial days are dropped per pair before averaging.
    """
    if not pairs:
        return 0
    total_days = 0
    for start, end in pairs:
        total_days += int((end - start).total_seconds() / 86400)
    return int(round_half_up(total_days / len(pairs)))


# ============================================================
# TIMELINES & BREAKDOWNS
# ============================================================

def build_timeline(rows: Iterable[TimeBucketCount]) -> List[TimeBucketCount]:
    """Rows sorted ascending by date. Days without rows are not inserted."""
    return sorted(rows, key=lambda row: row.date)


def merge_timelines(
    applications: Iterable[TimeBucketCount],
    views: Iterable[TimeBucketCount]
) -> List[TimelinePoint]:
    """
    Outer-join application and view buckets by date.

    A day present on only one side gets 0 for the other.
    """
    points: Dict[date, Dict[str, int]] = {}
    for row in applications:
        points.setdefault(row.date, {"applications": 0, "views": 0})["applications"] = row.count
    for row in views:
        points.setdefault(row.date, {"applications": 0, "views": 0})["views"] = row.count

    return [
        TimelinePoint(date=day, applications=counts["applications"], views=counts["views"])
        for day, counts in sorted(points.items())
    ]


def status_color(category: str) -> str:
    return STATUS_COLORS.get(category, DEFAULT_STATUS_COLOR)


def display_name(category: str) -> str:
    """First letter upper-cased, the rest untouched ("under_review" -> "Under_review")."""
    return category[:1].upper() + category[1:]


def build_category_breakdown(rows: Iterable[CategoryCount]) -> List[CategorySlice]:
    """One display slice per input row, input order preserved."""
    return [
        CategorySlice(name=display_name(row.category), value=row.count, color=status_color(row.category))
        for row in rows
    ]


def counts_by_category(rows: Iterable[CategoryCount]) -> Dict[str, int]:
    return {row.category: row.count for row in rows}


# ============================================================
# COMPARISON & TREND
# ============================================================

def compare_periods(current: PeriodMetrics, previous: PeriodMetrics) -> ComparisonResult:
    """Field-by-field percentage change between two period rollups."""
    jobs_change = None
    if current.jobs_posted is not None and previous.jobs_posted is not None:
        jobs_change = compute_percentage_change(current.jobs_posted, previous.jobs_posted)

    change = PercentageChange(
        applications=compute_percentage_change(current.applications, previous.applications),
        views=compute_percentage_change(current.views, previous.views),
        success_rate=compute_percentage_change(current.success_rate, previous.success_rate),
        jobs_posted=jobs_change
    )
    return ComparisonResult(current=current, previous=previous, percentage_change=change)


def _mean(values: Sequence[int]) -> float:
    if not values:
        return 0.0
    return float(np.mean(values))


def project_trend(timeline: Sequence[TimeBucketCount], confidence: int) -> TrendProjection:
    """
    Naive forecast from the most recent slice of a sorted timeline.

    Takes the last 7 entries, compares the mean of the second half to the
    mean of the first half (the first half gets the extra entry when odd):
    more than 10% higher is "up", more than 10% lower is "down".
    The projection is the recent daily average times 30.

    `confidence` is passed through unchanged; it is a per-role constant,
    not a statistical estimate.
    """
    recent = [row.count for row in timeline[-TREND_WINDOW:]]
    average = _mean(recent)

    direction = TrendDirection.stable
    if len(recent) >= 2:
        split = math.ceil(len(recent) / 2)
        first_avg = _mean(recent[:split])
        second_avg = _mean(recent[split:])

        if second_avg > first_avg * UP_THRESHOLD:
            direction = TrendDirection.up
        elif second_avg < first_avg * DOWN_THRESHOLD:
            direction = TrendDirection.down

    return TrendProjection(
        next_period_projection=int(round_half_up(average * PROJECTION_DAYS)),
        direction=direction,
        confidence=confidence
    )
