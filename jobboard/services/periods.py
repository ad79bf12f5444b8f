"""
Period Resolver

Maps a range token (7d, 30d, 90d, 6m, 1y) onto two adjacent windows:

    previous                current
    [start - length, start) [start, now)

The previous window always ends where the current one starts and has the
same length, so period-over-period changes compare like with like.
Month tokens step back whole calendar months for the current window; the
previous window reuses the resulting length.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Tuple

from dateutil.relativedelta import relativedelta

from jobboard.schemas.schemas import DateRange


class InvalidRangeError(ValueError):
    """Unknown range token."""

    def __init__(self, token):
        self.token = token
        valid = ", ".join(r.value for r in DateRange)
        super().__init__(f"Invalid range '{token}'. Expected one of: {valid}")


@dataclass(frozen=True)
class PeriodWindow:
    """Half-open interval [start, end)."""
    start: datetime
    end: datetime

    def __post_init__(self):
        if not self.start < self.end:
            raise ValueError(f"Window start {self.start} must be before end {self.end}")

    @property
    def length(self) -> timedelta:
        return self.end - self.start

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment < self.end


@dataclass(frozen=True)
class RangeResolution:
    """Tagged result of parse_range: exactly one of range / error is set."""
    range: Optional[DateRange] = None
    error: Optional[InvalidRangeError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


_DAY_RANGES = {
    DateRange.last_7_days: 7,
    DateRange.last_30_days: 30,
    DateRange.last_90_days: 90,
}

_MONTH_RANGES = {
    DateRange.last_6_months: 6,
    DateRange.last_year: 12,
}


def subtract_months(moment: datetime, months: int) -> datetime:
    """Step back whole calendar months, clamping the day to the target month."""
    return moment - relativedelta(months=months)


def parse_range(token) -> RangeResolution:
    """Validate a range token without raising."""
    if isinstance(token, DateRange):
        return RangeResolution(range=token)
    try:
        return RangeResolution(range=DateRange(token))
    except ValueError:
        return RangeResolution(error=InvalidRangeError(token))


def range_start(token, now: datetime) -> datetime:
    resolution = parse_range(token)
    if not resolution.ok:
        raise resolution.error

    date_range = resolution.range
    if date_range in _DAY_RANGES:
        return now - timedelta(days=_DAY_RANGES[date_range])
    return subtract_months(now, _MONTH_RANGES[date_range])


def resolve_period(token, now: datetime) -> Tuple[PeriodWindow, PeriodWindow]:
    """
    Resolve a range token into (current, previous) windows.

    Raises:
        InvalidRangeError: token is not a known range
    """
    start = range_start(token, now)
    current = PeriodWindow(start=start, end=now)
    previous = PeriodWindow(start=start - current.length, end=start)
    return current, previous
