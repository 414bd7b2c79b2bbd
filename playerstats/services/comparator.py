"""Period-over-period comparison of engagement buckets.

A comparison takes the count of "this" period and of the "last" period and
reports a symmetric rate of change (the difference as a share of the combined
activity of both periods) together with a trend direction.
"""
import calendar
from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import Optional, Tuple

from dateutil.relativedelta import relativedelta

from playerstats.core.errors import BadRequestError
from playerstats.schemas.statistics import Comparison, Trend


class Period(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


class InvalidCompareError(BadRequestError):
    code = "invalid-compare"


def compare(this: Optional[int], last: Optional[int], count: Optional[int] = None) -> Comparison:
    """Compare two buckets.

    ``None`` means the bucket is absent altogether, which is not the same as a
    bucket holding zero events: a lone ``this`` bucket is an increase and a
    lone ``last`` bucket a decrease.
    """
    headline = count if count is not None else (this or 0)

    if this is None or last is None:
        if this is not None:
            trend = Trend.INCREASE
        elif last is not None:
            trend = Trend.DECREASE
        else:
            trend = Trend.EQUAL
        return Comparison(count=headline, rate=0, trend=trend)

    total = this + last
    diff = this - last
    rate = round(abs(diff / total) * 100, 2) if total > 0 else 0

    if diff < 0:
        trend = Trend.DECREASE
    elif diff == 0:
        trend = Trend.EQUAL
    else:
        trend = Trend.INCREASE

    return Comparison(count=headline, rate=rate, trend=trend)


def parse_period(value: str) -> Period:
    try:
        return Period(value)
    except ValueError:
        raise InvalidCompareError(f"Invalid compare parameter: {value}")


@dataclass(frozen=True)
class PeriodWindow:
    """Date bounds of the current and the previous period.

    ``this_start`` is inclusive and open-ended; ``last`` covers
    ``last_start <= d < last_end``.
    """

    period: Period
    this_start: date
    last_start: date
    last_end: date

    @classmethod
    def for_period(cls, period: Period, today: date) -> "PeriodWindow":
        if period == Period.DAY:
            yesterday = today - timedelta(days=1)
            return cls(period, today, yesterday, today)
        if period == Period.WEEK:
            offset, double = timedelta(days=7), timedelta(days=14)
        elif period == Period.MONTH:
            offset, double = relativedelta(months=1), relativedelta(months=2)
        else:
            offset, double = relativedelta(years=1), relativedelta(years=2)
        this_start = today - offset
        return cls(period, this_start, today - double, this_start)

    def bucket(self, day: date) -> Optional[str]:
        """Return ``"this"``, ``"last"`` or ``None`` for a date."""
        if self.period == Period.DAY:
            if day == self.this_start:
                return "this"
            if day == self.last_start:
                return "last"
            return None
        if day >= self.this_start:
            return "this"
        if self.last_start <= day < self.last_end:
            return "last"
        return None


def calendar_month_bounds(today: date) -> Tuple[date, date, date, date]:
    """Current calendar month and the full previous calendar month.

    Returns ``(this_first, next_first, last_first, last_last)``; the previous
    month ends on its real last day.
    """
    this_first = today.replace(day=1)
    next_first = this_first + relativedelta(months=1)
    last_first = this_first - relativedelta(months=1)
    last_last = last_first.replace(day=calendar.monthrange(last_first.year, last_first.month)[1])
    return this_first, next_first, last_first, last_last
