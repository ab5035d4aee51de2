"""
Date Range Utilities

All calendar logic the engine needs: month keys, fixed reporting windows,
overdue checks and day differences.

DESIGN DECISION: Nothing in here reads the clock. Every function that
depends on "today" takes `now` explicitly, so a whole engine run agrees on
one instant and tests need no time mocking.

All datetimes are naive local time.
"""

import calendar
from datetime import datetime, timedelta
from typing import NamedTuple, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from freelance_finance.engine.currency import round_half_up
from freelance_finance.models.records import DateRange

MS_PER_DAY = 24 * 60 * 60 * 1000

# Sentinel bounds for ALL_TIME
ALL_TIME_START = datetime(2000, 1, 1)
ALL_TIME_END = datetime(2100, 1, 1, 23, 59, 59, 999000)


class InvalidMonthKeyError(ValueError):
    """A month key string that is not YYYY-MM was passed to the API."""
    pass


class MonthKey(BaseModel):
    """
    Canonical month representation.

    month_str ("YYYY-MM") is the join key between a recurring expense's
    payment history and a target month.
    """
    model_config = ConfigDict(frozen=True)

    year: int
    month: int = Field(ge=1, le=12)

    @property
    def month_str(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"

    def __str__(self) -> str:
        return self.month_str


class DateWindow(NamedTuple):
    """Inclusive [start, end] window."""
    start: datetime
    end: datetime


def get_month_key(value: datetime) -> MonthKey:
    return MonthKey(year=value.year, month=value.month)


def parse_month_key(month_str: str) -> MonthKey:
    """
    Parse "YYYY-MM" into a MonthKey.

    Raises:
        InvalidMonthKeyError: If the string is not a valid month
    """
    try:
        year_part, month_part = month_str.split("-")
        year, month = int(year_part), int(month_part)
    except (AttributeError, ValueError) as e:
        raise InvalidMonthKeyError(f"Invalid month key: {month_str!r}") from e
    if not 1 <= month <= 12:
        raise InvalidMonthKeyError(f"Month out of range in key: {month_str!r}")
    return MonthKey(year=year, month=month)


def month_day(year: int, month: int, day: int) -> datetime:
    """Midnight of the given day, clamped to the month's last day."""
    last_day = calendar.monthrange(year, month)[1]
    return datetime(year, month, max(1, min(day, last_day)))


def month_key_to_date(key: MonthKey, day: int = 15) -> datetime:
    return month_day(key.year, key.month, day)


def get_current_month(now: datetime) -> MonthKey:
    return get_month_key(now)


def start_of_day(value: datetime) -> datetime:
    return value.replace(hour=0, minute=0, second=0, microsecond=0)


def end_of_day(value: datetime) -> datetime:
    return value.replace(hour=23, minute=59, second=59, microsecond=999000)


def add_days(value: datetime, days: int) -> datetime:
    return value + timedelta(days=days)


def add_months(value: datetime, months: int) -> datetime:
    """Shift by whole months, clamping the day (Jan 31 + 1 month = Feb 28/29)."""
    index = value.year * 12 + (value.month - 1) + months
    year, month = divmod(index, 12)
    shifted = month_day(year, month + 1, value.day)
    return shifted.replace(
        hour=value.hour,
        minute=value.minute,
        second=value.second,
        microsecond=value.microsecond,
    )


def is_same_month(first: datetime, second: datetime) -> bool:
    return first.year == second.year and first.month == second.month


def get_month_range(value: datetime) -> DateWindow:
    """First instant to last instant of the month containing value."""
    start = datetime(value.year, value.month, 1)
    last_day = calendar.monthrange(value.year, value.month)[1]
    end = end_of_day(datetime(value.year, value.month, last_day))
    return DateWindow(start, end)


def get_date_range(
    date_range: Union[DateRange, str],
    now: datetime,
) -> DateWindow:
    """
    Resolve a fixed reporting window relative to now.

    ALL_TIME is a sentinel (2000-01-01 .. 2100-01-01), not an open interval.
    """
    date_range = DateRange(date_range)

    if date_range == DateRange.THIS_MONTH:
        return get_month_range(now)
    if date_range == DateRange.LAST_MONTH:
        return get_month_range(add_months(datetime(now.year, now.month, 1), -1))
    if date_range == DateRange.THIS_YEAR:
        return DateWindow(
            datetime(now.year, 1, 1),
            end_of_day(datetime(now.year, 12, 31)),
        )
    return DateWindow(ALL_TIME_START, ALL_TIME_END)


def get_previous_date_range(
    date_range: Union[DateRange, str],
    now: datetime,
) -> Optional[DateWindow]:
    """
    The window immediately before a fixed window, for trend comparison.

    ALL_TIME has no predecessor and returns None.
    """
    date_range = DateRange(date_range)
    this_month = datetime(now.year, now.month, 1)

    if date_range == DateRange.THIS_MONTH:
        return get_month_range(add_months(this_month, -1))
    if date_range == DateRange.LAST_MONTH:
        return get_month_range(add_months(this_month, -2))
    if date_range == DateRange.THIS_YEAR:
        return DateWindow(
            datetime(now.year - 1, 1, 1),
            end_of_day(datetime(now.year - 1, 12, 31)),
        )
    return None


def is_date_in_range(
    value: Optional[datetime],
    start: datetime,
    end: datetime,
) -> bool:
    """Inclusive range check; a missing date is never in range."""
    if value is None:
        return False
    return start <= value <= end


def days_difference(first: datetime, second: datetime) -> int:
    """Whole days from first to second, rounded; negative if second is earlier."""
    delta_ms = (second - first) / timedelta(milliseconds=1)
    return round_half_up(delta_ms / MS_PER_DAY)


def is_overdue(value: Optional[datetime], now: datetime) -> bool:
    """
    True if the calendar day of value is strictly before today.

    Compares dates, not timestamps: something due at 09:00 today is not
    overdue at 18:00 today.
    """
    if value is None:
        return False
    return value.date() < now.date()
