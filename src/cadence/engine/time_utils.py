#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
"""Calendar arithmetic used by the occurrence engine: half-open time ranges,
weekday distances, month and ISO week resolution.

All helpers raise `CalendarOverflowError` instead of clamping or wrapping when a
result falls outside the range `datetime` can represent.
"""

import calendar
import datetime
from typing import NamedTuple, Self

from dateutil.relativedelta import relativedelta

from cadence.constants import DAYS_PER_WEEK, MONTHS_PER_YEAR
from cadence.engine.exceptions import CalendarOverflowError, InvalidTimeRangeError


class TimeRange(NamedTuple):
    """A half-open interval `[start, end)` between two instants.

    Parameters
    ----------
    start
        First instant covered by the range.
    end
        First instant after the range. Ranges with `end == start` are empty
        but valid.
    """

    start: datetime.datetime
    end: datetime.datetime

    @classmethod
    def from_start(cls, start: datetime.datetime, duration: datetime.timedelta) -> Self:
        return cls(start, add_delta(start, duration))

    @property
    def duration(self) -> datetime.timedelta:
        return self.end - self.start

    def contains(self, dt: datetime.datetime) -> bool:
        """Check if a given instant lies within this range."""
        return self.start <= dt < self.end

    def includes(self, other: Self) -> bool:
        """Check if `other` is included in this time range."""
        return self.start <= other.start and other.end <= self.end

    def overlaps(self, other: Self) -> bool:
        return self.start < other.end and other.start < self.end

    def ends_within(self, window: Self) -> bool:
        """Check if this range finishes inside `window`, the membership test used
        when collecting occurrences for a query window."""
        return window.start <= self.end < window.end

    def shift(self, delta: datetime.timedelta) -> Self:
        return type(self)(add_delta(self.start, delta), add_delta(self.end, delta))

    def validate(self) -> Self:
        if self.end < self.start:
            raise InvalidTimeRangeError(
                f"Time range ends ({self.end}) before it starts ({self.start})"
            )
        return self


def add_delta(dt: datetime.datetime, delta: datetime.timedelta) -> datetime.datetime:
    try:
        return dt + delta
    except OverflowError as e:
        raise CalendarOverflowError(f"{dt} + {delta} is out of range") from e


def days_delta(days: int) -> datetime.timedelta:
    try:
        return datetime.timedelta(days=days)
    except OverflowError as e:
        raise CalendarOverflowError(f"A span of {days} days is out of range") from e


def add_days(dt: datetime.datetime, days: int) -> datetime.datetime:
    return add_delta(dt, days_delta(days))


def weekday_distance(from_weekday: int, to_weekday: int) -> int:
    """Number of days to move forward from `from_weekday` to reach `to_weekday`,
    in the range [0, 6]. Weekdays are 0-indexed starting on Monday."""
    return (to_weekday - from_weekday) % DAYS_PER_WEEK


def week_start(dt: datetime.datetime) -> datetime.datetime:
    """The Monday of the week containing `dt`, at the same time of day."""
    return add_days(dt, -dt.weekday())


def is_leap_year(year: int) -> bool:
    return calendar.isleap(year)


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def check_year(year: int) -> int:
    if not datetime.MINYEAR <= year <= datetime.MAXYEAR:
        raise CalendarOverflowError(f"Year {year} is out of range")
    return year


def month_index(dt: datetime.date) -> int:
    """Months elapsed since the start of year 0, so that month distances
    reduce to integer subtraction."""
    return dt.year * MONTHS_PER_YEAR + dt.month - 1


def from_month_index(index: int) -> tuple[int, int]:
    """Inverse of `month_index`, returns a `(year, month)` pair."""
    year, month = divmod(index, MONTHS_PER_YEAR)
    return check_year(year), month + 1


def shift_months(dt: datetime.datetime, months: int) -> datetime.datetime:
    """Add `months` calendar months to `dt`, carrying into the year.

    Notes
    -----
    The day of month is clamped by `relativedelta` when the target month is
    shorter, so callers only use this for days that exist in every month.
    """
    try:
        return dt + relativedelta(months=months)
    except (ValueError, OverflowError) as e:
        raise CalendarOverflowError(
            f"{dt} shifted by {months} months is out of range"
        ) from e


def on_day(
    dt: datetime.datetime, year: int, month: int, day: int
) -> datetime.datetime | None:
    """Move `dt` to the given calendar day, keeping the time of day. Returns `None`
    when `month` has no such `day` (skip semantics), never a clamped date."""
    check_year(year)
    if day > days_in_month(year, month):
        return None
    return dt.replace(year=year, month=month, day=day)


def on_date(dt: datetime.datetime, date: datetime.date) -> datetime.datetime:
    return dt.replace(year=date.year, month=date.month, day=date.day)


def week_of_month(date: datetime.date) -> int:
    """0-indexed position of `date`'s weekday within its month (the third Tuesday
    has index 2)."""
    return (date.day - 1) // DAYS_PER_WEEK


def nth_weekday_of_month(year: int, month: int, index: int, weekday: int) -> int | None:
    """Day of month of the `index`-th (0-indexed) `weekday` in the given month, or
    `None` if the month does not have that many such weekdays."""
    check_year(year)
    first_weekday = datetime.date(year, month, 1).weekday()
    day = 1 + weekday_distance(first_weekday, weekday) + DAYS_PER_WEEK * index
    if day > days_in_month(year, month):
        return None
    return day


def iso_weeks_in_year(iso_year: int) -> int:
    """Either 52 or 53. December 28th always falls in the last ISO week."""
    check_year(iso_year)
    return datetime.date(iso_year, 12, 28).isocalendar().week


def iso_year_start(iso_year: int) -> datetime.date:
    """The Monday starting ISO week 1 of `iso_year`."""
    try:
        return datetime.date.fromisocalendar(check_year(iso_year), 1, 1)
    except ValueError as e:
        raise CalendarOverflowError(f"ISO year {iso_year} is out of range") from e


def iso_date(iso_year: int, week: int, weekday: int) -> datetime.date | None:
    """Resolve an ISO `(year, week, weekday)` triple to a calendar date.

    Parameters
    ----------
    weekday
        0-indexed, starting on Monday.

    Returns
    -------
    `None` when `week` is 53 and `iso_year` only has 52 weeks.
    """
    if week > iso_weeks_in_year(iso_year):
        return None
    try:
        return datetime.date.fromisocalendar(iso_year, week, weekday + 1)
    except ValueError as e:
        raise CalendarOverflowError(
            f"ISO date {iso_year}-W{week}-{weekday + 1} is out of range"
        ) from e
