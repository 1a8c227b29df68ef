#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
"""Forward iteration over the occurrence starts of a rule.

Each rule kind defines a lattice of candidate periods (days, weeks, months or
ISO years) spaced `interval` apart from the period of the origin occurrence.
The generators below jump straight to the lattice period containing a given
instant and walk forward from there, skipping periods where the origin's
day does not exist. Termination is not applied here.
"""

import datetime
from collections.abc import Iterator
from typing import assert_never

from cadence.constants import DAYS_PER_WEEK
from cadence.engine.rules import (
    Daily,
    Monthly,
    RecurrenceRule,
    Weekly,
    Yearly,
    is_active,
)
from cadence.engine.time_utils import (
    add_days,
    check_year,
    days_delta,
    from_month_index,
    iso_date,
    month_index,
    nth_weekday_of_month,
    on_date,
    on_day,
    week_of_month,
    week_start,
)


def _lattice_offset(distance: int, interval: int) -> int:
    """First lattice step whose period is at or before the period `distance`
    periods after the origin."""
    return max(distance, 0) // interval


def iter_daily(
    origin: datetime.datetime, interval: int, after: datetime.datetime | None = None
) -> Iterator[datetime.datetime]:
    step = 0
    if after is not None and after > origin:
        step = (after - origin) // days_delta(interval)
    while True:
        yield add_days(origin, step * interval)
        step += 1


def iter_weekly(
    origin: datetime.datetime,
    interval: int,
    week_map: int,
    after: datetime.datetime | None = None,
) -> Iterator[datetime.datetime]:
    """The origin itself is always an occurrence, even when its weekday is not
    active in `week_map`."""
    monday = week_start(origin)
    weeks = 0
    if after is not None and after > origin:
        elapsed = (after - monday).days // DAYS_PER_WEEK
        weeks = _lattice_offset(elapsed, interval) * interval
    while True:
        lattice_monday = add_days(monday, weeks * DAYS_PER_WEEK)
        for weekday in range(DAYS_PER_WEEK):
            candidate = add_days(lattice_monday, weekday)
            if candidate == origin or (
                candidate > origin and is_active(week_map, weekday)
            ):
                yield candidate
        weeks += interval


def iter_monthly(
    origin: datetime.datetime,
    interval: int,
    is_by_day: bool,
    after: datetime.datetime | None = None,
) -> Iterator[datetime.datetime]:
    start_index = month_index(origin)
    step = 0
    if after is not None and after > origin:
        step = _lattice_offset(month_index(after) - start_index, interval)
    week_index, weekday = week_of_month(origin), origin.weekday()
    while True:
        year, month = from_month_index(start_index + step * interval)
        if is_by_day:
            day = origin.day
        else:
            day = nth_weekday_of_month(year, month, week_index, weekday)
        if day is None:
            step += 1
            continue
        if (candidate := on_day(origin, year, month, day)) is not None:
            yield candidate
        step += 1


def iter_yearly(
    origin: datetime.datetime,
    interval: int,
    is_by_day: bool,
    after: datetime.datetime | None = None,
) -> Iterator[datetime.datetime]:
    """By-day rules step calendar years. By-weekday rules step ISO years and
    keep the origin's ISO week and weekday."""
    iso_year, iso_week, _ = origin.isocalendar()
    if is_by_day:
        start_year = origin.year
        after_year = after.year if after is not None else start_year
    else:
        start_year = iso_year
        after_year = after.isocalendar().year if after is not None else start_year
    step = 0
    if after is not None and after > origin:
        step = _lattice_offset(after_year - start_year, interval)
    while True:
        year = check_year(start_year + step * interval)
        if is_by_day:
            candidate = on_day(origin, year, origin.month, origin.day)
        elif (date := iso_date(year, iso_week, origin.weekday())) is not None:
            candidate = on_date(origin, date)
        else:
            candidate = None
        if candidate is not None:
            yield candidate
        step += 1


def iter_starts(
    rule: RecurrenceRule,
    origin: datetime.datetime,
    after: datetime.datetime | None = None,
) -> Iterator[datetime.datetime]:
    """Ascending occurrence starts of `rule`, beginning at `origin`.

    Parameters
    ----------
    rule
        A validated recurrence rule. Its termination is ignored.
    origin
        Start of an occurrence of the series (usually the anchor's start).
    after
        If specified, the iteration starts from the lattice period containing
        `after`, so starts before `after` may still be yielded but the
        iteration does not walk the periods in between.
    """
    match rule.kind:
        case Daily():
            return iter_daily(origin, rule.interval, after)
        case Weekly(week_map=week_map):
            return iter_weekly(origin, rule.interval, week_map, after)
        case Monthly(is_by_day=is_by_day):
            return iter_monthly(origin, rule.interval, is_by_day, after)
        case Yearly(is_by_day=is_by_day):
            return iter_yearly(origin, rule.interval, is_by_day, after)
        case _:
            assert_never(rule.kind)
