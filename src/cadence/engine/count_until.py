#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
"""Conversion between an occurrence's ordinal and its timing.

Ordinal 0 is the occurrence the count starts from (the anchor unless another
occurrence start is given), ordinal `n` the `n`-th occurrence after it. Regular
anchors are converted in closed form. Anchors whose day does not exist in every
period (days after the 28th, February 29th, ISO week 53) walk the lattice.
"""

import datetime
from itertools import islice

from cadence.constants import (
    DAYS_PER_WEEK,
    LAST_REGULAR_ISO_WEEK,
    LAST_REGULAR_MONTH_DAY,
)
from cadence.engine.occurrences import iter_starts
from cadence.engine.rules import (
    Count,
    Daily,
    Monthly,
    RecurrenceRule,
    Until,
    Weekly,
    Yearly,
    active_weekdays,
    is_active,
    validate_rule,
)
from cadence.engine.time_utils import (
    TimeRange,
    add_days,
    add_delta,
    from_month_index,
    iso_date,
    month_index,
    nth_weekday_of_month,
    on_date,
    shift_months,
    week_of_month,
)


def _is_leap_day(dt: datetime.date) -> bool:
    return dt.month == 2 and dt.day == 29


def _nth_weekly_start(
    count: int, interval: int, week_map: int, origin: datetime.datetime
) -> datetime.datetime:
    """Full interval-weeks follow from the number of active days per week. The
    remainder picks the next active weekday after the origin's weekday; moving
    past Sunday enters the next lattice week, `interval - 1` weeks further."""
    start_weekday = origin.weekday()
    full_weeks, remainder = divmod(count - 1, len(active_weekdays(week_map)))
    offsets = [
        offset
        for offset in range(1, DAYS_PER_WEEK + 1)
        if is_active(week_map, (start_weekday + offset) % DAYS_PER_WEEK)
    ]
    offset = offsets[remainder]
    weeks = full_weeks * interval
    if start_weekday + offset >= DAYS_PER_WEEK:
        weeks += interval - 1
    return add_days(origin, weeks * DAYS_PER_WEEK + offset)


def _nth_start(
    count: int, rule: RecurrenceRule, origin: datetime.datetime
) -> datetime.datetime:
    if count == 0:
        return origin
    steps = count * rule.interval
    match rule.kind:
        case Daily():
            return add_days(origin, steps)
        case Weekly(week_map=week_map):
            return _nth_weekly_start(count, rule.interval, week_map, origin)
        case Monthly(is_by_day=True) if origin.day <= LAST_REGULAR_MONTH_DAY:
            return shift_months(origin, steps)
        case Monthly(is_by_day=False) if origin.day <= LAST_REGULAR_MONTH_DAY:
            year, month = from_month_index(month_index(origin) + steps)
            day = nth_weekday_of_month(
                year, month, week_of_month(origin), origin.weekday()
            )
            return origin.replace(year=year, month=month, day=day)
        case Yearly(is_by_day=True) if not _is_leap_day(origin):
            return shift_months(origin, steps * 12)
        case Yearly(is_by_day=False) if (
            origin.isocalendar().week <= LAST_REGULAR_ISO_WEEK
        ):
            iso_year, week, _ = origin.isocalendar()
            return on_date(origin, iso_date(iso_year + steps, week, origin.weekday()))
    return next(islice(iter_starts(rule, origin), count, None))


def occurrence_at(
    count: int,
    rule: RecurrenceRule,
    anchor: TimeRange,
    start: datetime.datetime | None = None,
) -> TimeRange:
    """The `count`-th occurrence after `start`.

    Parameters
    ----------
    count
        Ordinal of the occurrence, relative to `start`.
    rule
        The series' recurrence rule. Its termination is not applied.
    anchor
        The first occurrence of the series, whose duration every occurrence
        shares.
    start
        Start of an occurrence of the series to count from. Defaults to the
        anchor's start.
    """
    validate_rule(rule, anchor)
    if count < 0:
        raise ValueError(f"Occurrence ordinal must be non-negative, got {count}")
    origin = anchor.start if start is None else start
    return TimeRange.from_start(_nth_start(count, rule, origin), anchor.duration)


def count_to_until(
    count: int,
    rule: RecurrenceRule,
    anchor: TimeRange,
    start: datetime.datetime | None = None,
) -> datetime.datetime:
    """The instant at which the `count`-th occurrence after `start` ends. A count
    of 0 returns the end of the occurrence starting at `start`."""
    return occurrence_at(count, rule, anchor, start).end


def _count_weekly(
    interval: int, week_map: int, origin: datetime.date, last_date: datetime.date
) -> int:
    start_weekday, last_weekday = origin.weekday(), last_date.weekday()
    first_monday = origin - datetime.timedelta(days=start_weekday)
    last_monday = last_date - datetime.timedelta(days=last_weekday)
    weeks = (last_monday - first_monday).days // DAYS_PER_WEEK

    def active_between(first: int, last: int) -> int:
        return sum(is_active(week_map, day) for day in range(first, last + 1))

    if weeks == 0:
        return active_between(start_weekday + 1, last_weekday)
    count = active_between(start_weekday + 1, DAYS_PER_WEEK - 1)
    count += len(active_weekdays(week_map)) * ((weeks - 1) // interval)
    if weeks % interval == 0:
        count += active_between(0, last_weekday)
    return count


def _count_lattice(
    periods: int,
    rule: RecurrenceRule,
    origin: datetime.datetime,
    last_date: datetime.date,
) -> int:
    """Count occurrences up to `last_date` for kinds with exactly one occurrence
    per lattice period, `periods` being the number of periods between the
    origin and `last_date`."""
    steps = periods // rule.interval
    if steps > 0 and _nth_start(steps, rule, origin).date() > last_date:
        steps -= 1
    return max(steps, 0)


def until_to_count(
    until: datetime.datetime,
    rule: RecurrenceRule,
    anchor: TimeRange,
    start: datetime.datetime | None = None,
) -> int:
    """The greatest ordinal (counted from `start`) whose occurrence ends at or
    before `until`, 0 if no occurrence after `start` has ended by then.

    Notes
    -----
    Occurrences share the anchor's time of day, so the count only depends on the
    last calendar date an occurrence may start on. That date is the one of
    `until - duration`, or the day before when the occurrence's time of day is
    later than the cutoff's.
    """
    validate_rule(rule, anchor)
    origin = anchor.start if start is None else start
    cutoff = add_delta(until, -anchor.duration)
    if cutoff.date() <= origin.date():
        return 0
    last_date = cutoff.date()
    if origin.time() > cutoff.time():
        last_date -= datetime.timedelta(days=1)
    match rule.kind:
        case Daily():
            return (last_date - origin.date()).days // rule.interval
        case Weekly(week_map=week_map):
            return _count_weekly(rule.interval, week_map, origin.date(), last_date)
        case Monthly() if origin.day <= LAST_REGULAR_MONTH_DAY:
            periods = month_index(last_date) - month_index(origin)
            return _count_lattice(periods, rule, origin, last_date)
        case Yearly(is_by_day=True) if not _is_leap_day(origin):
            return _count_lattice(last_date.year - origin.year, rule, origin, last_date)
        case Yearly(is_by_day=False) if (
            origin.isocalendar().week <= LAST_REGULAR_ISO_WEEK
        ):
            periods = last_date.isocalendar().year - origin.isocalendar().year
            return _count_lattice(periods, rule, origin, last_date)
    count = 0
    for occurrence_start in islice(iter_starts(rule, origin), 1, None):
        if occurrence_start.date() > last_date:
            break
        count += 1
    return count


def terminal_count(rule: RecurrenceRule, anchor: TimeRange) -> int | None:
    """Ordinal of the last occurrence of the series, `None` if it never ends."""
    match rule.termination:
        case Count(count=count):
            return count
        case Until(until=until):
            return until_to_count(until, rule, anchor)
    return None


def terminal_instant(
    rule: RecurrenceRule, anchor: TimeRange
) -> datetime.datetime | None:
    """Latest instant an occurrence of the series may end at, `None` if the
    series never ends."""
    match rule.termination:
        case Count(count=count):
            return count_to_until(count, rule, anchor)
        case Until(until=until):
            return until
    return None
