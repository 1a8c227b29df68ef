#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
import datetime
from itertools import islice

import pytest

from cadence.engine.count_until import occurrence_at
from cadence.engine.occurrences import iter_starts
from cadence.engine.rules import Daily, Monthly, RecurrenceRule, Weekly, Yearly
from cadence.engine.time_utils import TimeRange


def take(rule: RecurrenceRule, origin: datetime.datetime, n: int, **kwargs):
    return list(islice(iter_starts(rule, origin, **kwargs), n))


def test_weekly_lattice_skips_inactive_weeks():
    origin = datetime.datetime(2023, 2, 15, 10)
    rule = RecurrenceRule(kind=Weekly(week_map=86), interval=2)
    assert [d.date() for d in take(rule, origin, 7)] == [
        datetime.date(2023, 2, 15),
        datetime.date(2023, 2, 17),
        datetime.date(2023, 2, 18),
        datetime.date(2023, 2, 27),
        datetime.date(2023, 3, 1),
        datetime.date(2023, 3, 3),
        datetime.date(2023, 3, 4),
    ]


def test_weekly_origin_counts_when_inactive():
    # a Wednesday anchor on a Monday-only rule
    origin = datetime.datetime(2023, 2, 15, 10)
    rule = RecurrenceRule(kind=Weekly(week_map=64))
    assert take(rule, origin, 3) == [
        origin,
        datetime.datetime(2023, 2, 20, 10),
        datetime.datetime(2023, 2, 27, 10),
    ]


def test_monthly_skips_short_months():
    origin = datetime.datetime(2023, 1, 31, 9)
    rule = RecurrenceRule(kind=Monthly(is_by_day=True))
    assert [d.month for d in take(rule, origin, 5)] == [1, 3, 5, 7, 8]


def test_fifth_weekday_skips_months():
    origin = datetime.datetime(2023, 1, 31, 9)
    rule = RecurrenceRule(kind=Monthly(is_by_day=False))
    assert [d.date() for d in take(rule, origin, 4)] == [
        datetime.date(2023, 1, 31),
        datetime.date(2023, 5, 30),
        datetime.date(2023, 8, 29),
        datetime.date(2023, 10, 31),
    ]


def test_leap_day_yearly():
    origin = datetime.datetime(2096, 2, 29, 9)
    rule = RecurrenceRule(kind=Yearly(is_by_day=True), interval=4)
    assert [d.year for d in take(rule, origin, 3)] == [2096, 2104, 2108]


def test_iso_week_53_yearly():
    origin = datetime.datetime(2020, 12, 31, 9)
    rule = RecurrenceRule(kind=Yearly(is_by_day=False))
    assert [d.date() for d in take(rule, origin, 3)] == [
        datetime.date(2020, 12, 31),
        datetime.date(2026, 12, 31),
        datetime.date(2032, 12, 30),
    ]


@pytest.mark.parametrize(
    "rule",
    [
        RecurrenceRule(kind=Daily(), interval=3),
        RecurrenceRule(kind=Weekly(week_map=86), interval=2),
        RecurrenceRule(kind=Monthly(is_by_day=True), interval=5),
        RecurrenceRule(kind=Monthly(is_by_day=False), interval=2),
        RecurrenceRule(kind=Yearly(is_by_day=False), interval=1),
    ],
    ids=[
        "daily",
        "weekly",
        "monthly_by_day",
        "monthly_by_weekday",
        "yearly_by_weekday",
    ],
)
def test_jump_matches_walk(rule: RecurrenceRule):
    origin = datetime.datetime(2023, 2, 15, 10)
    after = datetime.datetime(2027, 6, 3, 8)
    walked = [d for d in take(rule, origin, 2000) if d >= after][:10]
    jumped = [d for d in take(rule, origin, 40, after=after) if d >= after][:10]
    assert jumped == walked


@pytest.mark.parametrize(
    "rule",
    [
        RecurrenceRule(kind=Daily(), interval=3),
        RecurrenceRule(kind=Weekly(week_map=103), interval=2),
        RecurrenceRule(kind=Monthly(is_by_day=True), interval=2),
        RecurrenceRule(kind=Monthly(is_by_day=False), interval=2),
        RecurrenceRule(kind=Yearly(is_by_day=True), interval=2),
        RecurrenceRule(kind=Yearly(is_by_day=False), interval=1),
    ],
    ids=[
        "daily",
        "weekly",
        "monthly_by_day",
        "monthly_by_weekday",
        "yearly_by_day",
        "yearly_by_weekday",
    ],
)
def test_closed_form_matches_lattice(rule: RecurrenceRule, morning_anchor: TimeRange):
    starts = take(rule, morning_anchor.start, 25)
    assert [occurrence_at(n, rule, morning_anchor).start for n in range(25)] == starts
