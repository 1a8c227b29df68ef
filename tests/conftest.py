#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
import datetime

import pytest

from cadence.engine.rules import Count, Monthly, RecurrenceRule, Until, Weekly
from cadence.engine.time_utils import TimeRange


@pytest.fixture()
def morning_anchor() -> TimeRange:
    """A 10:00 - 12:15 occurrence on Saturday 18 February 2023."""
    return TimeRange(
        datetime.datetime(2023, 2, 18, 10, 0), datetime.datetime(2023, 2, 18, 12, 15)
    )


@pytest.fixture()
def evening_anchor() -> TimeRange:
    """An 18:30 - 20:00 occurrence on Tuesday 21 March 2023."""
    return TimeRange(
        datetime.datetime(2023, 3, 21, 18, 30), datetime.datetime(2023, 3, 21, 20, 0)
    )


@pytest.fixture()
def late_anchor() -> TimeRange:
    """A 22:45 - 00:00 occurrence on Friday 17 February 2023, ending the next day."""
    return TimeRange(
        datetime.datetime(2023, 2, 17, 22, 45), datetime.datetime(2023, 2, 18, 0, 0)
    )


@pytest.fixture()
def standup_rule() -> RecurrenceRule:
    """Every other week on Monday, Wednesday, Friday and Saturday, 12 repetitions."""
    return RecurrenceRule(
        kind=Weekly(week_map=86), interval=2, termination=Count(count=12)
    )


@pytest.fixture()
def monthly_until_rule() -> RecurrenceRule:
    return RecurrenceRule(
        kind=Monthly(is_by_day=True),
        interval=1,
        termination=Until(until=datetime.datetime(2023, 4, 1, 13, 0)),
    )
