#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
"""Recurrence rules: how often a series repeats and when it stops."""

import datetime
from collections.abc import Iterable
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from cadence.constants import DAYS_PER_WEEK, WEEK_MAP_MAX
from cadence.engine.exceptions import InvalidRuleError
from cadence.engine.time_utils import TimeRange


class Count(BaseModel):
    """Terminate after `count` repetitions of the anchor occurrence, so the series
    holds `count + 1` occurrences in total."""

    model_config = ConfigDict(frozen=True)

    type: Literal["count"] = "count"
    count: int = Field(ge=0)


class Until(BaseModel):
    """Terminate with the last occurrence that ends at or before `until`."""

    model_config = ConfigDict(frozen=True)

    type: Literal["until"] = "until"
    until: datetime.datetime


Termination = Annotated[Count | Until, Field(discriminator="type")]


class Daily(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["daily"] = "daily"


class Weekly(BaseModel):
    """Repeat on the weekdays set in `week_map`.

    Parameters
    ----------
    week_map
        7-bit weekday set read most significant bit first: bit value 64 is
        Monday and bit value 1 is Sunday (`86 == 0b1010110` is Monday, Wednesday,
        Friday and Saturday).
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["weekly"] = "weekly"
    week_map: int = Field(ge=0, le=WEEK_MAP_MAX)

    @property
    def weekdays(self) -> list[int]:
        return active_weekdays(self.week_map)

    @property
    def events_per_week(self) -> int:
        return self.week_map.bit_count()

    def is_active(self, weekday: int) -> bool:
        return is_active(self.week_map, weekday)


class Monthly(BaseModel):
    """Repeat every month, either on the anchor's day of month (`is_by_day`) or
    on the anchor's weekday position in the month (eg the third Tuesday)."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["monthly"] = "monthly"
    is_by_day: bool = True


class Yearly(BaseModel):
    """Repeat every year, either on the anchor's calendar date (`is_by_day`) or on
    the anchor's ISO week and weekday."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["yearly"] = "yearly"
    is_by_day: bool = True


RuleKind = Annotated[Daily | Weekly | Monthly | Yearly, Field(discriminator="kind")]


class RecurrenceRule(BaseModel):
    """How a recurring event repeats.

    Parameters
    ----------
    kind
        The repetition frequency, with its kind-specific settings.
    interval
        Number of frequency periods between two lattice periods (eg `2` with a
        weekly rule repeats every other week).
    termination
        When the series stops. `None` for series which never end.
    """

    model_config = ConfigDict(frozen=True)

    kind: RuleKind
    interval: int = Field(default=1, ge=0)
    termination: Termination | None = None

    @property
    def is_finite(self) -> bool:
        return self.termination is not None


def weekday_bit(weekday: int) -> int:
    return 1 << (DAYS_PER_WEEK - 1 - weekday)


def is_active(week_map: int, weekday: int) -> bool:
    return bool(week_map & weekday_bit(weekday))


def active_weekdays(week_map: int) -> list[int]:
    return [day for day in range(DAYS_PER_WEEK) if is_active(week_map, day)]


def week_map_from_weekdays(weekdays: Iterable[int]) -> int:
    """Build a weekly bitmap from 0-indexed weekdays (Monday is 0)."""
    week_map = 0
    for day in weekdays:
        if not 0 <= day < DAYS_PER_WEEK:
            raise ValueError(f"Invalid weekday: {day}")
        week_map |= weekday_bit(day)
    return week_map


def validate_rule(
    rule: RecurrenceRule, anchor: TimeRange | None = None
) -> RecurrenceRule:
    """Reject rules which cannot be expanded.

    Parameters
    ----------
    rule
        The rule to check.
    anchor
        The first occurrence of the series. When given, it must not end before
        it starts and an `Until` termination must not precede its end.

    Raises
    ------
    InvalidRuleError
        If the interval or count is 0, the weekly bitmap is empty or the rule
        is inconsistent with `anchor`.
    """
    if rule.interval < 1:
        raise InvalidRuleError("Recurrence interval must be at least 1")
    if isinstance(rule.kind, Weekly) and rule.kind.week_map == 0:
        raise InvalidRuleError("Weekly recurrence must be active on at least one day")
    match rule.termination:
        case Count(count=count) if count < 1:
            raise InvalidRuleError("Recurrence count must be at least 1")
    if anchor is None:
        return rule
    if anchor.end < anchor.start:
        raise InvalidRuleError(
            f"Event ends ({anchor.end}) before it starts ({anchor.start})"
        )
    match rule.termination:
        case Until(until=until) if until < anchor.end:
            raise InvalidRuleError("Recurrence ends sooner than the event ends")
    return rule
