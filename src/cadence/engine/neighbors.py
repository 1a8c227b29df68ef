#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
"""Locate the occurrences of a series surrounding an arbitrary instant."""

import datetime

from cadence.engine.count_until import occurrence_at, terminal_count, until_to_count
from cadence.engine.rules import RecurrenceRule, validate_rule
from cadence.engine.time_utils import TimeRange, add_delta


def previous_occurrence(
    instant: datetime.datetime, rule: RecurrenceRule, anchor: TimeRange
) -> TimeRange | None:
    """The latest occurrence which started at or before `instant`, including one
    still in progress at `instant`.

    Returns
    -------
    `None` if `instant` precedes the anchor. Past the end of the series, the
    last occurrence is returned.
    """
    validate_rule(rule, anchor)
    if instant < anchor.start:
        return None
    count = until_to_count(add_delta(instant, anchor.duration), rule, anchor)
    last = terminal_count(rule, anchor)
    if last is not None:
        count = min(count, last)
    return occurrence_at(count, rule, anchor)


def next_occurrence(
    instant: datetime.datetime, rule: RecurrenceRule, anchor: TimeRange
) -> TimeRange | None:
    """The earliest occurrence which has not finished by `instant`, so an
    occurrence in progress at `instant` is returned.

    Returns
    -------
    `None` once the last occurrence of the series has finished.
    """
    validate_rule(rule, anchor)
    if instant < anchor.end:
        return anchor
    count = until_to_count(instant, rule, anchor) + 1
    last = terminal_count(rule, anchor)
    if last is not None and count > last:
        return None
    return occurrence_at(count, rule, anchor)
