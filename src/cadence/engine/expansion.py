#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
import logging

from cadence.engine.count_until import terminal_instant
from cadence.engine.occurrences import iter_starts
from cadence.engine.rules import RecurrenceRule, validate_rule
from cadence.engine.time_utils import TimeRange, add_delta

logger = logging.getLogger(__name__)


def expand(
    anchor: TimeRange, rule: RecurrenceRule, window: TimeRange
) -> list[TimeRange]:
    """Find the occurrences of a recurring event which belong to a query window.

    Parameters
    ----------
    anchor
        The first occurrence of the series. Every occurrence lasts as long
        as the anchor.
    rule
        The series' recurrence rule.
    window
        The query window. An occurrence belongs to it when it ends within the
        window (`window.start <= end < window.end`), so an occurrence ending
        exactly at `window.end` is excluded and one starting exactly at
        `window.start` is included. An occurrence which starts inside the window
        but ends after `window.end` is left out rather than treated as
        overlapping.

    Returns
    -------
    The occurrences in ascending order of start. Occurrences past the rule's
    termination are never returned.

    Raises
    ------
    InvalidRuleError
        If the rule is invalid or inconsistent with the anchor.
    InvalidTimeRangeError
        If the window ends before it starts.
    """
    validate_rule(rule, anchor)
    window.validate()
    duration = anchor.duration
    terminal = terminal_instant(rule, anchor)
    if terminal is not None and terminal < window.start:
        logger.debug(f"Series ended at {terminal}, before window {window}")
        return []
    # occurrences starting before this instant end before the window starts
    earliest_start = add_delta(window.start, -duration)
    occurrences = []
    for start in iter_starts(rule, anchor.start, after=earliest_start):
        occurrence = TimeRange.from_start(start, duration)
        if occurrence.end >= window.end:
            break
        if terminal is not None and occurrence.end > terminal:
            break
        if occurrence.ends_within(window):
            occurrences.append(occurrence)
    logger.debug(f"Expanded {len(occurrences)} occurrences in window {window}")
    return occurrences
