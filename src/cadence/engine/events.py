#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
"""Expand several events over one query window and aggregate their entries."""

import datetime
import logging
from collections.abc import Iterable
from typing import Any, Self

from pydantic import BaseModel, Field

from cadence.config import EngineConfig
from cadence.constants import RESOLUTION
from cadence.engine.count_until import terminal_instant
from cadence.engine.expansion import expand
from cadence.engine.neighbors import next_occurrence, previous_occurrence
from cadence.engine.overrides import (
    Entry,
    EventId,
    Override,
    group_overrides,
    merge_overrides,
)
from cadence.engine.rules import RecurrenceRule, validate_rule
from cadence.engine.time_utils import TimeRange, add_delta

logger = logging.getLogger(__name__)


class EventSeries(BaseModel):
    """One event as stored, the input to a multi-event query.

    Parameters
    ----------
    event_id
        The unique ID of the event.
    anchor
        The first occurrence of the event.
    rule
        How the event repeats. Not set for one-off events.
    metadata
        Static event data (eg title, description) passed through to
        the summary unchanged.
    """

    event_id: EventId
    anchor: TimeRange
    rule: RecurrenceRule | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def is_recurring(self) -> bool:
        return self.rule is not None


class EventSummary(BaseModel):
    """Static data of an event returned alongside its entries.

    Parameters
    ----------
    entries_start
        Start of the first occurrence of the event.
    entries_end
        Latest instant an occurrence may end at, `None` for series which
        never end.
    """

    metadata: dict[str, Any] = Field(default_factory=dict)
    rule: RecurrenceRule | None = None
    entries_start: datetime.datetime
    entries_end: datetime.datetime | None = None

    @classmethod
    def from_series(cls, series: EventSeries) -> Self:
        if series.rule is None:
            entries_end = series.anchor.end
        else:
            entries_end = terminal_instant(series.rule, series.anchor)
        return cls(
            metadata=series.metadata,
            rule=series.rule,
            entries_start=series.anchor.start,
            entries_end=entries_end,
        )


class Events(BaseModel):
    """Query result: event summaries keyed by event ID and their entries ordered
    by start."""

    events: dict[EventId, EventSummary] = Field(default_factory=dict)
    entries: list[Entry] = Field(default_factory=list)

    def merge(self, other: Self) -> Self:
        """Union of two results. Entries stay ordered by start, ties keep their
        original order."""
        return type(self)(
            events={**self.events, **other.events},
            entries=sorted(
                [*self.entries, *other.entries], key=lambda entry: entry.starts_at
            ),
        )


def _edge_entries(
    series: EventSeries, overrides: list[Override], window: TimeRange
) -> list[Entry]:
    """Occurrences right before and right after `window` which an override moved
    into it."""
    rule, anchor = series.rule, series.anchor
    before_window = add_delta(window.start, -anchor.duration - RESOLUTION)
    edges = [
        previous_occurrence(before_window, rule, anchor),
        next_occurrence(add_delta(window.end, -RESOLUTION), rule, anchor),
    ]
    entries = []
    for edge in edges:
        if edge is None:
            continue
        (entry,) = merge_overrides(series.event_id, [edge], overrides)
        if entry.is_moved and entry.window.ends_within(window):
            entries.append(entry)
    return entries


def expand_series(
    series: EventSeries,
    overrides: Iterable[Override],
    window: TimeRange,
    include_edges: bool = True,
) -> list[Entry]:
    """Entries of a single event within `window`, with its overrides applied.

    Parameters
    ----------
    series
        The event to expand.
    overrides
        The event's overrides.
    window
        The query window, see `expand` for membership rules.
    include_edges
        If `True`, the occurrences immediately before and after the window
        are included when an override moves them into it.
    """
    overrides = list(overrides)
    if series.rule is None:
        window.validate()
        series.anchor.validate()
        occurrences = [series.anchor] if series.anchor.ends_within(window) else []
        return merge_overrides(series.event_id, occurrences, overrides)
    validate_rule(series.rule, series.anchor)
    occurrences = expand(series.anchor, series.rule, window)
    entries = merge_overrides(series.event_id, occurrences, overrides)
    if include_edges and overrides:
        entries.extend(_edge_entries(series, overrides, window))
    return sorted(entries, key=lambda entry: entry.starts_at)


def expand_events(
    series: Iterable[EventSeries],
    overrides: Iterable[Override],
    window: TimeRange,
    config: EngineConfig | None = None,
) -> Events:
    """Expand every event in `series` over `window` and aggregate the results.

    Parameters
    ----------
    series
        The events to expand. Each is expanded independently.
    overrides
        Overrides of any of the events, matched to them by event ID.
    window
        The query window.
    config
        Engine settings, defaults are used when not specified.
    """
    config = config or EngineConfig()
    overrides_by_event = group_overrides(overrides)
    summaries, entries = {}, []
    for event in series:
        event_entries = expand_series(
            event,
            overrides_by_event.get(event.event_id, []),
            window,
            include_edges=config.include_edge_entries,
        )
        logger.debug(
            f"Event {event.event_id} has {len(event_entries)} entries in {window}"
        )
        summaries[event.event_id] = EventSummary.from_series(event)
        entries.extend(event_entries)
    return Events(
        events=summaries, entries=sorted(entries, key=lambda entry: entry.starts_at)
    )
