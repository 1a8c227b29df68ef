#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
"""Apply per-occurrence exceptions ("overrides") to expanded occurrences."""

import datetime
import logging
import uuid
from collections import defaultdict, deque
from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel, ConfigDict

from cadence.engine.time_utils import TimeRange

logger = logging.getLogger(__name__)

EventId = uuid.UUID | int | str


class Override(BaseModel):
    """A stored exception to one occurrence of a recurring event.

    Parameters
    ----------
    event_id
        The recurring event the override belongs to.
    original_window
        Where the occurrence would have been without the override.
    replacement_window
        Where the occurrence has been moved to. Not set if the occurrence only
        has its payload changed or is cancelled.
    payload_patch
        Fields of the event (eg title, description) which differ for this
        occurrence.
    deleted_at
        Set when the occurrence is cancelled (soft delete).
    created_at
        When the override was stored. The latest override wins if several
        apply to the same occurrence.
    """

    model_config = ConfigDict(frozen=True)

    event_id: EventId
    original_window: TimeRange
    replacement_window: TimeRange | None = None
    payload_patch: dict[str, Any] | None = None
    deleted_at: datetime.datetime | None = None
    created_at: datetime.datetime


class Entry(BaseModel):
    """An occurrence after overrides were applied, as returned to consumers."""

    event_id: EventId
    starts_at: datetime.datetime
    ends_at: datetime.datetime
    recurrence_override: Override | None = None

    @property
    def window(self) -> TimeRange:
        return TimeRange(self.starts_at, self.ends_at)

    @property
    def is_overridden(self) -> bool:
        return self.recurrence_override is not None

    @property
    def is_moved(self) -> bool:
        return (
            self.recurrence_override is not None
            and self.recurrence_override.replacement_window is not None
        )

    @property
    def is_cancelled(self) -> bool:
        return (
            self.recurrence_override is not None
            and self.recurrence_override.deleted_at is not None
        )

    @property
    def payload(self) -> dict[str, Any]:
        if self.recurrence_override is None:
            return {}
        return self.recurrence_override.payload_patch or {}


def _override_order(override: Override) -> tuple[datetime.datetime, datetime.datetime]:
    return override.original_window.start, override.created_at


def group_overrides(overrides: Iterable[Override]) -> dict[EventId, list[Override]]:
    """Group overrides by event, each group ordered by original start (ties broken by
    creation time)."""
    grouped = defaultdict(list)
    for override in overrides:
        grouped[override.event_id].append(override)
    return {
        event_id: sorted(group, key=_override_order)
        for event_id, group in grouped.items()
    }


def merge_overrides(
    event_id: EventId,
    occurrences: Iterable[TimeRange],
    overrides: Iterable[Override],
) -> list[Entry]:
    """Apply `overrides` to the occurrences of one event.

    Parameters
    ----------
    event_id
        The event the occurrences belong to.
    occurrences
        Occurrences of the event, in ascending order of start.
    overrides
        The event's overrides, in any order. An override applies to the
        occurrence whose window contains its original window.

    Returns
    -------
    One entry per occurrence, in the order of `occurrences`. Overridden
    occurrences take the replacement window (if any) and carry the applied
    override, including cancelled ones.
    """
    pending = deque(sorted(overrides, key=_override_order))
    entries = []
    for occurrence in occurrences:
        while pending and pending[0].original_window.start < occurrence.start:
            stale = pending.popleft()
            logger.debug(
                f"Override of {stale.event_id} at {stale.original_window.start} "
                f"matches no occurrence, skipping it"
            )
        matched, unmatched = [], []
        while pending and pending[0].original_window.start <= occurrence.end:
            candidate = pending.popleft()
            if occurrence.includes(candidate.original_window):
                matched.append(candidate)
            else:
                unmatched.append(candidate)
        # may still match a later, overlapping occurrence
        pending.extendleft(reversed(unmatched))
        if not matched:
            entries.append(
                Entry(
                    event_id=event_id,
                    starts_at=occurrence.start,
                    ends_at=occurrence.end,
                )
            )
            continue
        if len(matched) > 1:
            logger.warning(
                f"{len(matched)} overrides apply to the occurrence of {event_id} "
                f"at {occurrence.start}, keeping the latest"
            )
        override = max(matched, key=lambda o: o.created_at)
        window = override.replacement_window or occurrence
        entries.append(
            Entry(
                event_id=event_id,
                starts_at=window.start,
                ends_at=window.end,
                recurrence_override=override,
            )
        )
    return entries
