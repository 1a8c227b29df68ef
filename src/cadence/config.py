#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
import datetime
from dataclasses import dataclass

from omegaconf import DictConfig, OmegaConf
from pydantic import TypeAdapter

from cadence.engine.time_utils import TimeRange


@dataclass
class EngineConfig:
    """Settings of a multi-event query.

    Parameters
    ----------
    include_edge_entries
        Include occurrences just outside the query window which an override
        moved into it.
    show_cancelled
        Display entries whose occurrence was cancelled.
    """

    include_edge_entries: bool = True
    show_cancelled: bool = False


def engine_config(cfg: DictConfig) -> EngineConfig:
    """Validate the `engine` node of an endpoint configuration."""
    return OmegaConf.to_object(OmegaConf.merge(OmegaConf.structured(EngineConfig), cfg))


_time_range_adapter = TypeAdapter(TimeRange)


def parse_time_range(value: list[str | datetime.datetime]) -> TimeRange:
    """Parse a `[start, end]` pair of ISO 8601 strings or datetimes."""
    return _time_range_adapter.validate_python(value).validate()
