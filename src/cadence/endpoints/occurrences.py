#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
"""Print the occurrences of the events described in the endpoint configuration,
for example

    cadence-occurrences 'window=["2023-03-01T00:00","2023-04-01T00:00"]'
"""

import logging

import hydra
from omegaconf import DictConfig, OmegaConf

from cadence.config import engine_config, parse_time_range
from cadence.constants import ENDPOINT_CONFIGS
from cadence.display import display_entries
from cadence.engine.events import Events, EventSeries, expand_events
from cadence.engine.overrides import Override

logger = logging.getLogger(__name__)


def run(cfg: DictConfig) -> Events:
    config = engine_config(cfg.engine)
    window = parse_time_range(OmegaConf.to_container(cfg.window, resolve=True))
    series = [
        EventSeries.model_validate(s)
        for s in OmegaConf.to_container(cfg.series, resolve=True)
    ]
    overrides = []
    if (stored := cfg.get("overrides")) is not None:
        overrides = [
            Override.model_validate(o)
            for o in OmegaConf.to_container(stored, resolve=True)
        ]
    logger.info(f"Expanding {len(series)} events over {window.start} - {window.end}")
    return expand_events(series, overrides, window, config=config)


@hydra.main(config_name="occurrences", config_path=ENDPOINT_CONFIGS, version_base=None)
def main(cfg: DictConfig):
    events = run(cfg)
    display_entries(events, show_cancelled=cfg.engine.show_cancelled)


if __name__ == "__main__":
    main()
