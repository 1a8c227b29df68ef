#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
import datetime

PACKAGE_NAME = "cadence"
ENDPOINT_CONFIGS = f"pkg://{PACKAGE_NAME}.configs.endpoints"
DAYS_PER_WEEK = 7
MONTHS_PER_YEAR = 12
WEEK_MAP_MAX = (1 << DAYS_PER_WEEK) - 1
"""Largest valid weekly bitmap: every weekday active."""
RESOLUTION = datetime.timedelta(microseconds=1)
"""Smallest step between two distinct instants."""
LAST_REGULAR_MONTH_DAY = 28
"""Days up to this one exist in every month."""
LAST_REGULAR_ISO_WEEK = 52
"""ISO weeks up to this one exist in every ISO year."""
