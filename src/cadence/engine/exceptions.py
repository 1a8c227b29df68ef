#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
class InvalidRuleError(Exception):
    pass


class InvalidTimeRangeError(Exception):
    pass


class CalendarOverflowError(Exception):
    """Raised when calendar arithmetic leaves the representable date range."""

    pass
