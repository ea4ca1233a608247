#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
"""Wall-clock helpers for same-day scheduling. Clock times are "HH:MM"
strings and are compared as minutes since midnight. Nothing in this module
knows about dates except `combine`, so callers must make sure both
intervals fall on the same day before testing them for overlap."""

import datetime
from typing import Any, NamedTuple, Self

from sessiongrid.scheduling.exceptions import FormatError

MINUTES_PER_DAY = 24 * 60

ClockTime = str
"""A wall-clock time formatted as "HH:MM"."""


def to_minutes(time: ClockTime) -> int:
    """Parse an "HH:MM" string into minutes since midnight.

    Raises
    ------
    FormatError
        If either component is not numeric or is out of range.
    """
    try:
        hours_str, minutes_str = time.split(":")
    except (AttributeError, ValueError):
        raise FormatError(f"Expected a time formatted as HH:MM, got {time!r}")
    if not (hours_str.isdigit() and minutes_str.isdigit()):
        raise FormatError(f"Non-numeric time component in {time!r}")
    hours, minutes = int(hours_str), int(minutes_str)
    if not 0 <= hours <= 23:
        raise FormatError(f"Hours out of range in {time!r}")
    if not 0 <= minutes <= 59:
        raise FormatError(f"Minutes out of range in {time!r}")
    return hours * 60 + minutes


def from_minutes(minutes: int) -> ClockTime:
    """Format minutes since midnight as an "HH:MM" string."""
    if not 0 <= minutes < MINUTES_PER_DAY:
        raise FormatError(f"{minutes} minutes does not fall within a single day")
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def overlaps(a_start: Any, a_end: Any, b_start: Any, b_end: Any) -> bool:
    """Whether the half-open intervals [a_start, a_end) and [b_start, b_end)
    intersect. Intervals that only touch at an endpoint do not overlap."""
    return a_start < b_end and b_start < a_end


def duration_minutes(start_time: ClockTime, end_time: ClockTime) -> int:
    return to_minutes(end_time) - to_minutes(start_time)


def to_time(time: ClockTime) -> datetime.time:
    minutes = to_minutes(time)
    return datetime.time(hour=minutes // 60, minute=minutes % 60)


def combine(date: datetime.date, time: ClockTime) -> datetime.datetime:
    """Anchor a clock time to a calendar date."""
    return datetime.datetime.combine(date, to_time(time))


def format_time(time: ClockTime) -> str:
    """Render "HH:MM" on a 12 hour clock, eg "13:05" -> "1:05 PM"."""
    minutes = to_minutes(time)
    hours, minutes = divmod(minutes, 60)
    period = "PM" if hours >= 12 else "AM"
    display_hours = 12 if hours % 12 == 0 else hours % 12
    return f"{display_hours}:{minutes:02d} {period}"


class TimeInterval(NamedTuple):
    """Represents the half-open time interval between two specific time points."""

    start: datetime.datetime
    end: datetime.datetime

    def contains(self, dt: datetime.datetime) -> bool:
        """Check if a given datetime falls within this time interval."""
        return self.start <= dt < self.end

    def overlaps(self, other: Self) -> bool:
        return overlaps(self.start, self.end, other.start, other.end)

    @classmethod
    def on(cls, date: datetime.date, start_time: ClockTime, end_time: ClockTime):
        """The interval between two clock times on `date`."""
        return cls(start=combine(date, start_time), end=combine(date, end_time))
