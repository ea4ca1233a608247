#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
import datetime

from sessiongrid.scheduling.availability import EffectiveBlock
from sessiongrid.scheduling.exceptions import FormatError
from sessiongrid.scheduling.time_utils import (
    ClockTime,
    TimeInterval,
    duration_minutes,
    to_minutes,
)

TIME_INCREMENT_MINUTES = 15
MIN_SESSION_MINUTES = 30
MAX_SESSION_MINUTES = 120


def is_valid_time_increment(
    time: ClockTime, increment_minutes: int = TIME_INCREMENT_MINUTES
) -> bool:
    try:
        minutes = to_minutes(time)
    except FormatError:
        return False
    return minutes % increment_minutes == 0


def validate_time_slot(start_time: ClockTime, end_time: ClockTime) -> None:
    """Check that a session may be booked between `start_time` and `end_time`.

    Raises
    ------
    FormatError
        With a message suitable for display if the slot is not bookable.
    """
    if not start_time or not end_time:
        raise FormatError("Both start and end times are required")
    if not is_valid_time_increment(start_time) or not is_valid_time_increment(
        end_time
    ):
        raise FormatError(
            f"Times must be in {TIME_INCREMENT_MINUTES}-minute increments"
        )
    duration = duration_minutes(start_time, end_time)
    if duration <= 0:
        raise FormatError("End time must be after start time")
    if duration < MIN_SESSION_MINUTES:
        raise FormatError(f"Duration must be at least {MIN_SESSION_MINUTES} minutes")
    if duration > MAX_SESSION_MINUTES:
        raise FormatError("Duration must be no more than 2 hours")


def is_timeslot_blocked(
    date: datetime.date,
    start_time: ClockTime,
    end_time: ClockTime,
    blocks: list[EffectiveBlock],
) -> bool:
    """Whether any of `blocks` intersects the slot on `date`."""
    slot = TimeInterval.on(date, start_time, end_time)
    return any(slot.overlaps(block.interval) for block in blocks)
