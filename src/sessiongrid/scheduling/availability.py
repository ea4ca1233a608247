#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
"""Trainer availability and blackout periods.

Weekly availability is described by `TimeSlot` windows. Blackout periods are
declared as `BlockedDayRule`s which are expanded into concrete, date-anchored
`EffectiveBlock`s before they are checked against booked sessions."""

import datetime
from collections import defaultdict
from typing import Self

from dateutil import rrule
from pydantic import BaseModel, Field, model_validator

from sessiongrid.scheduling.exceptions import FormatError
from sessiongrid.scheduling.time_utils import (
    ClockTime,
    TimeInterval,
    combine,
    overlaps,
    to_minutes,
)

DAY_NAMES = [
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
]

DEFAULT_BLOCK_START = "00:00"
DEFAULT_BLOCK_END = "23:59"

# rrule weekdays start on Monday, ours start on Sunday
_RRULE_WEEKDAYS = [
    rrule.SU,
    rrule.MO,
    rrule.TU,
    rrule.WE,
    rrule.TH,
    rrule.FR,
    rrule.SA,
]


def day_name(day_of_week: int) -> str:
    if day_of_week not in range(7):
        return "Unknown"
    return DAY_NAMES[day_of_week]


def validate_time_range(start_time: ClockTime, end_time: ClockTime) -> None:
    """Check that `start_time` and `end_time` describe a non-empty window.

    Raises
    ------
    FormatError
        If either time is missing or malformed, or the window is empty.
    """
    if not start_time or not end_time:
        raise FormatError("Both start and end times are required")
    if to_minutes(start_time) >= to_minutes(end_time):
        raise FormatError("End time must be after start time")


class TimeSlot(BaseModel, frozen=True):
    """A recurring weekly window during which a trainer is available.

    Parameters
    ----------
    day_of_week
        0 is Sunday, 6 is Saturday.
    start_time, end_time
        Clock times formatted as "HH:MM".
    """

    day_of_week: int = Field(ge=0, le=6)
    start_time: ClockTime
    end_time: ClockTime

    @model_validator(mode="after")
    def _check_window(self) -> Self:
        validate_time_range(self.start_time, self.end_time)
        return self

    def overlaps(self, other: Self) -> bool:
        if self.day_of_week != other.day_of_week:
            return False
        return overlaps(
            to_minutes(self.start_time),
            to_minutes(self.end_time),
            to_minutes(other.start_time),
            to_minutes(other.end_time),
        )


def slot_overlaps_existing(new_slot: TimeSlot, existing_slots: list[TimeSlot]) -> bool:
    return any(new_slot.overlaps(slot) for slot in existing_slots)


def sort_time_slots(slots: list[TimeSlot]) -> list[TimeSlot]:
    return sorted(slots, key=lambda s: (s.day_of_week, to_minutes(s.start_time)))


def group_slots_by_day(slots: list[TimeSlot]) -> dict[int, list[TimeSlot]]:
    groups = defaultdict(list)
    for slot in slots:
        groups[slot.day_of_week].append(slot)
    return dict(groups)


def availability_summary(slots: list[TimeSlot]) -> str:
    """A short human-readable description of weekly availability."""
    if not slots:
        return "No availability set"
    grouped = group_slots_by_day(slots)
    if len(grouped) == 7:
        return "Available daily"
    if len(grouped) == 1:
        return f"Available {day_name(next(iter(grouped)))}"
    return f"Available {len(grouped)} days/week"


class EffectiveBlock(BaseModel, frozen=True):
    """A concrete interval during which no session may run."""

    start: datetime.datetime
    end: datetime.datetime

    @model_validator(mode="after")
    def _check_order(self) -> Self:
        if self.start >= self.end:
            raise FormatError(
                f"Block must end after it starts, got {self.start} - {self.end}"
            )
        return self

    @property
    def interval(self) -> TimeInterval:
        return TimeInterval(start=self.start, end=self.end)


class MonthlyRecurrence(BaseModel):
    """Repeat a block on the `nth` `weekday` of every month.

    Parameters
    ----------
    nth
        1 for the first occurrence of `weekday` in the month, 2 for the second etc.
    weekday
        0 is Sunday, 6 is Saturday.
    exclude_months
        Months (1-12) in which the block does not apply.
    """

    nth: int = Field(ge=1, le=5)
    weekday: int = Field(ge=0, le=6)
    exclude_months: list[int] = Field(default_factory=list)


class BlockedDayRule(BaseModel):
    """A declared blackout period.

    Raises `FormatError` on construction if its times are malformed or
    describe an empty window, or if it ends before it starts.

    Parameters
    ----------
    start_date, end_date
        Inclusive range of days covered by the rule. If `end_date` is not set,
        only `start_date` is blocked, unless the rule recurs.
    start_time, end_time
        Portion of each day that is blocked. The whole day is blocked when
        these are not set.
    recurrence
        If set, the rule only applies on the days it generates.
    """

    rule_id: str | None = None
    start_date: datetime.date
    end_date: datetime.date | None = None
    start_time: ClockTime | None = None
    end_time: ClockTime | None = None
    reason: str | None = None
    recurrence: MonthlyRecurrence | None = None

    @model_validator(mode="after")
    def _check_times(self) -> Self:
        validate_time_range(
            self.start_time or DEFAULT_BLOCK_START,
            self.end_time or DEFAULT_BLOCK_END,
        )
        if self.end_date is not None and self.end_date < self.start_date:
            raise FormatError("End date must not be before start date")
        return self

    def _block_on(self, day: datetime.date) -> EffectiveBlock:
        return EffectiveBlock(
            start=combine(day, self.start_time or DEFAULT_BLOCK_START),
            end=combine(day, self.end_time or DEFAULT_BLOCK_END),
        )


def _recurring_days(
    recurrence: MonthlyRecurrence, date_from: datetime.date, date_to: datetime.date
) -> list[datetime.date]:
    weekday = _RRULE_WEEKDAYS[recurrence.weekday](recurrence.nth)
    # start at the first of the month so that an nth weekday falling before
    # `date_from` in the same month is not mistaken for the next one
    dtstart = datetime.datetime(date_from.year, date_from.month, 1)
    until = datetime.datetime.combine(date_to, datetime.time.max)
    days = []
    for occurrence in rrule.rrule(
        rrule.MONTHLY, byweekday=weekday, dtstart=dtstart, until=until
    ):
        day = occurrence.date()
        if day.month in recurrence.exclude_months:
            continue
        if date_from <= day <= date_to:
            days.append(day)
    return days


def expand_rule(
    rule: BlockedDayRule, date_from: datetime.date, date_to: datetime.date
) -> list[EffectiveBlock]:
    """Expand `rule` into the effective blocks falling between `date_from`
    and `date_to` (both inclusive)."""
    first = max(rule.start_date, date_from)
    if rule.recurrence is not None:
        # recurring rules without an end date never expire
        last = min(rule.end_date or date_to, date_to)
        if first > last:
            return []
        return [
            rule._block_on(day)
            for day in _recurring_days(rule.recurrence, first, last)
        ]
    last = min(rule.end_date or rule.start_date, date_to)
    blocks = []
    day = first
    while day <= last:
        blocks.append(rule._block_on(day))
        day += datetime.timedelta(days=1)
    return blocks
