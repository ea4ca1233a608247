#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
import datetime

from sessiongrid.records.sessions import Session, SessionStatus
from sessiongrid.scheduling.time_utils import ClockTime, overlaps, to_minutes


def available_seats(
    session_type: str,
    date: datetime.date,
    start_time: ClockTime,
    end_time: ClockTime,
    sessions: list[Session],
    seats_per_type: dict[str, int],
    exclude_session_id: str | None = None,
) -> list[int]:
    """Seats of `session_type` that are free between `start_time` and
    `end_time` on `date`.

    Parameters
    ----------
    sessions
        Existing sessions. Only sessions of the same type on the same date
        hold seats; cancelled sessions release theirs.
    seats_per_type
        Number of seats (lanes) available for each session type.
    exclude_session_id
        A session to disregard, eg the one being moved.

    Returns
    -------
    The free 1-indexed seat numbers in increasing order.
    """
    start, end = to_minutes(start_time), to_minutes(end_time)
    occupied = set()
    for session in sessions:
        if exclude_session_id is not None and session.session_id == exclude_session_id:
            continue
        if session.session_type != session_type or session.date != date:
            continue
        if session.status == SessionStatus.Cancelled or session.assigned_seat is None:
            continue
        if overlaps(
            start, end, to_minutes(session.start_time), to_minutes(session.end_time)
        ):
            occupied.add(session.assigned_seat)
    max_seats = seats_per_type.get(session_type, 0)
    return [seat for seat in range(1, max_seats + 1) if seat not in occupied]


def first_available_seat(
    session_type: str,
    date: datetime.date,
    start_time: ClockTime,
    end_time: ClockTime,
    sessions: list[Session],
    seats_per_type: dict[str, int],
    exclude_session_id: str | None = None,
) -> int | None:
    """The lowest free seat, or `None` if every seat is taken."""
    seats = available_seats(
        session_type,
        date,
        start_time,
        end_time,
        sessions,
        seats_per_type,
        exclude_session_id=exclude_session_id,
    )
    return seats[0] if seats else None
