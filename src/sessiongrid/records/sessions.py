#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
"""Booked tutoring sessions and the storage operations on them."""

import datetime
import logging
from collections import Counter
from copy import deepcopy
from enum import StrEnum
from typing import Any, Self, Sequence

import polars as pl
from polars.exceptions import NoDataError
from pydantic import BaseModel, ConfigDict, Field, field_validator

from sessiongrid.scheduling.exceptions import NotFoundError
from sessiongrid.scheduling.time_utils import ClockTime, TimeInterval
from sessiongrid.storage.context import get_current_context
from sessiongrid.storage.database_schemas import DatabaseNamespace
from sessiongrid.storage.utils import (
    NOT_GIVEN,
    exact_match_filter_dataframe,
    filter_dataframe,
    gt_eq_filter_dataframe,
    is_sequence_member_filter_dataframe,
    lt_eq_filter_dataframe,
)

SessionId = str

logger = logging.getLogger(__name__)


class SessionStatus(StrEnum):
    Scheduled = "scheduled"
    Completed = "completed"
    Cancelled = "cancelled"
    NoShow = "no-show"


class SessionProgress(BaseModel):
    """Outcome notes recorded by the trainer once a session has run."""

    completed: bool = False
    score: int | None = None
    observations: str = ""
    recommendations: str = ""


class Session(BaseModel):
    """A booked session between a trainer and a student.

    Parameters
    ----------
    session_type
        The kind of session (eg "training-tabletop", "gt"). Seats are allocated
        per kind.
    date
        The calendar day of the session. Datetimes are truncated to their date.
    start_time, end_time
        Clock times on `date`, formatted as "HH:MM". Sessions never span midnight.
    assigned_seat
        1-indexed seat (lane) within the session kind.
    session_id
        Assigned by the store when the session is created.
    """

    model_config = ConfigDict(use_enum_values=True)

    session_type: str
    student_id: str
    trainer_id: str
    date: datetime.date
    start_time: ClockTime
    end_time: ClockTime
    status: SessionStatus = Field(
        default=SessionStatus.Scheduled, validate_default=True
    )
    assigned_seat: int | None = Field(default=None, ge=1)
    notes: str | None = None
    progress: SessionProgress | None = None
    session_id: SessionId | None = None
    created_at: datetime.datetime | None = None
    updated_at: datetime.datetime | None = None

    @field_validator("date", mode="before")
    @classmethod
    def _truncate_to_date(cls, value: Any) -> Any:
        if isinstance(value, datetime.datetime):
            return value.date()
        return value

    @property
    def interval(self) -> TimeInterval:
        """The concrete interval the session occupies.

        Raises
        ------
        FormatError
            If `start_time` or `end_time` are malformed.
        """
        return TimeInterval.on(self.date, self.start_time, self.end_time)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        data = deepcopy(data)
        progress = data.get("progress")
        if progress is not None and all(val is None for val in progress.values()):
            data["progress"] = None
        return cls(**data)


def _sessions_db() -> pl.DataFrame:
    return get_current_context().get_database(namespace=DatabaseNamespace.SESSIONS)


def _status_value(status: SessionStatus | str) -> str:
    if status is NOT_GIVEN:
        return status
    return SessionStatus(status).value


def list_sessions(
    date: datetime.date = NOT_GIVEN,
    session_type: str = NOT_GIVEN,
    status: SessionStatus = NOT_GIVEN,
    trainer_id: str = NOT_GIVEN,
    student_id: str = NOT_GIVEN,
    date_from: datetime.date = NOT_GIVEN,
    date_to: datetime.date = NOT_GIVEN,
    session_types: Sequence[str] = NOT_GIVEN,
) -> list[Session]:
    """Return stored sessions ordered by date and start time.

    Parameters
    ----------
    date
        Only return sessions on this day.
    date_from, date_to
        Only return sessions dated within this inclusive range.
    session_types
        Only return sessions of one of these kinds.
    """
    sessions_db = filter_dataframe(
        _sessions_db(),
        filter_criteria=[
            ("date", date, exact_match_filter_dataframe),
            ("session_type", session_type, exact_match_filter_dataframe),
            ("status", _status_value(status), exact_match_filter_dataframe),
            ("trainer_id", trainer_id, exact_match_filter_dataframe),
            ("student_id", student_id, exact_match_filter_dataframe),
            ("date", date_from, gt_eq_filter_dataframe),
            ("date", date_to, lt_eq_filter_dataframe),
            ("session_type", session_types, is_sequence_member_filter_dataframe),
        ],
    )
    sessions_db = sessions_db.sort(["date", "start_time"])
    return [Session.from_dict(record) for record in sessions_db.to_dicts()]


def get_session(session_id: SessionId) -> Session:
    """Retrieve the session with `session_id`.

    Raises
    ------
    NotFoundError if no session has this id.
    """
    records = filter_dataframe(
        _sessions_db(),
        filter_criteria=[("session_id", session_id, exact_match_filter_dataframe)],
    ).to_dicts()
    if not records:
        raise NotFoundError(f"No session with id {session_id} was found.")
    return Session.from_dict(records[0])


def create_session(data: Session | dict[str, Any]) -> Session:
    """Store a new session. Its id and timestamps are assigned here, and
    any `session_id` already set on `data` is replaced."""
    context = get_current_context()
    if isinstance(data, dict):
        data = Session(**data)
    now = context.now()
    session = data.model_copy(
        update={"session_id": context.new_id(), "created_at": now, "updated_at": now}
    )
    context.add_to_database(
        namespace=DatabaseNamespace.SESSIONS,
        rows=[session.model_dump()],
    )
    logger.debug(f"Created session {session.session_id} ({session.session_type})")
    return session


def update_session(session_id: SessionId, **changes: Any) -> Session:
    """Update fields of an existing session.

    Raises
    ------
    NotFoundError if no session has this id.
    """
    context = get_current_context()
    # validate the changes against the model before writing them
    current = get_session(session_id)
    updated = Session(**{**current.model_dump(), **changes})
    values = {
        k: v
        for k, v in updated.model_dump().items()
        if k in changes and k not in ("session_id", "created_at")
    }
    values["updated_at"] = context.now()
    try:
        context.update_database(
            namespace=DatabaseNamespace.SESSIONS,
            predicate=pl.col("session_id") == session_id,
            values=values,
        )
    except NoDataError:
        raise NotFoundError(f"No session with id {session_id} was found.")
    return get_session(session_id)


def update_session_status(session_id: SessionId, status: SessionStatus) -> Session:
    return update_session(session_id, status=status)


def delete_session(session_id: SessionId) -> None:
    try:
        get_current_context().remove_from_database(
            namespace=DatabaseNamespace.SESSIONS,
            predicate=pl.col("session_id") == session_id,
        )
    except NoDataError:
        raise NotFoundError(f"No session with id {session_id} was found.")


def count_sessions_by_kind(date: datetime.date) -> dict[str, int]:
    """Number of sessions of each kind on `date` that still take up a seat."""
    counts = Counter(
        s.session_type
        for s in list_sessions(date=date)
        if s.status != SessionStatus.Cancelled
    )
    return dict(counts)
