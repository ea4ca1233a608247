#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
"""Cancel booked sessions that clash with a newly declared blackout period."""

import logging
from typing import Protocol, runtime_checkable

from sessiongrid.records.sessions import (
    Session,
    SessionId,
    SessionStatus,
    update_session_status,
)
from sessiongrid.scheduling.availability import EffectiveBlock
from sessiongrid.scheduling.time_utils import TimeInterval

logger = logging.getLogger(__name__)


@runtime_checkable
class StatusUpdater(Protocol):
    """Callable type def for the storage operation persisting a status change."""

    def __call__(self, session_id: SessionId, status: SessionStatus) -> Session: ...


def session_interval(session: Session) -> TimeInterval:
    """The concrete [start, end) interval of `session`.

    Raises
    ------
    FormatError
        If the session start or end time is malformed.
    """
    return session.interval


def find_overlapping(block: EffectiveBlock, sessions: list[Session]) -> list[int]:
    """Positions in `sessions` of the scheduled sessions intersecting `block`.

    Sessions which are not scheduled are never reported. Every scheduled
    session is checked before returning, so a malformed one raises before
    the caller acts on any match.
    """
    positions = []
    for position, session in enumerate(sessions):
        if session.status != SessionStatus.Scheduled:
            continue
        if session_interval(session).overlaps(block.interval):
            positions.append(position)
    return positions


def cancel_overlapping(
    block: EffectiveBlock,
    sessions: list[Session],
    update_status: StatusUpdater | None = update_session_status,
) -> list[Session]:
    """Cancel every scheduled session in `sessions` that overlaps `block`.

    Parameters
    ----------
    block
        The blackout period.
    sessions
        The sessions to check. Entries that get cancelled are replaced in place
        with their updated record.
    update_status
        Persists each status change. Set to `None` to only update `sessions`.

    Returns
    -------
    The sessions cancelled by this call. Completed, cancelled and no-show
    sessions are left untouched, so applying the same block twice cancels
    nothing the second time.

    Raises
    ------
    FormatError
        If any scheduled session has a malformed start or end time. No status
        is changed in that case.
    NotFoundError
        If `update_status` cannot find a session in the store.
    """
    positions = find_overlapping(block, sessions)
    cancelled = []
    for position in positions:
        session = sessions[position]
        if update_status is not None and session.session_id is not None:
            session = update_status(session.session_id, SessionStatus.Cancelled)
        else:
            session = session.model_copy(update={"status": SessionStatus.Cancelled})
        sessions[position] = session
        cancelled.append(session)
        logger.debug(
            f"Cancelled session {session.session_id} on {session.date} "
            f"{session.start_time}-{session.end_time}"
        )
    if cancelled:
        logger.info(
            f"Cancelled {len(cancelled)} session(s) overlapping block "
            f"{block.start} - {block.end}"
        )
    return cancelled
