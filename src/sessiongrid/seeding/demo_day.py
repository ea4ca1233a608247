#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
import datetime
import logging

from sessiongrid.records.blocked_days import list_effective_blocks
from sessiongrid.records.sessions import (
    Session,
    count_sessions_by_kind,
    create_session,
    list_sessions,
)
from sessiongrid.records.students import list_students
from sessiongrid.records.trainers import list_trainers
from sessiongrid.scheduling.generation import (
    GenerationConfig,
    GenerationSettings,
    RandomSource,
    generate,
)
from sessiongrid.scheduling.seats import available_seats
from sessiongrid.scheduling.validation import is_timeslot_blocked

logger = logging.getLogger(__name__)


def populate_demo_day(
    day: datetime.date,
    configs: list[GenerationConfig],
    settings: GenerationSettings | None = None,
    rng: RandomSource | None = None,
    strict_eligibility: bool = False,
) -> list[Session]:
    """Fill `day` with generated sessions and save them.

    Trainers and students are drawn from the store. Sessions already booked on
    `day` count towards each kind's cap and keep their seats: a generated
    session whose seat is taken moves to the lowest free seat of its kind, and
    is dropped if there is none. Generated sessions falling in a blocked period
    are dropped as well.

    Returns
    -------
    The saved sessions.
    """
    settings = settings or GenerationSettings()
    candidates = generate(
        day,
        configs,
        trainers=list_trainers(),
        students=list_students(),
        existing_counts=count_sessions_by_kind(day),
        rng=rng,
        settings=settings,
        strict_eligibility=strict_eligibility,
    )
    seats_per_type = {
        config.kind: settings.seat_range or config.lane_count for config in configs
    }
    booked = list_sessions(date=day, session_types=list(seats_per_type))
    blocks = list_effective_blocks(day, day)
    saved, blocked, unseated = [], 0, 0
    for candidate in candidates:
        if is_timeslot_blocked(day, candidate.start_time, candidate.end_time, blocks):
            blocked += 1
            continue
        free_seats = available_seats(
            candidate.session_type,
            day,
            candidate.start_time,
            candidate.end_time,
            booked,
            seats_per_type,
        )
        if not free_seats:
            unseated += 1
            continue
        if candidate.assigned_seat not in free_seats:
            candidate = candidate.model_copy(update={"assigned_seat": free_seats[0]})
        session = create_session(candidate)
        booked.append(session)
        saved.append(session)
    if blocked:
        logger.info(f"Dropped {blocked} generated session(s) falling in blocked periods")
    if unseated:
        logger.info(f"Dropped {unseated} generated session(s) with no free seat")
    logger.info(f"Saved {len(saved)} demo session(s) on {day}")
    return saved
