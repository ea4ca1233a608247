#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
import datetime
import random

from sessiongrid.records.blocked_days import add_blocked_day
from sessiongrid.records.sessions import SessionStatus, list_sessions
from sessiongrid.scheduling.availability import BlockedDayRule
from sessiongrid.scheduling.generation import GenerationConfig
from sessiongrid.scheduling.time_utils import overlaps, to_minutes
from sessiongrid.seeding.demo_day import populate_demo_day
from sessiongrid.seeding.seed import seed_if_empty

DAY = datetime.date(2025, 8, 9)

CONFIGS = [
    GenerationConfig(
        kind="training-tabletop",
        lane_count=10,
        windows=[{"start": "10:00", "end": "19:00", "probability": 1.0}],
        durations=[60],
        cap=20,
    ),
    GenerationConfig(
        kind="gt",
        lane_count=4,
        windows=[{"start": "10:00", "end": "17:00", "probability": 1.0}],
        durations=[90, 120],
        required_flag="can_do_gt_assessments",
        cap=4,
    ),
]


def test_populate_demo_day_tops_up_existing_sessions():
    seed_if_empty(today=DAY)
    saved = populate_demo_day(DAY, CONFIGS, rng=random.Random(0))
    # the seed books two tabletop sessions and one gt session on the day, and
    # holds tabletop seat 1 at 10:00 so one of the ten 10:00 candidates is dropped
    assert sum(s.session_type == "training-tabletop" for s in saved) == 17
    assert sum(s.session_type == "gt" for s in saved) == 3
    assert all(s.session_id is not None for s in saved)
    assert len(list_sessions(date=DAY)) == 3 + len(saved)


def test_populate_demo_day_skips_blocked_periods():
    seed_if_empty(today=DAY)
    add_blocked_day(BlockedDayRule(start_date=DAY, start_time="10:00", end_time="10:30"))
    saved = populate_demo_day(DAY, CONFIGS, rng=random.Random(0))
    # everything generated at 10:00 is dropped, the 11:00 tabletop row is kept
    assert [s.start_time for s in saved] == ["11:00"] * 9
    for session in saved:
        assert not overlaps(
            to_minutes(session.start_time),
            to_minutes(session.end_time),
            to_minutes("10:00"),
            to_minutes("10:30"),
        )


def test_populated_day_never_double_books_a_seat():
    seed_if_empty(today=DAY)
    populate_demo_day(DAY, CONFIGS, rng=random.Random(0))
    booked = [
        s for s in list_sessions(date=DAY) if s.status != SessionStatus.Cancelled
    ]
    for i, session in enumerate(booked):
        for other in booked[i + 1 :]:
            if (session.session_type, session.assigned_seat) != (
                other.session_type,
                other.assigned_seat,
            ):
                continue
            assert not overlaps(
                to_minutes(session.start_time),
                to_minutes(session.end_time),
                to_minutes(other.start_time),
                to_minutes(other.end_time),
            )


def test_generated_session_moves_off_a_booked_seat():
    seed_if_empty(today=DAY)
    config = CONFIGS[0].model_copy(update={"lane_count": 3, "cap": 5})
    saved = populate_demo_day(DAY, [config], rng=random.Random(0))
    # two seeded tabletop sessions leave a quota of three; seat 1 is held by
    # the seeded 10:00 session, so the last candidate finds no free seat
    assert [(s.start_time, s.assigned_seat) for s in saved] == [
        ("10:00", 2),
        ("10:00", 3),
    ]
