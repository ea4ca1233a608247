#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
import datetime
import logging
import random
from collections import defaultdict
from importlib.resources import files

import pytest
from omegaconf import OmegaConf
from pydantic import ValidationError

from sessiongrid.records.sessions import Session, SessionStatus
from sessiongrid.records.students import Student
from sessiongrid.records.trainers import Trainer
from sessiongrid.scheduling.exceptions import ExhaustedInputError
from sessiongrid.scheduling.generation import (
    GenerationConfig,
    GenerationSettings,
    draw,
    generate,
    load_generation_configs,
    weighted_choice,
)
from sessiongrid.scheduling.time_utils import overlaps, to_minutes

DAY = datetime.date(2025, 8, 11)


def full_day_config(**kwargs) -> GenerationConfig:
    fields = {
        "kind": "training-tabletop",
        "lane_count": 4,
        "windows": [{"start": "10:00", "end": "19:00", "probability": 1.0}],
        "durations": [60],
    }
    fields.update(kwargs)
    return GenerationConfig(**fields)


def assert_lanes_do_not_overlap(sessions: list[Session]):
    lanes = defaultdict(list)
    for session in sessions:
        lanes[(session.session_type, session.assigned_seat)].append(session)
    for lane in lanes.values():
        lane.sort(key=lambda s: to_minutes(s.start_time))
        for previous, following in zip(lane, lane[1:]):
            assert to_minutes(previous.end_time) <= to_minutes(following.start_time)


def test_generated_sessions_respect_business_day_and_blackouts(
    trainers: list[Trainer], students: list[Student]
):
    config = full_day_config(durations=[30, 45, 60, 90], gaps=[0, 15])
    sessions = generate(DAY, [config], trainers, students, rng=random.Random(1))
    assert sessions
    for session in sessions:
        start, end = to_minutes(session.start_time), to_minutes(session.end_time)
        assert to_minutes("10:00") <= start < end <= to_minutes("19:00")
        assert start % 15 == 0
        assert not overlaps(start, end, to_minutes("12:30"), to_minutes("13:30"))
        assert session.status == SessionStatus.Scheduled
        assert session.date == DAY
        assert session.session_id is None
    assert_lanes_do_not_overlap(sessions)


def test_packed_lanes_with_certain_placement(
    trainers: list[Trainer], students: list[Student]
):
    config = full_day_config(lane_count=2)
    sessions = generate(DAY, [config], trainers, students, rng=random.Random(0))
    # 10-12:30 holds two hour long sessions per lane, 13:30-19:00 holds five
    assert len(sessions) == 2 * (2 + 5)
    assert {s.assigned_seat for s in sessions} == {1, 2}
    assert_lanes_do_not_overlap(sessions)


def test_cap_counts_existing_sessions(trainers: list[Trainer], students: list[Student]):
    config = full_day_config(cap=6)
    assert len(generate(DAY, [config], trainers, students)) == 6
    assert (
        len(
            generate(
                DAY,
                [config],
                trainers,
                students,
                existing_counts={"training-tabletop": 4},
            )
        )
        == 2
    )
    assert (
        generate(
            DAY, [config], trainers, students, existing_counts={"training-tabletop": 9}
        )
        == []
    )


def test_kinds_are_filled_independently(
    trainers: list[Trainer], students: list[Student]
):
    configs = [
        full_day_config(cap=3),
        full_day_config(kind="remote", lane_count=1, cap=2),
    ]
    sessions = generate(DAY, configs, trainers, students)
    kinds = [s.session_type for s in sessions]
    assert kinds.count("training-tabletop") == 3
    assert kinds.count("remote") == 2


def test_zero_probability_places_nothing(
    trainers: list[Trainer], students: list[Student]
):
    config = full_day_config(
        windows=[{"start": "10:00", "end": "19:00", "probability": 0.0}]
    )
    assert generate(DAY, [config], trainers, students) == []


def test_seeded_generation_is_reproducible(
    trainers: list[Trainer], students: list[Student]
):
    config = full_day_config(
        windows=[
            {"start": "10:00", "end": "12:30", "probability": 0.5},
            {"start": "13:30", "end": "19:00", "probability": 0.7},
        ],
        durations=[45, 60, 60, 90],
        gaps=[0, 15, 30],
    )
    first = generate(DAY, [config], trainers, students, rng=random.Random(42))
    second = generate(DAY, [config], trainers, students, rng=random.Random(42))
    assert first == second


def test_random_seats_stay_in_range(trainers: list[Trainer], students: list[Student]):
    settings = GenerationSettings(seat_range=3)
    sessions = generate(
        DAY, [full_day_config()], trainers, students, settings=settings
    )
    assert {s.assigned_seat for s in sessions} <= {1, 2, 3}


def test_eligible_trainers_are_selected(
    trainers: list[Trainer], students: list[Student]
):
    configs = [
        full_day_config(kind="gt", required_flag="can_do_gt_assessments"),
        full_day_config(kind="accelerate-rx", required_flag="accelerate-rx"),
        full_day_config(
            kind="remote", eligibility=lambda trainer: trainer.name.startswith("M")
        ),
    ]
    sessions = generate(DAY, configs, trainers, students, rng=random.Random(3))
    trainer_ids = defaultdict(set)
    for session in sessions:
        trainer_ids[session.session_type].add(session.trainer_id)
    assert trainer_ids["gt"] == {"t-sarah"}
    assert trainer_ids["accelerate-rx"] == {"t-lisa"}
    assert trainer_ids["remote"] == {"t-michael"}


def test_no_eligible_trainer_falls_back_to_any_trainer(
    students: list[Student], caplog: pytest.LogCaptureFixture
):
    trainers = [Trainer(name="Michael Chen", trainer_id="t-michael")]
    config = full_day_config(kind="gt", required_flag="can_do_gt_assessments", cap=2)
    with caplog.at_level(logging.WARNING):
        sessions = generate(DAY, [config], trainers, students)
    assert [s.trainer_id for s in sessions] == ["t-michael", "t-michael"]
    assert "No trainer is eligible for gt sessions" in caplog.text


def test_strict_eligibility_raises(students: list[Student]):
    trainers = [Trainer(name="Michael Chen", trainer_id="t-michael")]
    config = full_day_config(kind="gt", required_flag="can_do_gt_assessments")
    with pytest.raises(ExhaustedInputError):
        generate(DAY, [config], trainers, students, strict_eligibility=True)


def test_empty_pools_raise(trainers: list[Trainer], students: list[Student]):
    with pytest.raises(ExhaustedInputError):
        generate(DAY, [full_day_config()], [], students)
    with pytest.raises(ExhaustedInputError):
        generate(DAY, [full_day_config()], trainers, [])
    with pytest.raises(ExhaustedInputError):
        draw(random.Random(), [])


def test_empty_pools_are_fine_if_nothing_is_placed():
    assert generate(DAY, [full_day_config(cap=0)], [], []) == []


def test_weighted_choice():
    rng = random.Random(0)
    assert weighted_choice(rng, {"always": 1.0, "never": 0.0}) == "always"


def test_invalid_configs_are_rejected():
    with pytest.raises(ValidationError):
        full_day_config(durations=[60, -15])
    with pytest.raises(ValidationError):
        full_day_config(lane_count=0)
    with pytest.raises(ValidationError):
        full_day_config(windows=[])


def test_load_generation_configs():
    cfg = OmegaConf.create(
        {
            "settings": {
                "day_start": "09:00",
                "day_end": "17:00",
                "blackouts": [{"start": "12:00", "end": "12:30"}],
            },
            "kinds": [
                {
                    "kind": "gt",
                    "lane_count": 2,
                    "windows": [{"start": "09:00", "end": "17:00"}],
                    "durations": [90, 120],
                    "required_flag": "can_do_gt_assessments",
                    "cap": 3,
                }
            ],
        }
    )
    settings, configs = load_generation_configs(cfg)
    assert settings.day_start == "09:00"
    assert settings.increment == 15
    assert [(b.start, b.end) for b in settings.blackouts] == [("12:00", "12:30")]
    (config,) = configs
    assert config.kind == "gt"
    assert config.windows[0].probability == 1.0
    assert config.gaps == [0]


def test_packaged_demo_day_config_loads():
    cfg = OmegaConf.create((files("sessiongrid.configs") / "demo_day.yaml").read_text())
    settings, configs = load_generation_configs(cfg)
    lanes = {config.kind: config.lane_count for config in configs}
    assert lanes == {
        "training-tabletop": 10,
        "training-digital": 10,
        "accelerate-rx": 3,
        "remote": 4,
        "gt": 4,
    }
    assert (settings.day_start, settings.day_end) == ("10:00", "19:00")
    assert cfg.day == datetime.date.today().isoformat()
